"""Expression tree for toycalc statements. Nodes are immutable and every non-leaf node exclusively owns its children,
so a tree is acyclic and never shares subtrees. A Program is a plain list of top-level statements.
"""

from dataclasses import dataclass, field
from typing import List, Union

OPERATORS = ("+", "-", "*", "/")


@dataclass(frozen=True)
class NumberLiteral:
    value: float

    def __str__(self):
        return f"{self.value:g}"


@dataclass(frozen=True)
class VariableRef:
    name: str
    column: int = field(default=-1, compare=False)  # offset of the name in the source, -1 if unknown

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: "Expression"
    right: "Expression"

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"'{self.operator}' is not a binary operator")

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class Assignment:
    name: str
    value: "Expression"

    def __str__(self):
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class PrintStatement:
    value: "Expression"

    def __str__(self):
        return f"print {self.value}"


Expression = Union[NumberLiteral, VariableRef, BinaryOp, Assignment, PrintStatement]
Program = List[Expression]


def negate(operand):
    """Unary minus is sugar for (0 - operand)."""
    return BinaryOp("-", NumberLiteral(0.0), operand)
