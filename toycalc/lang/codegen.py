"""Lowers statement trees into flat stack-machine instructions.

    NumberLiteral  -> PUSH_CONST value
    VariableRef    -> LOAD_VAR name
    BinaryOp       -> <left> <right> ADD|SUB|MUL|DIV
    Assignment     -> <value> STORE_VAR name        ; STORE_VAR re-pushes, so the statement still has a result
    PrintStatement -> <value> PRINT                 ; PRINT consumes its operand

Lowering is purely structural and never fails on a tree built by the parser.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from toycalc.lang.error import GenericException
from toycalc.lang.tree import Assignment, BinaryOp, NumberLiteral, PrintStatement, VariableRef

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Opcode(Enum):
    PUSH_CONST = "PushConstant"
    LOAD_VAR = "LoadVariable"
    STORE_VAR = "StoreVariable"
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"
    PRINT = "Print"


ARITHMETIC = {"+": Opcode.ADD, "-": Opcode.SUB, "*": Opcode.MUL, "/": Opcode.DIV}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operand: Union[float, str, None] = None

    def __str__(self):
        if self.operand is None:
            return self.opcode.name
        if isinstance(self.operand, float):
            return f"{self.opcode.name} {self.operand:g}"
        return f"{self.opcode.name} {self.operand}"


def generate(statement):
    """Returns the instruction list that evaluates a single statement."""
    code = []

    def _generate(node):
        if isinstance(node, NumberLiteral):
            code.append(Instruction(Opcode.PUSH_CONST, float(node.value)))

        elif isinstance(node, VariableRef):
            code.append(Instruction(Opcode.LOAD_VAR, node.name))

        elif isinstance(node, BinaryOp):
            _generate(node.left)
            _generate(node.right)
            code.append(Instruction(ARITHMETIC[node.operator]))

        elif isinstance(node, Assignment):
            _generate(node.value)
            code.append(Instruction(Opcode.STORE_VAR, node.name))

        elif isinstance(node, PrintStatement):
            _generate(node.value)
            code.append(Instruction(Opcode.PRINT))

        else:
            raise GenericException("code generator got unknown node '{}'", repr(node), internal=True)

    _generate(statement)
    logger.debug("%r -> %s", statement, code)
    return code


def generate_program(program):
    """Lowers every statement of program separately; one instruction list per statement."""
    return [generate(statement) for statement in program]


def disassemble(code):
    """Human-readable listing of an instruction list, one numbered instruction per line."""
    return "\n".join(f"{idx:4d}  {instr}" for idx, instr in enumerate(code))
