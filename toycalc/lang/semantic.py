"""Semantic analysis for toycalc programs: a single left-to-right walk that flags variables used before they are
assigned. Findings are warnings only; the program still runs and the VM decides whether the load actually fails.
"""

import logging

from toycalc.lang.error import GenericException, SemanticWarning
from toycalc.lang.tree import Assignment, BinaryOp, NumberLiteral, PrintStatement, VariableRef

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class SemanticChecker:
    """Tracks assigned names across a whole program (no per-statement reset). Starts from an empty set, so names
    assigned by earlier input units still warn.
    """

    def __init__(self):
        self.assigned = set()
        self.warnings = []

    def check(self, program):
        """Checks every statement in order and returns the list of SemanticWarnings collected so far."""
        for statement in program:
            self.visit(statement)
        return self.warnings

    def visit(self, node):
        if isinstance(node, NumberLiteral):
            return

        elif isinstance(node, VariableRef):
            if node.name not in self.assigned:
                logger.debug("use before assignment: %s", node.name)
                msg = "use of variable '{}' before assignment"
                self.warnings.append(SemanticWarning(msg, node.name, column=node.column))

        elif isinstance(node, BinaryOp):
            self.visit(node.left)
            self.visit(node.right)

        elif isinstance(node, Assignment):
            self.visit(node.value)  # rhs first: 'x = x + 1' still warns about x
            self.assigned.add(node.name)

        elif isinstance(node, PrintStatement):
            self.visit(node.value)

        else:
            raise GenericException("semantic checker got unknown node '{}'", repr(node), internal=True)


def check(program):
    """Returns the use-before-assignment warnings of program."""
    return SemanticChecker().check(program)
