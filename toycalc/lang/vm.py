"""Stack-based virtual machine for toycalc instructions.

The VM owns only its operand stack, which is cleared before every statement. The variable table belongs to the
session and is passed into execute(), so it survives across statements and input units. A failing instruction aborts
the rest of its statement; stores that already ran stay in the table.
"""

import logging
import operator

from toycalc.lang.codegen import Opcode
from toycalc.lang.error import DivisionByZero, GenericException, StackUnderflow, UndefinedVariable

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

BINARY = {
    Opcode.ADD: operator.add,
    Opcode.SUB: operator.sub,
    Opcode.MUL: operator.mul,
    Opcode.DIV: operator.truediv,
}


def format_number(value):
    """Formats value the way an iostream would by default: up to 6 significant digits, no trailing zeros."""
    return f"{value:g}"


class VirtualMachine:
    """Executes one statement's instruction list at a time."""

    def __init__(self, output=None):
        """output is the channel for PRINT: a callable taking the formatted value. Defaults to stdout."""
        self.output = output if output is not None else print
        self.stack = []

    def pop(self, opcode):
        if not self.stack:
            raise StackUnderflow(opcode.name, 1, 0)
        return self.stack.pop()

    def execute(self, code, variables):
        """Runs code against variables (mutated in place by STORE_VAR). Returns the statement's result: the top of the
        stack when execution ends, or 0.0 if the stack is empty.
        """
        self.stack.clear()

        for instr in code:
            opcode = instr.opcode
            logger.debug("%-16s stack=%s", instr, self.stack)

            if opcode is Opcode.PUSH_CONST:
                self.stack.append(instr.operand)

            elif opcode is Opcode.LOAD_VAR:
                if instr.operand not in variables:
                    raise UndefinedVariable(instr.operand)
                self.stack.append(variables[instr.operand])

            elif opcode is Opcode.STORE_VAR:
                value = self.pop(opcode)
                variables[instr.operand] = value
                self.stack.append(value)

            elif opcode in BINARY:
                if len(self.stack) < 2:
                    raise StackUnderflow(opcode.name, 2, len(self.stack))
                right = self.stack.pop()
                left = self.stack.pop()
                if opcode is Opcode.DIV and right == 0:
                    raise DivisionByZero()
                self.stack.append(BINARY[opcode](left, right))

            elif opcode is Opcode.PRINT:
                self.output(format_number(self.pop(opcode)))

            else:
                raise GenericException("unknown opcode '{}'", repr(opcode), internal=True)

        return self.stack[-1] if self.stack else 0.0
