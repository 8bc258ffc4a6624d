import unittest

from toycalc.lang.codegen import Instruction, Opcode, generate
from toycalc.lang.error import DivisionByZero, StackUnderflow, UndefinedVariable
from toycalc.lang.grammar import parse
from toycalc.lang.vm import VirtualMachine, format_number


class VirtualMachineTestCase(unittest.TestCase):

    def setUp(self):
        self.printed = []
        self.vm = VirtualMachine(output=self.printed.append)
        self.variables = {}

    def run_text(self, text):
        return [self.vm.execute(generate(statement), self.variables) for statement in parse(text)]

    def test_arithmetic(self):
        cases = {
            "2 + 3 * 4": 14.0,
            "(2 + 3) * 4": 20.0,
            "7 / 2": 3.5,
            "1 - 2 - 3": -4.0,
            "8 / 4 / 2": 1.0,
            "-5 + 3": -2.0,
            "-(2 + 3)": -5.0,
            "2 * -3": -6.0,
            "0.1 + 0.2": 0.1 + 0.2,
            "1 / 3": 1 / 3,
        }
        for case, expected in cases.items():
            self.assertEqual([expected], self.run_text(case), case)

    def test_assignment(self):
        self.assertEqual([5.0], self.run_text("x = 5"))
        self.assertEqual([5.0], self.run_text("x"))
        self.assertEqual({"x": 5.0}, self.variables)

    def test_sequential(self):
        self.assertEqual([1.0, 2.0, 2.0], self.run_text("x = 1; y = x + 1; y"))

    def test_division_by_zero(self):
        self.assertRaises(DivisionByZero, self.run_text, "x = 5 / 0")
        self.assertEqual({}, self.variables)
        self.assertRaises(DivisionByZero, self.run_text, "5 / (3 - 3)")

    def test_undefined_variable(self):
        with self.assertRaises(UndefinedVariable) as context:
            self.run_text("y")
        self.assertEqual("y", context.exception.name)

    def test_print(self):
        self.assertEqual([0.0], self.run_text("print(3 + 4)"))
        self.assertEqual([0.0], self.run_text("print 3 + 4"))
        self.assertEqual(["7", "7"], self.printed)
        self.assertEqual([], self.vm.stack)

    def test_stack_underflow(self):
        should_raise = [
            [Instruction(Opcode.ADD)],
            [Instruction(Opcode.PUSH_CONST, 1.0), Instruction(Opcode.DIV)],
            [Instruction(Opcode.STORE_VAR, "x")],
            [Instruction(Opcode.PRINT)],
        ]
        for code in should_raise:
            self.assertRaises(StackUnderflow, self.vm.execute, code, self.variables)
        self.assertEqual({}, self.variables)

    def test_stack_cleared_per_statement(self):
        self.vm.execute([Instruction(Opcode.PUSH_CONST, 1.0), Instruction(Opcode.PUSH_CONST, 2.0)], self.variables)
        self.assertRaises(StackUnderflow, self.vm.execute, [Instruction(Opcode.ADD)], self.variables)

    def test_no_rollback(self):
        code = [
            Instruction(Opcode.PUSH_CONST, 1.0), Instruction(Opcode.STORE_VAR, "x"),
            Instruction(Opcode.PUSH_CONST, 0.0), Instruction(Opcode.DIV),
        ]
        self.assertRaises(DivisionByZero, self.vm.execute, code, self.variables)
        self.assertEqual({"x": 1.0}, self.variables)

    def test_empty_code(self):
        self.assertEqual(0.0, self.vm.execute([], self.variables))

    def test_format_number(self):
        cases = {14.0: "14", 2.5: "2.5", -5.0: "-5", 1 / 3: "0.333333", 1e20: "1e+20", 0.0: "0"}
        for case, expected in cases.items():
            self.assertEqual(expected, format_number(case))


if __name__ == '__main__':
    unittest.main()
