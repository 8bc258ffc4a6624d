import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from toycalc.lang.error import (DivisionByZero, ErrorHandler, GenericException, LexError, ParseError,
                                UndefinedVariable)
from toycalc.lang.session import Session
from toycalc.lang.tree import Assignment


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)

    def test_interactive_is_not_fatal(self):
        self.assertFalse(self.sess.error_handler.fatal)

    def test_sequential_statements(self):
        outcome = self.sess.execute("x = 1; y = x + 1; y")
        self.assertTrue(outcome.ok)
        self.assertEqual([1.0, 2.0, 2.0], outcome.values)
        self.assertEqual([], outcome.warnings)
        self.assertEqual({"x": 1.0, "y": 2.0}, self.sess.variables)

    def test_variables_persist(self):
        self.sess.execute("x = 5")
        outcome = self.sess.execute("x")
        self.assertEqual([5.0], outcome.values)
        self.assertTrue(outcome.ok)

    def test_checker_restarts_each_input(self):
        self.sess.execute("x = 5")
        outcome = self.sess.execute("x")
        self.assertEqual(1, len(outcome.warnings))
        self.assertIn("x", str(outcome.warnings[0]))

    def test_deep_nesting(self):
        text = "(" * 1500 + "1" + ")" * 1500
        outcome = self.sess.execute(text)
        self.assertIsInstance(outcome.error, ParseError)
        self.assertIn("nested too deeply", str(outcome.error))
        self.assertEqual([], outcome.results)

        self.assertEqual([3.0], self.sess.execute("((1 + 2))").values)  # session survives

    def test_print(self):
        for line in ("print(3 + 4)", "print 3 + 4"):
            outcome = self.sess.execute(line)
            self.assertEqual(["7"], outcome.output, line)
            self.assertEqual(["7"], outcome.results[0].lines(), line)
            self.assertTrue(outcome.results[0].is_print)

    def test_echo(self):
        outcome = self.sess.execute("print 1; 2 * 3")
        self.assertEqual([["1"], ["6"]], [result.lines() for result in outcome.results])

    def test_undefined_variable(self):
        outcome = self.sess.execute("y")
        self.assertEqual(1, len(outcome.warnings))
        self.assertIn("y", str(outcome.warnings[0]))
        self.assertIsInstance(outcome.error, UndefinedVariable)
        self.assertEqual([], outcome.results)

    def test_compile_errors_execute_nothing(self):
        cases = {"(1 + 2": ParseError, "x = 1; (2": ParseError, "x = 1; 2 $ 3": LexError, "x = 1 2": ParseError}
        for case, kind in cases.items():
            outcome = self.sess.execute(case)
            self.assertIsInstance(outcome.error, kind, case)
            self.assertEqual([], outcome.results, case)
            self.assertEqual({}, self.sess.variables, case)

    def test_vm_error_stops_batch(self):
        outcome = self.sess.execute("x = 2; 5 / 0; x = 9")
        self.assertIsInstance(outcome.error, DivisionByZero)
        self.assertEqual([2.0], outcome.values)
        self.assertEqual({"x": 2.0}, self.sess.variables)

        self.assertTrue(self.sess.execute("x + 1").ok)  # session survives

    def test_disassemble(self):
        listing = self.sess.disassemble("a = 2; print a")
        self.assertEqual(2, len(listing))
        self.assertIsInstance(listing[0][0], Assignment)
        self.assertEqual({}, self.sess.variables)
        self.assertRaises(ParseError, self.sess.disassemble, "(")

    def test_run_reports(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.sess.run("print 1; 2", 1)
        self.assertEqual("1\n2\n", stdout.getvalue())

    def test_run_reports_errors(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            outcome = self.sess.run("z; 1 / 0", 1)
        self.assertIsInstance(outcome.error, UndefinedVariable)
        self.assertIn("before assignment", stdout.getvalue())
        self.assertIn("undefined variable", stdout.getvalue())

    def test_run_reports_name_column(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.sess.run("bb = 1; bb + b", 1)
        warning, echo, error = stdout.getvalue().splitlines()
        self.assertIn("<in>:1:14: ", warning)
        self.assertEqual("1", echo)
        self.assertIn("<in>:1:14: ", error)

    def test_warnings_can_be_hidden(self):
        sess = Session(ErrorHandler(), cmd_line=True, warnings=False)
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            sess.run("k", 1)
        self.assertNotIn("before assignment", stdout.getvalue())
        self.assertIn("undefined variable", stdout.getvalue())


class FileSessionTestCase(unittest.TestCase):

    def write(self, contents):
        handle, path = tempfile.mkstemp(suffix=".calc")
        with os.fdopen(handle, "w") as file:
            file.write(contents)
        self.addCleanup(os.remove, path)
        return path

    def test_run_file(self):
        path = self.write("x = 2\n\n   \nprint x * 3\n")
        sess = Session(ErrorHandler(), path, cmd_line=False, warnings=False)
        self.assertEqual([("x = 2", 1), ("print x * 3", 4)], sess.lines)

        stdout = io.StringIO()
        with redirect_stdout(stdout):
            sess.run_file()
        self.assertEqual("2\n6\n", stdout.getvalue())

    def test_file_error_is_fatal(self):
        path = self.write("1\n1 / 0\n2\n")
        sess = Session(ErrorHandler(), path, cmd_line=False)

        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            sess.run_file()
        self.assertEqual(1, context.exception.code)
        self.assertIn("division by zero", stdout.getvalue())
        self.assertEqual("1", stdout.getvalue().splitlines()[0])
        self.assertNotIn("2", stdout.getvalue().splitlines())

    def test_missing_file(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), "/nonexistent/missing.calc", False)


if __name__ == '__main__':
    unittest.main()
