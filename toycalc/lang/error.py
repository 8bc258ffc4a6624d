"""Error handling for the toycalc language. Only GenericExceptions should be encountered while running a session: if
another type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Error kinds, by pipeline stage:

```
CompileError       ; input unit is rejected as a whole, nothing is executed
    LexError       ; unrecognized character
    ParseError     ; missing/unexpected token, unterminated parenthesis
SemanticWarning    ; use before assignment, reported but never raised
VMError            ; current statement (and the rest of the input unit) is abandoned
    UndefinedVariable
    StackUnderflow
    DivisionByZero
```
"""

import re
import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a toycalc error/warning."""
    column = None  # 0-based offset of the offending name in the source line, when known exactly

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning. exprs[0] should be the offending expr (usually the source line)
        and start/end the offending span inside of it.
        """
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

    @property
    def kind(self):
        """Name of the error kind, e.g. 'ParseError'."""
        return type(self).__name__


class CompileError(GenericException):
    """Raised before anything is executed: the whole input unit is rejected."""


class LexError(CompileError):
    """Unrecognized character in the input."""


class ParseError(CompileError):
    """Grammar violation: missing token, unexpected token or unterminated parenthesis."""


class SemanticWarning(GenericException):
    """Non-fatal finding of the semantic checker. Collected and reported, never raised."""

    def __init__(self, msg, exprs=None, column=-1, **kwargs):
        kwargs.setdefault("diagnosis", False)
        super().__init__(msg, exprs, **kwargs)
        if column >= 0:
            self.column = column


class VMError(GenericException):
    """Raised while executing a statement's instructions."""

    def __init__(self, msg, exprs=None, **kwargs):
        kwargs.setdefault("diagnosis", False)
        super().__init__(msg, exprs, **kwargs)


class UndefinedVariable(VMError):
    """Variable was loaded before ever being stored."""

    def __init__(self, name):
        super().__init__("undefined variable '{}'", name)
        self.name = name


class StackUnderflow(VMError):
    """Instruction needed more operands than the stack holds."""

    def __init__(self, opcode, needed, found):
        super().__init__("stack underflow: {} needs {} operand(s), found {}", (opcode, needed, found))
        self.opcode = opcode


class DivisionByZero(VMError):
    """Right operand of a division was exactly zero."""

    def __init__(self):
        super().__init__("division by zero")


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom toycalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns 'file:line_num:col: ' for the most recently registered line, or '' if nothing is registered."""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line is None:
                continue
            if error.column is not None:
                col = error.column
            elif error.diagnosis:
                col = error.start
            else:
                col = ErrorHandler.find_name(line, error.expr)
            return colored(f"{file}:{line_num}:{col + 1}: ", attrs=["bold"])
        return ""

    @staticmethod
    def find_name(line, name):
        """Offset of the first whole-word occurrence of name in line ('b' is not found inside 'bb'), else 0."""
        if not name:
            return 0
        match = re.search(r"(?<!\w)" + re.escape(name) + r"(?!\w)", line)
        return match.start() if match else 0

    def warn(self, warning):
        """Prints runtime warning message. warning is a SemanticWarning (or any GenericException)."""
        error_msg = self._location(warning)
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + warning.msg

        print(error_msg)

        if not warning.internal and warning.expr and warning.diagnosis:
            print(ErrorHandler.diagnose(warning, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = "" if error.internal else self._location(error)

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("expression nested too deeply", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
