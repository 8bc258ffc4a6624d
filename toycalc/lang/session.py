"""Session control for the toycalc language. Runs the full pipeline (lex, parse, check, lower, execute) over one input
unit at a time, either in command-line mode or file interpretation mode. The session owns the variable table, which is
the only state carried from one input unit to the next.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from toycalc.lang.codegen import generate_program
from toycalc.lang.error import CompileError, GenericException, ParseError, VMError
from toycalc.lang.grammar import parse
from toycalc.lang.semantic import check
from toycalc.lang.tree import PrintStatement
from toycalc.lang.vm import VirtualMachine, format_number

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass
class StatementResult:
    """Result of one executed statement. printed holds what a print statement emitted."""
    statement: object
    value: float
    printed: List[str] = field(default_factory=list)

    @property
    def is_print(self):
        return isinstance(self.statement, PrintStatement)

    def lines(self):
        """What the user should see for this statement: printed lines for print, else the echoed result."""
        if self.is_print:
            return list(self.printed)
        return [format_number(self.value)]


@dataclass
class Outcome:
    """Everything one input unit produced. error is None when every statement ran."""
    source: str
    warnings: list = field(default_factory=list)
    results: List[StatementResult] = field(default_factory=list)
    error: Optional[GenericException] = None

    @property
    def ok(self):
        return self.error is None

    @property
    def values(self):
        return [result.value for result in self.results]

    @property
    def output(self):
        return [line for result in self.results for line in result.printed]


class Session:
    """Governs a toycalc session, with control over the variable table."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=True, warnings=True):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                # used for error messages
        self.cmd_line = cmd_line        # whether or not in command-line mode
        self.show_warnings = warnings   # whether or not semantic warnings are reported

        self.variables = {}  # dict of name: value, lives as long as the session
        self.lines = []      # list of (line, line_num) to run in file mode

        self._printed = []
        self.vm = VirtualMachine(output=self._printed.append)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file, start=1):
                        line = line.rstrip()
                        if line and not line.isspace():
                            self.lines.append((line, line_num))
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

    def execute(self, text):
        """Runs one input unit and returns its Outcome. Input errors are returned in Outcome.error, never raised."""
        outcome = Outcome(text)

        try:
            program = parse(text)
            outcome.warnings = check(program)
            lowered = generate_program(program)
        except CompileError as error:
            logger.debug("%s: %s", error.kind, error)
            outcome.error = error
            return outcome
        except RecursionError:
            outcome.error = ParseError("expression nested too deeply", text, diagnosis=False)
            return outcome

        for statement, code in zip(program, lowered):
            del self._printed[:]

            try:
                value = self.vm.execute(code, self.variables)
            except VMError as error:
                logger.debug("%s in %r: %s", error.kind, statement, error)
                outcome.error = error
                break  # later statements of this unit are abandoned, earlier ones stay committed

            outcome.results.append(StatementResult(statement, value, list(self._printed)))

        return outcome

    def disassemble(self, text):
        """Returns [(statement, instructions)] for text without executing anything. Raises CompileError."""
        program = parse(text)
        return list(zip(program, generate_program(program)))

    def report(self, outcome):
        """Prints an Outcome: warnings first, then each statement's output, then the error (if any)."""
        if self.show_warnings:
            for warning in outcome.warnings:
                self.error_handler.warn(warning)

        for result in outcome.results:
            for line in result.lines():
                print(line)

        if outcome.error is not None:
            self.error_handler.throw(outcome.error)

    def run(self, line, line_num):
        """Executes and reports a single line. Returns its Outcome."""
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised

        outcome = self.execute(line)
        self.report(outcome)

        self.error_handler.remove_line(self.path)
        return outcome

    def run_file(self):
        """Runs every line loaded from this session's file, in order."""
        for line, line_num in self.lines:
            self.run(line, line_num)
