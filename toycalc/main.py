"""Runs the toycalc language over script files, a single command-line argument, or in interactive mode. Also uses the
error handling context manager. Called from the toycalc console script and `python -m toycalc`.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered and the tree uses
dataclasses.
"""

import argparse
import logging
import sys

from toycalc.lang.error import ErrorHandler
from toycalc.lang.session import Session
from toycalc.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="toycalc", description="Arithmetic REPL backed by a stack virtual machine.")
    parser.add_argument("file", help="file to interpret and run line by line (if empty, goes to command-line mode)",
                        nargs="?")
    parser.add_argument("-c", "--command", help="run CODE as a single input unit and exit", metavar="CODE")
    parser.add_argument("--no-warnings", help="do not report use-before-assignment warnings", action="store_true")
    parser.add_argument("--debug", help="log tokens, trees, instructions and VM steps to stderr", action="store_true")
    return parser


def main(argv=None):
    """Runs toycalc interpreter. Called from toycalc executable script."""
    assert sys.version_info >= (3, 7), "toycalc cannot be run with python < 3.7"

    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.debug:
            logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s", stream=sys.stderr)

        warnings = not args.no_warnings

        if args.command is not None:
            sess = Session(error_handler, cmd_line=False, warnings=warnings)
            sess.run(args.command, 1)

        elif args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, warnings=warnings)
            sess.run_file()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, warnings=warnings)).cmdloop()
