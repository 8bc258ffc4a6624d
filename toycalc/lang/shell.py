"""Handles interactive/command-line mode for the toycalc interpreter. Uses cmd as backend."""

import cmd

from toycalc.lang.codegen import disassemble
from toycalc.lang.vm import format_number


class Shell(cmd.Cmd):
    """toycalc interpreter shell."""
    intro = "toycalc :: arithmetic on a stack VM\nEnter statements, separated by ';'. Type 'help' for more information."
    prompt = "> "
    goodbye = "Goodbye."
    code_starts = "=+-*/;"  # 'vars = 2' is an assignment, not the vars command

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def onecmd(self, line):
        """Only dispatches to do_* when the line does not read as code using that name as a variable."""
        command, arg, line = self.parseline(line)
        if command and arg and arg[0] in self.code_starts:
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary toycalc statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.run(line, self.line_num)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the toycalc interpreter!\n\n"
              "Every line is lexed, parsed, checked, compiled to stack-machine instructions and \n"
              "run immediately. Statements are arithmetic expressions (+ - * / and parentheses), \n"
              "assignments and print statements, separated by ';'.\n\n"
              "Try it out by typing 'x = 2 * 3; print x + 1'. This will bind 6 to 'x', echo \n"
              "the result 6, then print 7. Variables live until the session ends.\n\n"
              "Commands: 'vars [NAME]' lists variables, 'dis LINE' shows the instructions for \n"
              "LINE without running it, 'exit' or 'quit' leaves.")

    def do_vars(self, arg):
        """Lists the session's variables, or a single one."""
        arg = arg.strip()
        if arg:
            if arg not in self.sess.variables:
                print(f"'{arg}' is not defined")
            else:
                print(f"{arg} = {format_number(self.sess.variables[arg])}")
            return

        for name in sorted(self.sess.variables):
            print(f"{name} = {format_number(self.sess.variables[name])}")

    def do_dis(self, arg):
        """Shows the instructions each statement of arg compiles to, without running them."""
        with self.sess.error_handler:
            self.line_num += 1
            self.sess.error_handler.register_line(self.sess.path, arg, self.line_num)

            for statement, code in self.sess.disassemble(arg):
                print(f"; {statement}")
                print(disassemble(code))

            self.sess.error_handler.remove_line(self.sess.path)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        print(self.goodbye)
        return True

    do_quit = do_exit
