"""Recursive descent parser for the toycalc language. Consumes tokens from toycalc.lang.lexical and produces a Program
(list of statement trees from toycalc.lang.tree).

Grammar, lowest to highest precedence:

```
<program>    ::= <statement> (";" <statement>)* [";"]   ; empty input is an empty program
<statement>  ::= "print" ("(" <expression> ")" | <expression>)
               | <identifier> "=" <expression>          ; only if the identifier is immediately followed by "="
               | <expression>
<expression> ::= <term> (("+" | "-") <term>)*           ; left-associative
<term>       ::= <factor> (("*" | "/") <factor>)*       ; left-associative
<factor>     ::= "-" <factor>                           ; unary minus, built as (0 - <factor>)
               | <number> | <identifier> | "(" <expression> ")"
```

Assignment is told apart from a variable reference by peeking one token past the identifier; the identifier is only
consumed once the "=" has been seen, so there is never a cursor rewind.
"""

import logging

from toycalc.lang.error import ParseError
from toycalc.lang.lexical import TokenKind, invalid_character, tokenize
from toycalc.lang.tree import Assignment, BinaryOp, NumberLiteral, PrintStatement, VariableRef, negate

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ADDITIVE = {TokenKind.PLUS: "+", TokenKind.MINUS: "-"}
MULTIPLICATIVE = {TokenKind.STAR: "*", TokenKind.SLASH: "/"}


class Parser:
    """Parses one input unit. tokens may be any iterable of Tokens (a list from tokenize(), or a Lexer directly);
    source is the original text and is only used for error messages.
    """

    def __init__(self, tokens, source=None):
        self.tokens = list(tokens)
        self.pos = 0

        if source is None:
            source = " ".join(token.text for token in self.tokens if token.text)
        self.source = source

    def error(self, msg, token):
        """Returns a ParseError pointing at token. msg may reference the token's text as '{1}'."""
        return ParseError(msg, (self.source, token.text), start=token.column, end=token.column + len(token.text))

    def peek(self, offset=0):
        """Returns the token offset positions ahead of the cursor without consuming anything."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            raise ParseError("unexpected end of input", self.source, start=len(self.source))

        token = self.tokens[idx]
        if token.kind is TokenKind.INVALID:
            raise invalid_character(token, self.source)
        return token

    def advance(self):
        token = self.peek()
        self.pos += 1
        return token

    def accept(self, kind):
        """Consumes and returns the next token if it is of the given kind, else returns None."""
        if self.peek().kind is kind:
            return self.advance()
        return None

    def expect(self, kind, what):
        token = self.peek()
        if token.kind is not kind:
            if token.kind is TokenKind.END:
                raise self.error(f"expected {what} before end of input", token)
            raise self.error(f"expected {what}, got '{{1}}'", token)
        return self.advance()

    def parse_program(self):
        """Parses every statement of the input unit. Either the whole program is returned or a ParseError is raised."""
        program = []

        while self.peek().kind is not TokenKind.END:
            program.append(self.parse_statement())

            if self.accept(TokenKind.SEMICOLON) is None and self.peek().kind is not TokenKind.END:
                raise self.error("expected ';' after statement, got '{1}'", self.peek())

        logger.debug("program: %r", program)
        return program

    def parse_statement(self):
        if self.accept(TokenKind.PRINT):
            if self.accept(TokenKind.LPAREN):
                value = self.parse_expression()
                self.expect(TokenKind.RPAREN, "')'")
                return PrintStatement(value)
            return PrintStatement(self.parse_expression())

        if self.peek().kind is TokenKind.IDENTIFIER and self.peek(1).kind is TokenKind.ASSIGN:
            name = self.advance().text
            self.advance()  # '='
            return Assignment(name, self.parse_expression())

        return self.parse_expression()

    def parse_expression(self):
        left = self.parse_term()
        while self.peek().kind in ADDITIVE:
            operator = ADDITIVE[self.advance().kind]
            left = BinaryOp(operator, left, self.parse_term())
        return left

    def parse_term(self):
        left = self.parse_factor()
        while self.peek().kind in MULTIPLICATIVE:
            operator = MULTIPLICATIVE[self.advance().kind]
            left = BinaryOp(operator, left, self.parse_factor())
        return left

    def parse_factor(self):
        token = self.advance()

        if token.kind is TokenKind.MINUS:
            return negate(self.parse_factor())

        elif token.kind is TokenKind.NUMBER:
            return NumberLiteral(token.value)

        elif token.kind is TokenKind.IDENTIFIER:
            return VariableRef(token.text, token.column)

        elif token.kind is TokenKind.LPAREN:
            inner = self.parse_expression()
            if self.peek().kind is not TokenKind.RPAREN:
                raise self.error("unterminated parenthesis, expected ')'", self.peek())
            self.advance()
            return inner

        elif token.kind is TokenKind.END:
            raise self.error("unexpected end of input", token)

        raise self.error("unexpected token '{1}'", token)


def parse(text):
    """Lexes and parses text into a Program. Raises LexError or ParseError; a partial Program is never returned."""
    return Parser(tokenize(text), text).parse_program()
