"""Lexical analysis for the toycalc language. Turns raw input text into tokens; a single forward cursor, never
backtracks.

```
<number>     ::= <digit>+ ["." <digit>*] | "." <digit>+   ; parsed as a float
<identifier> ::= (<letter> | "_") (<letter> | <digit> | "_")*
<keyword>    ::= "print"                                  ; reserved, never an identifier
<operator>   ::= "+" | "-" | "*" | "/" | "(" | ")" | "=" | ";"
```

Whitespace separates tokens and is otherwise ignored. Any other character becomes an Invalid token: iteration does
not fail on it, but tokenize() and the parser treat it as a fatal LexError for the whole input unit.
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from toycalc.lang.error import LexError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class TokenKind(Enum):
    NUMBER = "Number"
    IDENTIFIER = "Identifier"
    PLUS = "Plus"
    MINUS = "Minus"
    STAR = "Star"
    SLASH = "Slash"
    LPAREN = "LParen"
    RPAREN = "RParen"
    ASSIGN = "Assign"
    SEMICOLON = "Semicolon"
    PRINT = "PrintKeyword"
    END = "End"
    INVALID = "Invalid"


SINGLE_CHARS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "=": TokenKind.ASSIGN,
    ";": TokenKind.SEMICOLON,
}
KEYWORDS = {"print": TokenKind.PRINT}

DIGITS = string.digits
IDENT_START = string.ascii_letters + "_"
IDENT_CHARS = IDENT_START + string.digits


@dataclass(frozen=True)
class Token:
    """A single lexeme. value is only set for NUMBER tokens; column is the 0-based offset into the source text."""
    kind: TokenKind
    text: str
    column: int = 0
    value: Optional[float] = None

    def __repr__(self):
        return f"Token({self.kind.value}, {self.text!r}, col={self.column})"


class Lexer:
    """Lazy token stream over text. Every iteration starts again from the beginning of the text and ends with
    exactly one END token.
    """

    def __init__(self, text):
        self.text = text

    def __iter__(self):
        text = self.text
        pos = 0

        while True:
            while pos < len(text) and text[pos].isspace():
                pos += 1

            if pos >= len(text):
                yield Token(TokenKind.END, "", pos)
                return

            start = pos
            char = text[pos]
            following = text[pos + 1] if pos + 1 < len(text) else ""

            if char in DIGITS or (char == "." and following and following in DIGITS):
                seen_dot = False
                while pos < len(text) and (text[pos] in DIGITS or (text[pos] == "." and not seen_dot)):
                    seen_dot = seen_dot or text[pos] == "."
                    pos += 1
                lexeme = text[start:pos]
                yield Token(TokenKind.NUMBER, lexeme, start, float(lexeme))

            elif char in IDENT_START:
                while pos < len(text) and text[pos] in IDENT_CHARS:
                    pos += 1
                lexeme = text[start:pos]
                yield Token(KEYWORDS.get(lexeme, TokenKind.IDENTIFIER), lexeme, start)

            else:
                pos += 1
                yield Token(SINGLE_CHARS.get(char, TokenKind.INVALID), char, start)


def invalid_character(token, text):
    """Returns the LexError for an INVALID token found in text."""
    return LexError("unrecognized character '{1}'", (text, token.text), start=token.column, end=token.column + 1)


def tokenize(text):
    """Materializes the token stream of text into a list. Raises LexError on the first unrecognized character."""
    tokens = []
    for token in Lexer(text):
        if token.kind is TokenKind.INVALID:
            raise invalid_character(token, text)
        tokens.append(token)

    logger.debug("tokens: %s", tokens)
    return tokens
