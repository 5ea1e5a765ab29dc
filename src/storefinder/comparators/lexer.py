"""
Tokenizer shared by the size and date expression parsers.

Both expression languages are built from the same handful of token kinds:
symbolic comparison operators, unsigned integers, ISO calendar dates and
alphabetic words (unit names and word operators such as 'after').
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..exceptions import InvalidExpression


class TokenKind(Enum):
    """Kinds of tokens produced by the tokenizer."""
    OPERATOR = "operator"
    NUMBER = "number"
    DATE = "date"
    WORD = "word"
    END = "end"


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        kind: Token kind
        text: Token text (words are lower-cased)
        position: Offset of the token in the source string
    """
    kind: TokenKind
    text: str
    position: int


# Longest symbols first so '>=' wins over '>'
SYMBOL_OPERATORS = ('>=', '<=', '==', '!=', '>', '<')

_DATE_PATTERN = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')
_NUMBER_PATTERN = re.compile(r'[0-9]+')
_WORD_PATTERN = re.compile(r'[A-Za-z]+')


def tokenize(raw: str) -> List[Token]:
    """
    Split an expression into tokens.

    Args:
        raw: Expression text

    Returns:
        List of tokens, always terminated by an END token

    Raises:
        InvalidExpression: If the text contains a character no token starts with
    """
    if not isinstance(raw, str):
        raise InvalidExpression(f"Expression must be a string, got {type(raw).__name__}", str(raw))

    tokens = []
    pos = 0
    length = len(raw)

    while pos < length:
        char = raw[pos]

        if char.isspace():
            pos += 1
            continue

        if char in '<>=!':
            symbol = next((s for s in SYMBOL_OPERATORS if raw.startswith(s, pos)), None)
            if symbol is None:
                raise InvalidExpression(f"Unexpected character '{char}' at position {pos} in '{raw}'", raw)
            tokens.append(Token(TokenKind.OPERATOR, symbol, pos))
            pos += len(symbol)
            continue

        match = _DATE_PATTERN.match(raw, pos)
        if match:
            tokens.append(Token(TokenKind.DATE, match.group(), pos))
            pos = match.end()
            continue

        match = _NUMBER_PATTERN.match(raw, pos)
        if match:
            tokens.append(Token(TokenKind.NUMBER, match.group(), pos))
            pos = match.end()
            continue

        match = _WORD_PATTERN.match(raw, pos)
        if match:
            tokens.append(Token(TokenKind.WORD, match.group().lower(), pos))
            pos = match.end()
            continue

        raise InvalidExpression(f"Unexpected character '{char}' at position {pos} in '{raw}'", raw)

    tokens.append(Token(TokenKind.END, '', length))
    return tokens


class TokenStream:
    """Cursor over a token list used by the recursive-descent parsers."""

    def __init__(self, raw: str):
        self.raw = raw
        self._tokens = tokenize(raw)
        self._index = 0

    def peek(self) -> Token:
        """Return the current token without consuming it."""
        return self._tokens[self._index]

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self._tokens[self._index]
        if token.kind is not TokenKind.END:
            self._index += 1
        return token

    def accept(self, kind: TokenKind) -> Optional[Token]:
        """Consume the current token if it has the given kind."""
        if self.peek().kind is kind:
            return self.advance()
        return None

    def expect(self, kind: TokenKind, description: str) -> Token:
        """Consume a token of the given kind or fail."""
        token = self.peek()
        if token.kind is not kind:
            raise self.error(f"expected {description}", token)
        return self.advance()

    def expect_end(self) -> None:
        """Fail unless every token has been consumed."""
        token = self.peek()
        if token.kind is not TokenKind.END:
            raise self.error(f"unexpected '{token.text}'", token)

    def error(self, reason: str, token: Token) -> InvalidExpression:
        """Build an InvalidExpression pointing at a token."""
        return InvalidExpression(
            f"Invalid expression '{self.raw}': {reason} at position {token.position}",
            self.raw
        )
