"""
Size expressions for storefinder.

A size expression compares an entry's byte count against a threshold:

    <size-expr> ::= OP WS? NUMBER WS? UNIT?
    OP          ::= ">" | ">=" | "<" | "<=" | "==" | "!="
    UNIT        ::= "k" | "kb" | "kilo" | "m" | "mb" | "mega" | "g" | "gb" | "giga"

Units are case-insensitive and binary (powers of 1024).
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from .lexer import TokenKind, TokenStream
from .operators import ComparisonOperator
from ..exceptions import InvalidFilterConfiguration, UnsupportedUnit
from ..models.entry import Entry


logger = logging.getLogger(__name__)


KILOBYTE = 1024
MEGABYTE = 1024 ** 2
GIGABYTE = 1024 ** 3

UNIT_MULTIPLIERS = {
    'k': KILOBYTE,
    'kb': KILOBYTE,
    'kilo': KILOBYTE,
    'm': MEGABYTE,
    'mb': MEGABYTE,
    'mega': MEGABYTE,
    'g': GIGABYTE,
    'gb': GIGABYTE,
    'giga': GIGABYTE,
}


@dataclass(frozen=True)
class SizeExpression:
    """
    A parsed size predicate.

    Attributes:
        operator: Comparison operator
        threshold: Threshold in bytes
        raw: Source text of the expression
    """
    operator: ComparisonOperator
    threshold: int
    raw: str

    def matches(self, size: int) -> bool:
        """Check whether a byte count satisfies the predicate."""
        return self.operator.apply(size, self.threshold)

    def __str__(self) -> str:
        return f"size {self.operator.symbol} {self.threshold}"


class SizeComparator:
    """Parses size expressions and filters entries with them."""

    def parse(self, raw: str) -> SizeExpression:
        """
        Parse a size expression.

        Args:
            raw: Expression text such as '< 25' or '>= 1KB'

        Returns:
            Parsed SizeExpression

        Raises:
            InvalidExpression: If the text does not follow the size grammar
            UnsupportedUnit: If the unit word is not recognized
        """
        stream = TokenStream(raw)
        operator = self._parse_operator(stream)
        amount = int(stream.expect(TokenKind.NUMBER, "a byte count").text)
        multiplier = self._parse_unit(stream)
        stream.expect_end()
        return SizeExpression(operator=operator, threshold=amount * multiplier, raw=raw)

    def _parse_operator(self, stream: TokenStream) -> ComparisonOperator:
        token = stream.expect(TokenKind.OPERATOR, "a comparison operator")
        return ComparisonOperator(token.text)

    def _parse_unit(self, stream: TokenStream) -> int:
        token = stream.accept(TokenKind.WORD)
        if token is None:
            return 1
        if token.text not in UNIT_MULTIPLIERS:
            raise UnsupportedUnit(token.text, stream.raw)
        return UNIT_MULTIPLIERS[token.text]

    def evaluate(self, expression: SizeExpression, file_size: int) -> bool:
        """Apply a parsed expression to a byte count."""
        return expression.matches(file_size)

    def filter(self, entries: Iterable[Entry], raw: str) -> List[Entry]:
        """
        Keep the entries whose size satisfies an expression.

        The expression is parsed once before any entry is evaluated.

        Raises:
            InvalidExpression: If the expression is malformed
            InvalidFilterConfiguration: If an entry has no size (a directory)
        """
        expression = self.parse(raw)
        return self.filter_parsed(entries, expression)

    def filter_parsed(self, entries: Iterable[Entry], expression: SizeExpression) -> List[Entry]:
        """Keep the entries whose size satisfies an already parsed expression."""
        entries = list(entries)
        kept = []
        for entry in entries:
            if entry.size is None:
                raise InvalidFilterConfiguration(
                    f"Cannot apply size expression '{expression.raw}' to directory '{entry.path}'",
                    expression.raw
                )
            if expression.matches(entry.size):
                kept.append(entry)

        logger.debug(f"Size expression '{expression.raw}' kept {len(kept)} of {len(entries)} entries")
        return kept
