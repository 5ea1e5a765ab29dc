"""
Date expressions for storefinder.

A date expression compares an entry's last modification time against a
reference time:

    <date-expr> ::= OP WS? (DATE | AMOUNT | UNIT)?
    OP          ::= ">" | ">=" | "<" | "<=" | "==" | "last" | "after" | "before"
    DATE        ::= YYYY "-" MM "-" DD
    AMOUNT      ::= NUMBER WS? UNIT
    UNIT        ::= "minute" | "hour" | "day" | "week" | "month" | "year" ("s")?

'after' and 'last' read as '>', 'before' reads as '<'. A relative amount
resolves to "now minus the amount" when the expression is parsed; a bare
unit counts as an amount of one ('last week'). Without an operand the
reference is the current time.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from .lexer import Token, TokenKind, TokenStream
from .operators import ComparisonOperator
from ..exceptions import InvalidExpression, UnsupportedUnit
from ..models.entry import Entry


logger = logging.getLogger(__name__)


DATE_FORMAT = '%Y-%m-%d'

SYMBOL_OPERATORS = {
    '>': ComparisonOperator.GT,
    '>=': ComparisonOperator.GE,
    '<': ComparisonOperator.LT,
    '<=': ComparisonOperator.LE,
    '==': ComparisonOperator.EQ,
}

WORD_OPERATORS = {
    'after': ComparisonOperator.GT,
    'last': ComparisonOperator.GT,
    'before': ComparisonOperator.LT,
}

# Fixed-length units in seconds; months and years use calendar arithmetic
FIXED_UNITS = {
    'minute': 60,
    'hour': 3600,
    'day': 86400,
    'week': 7 * 86400,
}

CALENDAR_UNITS = {
    'month': 1,
    'year': 12,
}


@dataclass(frozen=True)
class DateExpression:
    """
    A parsed date predicate.

    Attributes:
        operator: Normalized comparison operator
        reference: Reference time as a Unix timestamp, fixed at parse time
        raw: Source text of the expression
    """
    operator: ComparisonOperator
    reference: int
    raw: str

    def matches(self, timestamp: int) -> bool:
        """Check whether a timestamp satisfies the predicate."""
        return self.operator.apply(timestamp, self.reference)

    def get_reference_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.reference)

    def __str__(self) -> str:
        return f"date {self.operator.symbol} {self.get_reference_datetime().isoformat()}"


def subtract_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime back by a number of calendar months.

    The day of month is clamped to the length of the target month, so
    March 31 minus one month is February 28 (or 29 in leap years).

    Raises:
        ValueError: If the result falls before year 1
    """
    total = moment.year * 12 + (moment.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    if year < 1:
        raise ValueError(f"Cannot go back {months} months from {moment.isoformat()}")
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class DateComparator:
    """
    Parses date expressions and filters entries with them.

    Args:
        clock: Callable returning the current local time; defaults to datetime.now
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.now

    def parse(self, raw: str) -> DateExpression:
        """
        Parse a date expression.

        Args:
            raw: Expression text such as 'after 2021-01-01' or '> 3 days'

        Returns:
            Parsed DateExpression with its reference time resolved

        Raises:
            InvalidExpression: If the text does not follow the date grammar
            UnsupportedUnit: If a time unit is not recognized
        """
        stream = TokenStream(raw)
        operator = self._parse_operator(stream)
        now = self._clock()

        token = stream.peek()
        if token.kind is TokenKind.DATE:
            stream.advance()
            reference = self._parse_absolute_date(token, stream)
        elif token.kind is TokenKind.NUMBER:
            stream.advance()
            unit_token = stream.expect(TokenKind.WORD, "a time unit")
            reference = self._resolve_relative(now, int(token.text), unit_token, stream)
        elif token.kind is TokenKind.WORD:
            stream.advance()
            reference = self._resolve_relative(now, 1, token, stream)
        elif token.kind is TokenKind.END:
            reference = now
        else:
            raise stream.error(f"unexpected '{token.text}'", token)

        stream.expect_end()
        try:
            timestamp = int(reference.timestamp())
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidExpression(f"Invalid expression '{raw}': date out of range", raw) from e
        return DateExpression(operator=operator, reference=timestamp, raw=raw)

    def _parse_operator(self, stream: TokenStream) -> ComparisonOperator:
        token = stream.peek()
        if token.kind is TokenKind.OPERATOR:
            if token.text not in SYMBOL_OPERATORS:
                raise stream.error(f"operator '{token.text}' is not supported for dates", token)
            stream.advance()
            return SYMBOL_OPERATORS[token.text]
        if token.kind is TokenKind.WORD and token.text in WORD_OPERATORS:
            stream.advance()
            return WORD_OPERATORS[token.text]
        raise stream.error("expected a date operator", token)

    def _parse_absolute_date(self, token: Token, stream: TokenStream) -> datetime:
        try:
            return datetime.strptime(token.text, DATE_FORMAT)
        except ValueError as e:
            raise stream.error(f"'{token.text}' is not a valid calendar date ({e})", token) from e

    def _resolve_relative(self, now: datetime, amount: int, unit_token: Token,
                          stream: TokenStream) -> datetime:
        unit = self._normalize_unit(unit_token.text, stream.raw)
        try:
            if unit in CALENDAR_UNITS:
                return subtract_months(now, amount * CALENDAR_UNITS[unit])
            return now - timedelta(seconds=amount * FIXED_UNITS[unit])
        except (OverflowError, ValueError) as e:
            raise InvalidExpression(f"Invalid expression '{stream.raw}': amount out of range", stream.raw) from e

    def _normalize_unit(self, word: str, raw: str) -> str:
        if word in FIXED_UNITS or word in CALENDAR_UNITS:
            return word
        if word.endswith('s'):
            singular = word[:-1]
            if singular in FIXED_UNITS or singular in CALENDAR_UNITS:
                return singular
        raise UnsupportedUnit(word, raw)

    def evaluate(self, expression: DateExpression, timestamp: int) -> bool:
        """Apply a parsed expression to a Unix timestamp."""
        return expression.matches(timestamp)

    def filter(self, entries: Iterable[Entry], raw: str) -> List[Entry]:
        """
        Keep the entries whose last modification time satisfies an expression.

        The expression (and therefore "now") is resolved once, before any
        entry is evaluated.

        Raises:
            InvalidExpression: If the expression is malformed
        """
        expression = self.parse(raw)
        return self.filter_parsed(entries, expression)

    def filter_parsed(self, entries: Iterable[Entry], expression: DateExpression) -> List[Entry]:
        """Keep the entries matching an already parsed expression."""
        entries = list(entries)
        kept = [entry for entry in entries if expression.matches(entry.last_modified)]
        logger.debug(f"Date expression '{expression.raw}' kept {len(kept)} of {len(entries)} entries")
        return kept
