"""Comparison operators used by size and date expressions."""

import operator
from enum import Enum


class ComparisonOperator(Enum):
    """Comparison operators keyed by their textual symbol."""
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    EQ = "=="
    NE = "!="

    def apply(self, left: int, right: int) -> bool:
        """Compare left against right with this operator."""
        return _FUNCTIONS[self](left, right)

    @property
    def symbol(self) -> str:
        return self.value


_FUNCTIONS = {
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.GE: operator.ge,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.LE: operator.le,
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.NE: operator.ne,
}
