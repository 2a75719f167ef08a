"""Fisher's exact test for 2x2 contingency tables.

The combinatorial terms are computed with exact integers and only the final
ratio is converted to ``float``. Counts in the tens of thousands would overflow
or lose all precision as floating-point factorials.
"""
from __future__ import annotations

import math
import numbers
from typing import List, Optional, Protocol, Sequence, Tuple

from bayesbandit.errors import InvalidParameter, InvalidShape, NumericError

Table = Sequence[Sequence[float]]


class ExactBinomial(Protocol):
    def comb(self, n: int, k: int) -> int:
        ...


class MathBinomial:
    """Exact binomial coefficients on arbitrary-precision ints."""

    def comb(self, n: int, k: int) -> int:
        if n < 0 or not 0 <= k <= n:
            raise InvalidParameter(f"C({n}, {k}) is undefined")
        return math.comb(n, k)


def _as_count(value: float) -> int:
    if isinstance(value, bool):
        raise InvalidParameter(f"Count {value!r} must be a number, not a bool")
    if isinstance(value, numbers.Integral):
        count = int(value)
    elif isinstance(value, numbers.Real) and float(value).is_integer():
        count = int(value)
    else:
        raise InvalidParameter(f"Count {value!r} must be a whole number")
    if count < 0:
        raise InvalidParameter(f"Count {value!r} must be non-negative")
    return count


def _unpack(table: Table) -> List[List[int]]:
    try:
        rows = [list(row) for row in table]
    except TypeError as exc:
        raise InvalidShape("Contingency table must be a sequence of two rows") from exc
    if len(rows) != 2 or any(len(row) != 2 for row in rows):
        shape = [len(row) for row in rows]
        raise InvalidShape(f"Contingency table must be 2x2, got row lengths {shape}")
    return [[_as_count(value) for value in row] for row in rows]


def _exact(binomial: ExactBinomial, n: int, k: int) -> int:
    value = binomial.comb(n, k)
    if not isinstance(value, numbers.Integral) or value < 0:
        raise NumericError(f"C({n}, {k}) returned {value!r}, expected a non-negative integer")
    return int(value)


def fisher_exact(table: Table, binomial: Optional[ExactBinomial] = None) -> float:
    """Hypergeometric probability of the table ``[[a, b], [c, d]]``.

    ``p = C(a+b, a) * C(c+d, c) / C(n, a+c)``. This is the point probability
    of the observed table given its margins, not a summed tail.
    """
    binomial = binomial or MathBinomial()
    (a, b), (c, d) = _unpack(table)
    n = a + b + c + d
    denominator = _exact(binomial, n, a + c)
    if denominator == 0:
        raise NumericError(f"C({n}, {a + c}) evaluated to zero")
    numerator = _exact(binomial, a + b, a) * _exact(binomial, c + d, c)
    if numerator > denominator:
        raise NumericError(f"Fisher p-value for {[[a, b], [c, d]]} exceeds 1")
    # int / int is correctly rounded and underflows to 0.0
    return numerator / denominator


def contingency_table(best: Tuple[float, float], other: Tuple[float, float]) -> List[List[float]]:
    """Arrange ``(successes, failures)`` pairs as ``[[s_best, s_other], [f_best, f_other]]``."""
    return [[best[0], other[0]], [best[1], other[1]]]
