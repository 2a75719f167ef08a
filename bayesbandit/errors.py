"""Exceptions raised by the bandit package.

Every error is a precondition violation on caller-supplied data. Nothing here
is retryable and nothing is clamped or corrected on the caller's behalf.
"""
from __future__ import annotations


class BanditError(Exception):
    """Base class for all bandit errors."""


class InvalidConfiguration(BanditError, ValueError):
    """Construction input is missing or malformed."""


class NoArmsAvailable(BanditError, LookupError):
    """Selection was requested with no arm to choose from."""


class InvalidParameter(BanditError, ValueError):
    """A numeric argument is outside its domain (e.g. a non-positive Beta shape)."""


class DivisionByZero(BanditError, ZeroDivisionError):
    """A success ratio was requested for an arm with zero trials."""


class InvalidShape(BanditError, ValueError):
    """A contingency table is not 2x2."""


class NumericError(BanditError, ArithmeticError):
    """A computed probability fell outside [0, 1]."""


__all__ = [
    "BanditError",
    "InvalidConfiguration",
    "NoArmsAvailable",
    "InvalidParameter",
    "DivisionByZero",
    "InvalidShape",
    "NumericError",
]
