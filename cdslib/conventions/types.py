"""
Basic types and enums used across schedules, pricers and risk calculators.
"""

from enum import Enum


class BusinessDayAdjustment(Enum):
    """Business day adjustment rules."""

    NO_ADJUSTMENT = "NO_ADJUSTMENT"
    FOLLOWING = "FOLLOWING"
    MODIFIED_FOLLOWING = "MODIFIED_FOLLOWING"
    PRECEDING = "PRECEDING"
    MODIFIED_PRECEDING = "MODIFIED_PRECEDING"


class StubType(Enum):
    """Position and length of the irregular period in a premium schedule."""

    FRONTSHORT = "FRONTSHORT"
    FRONTLONG = "FRONTLONG"
    BACKSHORT = "BACKSHORT"
    BACKLONG = "BACKLONG"

    @property
    def is_front(self) -> bool:
        return self in (StubType.FRONTSHORT, StubType.FRONTLONG)

    @property
    def is_long(self) -> bool:
        return self in (StubType.FRONTLONG, StubType.BACKLONG)


class PriceType(Enum):
    """Whether a premium-leg value includes accrued premium."""

    CLEAN = "CLEAN"
    DIRTY = "DIRTY"


class AccrualOnDefaultFormula(Enum):
    """Formula used to integrate premium accrued up to a default.

    ORIGINAL_ISDA reproduces the ISDA C library, including its half-day
    shift of the accrual time; CORRECT is the exact integral.
    """

    ORIGINAL_ISDA = "ORIGINAL_ISDA"
    CORRECT = "CORRECT"


class BumpType(Enum):
    """How a spread bump is applied."""

    ADDITIVE = "ADDITIVE"
    MULTIPLICATIVE = "MULTIPLICATIVE"


class FiniteDifferenceType(Enum):
    """Finite-difference scheme for spread sensitivities."""

    FORWARD = "FORWARD"
    CENTRAL = "CENTRAL"
    BACKWARD = "BACKWARD"
