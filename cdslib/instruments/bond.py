"""
Fixed cash-flow bond description for bond-CDS basis analytics.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence, Union

import numpy as np

from cdslib.conventions.daycount import ACT_365F, DayCountConvention, get_day_count_convention
from cdslib.errors import InvalidArgument
from cdslib.schedule.premium_leg import PremiumLegSchedule


class BondAnalytic:
    """Payment times and amounts of a fixed-coupon bond.

    Amounts are per unit notional; the last amount includes the return of par.
    """

    def __init__(
        self,
        payment_times: Sequence[float],
        payment_amounts: Sequence[float],
        recovery_rate: float,
        accrued_interest: float = 0.0,
    ):
        """
        Initialize the bond.

        Args:
            payment_times: Curve times of the payments, strictly ascending, >= 0
            payment_amounts: Cash amount of each payment
            recovery_rate: Recovery rate in [0, 1]
            accrued_interest: Accrued coupon at the valuation date, >= 0

        Raises:
            InvalidArgument: If the inputs are inconsistent
        """
        times = np.array(payment_times, dtype=float).ravel()
        amounts = np.array(payment_amounts, dtype=float).ravel()
        if times.size == 0:
            raise InvalidArgument("A bond needs at least one payment")
        if times.size != amounts.size:
            raise InvalidArgument(
                f"payment_times and payment_amounts must have same length "
                f"({times.size} != {amounts.size})"
            )
        if times[0] < 0.0:
            raise InvalidArgument(f"payment times must be non-negative: {times[0]}")
        if np.any(np.diff(times) <= 0.0):
            raise InvalidArgument("payment times must be strictly ascending")
        if not 0.0 <= recovery_rate <= 1.0:
            raise InvalidArgument(f"recovery_rate must be in [0, 1], got {recovery_rate}")
        if accrued_interest < 0.0:
            raise InvalidArgument(f"accrued_interest must be non-negative, got {accrued_interest}")

        times.setflags(write=False)
        amounts.setflags(write=False)
        self._times = times
        self._amounts = amounts
        self._recovery_rate = recovery_rate
        self._accrued = accrued_interest

    @classmethod
    def from_schedule(
        cls,
        today: date,
        coupon: float,
        schedule: PremiumLegSchedule,
        recovery_rate: float,
        accrual_day_count: Union[str, DayCountConvention],
        curve_day_count: Union[str, DayCountConvention] = ACT_365F,
    ) -> "BondAnalytic":
        """
        Build from a coupon schedule; periods ending on or before ``today`` are dropped.

        Args:
            today: Valuation date; curve time zero
            coupon: Annual coupon rate
            schedule: Coupon schedule
            recovery_rate: Recovery rate in [0, 1]
            accrual_day_count: Day count of the coupon
            curve_day_count: Day count for payment times
        """
        accrual_dcc = get_day_count_convention(accrual_day_count)
        curve_dcc = get_day_count_convention(curve_day_count)
        remaining = schedule.truncate(today)

        times = [curve_dcc.year_fraction(today, p.payment_date) for p in remaining]
        amounts = [
            coupon * accrual_dcc.year_fraction(p.accrual_start, p.accrual_end) for p in remaining
        ]
        amounts[-1] += 1.0

        first_start = remaining.accrual_start_date(0)
        accrued = coupon * accrual_dcc.year_fraction(first_start, today) if first_start < today else 0.0
        return cls(times, amounts, recovery_rate, accrued)

    @property
    def n_payments(self) -> int:
        return self._times.size

    @property
    def payment_times(self) -> np.ndarray:
        return self._times

    @property
    def payment_amounts(self) -> np.ndarray:
        return self._amounts

    def payment_time(self, index: int) -> float:
        return float(self._times[index])

    def payment_amount(self, index: int) -> float:
        return float(self._amounts[index])

    @property
    def recovery_rate(self) -> float:
        return self._recovery_rate

    @property
    def accrued_interest(self) -> float:
        return self._accrued

    def __repr__(self) -> str:
        return (
            f"BondAnalytic(n_payments={self.n_payments}, maturity={self._times[-1]:.6f}, "
            f"recovery_rate={self._recovery_rate})"
        )
