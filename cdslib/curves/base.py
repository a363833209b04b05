"""
Piecewise term structures on the ISDA interpolation scheme.

A curve stores knot times ``t[i]`` and continuously compounded zero rates
``r[i]``. Interpolation is linear in ``rt = r * t`` (log-linear in discount
factors), which is the method mandated by the ISDA standard model:

- ``t <= t[0]``: ``rt = r[0] * t``
- ``t[i] < t <= t[i+1]``: linear between ``rt[i]`` and ``rt[i+1]``
- ``t > t[n-1]``: linear extrapolation of the last segment (flat forward)

The same class serves as a yield curve (discount factors) and as a credit
curve (survival probabilities). Curves are immutable; every "update"
returns a new instance.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from cdslib.errors import InvalidArgument, InvalidCurveInput


def _read_only(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


class Curve:
    """Immutable piecewise-linear-in-``rt`` curve."""

    def __init__(self, times: Sequence[float], rates: Sequence[float]):
        """
        Initialize the curve.

        Args:
            times: Knot times in years, strictly ascending, first >= 0
            rates: Continuously compounded zero rates at the knots

        Raises:
            InvalidCurveInput: If the knots or rates are invalid
        """
        t = np.array(times, dtype=float).ravel()
        r = np.array(rates, dtype=float).ravel()

        if r.size == 0:
            raise InvalidCurveInput("rates must not be empty")
        if t.size != r.size:
            raise InvalidCurveInput(
                f"times and rates must have same length ({t.size} != {r.size})"
            )
        if t[0] < 0.0:
            raise InvalidCurveInput(f"first knot time must be non-negative: {t[0]}")
        if t.size > 1 and np.any(np.diff(t) <= 0.0):
            raise InvalidCurveInput("knot times must be strictly ascending")
        if not (np.all(np.isfinite(t)) and np.all(np.isfinite(r))):
            raise InvalidCurveInput("knot times and rates must be finite")

        self._t = _read_only(t)
        self._r = _read_only(r)
        self._rt = _read_only(r * t)
        self._n = t.size

    @classmethod
    def make_flat(cls, rate: float, time: float = 1.0):
        """Single-knot curve with the same zero rate at every time."""
        return cls([time], [rate])

    # ------------------------------------------------------------------
    # Knot accessors
    # ------------------------------------------------------------------
    @property
    def times(self) -> np.ndarray:
        return self._t

    @property
    def rates(self) -> np.ndarray:
        return self._r

    @property
    def n_knots(self) -> int:
        return self._n

    def time_at(self, index: int) -> float:
        return float(self._t[index])

    def zero_rate_at(self, index: int) -> float:
        return float(self._r[index])

    # ------------------------------------------------------------------
    # Interpolation
    # ------------------------------------------------------------------
    def get_rt(self, t: float) -> float:
        """Zero rate times time, the negative log of the discount factor."""
        t = float(t)
        idx = int(np.searchsorted(self._t, t))
        if idx < self._n and self._t[idx] == t:
            return float(self._rt[idx])
        if idx == 0 or self._n == 1:
            return float(self._r[0]) * t

        i1 = min(idx, self._n - 1)
        i0 = i1 - 1
        t1 = self._t[i0]
        t2 = self._t[i1]
        return float(((t2 - t) * self._rt[i0] + (t - t1) * self._rt[i1]) / (t2 - t1))

    def get_zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate at ``t``."""
        t = float(t)
        if t == 0.0:
            return float(self._r[0])
        return self.get_rt(t) / t

    def discount_factor(self, t: float) -> float:
        """``exp(-rt(t))``."""
        return math.exp(-self.get_rt(t))

    def survival_probability(self, t: float) -> float:
        """``exp(-rt(t))`` read as a survival probability on a credit curve."""
        return math.exp(-self.get_rt(t))

    def forward_rate(self, t: float) -> float:
        """Instantaneous forward rate (constant on each segment)."""
        t = float(t)
        idx = int(np.searchsorted(self._t, t))
        if idx == 0 or self._n == 1:
            return float(self._r[0])
        i1 = min(idx, self._n - 1)
        i0 = i1 - 1
        return float((self._rt[i1] - self._rt[i0]) / (self._t[i1] - self._t[i0]))

    # ------------------------------------------------------------------
    # Sensitivities to a single knot rate
    # ------------------------------------------------------------------
    def single_node_rt_sensitivity(self, t: float, index: int) -> float:
        """Derivative of ``rt(t)`` with respect to ``rates[index]``."""
        self._check_index(index)
        t = float(t)
        idx = int(np.searchsorted(self._t, t))
        if idx < self._n and self._t[idx] == t:
            return float(self._t[idx]) if idx == index else 0.0
        if idx == 0 or self._n == 1:
            return t if index == 0 else 0.0

        i1 = min(idx, self._n - 1)
        i0 = i1 - 1
        if index not in (i0, i1):
            return 0.0
        t1 = self._t[i0]
        t2 = self._t[i1]
        if index == i0:
            return float((t2 - t) * t1 / (t2 - t1))
        return float((t - t1) * t2 / (t2 - t1))

    def single_node_discount_factor_sensitivity(self, t: float, index: int) -> float:
        """Derivative of ``exp(-rt(t))`` with respect to ``rates[index]``."""
        return -self.single_node_rt_sensitivity(t, index) * self.discount_factor(t)

    # ------------------------------------------------------------------
    # Persistent updates
    # ------------------------------------------------------------------
    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._n:
            raise InvalidArgument(f"knot index {index} out of range [0, {self._n})")

    def _with_rates(self, rates: np.ndarray):
        return type(self)(self._t, rates)

    def with_rate(self, rate: float, index: int):
        """New curve with the rate at knot ``index`` replaced."""
        self._check_index(index)
        rates = self._r.copy()
        rates[index] = rate
        return self._with_rates(rates)

    def with_rates(self, rates: Sequence[float]):
        """New curve on the same knots with all rates replaced."""
        rates = np.array(rates, dtype=float).ravel()
        if rates.size != self._n:
            raise InvalidCurveInput(
                f"expected {self._n} rates, got {rates.size}"
            )
        return self._with_rates(rates)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(times={self._t.tolist()}, "
            f"rates={self._r.tolist()})"
        )


class YieldCurve(Curve):
    """Risk-free discount curve."""


class CreditCurve(Curve):
    """Hazard-rate curve; ``rt`` is the integrated hazard."""

    def hazard_rate(self, t: float) -> float:
        """Forward hazard rate at ``t``."""
        return self.forward_rate(t)
