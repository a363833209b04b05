"""Root-finding utilities (bracketing and Brent's method)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

from cdslib.errors import NumericDegeneracy

logger = logging.getLogger(__name__)

Func = Callable[[float], float]


@dataclass
class RootResult:
    root: float
    iterations: int
    converged: bool
    method: str


class RootFindingError(NumericDegeneracy):
    """Raised when root-finding fails to bracket or converge."""


def find_bracket(
    func: Func,
    lower: float,
    upper: float,
    expansion: float = 1.6,
    max_iter: int = 50,
) -> Tuple[float, float]:
    """
    Expand ``[lower, upper]`` geometrically until ``func`` changes sign.

    Raises:
        RootFindingError: If no sign change is found within ``max_iter`` expansions
    """
    if not upper > lower:
        raise RootFindingError(f"Invalid initial bracket [{lower}, {upper}]")
    a, b = lower, upper
    f_a = func(a)
    f_b = func(b)
    for _ in range(max_iter):
        if f_a * f_b <= 0.0:
            return a, b
        width = b - a
        # expand on the side with the smaller absolute value
        if abs(f_a) < abs(f_b):
            a -= expansion * width
            f_a = func(a)
        else:
            b += expansion * width
            f_b = func(b)
    raise RootFindingError(
        f"Failed to bracket the root; last bracket [{a:.6g}, {b:.6g}] "
        f"with values ({f_a:.6e}, {f_b:.6e})"
    )


def brent(
    func: Func,
    lower: float,
    upper: float,
    *,
    tol_x: float = 1e-14,
    tol_value: float = 0.0,
    max_iter: int = 100,
) -> RootResult:
    """Brent's method on a bracket ``[lower, upper]``.

    Combines inverse quadratic interpolation, secant and bisection steps, so it
    converges superlinearly on smooth functions while never leaving the
    bracket.

    Args:
        func: Function whose root is sought
        lower: Lower end of the bracket
        upper: Upper end of the bracket
        tol_x: Absolute tolerance on the root
        tol_value: Absolute tolerance on the function value
        max_iter: Iteration cap

    Returns:
        RootResult with the root and iteration count

    Raises:
        RootFindingError: If the bracket holds no sign change or the iteration
            cap is reached
    """
    a, b = float(lower), float(upper)
    f_a = func(a)
    f_b = func(b)
    if f_a == 0.0:
        return RootResult(a, 0, True, "brent")
    if f_b == 0.0:
        return RootResult(b, 0, True, "brent")
    if f_a * f_b > 0.0:
        raise RootFindingError(
            f"Root not bracketed: f({a:.6g})={f_a:.6e}, f({b:.6g})={f_b:.6e}"
        )

    c, f_c = a, f_a
    d = e = b - a
    for iteration in range(1, max_iter + 1):
        if f_b * f_c > 0.0:
            c, f_c = a, f_a
            d = e = b - a
        if abs(f_c) < abs(f_b):
            a, b, c = b, c, b
            f_a, f_b, f_c = f_b, f_c, f_b

        tol = 2.0 * 2.2e-16 * abs(b) + 0.5 * tol_x
        m = 0.5 * (c - b)
        if abs(m) <= tol or abs(f_b) <= tol_value or f_b == 0.0:
            logger.debug("Brent converged in %s iterations: x=%s f=%s", iteration, b, f_b)
            return RootResult(b, iteration, True, "brent")

        if abs(e) >= tol and abs(f_a) > abs(f_b):
            s = f_b / f_a
            if a == c:
                # secant
                p = 2.0 * m * s
                q = 1.0 - s
            else:
                # inverse quadratic interpolation
                q = f_a / f_c
                r = f_b / f_c
                p = s * (2.0 * m * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0.0:
                q = -q
            else:
                p = -p
            if 2.0 * p < min(3.0 * m * q - abs(tol * q), abs(e * q)):
                e = d
                d = p / q
            else:
                d = m
                e = m
        else:
            d = m
            e = m

        a, f_a = b, f_b
        if abs(d) > tol:
            b += d
        else:
            b += tol if m > 0 else -tol
        f_b = func(b)

    raise RootFindingError(
        f"Brent failed to converge within {max_iter} iterations; "
        f"last estimate {b:.12g} with value {f_b:.6e}"
    )
