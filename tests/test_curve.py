"""Tests for the time-based Curve."""

import math

import numpy as np
import pytest

from cdslib.curves import CreditCurve, Curve, YieldCurve
from cdslib.errors import InvalidArgument, InvalidCurveInput


def test_knots_are_reproduced() -> None:
    """rt at a knot is rate * time."""
    curve = Curve([0.5, 1.0, 3.0], [0.02, 0.03, 0.04])
    for t, r in zip(curve.times, curve.rates):
        assert curve.get_rt(t) == pytest.approx(r * t, abs=1e-15)
        assert curve.get_zero_rate(t) == pytest.approx(r, abs=1e-15)


def test_flat_before_first_knot() -> None:
    """Zero rate is flat before the first knot."""
    curve = Curve([1.0, 2.0], [0.03, 0.05])
    assert curve.get_zero_rate(0.25) == pytest.approx(0.03, abs=1e-15)
    assert curve.get_rt(0.0) == 0.0
    assert curve.get_zero_rate(0.0) == 0.03


def test_linear_in_rt_between_knots() -> None:
    """rt is interpolated linearly and the forward rate is constant on a segment."""
    curve = Curve([1.0, 3.0], [0.02, 0.04])
    expected = 0.5 * (0.02 * 1.0 + 0.04 * 3.0)
    assert curve.get_rt(2.0) == pytest.approx(expected, abs=1e-15)
    fwd = (0.12 - 0.02) / 2.0
    assert curve.forward_rate(1.5) == pytest.approx(fwd, abs=1e-15)
    assert curve.forward_rate(2.9) == pytest.approx(fwd, abs=1e-15)


def test_flat_forward_extrapolation() -> None:
    """After the last knot the last segment's forward rate continues."""
    curve = Curve([1.0, 3.0], [0.02, 0.04])
    fwd = curve.forward_rate(2.0)
    assert curve.forward_rate(10.0) == pytest.approx(fwd, abs=1e-15)
    assert curve.get_rt(5.0) == pytest.approx(0.12 + fwd * 2.0, abs=1e-14)


def test_flat_two_knot_curve() -> None:
    curve = Curve([1.0, 10.0], [0.05, 0.05])
    assert curve.discount_factor(5.0) == pytest.approx(math.exp(-0.25), abs=1e-15)


def test_interpolated_discount_factors_lie_between_knots() -> None:
    """With positive forwards the discount factor falls strictly across each segment."""
    times = [0.5, 1.0, 2.0, 5.0, 10.0]
    curve = Curve(times, [0.01, 0.015, 0.02, 0.03, 0.035])
    for t0, t1 in zip(times[:-1], times[1:]):
        p0 = curve.discount_factor(t0)
        p1 = curve.discount_factor(t1)
        for w in (0.1, 0.5, 0.9):
            p = curve.discount_factor(t0 + w * (t1 - t0))
            assert p1 < p < p0


def test_single_knot_curve_is_flat() -> None:
    curve = CreditCurve.make_flat(0.025)
    for t in (0.1, 1.0, 7.5, 30.0):
        assert curve.get_rt(t) == pytest.approx(0.025 * t, abs=1e-15)
        assert curve.hazard_rate(t) == pytest.approx(0.025, abs=1e-15)


def test_discount_factor_equals_survival_probability() -> None:
    curve = Curve([0.5, 2.0], [0.01, 0.03])
    for t in (0.2, 1.0, 4.0):
        expected = math.exp(-curve.get_rt(t))
        assert curve.discount_factor(t) == expected
        assert curve.survival_probability(t) == expected


def test_with_rate_returns_new_curve() -> None:
    """Curves are immutable; with_rate leaves the original untouched."""
    curve = YieldCurve([1.0, 2.0], [0.01, 0.02])
    bumped = curve.with_rate(0.05, 1)
    assert isinstance(bumped, YieldCurve)
    assert bumped is not curve
    assert curve.zero_rate_at(1) == 0.02
    assert bumped.zero_rate_at(1) == 0.05
    assert bumped.zero_rate_at(0) == 0.01
    np.testing.assert_array_equal(bumped.times, curve.times)


def test_arrays_are_read_only() -> None:
    curve = Curve([1.0, 2.0], [0.01, 0.02])
    with pytest.raises(ValueError):
        curve.rates[0] = 0.5


def test_with_rates_requires_matching_length() -> None:
    curve = Curve([1.0, 2.0], [0.01, 0.02])
    with pytest.raises(InvalidCurveInput, match="expected 2 rates"):
        curve.with_rates([0.01])


def test_with_rate_index_out_of_range() -> None:
    curve = Curve([1.0, 2.0], [0.01, 0.02])
    with pytest.raises(InvalidArgument, match="out of range"):
        curve.with_rate(0.03, 2)


@pytest.mark.parametrize(
    "times, rates, message",
    [
        ([], [], "must not be empty"),
        ([1.0, 2.0], [0.01], "same length"),
        ([-0.5, 1.0], [0.01, 0.02], "non-negative"),
        ([1.0, 1.0], [0.01, 0.02], "strictly ascending"),
        ([1.0, 2.0], [0.01, float("nan")], "finite"),
    ],
)
def test_invalid_curve_input(times, rates, message) -> None:
    with pytest.raises(InvalidCurveInput, match=message):
        Curve(times, rates)


@pytest.mark.parametrize("t", [0.3, 1.0, 1.7, 2.5, 6.0])
def test_single_node_sensitivity_matches_finite_difference(t) -> None:
    curve = Curve([0.5, 1.0, 2.0, 3.0], [0.02, 0.025, 0.03, 0.028])
    eps = 1e-7
    for index in range(curve.n_knots):
        up = curve.with_rate(curve.zero_rate_at(index) + eps, index)
        down = curve.with_rate(curve.zero_rate_at(index) - eps, index)
        fd = (up.get_rt(t) - down.get_rt(t)) / (2 * eps)
        assert curve.single_node_rt_sensitivity(t, index) == pytest.approx(fd, abs=1e-7)
        fd_df = (up.discount_factor(t) - down.discount_factor(t)) / (2 * eps)
        assert curve.single_node_discount_factor_sensitivity(t, index) == pytest.approx(
            fd_df, abs=1e-7
        )
