"""Tests for bump-and-reprice spread sensitivities."""

import numpy as np
import pytest

from cdslib.conventions import BumpType, FiniteDifferenceType, PriceType
from cdslib.curves import CreditCurveBuilder
from cdslib.errors import InvalidArgument, UnsupportedQuoteType
from cdslib.instruments import ParSpread, PointsUpFront, QuotedSpread
from cdslib.pricing import MarketQuoteConverter
from cdslib.risk import (
    FiniteDifferenceSpreadSensitivityCalculator,
    bucketed_cs01_frame,
    bucketed_cs01_matrix_frame,
)

ONE_BP = 1e-4
COUPON = 0.01


@pytest.fixture
def calculator() -> FiniteDifferenceSpreadSensitivityCalculator:
    return FiniteDifferenceSpreadSensitivityCalculator()


# ----------------------------------------------------------------------
# Bumping helpers
# ----------------------------------------------------------------------
def test_bumped_spread() -> None:
    calc = FiniteDifferenceSpreadSensitivityCalculator
    assert calc.bumped_spread(0.01, 0.001, BumpType.ADDITIVE) == pytest.approx(0.011)
    assert calc.bumped_spread(0.01, 0.1, BumpType.MULTIPLICATIVE) == pytest.approx(0.011)


def test_make_bumped_spreads_returns_new_list() -> None:
    spreads = [0.01, 0.02, 0.03]
    calc = FiniteDifferenceSpreadSensitivityCalculator
    assert calc.make_bumped_spreads(spreads, ONE_BP, BumpType.ADDITIVE) == pytest.approx(
        [0.0101, 0.0201, 0.0301]
    )
    single = calc.make_bumped_spreads(spreads, ONE_BP, BumpType.ADDITIVE, index=1)
    assert single == pytest.approx([0.01, 0.0201, 0.03])
    assert spreads == [0.01, 0.02, 0.03]


def test_bump_quote(calculator, cds, yield_curve) -> None:
    assert calculator.bump_quote(cds, ParSpread(0.01), yield_curve, ONE_BP).coupon == pytest.approx(0.0101)

    qs = calculator.bump_quote(cds, QuotedSpread(0.01, 0.012), yield_curve, ONE_BP)
    assert qs.coupon == 0.01
    assert qs.quoted_spread == pytest.approx(0.0121)

    original = PointsUpFront(0.01, 0.02)
    bumped = calculator.bump_quote(cds, original, yield_curve, ONE_BP)
    assert isinstance(bumped, PointsUpFront)
    assert bumped.coupon == 0.01
    assert bumped.puf > original.puf
    assert original.puf == 0.02


def test_bump_quote_at_index(calculator, pillar_cds, yield_curve) -> None:
    quotes = [ParSpread(0.01), ParSpread(0.012)]
    bumped = calculator.bump_quote_at_index(pillar_cds[:2], quotes, yield_curve, ONE_BP, 1)
    assert bumped[0] is quotes[0]
    assert bumped[1].coupon == pytest.approx(0.0121)
    assert quotes[1].coupon == 0.012


# ----------------------------------------------------------------------
# Parallel CS01
# ----------------------------------------------------------------------
def test_parallel_cs01_is_positive_for_protection_buyer(calculator, cds, yield_curve) -> None:
    cs01 = calculator.parallel_cs01(cds, ParSpread(0.0125), yield_curve, ONE_BP)
    # roughly the risky duration of a 5Y trade
    assert 3.0 < cs01 < 5.0


def test_parallel_cs01_consistent_across_quote_types(calculator, cds, yield_curve) -> None:
    converter = MarketQuoteConverter()
    puf = 0.02
    qs = converter.puf_to_quoted_spread(cds, COUPON, yield_curve, puf)
    from_puf = calculator.parallel_cs01(cds, PointsUpFront(COUPON, puf), yield_curve, ONE_BP)
    from_qs = calculator.parallel_cs01(cds, QuotedSpread(COUPON, qs), yield_curve, ONE_BP)
    assert from_puf == pytest.approx(from_qs, abs=1e-7)


def test_parallel_cs01_from_spread(calculator, cds, yield_curve) -> None:
    a = calculator.parallel_cs01_from_spread(cds, COUPON, yield_curve, 0.015, ONE_BP)
    b = calculator.parallel_cs01_from_quoted_spread(cds, COUPON, yield_curve, cds, 0.015, ONE_BP)
    assert a == pytest.approx(b, abs=1e-12)
    mult = calculator.parallel_cs01_from_spread(
        cds, COUPON, yield_curve, 0.015, ONE_BP, BumpType.MULTIPLICATIVE
    )
    # a relative bump of 1e-4 moves the spread by 1.5e-6
    assert mult == pytest.approx(a * 0.015, rel=1e-2)


def test_pillar_quotes_match_par_spreads(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    quotes = [ParSpread(s) for s in pillar_spreads]
    a = calculator.parallel_cs01_from_pillar_quotes(cds, COUPON, yield_curve, pillar_cds, quotes, ONE_BP)
    b = calculator.parallel_cs01_from_par_spreads(cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP)
    assert a == pytest.approx(b, abs=1e-9)

    buckets_a = calculator.bucketed_cs01_from_pillar_quotes(
        cds, COUPON, yield_curve, pillar_cds, quotes, ONE_BP
    )
    buckets_b = calculator.bucketed_cs01_from_par_spreads(
        cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    np.testing.assert_allclose(buckets_a, buckets_b, rtol=0, atol=1e-9)


def test_bucketed_sums_to_parallel(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    parallel = calculator.parallel_cs01_from_par_spreads(
        cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    buckets = calculator.bucketed_cs01_from_par_spreads(
        cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    assert buckets.shape == (len(pillar_cds),)
    assert buckets.sum() == pytest.approx(parallel, rel=1e-2)
    # pillars beyond the trade maturity carry no risk
    assert buckets[4] == 0.0
    assert buckets[5] == 0.0


def test_bucketed_from_credit_curve(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    builder = CreditCurveBuilder()
    credit_curve = builder.calibrate_from_par_spreads(pillar_cds, pillar_spreads, yield_curve)
    buckets = calculator.bucketed_cs01_from_credit_curve(
        cds, COUPON, pillar_cds, yield_curve, credit_curve, ONE_BP
    )
    assert buckets[3] != 0.0
    assert buckets[4] == 0.0
    assert buckets[5] == 0.0

    parallel = calculator.parallel_cs01_from_credit_curve(
        cds, COUPON, pillar_cds, yield_curve, credit_curve, ONE_BP
    )
    assert buckets.sum() == pytest.approx(parallel, rel=1e-2)

    from_spreads = calculator.bucketed_cs01_from_bucket_par_spreads(
        cds, COUPON, pillar_cds, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    np.testing.assert_allclose(from_spreads, buckets, rtol=0, atol=1e-12)

    direct = calculator.bucketed_cs01_from_par_spreads(
        cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    np.testing.assert_allclose(buckets, direct, rtol=0, atol=1e-6)


def test_credit_curve_buckets_must_ascend(calculator, cds, yield_curve, pillar_cds, credit_curve) -> None:
    with pytest.raises(InvalidArgument, match="pillars must be ascending"):
        calculator.bucketed_cs01_from_credit_curve(
            cds, COUPON, list(reversed(pillar_cds)), yield_curve, credit_curve, ONE_BP
        )


def test_bucketed_from_puf(calculator, cds, yield_curve, pillar_cds) -> None:
    buckets = calculator.bucketed_cs01_from_puf(
        cds, PointsUpFront(COUPON, 0.02), yield_curve, pillar_cds, ONE_BP
    )
    assert buckets.shape == (len(pillar_cds),)
    assert buckets[:4].sum() > 0.0
    assert buckets[4] == 0.0


def test_bucketed_from_quoted_spreads(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    trades = [cds, pillar_cds[2]]
    matrix = calculator.bucketed_cs01_from_quoted_spreads_multi(
        trades, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    assert matrix.shape == (2, len(pillar_cds))
    single = calculator.bucketed_cs01_from_quoted_spreads(
        cds, COUPON, yield_curve, pillar_cds, pillar_spreads, ONE_BP
    )
    np.testing.assert_allclose(single, matrix[0], rtol=0, atol=1e-12)
    # the 3Y trade has no exposure to later pillars
    assert np.all(matrix[1, 3:] == 0.0)


# ----------------------------------------------------------------------
# Finite differences
# ----------------------------------------------------------------------
def test_central_is_sum_of_one_sided(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    deltas = [ONE_BP] * len(pillar_spreads)
    args = (cds, COUPON, PriceType.CLEAN, yield_curve, pillar_cds, pillar_spreads, deltas)
    central = calculator.finite_difference_spread_sensitivity(*args, FiniteDifferenceType.CENTRAL)
    forward = calculator.finite_difference_spread_sensitivity(*args, FiniteDifferenceType.FORWARD)
    backward = calculator.finite_difference_spread_sensitivity(*args, FiniteDifferenceType.BACKWARD)
    assert forward > 0.0
    assert backward > 0.0
    assert central == pytest.approx(forward + backward, abs=1e-14)


def test_finite_difference_validation(calculator, cds, yield_curve, pillar_cds) -> None:
    market = pillar_cds[:2]

    def run(spreads, deltas, fd_type=FiniteDifferenceType.CENTRAL):
        return calculator.finite_difference_spread_sensitivity(
            cds, COUPON, PriceType.CLEAN, yield_curve, market, spreads, deltas, fd_type
        )

    with pytest.raises(InvalidArgument, match="spreads must be positive"):
        run([0.01, 0.0], [ONE_BP, ONE_BP])
    with pytest.raises(InvalidArgument, match="non-negative"):
        run([0.01, 0.01], [ONE_BP, -ONE_BP])
    with pytest.raises(InvalidArgument, match="less than spread"):
        run([0.01, 0.01], [0.02, ONE_BP])
    with pytest.raises(InvalidArgument, match="length"):
        run([0.01], [ONE_BP, ONE_BP])
    # a forward shift may exceed the spread
    assert run([0.01, 0.01], [0.02, 0.02], FiniteDifferenceType.FORWARD) > 0.0


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------
def test_bump_too_small(calculator, cds, yield_curve, pillar_cds, pillar_spreads) -> None:
    with pytest.raises(InvalidArgument, match="bump amount too small"):
        calculator.parallel_cs01_from_par_spreads(
            cds, COUPON, yield_curve, pillar_cds, pillar_spreads, 1e-11
        )
    with pytest.raises(InvalidArgument, match="bump amount too small"):
        calculator.parallel_cs01(cds, PointsUpFront(COUPON, 0.01), yield_curve, 0.0)


def test_unknown_quote(calculator, cds, yield_curve) -> None:
    with pytest.raises(UnsupportedQuoteType):
        calculator.parallel_cs01(cds, {"spread": 0.01}, yield_curve, ONE_BP)
    with pytest.raises(UnsupportedQuoteType):
        calculator.bump_quote(cds, 0.01, yield_curve, ONE_BP)


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------
def test_bucketed_cs01_frame(pillar_cds) -> None:
    values = [0.1, 0.2, 0.3, 0.4, 0.0, 0.0]
    df = bucketed_cs01_frame(pillar_cds, values, scale=10.0)
    assert list(df.columns) == ["maturity", "protection_end", "cs01", "total"]
    assert df["cs01"].tolist() == pytest.approx([1.0, 2.0, 3.0, 4.0, 0.0, 0.0])
    assert df["total"].iloc[-1] == pytest.approx(10.0)
    assert df["maturity"].iloc[0] == pillar_cds[0].maturity

    with pytest.raises(InvalidArgument, match="one value per bucket"):
        bucketed_cs01_frame(pillar_cds, values[:2])


def test_bucketed_cs01_matrix_frame(pillar_cds) -> None:
    matrix = np.arange(12, dtype=float).reshape(2, 6)
    df = bucketed_cs01_matrix_frame(pillar_cds, matrix, trade_labels=["5Y", "3Y"])
    assert df.shape == (2, 6)
    assert df.loc["3Y", pillar_cds[0].maturity] == 6.0
    with pytest.raises(InvalidArgument, match="one entry per row"):
        bucketed_cs01_matrix_frame(pillar_cds, matrix, trade_labels=["only"])
