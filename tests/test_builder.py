"""Tests for the credit curve bootstrap."""

import logging

import numpy as np
import pytest

from cdslib.curves import BuilderConfig, CreditCurve, CreditCurveBuilder, implied_par_spreads
from cdslib.conventions import AccrualOnDefaultFormula
from cdslib.errors import InvalidArgument, UnsupportedQuoteType
from cdslib.instruments import ParSpread, PointsUpFront, QuotedSpread
from cdslib.pricing import MarketQuoteConverter

from tests.conftest import TRADE_DATE, make_cds


@pytest.mark.parametrize(
    "formula", [AccrualOnDefaultFormula.ORIGINAL_ISDA, AccrualOnDefaultFormula.CORRECT]
)
def test_calibrated_curve_reprices_par_spreads(yield_curve, pillar_cds, pillar_spreads, formula) -> None:
    builder = CreditCurveBuilder(BuilderConfig(formula=formula))
    curve = builder.calibrate_from_par_spreads(pillar_cds, pillar_spreads, yield_curve)
    assert isinstance(curve, CreditCurve)
    np.testing.assert_allclose(curve.times, [c.protection_end for c in pillar_cds], atol=0)
    repriced = implied_par_spreads(builder.pricer, pillar_cds, yield_curve, curve)
    np.testing.assert_allclose(repriced, pillar_spreads, rtol=0, atol=1e-12)


def test_calibrated_curve_reprices_upfronts(yield_curve, pillar_cds) -> None:
    builder = CreditCurveBuilder()
    premiums = [0.01, 0.01, 0.01, 0.05, 0.05, 0.05]
    pufs = [-0.002, -0.001, 0.004, -0.02, -0.015, -0.01]
    curve = builder.calibrate_from_puf(pillar_cds, premiums, yield_curve, pufs)
    for cds, premium, puf in zip(pillar_cds, premiums, pufs):
        assert builder.pricer.pv(cds, yield_curve, curve, premium) == pytest.approx(puf, abs=1e-12)


def test_mixed_quotes(yield_curve, pillar_cds, pillar_spreads) -> None:
    builder = CreditCurveBuilder()
    converter = MarketQuoteConverter()
    cds_list = pillar_cds[:3]
    quotes = [
        ParSpread(pillar_spreads[0]),
        QuotedSpread(0.01, pillar_spreads[1]),
        PointsUpFront(0.01, 0.001),
    ]
    curve = builder.calibrate(cds_list, quotes, yield_curve)
    pricer = builder.pricer

    assert pricer.par_spread(cds_list[0], yield_curve, curve) == pytest.approx(pillar_spreads[0], abs=1e-12)
    expected_puf = converter.quoted_spread_to_puf(cds_list[1], 0.01, yield_curve, pillar_spreads[1])
    assert pricer.pv(cds_list[1], yield_curve, curve, 0.01) == pytest.approx(expected_puf, abs=1e-12)
    assert pricer.pv(cds_list[2], yield_curve, curve, 0.01) == pytest.approx(0.001, abs=1e-12)


def test_flat_curve_is_recovered(yield_curve, pillar_cds) -> None:
    """Par spreads off a flat hazard curve bootstrap back to the same flat rate."""
    builder = CreditCurveBuilder()
    flat = CreditCurve.make_flat(0.02)
    spreads = implied_par_spreads(builder.pricer, pillar_cds, yield_curve, flat)
    curve = builder.calibrate_from_par_spreads(pillar_cds, spreads, yield_curve)
    np.testing.assert_allclose(curve.rates, 0.02, rtol=0, atol=1e-10)


def test_calibrate_single_gives_one_knot(yield_curve, cds) -> None:
    curve = CreditCurveBuilder().calibrate_single(cds, ParSpread(0.012), yield_curve)
    assert curve.n_knots == 1
    assert curve.time_at(0) == cds.protection_end


def test_negative_hazard_rate_is_logged(yield_curve, factory, caplog) -> None:
    cds = factory.make_imm_cds(TRADE_DATE, "1Y")
    with caplog.at_level(logging.WARNING, logger="cdslib.curves.builder"):
        curve = CreditCurveBuilder().calibrate_single(cds, PointsUpFront(0.01, -0.05), yield_curve)
    assert curve.zero_rate_at(0) < 0.0
    assert "Negative zero hazard rate" in caplog.text


def test_empty_input_rejected(yield_curve) -> None:
    with pytest.raises(InvalidArgument, match="at least one"):
        CreditCurveBuilder().calibrate_from_par_spreads([], [], yield_curve)


def test_length_mismatch_rejected(yield_curve, pillar_cds) -> None:
    builder = CreditCurveBuilder()
    with pytest.raises(InvalidArgument, match="same length"):
        builder.calibrate_from_par_spreads(pillar_cds, [0.01], yield_curve)
    with pytest.raises(InvalidArgument, match="same length"):
        builder.calibrate(pillar_cds, [ParSpread(0.01)], yield_curve)


def test_pillars_must_ascend(yield_curve, pillar_cds) -> None:
    reversed_cds = list(reversed(pillar_cds[:2]))
    with pytest.raises(InvalidArgument, match="strictly ascending"):
        CreditCurveBuilder().calibrate_from_par_spreads(reversed_cds, [0.01, 0.01], yield_curve)


def test_full_recovery_rejected(yield_curve) -> None:
    cds = make_cds(recovery_rate=1.0)
    with pytest.raises(InvalidArgument, match="zero loss given default"):
        CreditCurveBuilder().calibrate_from_par_spreads([cds], [0.01], yield_curve)


def test_unknown_quote_rejected(yield_curve, cds) -> None:
    with pytest.raises(UnsupportedQuoteType, match="unknown quote type"):
        CreditCurveBuilder().calibrate([cds], [0.01], yield_curve)
