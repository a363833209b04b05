"""
Risky bond pricing off ISDA-style yield and credit curves.

A bond is valued as its cash flows discounted with the yield curve and
weighted by survival, plus the recovery of par paid on default before the
last payment. The default integral is the protection-leg integral with the
bond's recovery rate in place of the loss given default.
"""

from __future__ import annotations

import logging
import math

from cdslib.conventions.types import AccrualOnDefaultFormula, PriceType
from cdslib.curves.base import CreditCurve, Curve
from cdslib.errors import InvalidArgument
from cdslib.instruments.bond import BondAnalytic
from cdslib.instruments.cds import CDSAnalytic
from cdslib.schedule.integration import get_integration_points
from cdslib.utils.rootfinding import brent, find_bracket

from .analytic import TAYLOR_THRESHOLD, AnalyticCDSPricer, epsilon

logger = logging.getLogger(__name__)


class BondAnalyticCalculator:
    """Bond price, implied flat hazard rate and equivalent CDS spread."""

    def __init__(
        self,
        formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        tolerance: float = 1e-14,
        bracket_width: float = 0.01,
    ):
        self.pricer = AnalyticCDSPricer(formula)
        self.tolerance = tolerance
        self.bracket_width = bracket_width

    def bond_price(
        self,
        bond: BondAnalytic,
        yield_curve: Curve,
        credit_curve: Curve,
        price_type: PriceType = PriceType.DIRTY,
    ) -> float:
        """
        Price per unit notional.

        Args:
            bond: Bond cash flows
            yield_curve: Discount curve
            credit_curve: Survival curve of the issuer
            price_type: DIRTY includes accrued interest, CLEAN removes it

        Returns:
            The bond price at curve time zero
        """
        risky = 0.0
        for t, amount in zip(bond.payment_times, bond.payment_amounts):
            risky += amount * yield_curve.discount_factor(t) * credit_curve.survival_probability(t)

        recovery = 0.0
        if bond.recovery_rate > 0.0:
            end = bond.payment_time(bond.n_payments - 1)
            recovery = bond.recovery_rate * self._default_integral(0.0, end, yield_curve, credit_curve)

        dirty = risky + recovery
        if price_type is PriceType.CLEAN:
            return dirty - bond.accrued_interest
        return dirty

    @staticmethod
    def _default_integral(start: float, end: float, yield_curve: Curve, credit_curve: Curve) -> float:
        # integral of P(t) (-dQ(t)) over [start, end]
        if not end > start:
            return 0.0
        nodes = get_integration_points(start, end, yield_curve, credit_curve)
        ht0 = credit_curve.get_rt(nodes[0])
        rt0 = yield_curve.get_rt(nodes[0])
        b0 = math.exp(-ht0 - rt0)

        pv = 0.0
        for t in nodes[1:]:
            ht1 = credit_curve.get_rt(t)
            rt1 = yield_curve.get_rt(t)
            b1 = math.exp(-ht1 - rt1)
            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0
            if abs(dhrt) < TAYLOR_THRESHOLD:
                pv += dht * b0 * epsilon(-dhrt)
            else:
                pv += (b0 - b1) * dht / dhrt
            ht0, rt0, b0 = ht1, rt1, b1
        return pv

    def hazard_rate(
        self,
        bond: BondAnalytic,
        yield_curve: Curve,
        bond_price: float,
        price_type: PriceType = PriceType.DIRTY,
    ) -> float:
        """
        Flat hazard rate that reprices the bond.

        Raises:
            InvalidArgument: If the price is not positive
            RootFindingError: If no hazard rate reprices the bond
        """
        if not bond_price > 0.0:
            raise InvalidArgument(f"bond price must be positive, got {bond_price}")
        end = bond.payment_time(bond.n_payments - 1)
        pillar = max(end, 1.0)

        def objective(h: float) -> float:
            curve = _flat_credit_curve(h, pillar)
            return self.bond_price(bond, yield_curve, curve, price_type) - bond_price

        lower, upper = find_bracket(objective, 0.0, self.bracket_width)
        result = brent(objective, lower, upper, tol_x=self.tolerance)
        logger.debug("Bond implied hazard rate %.10f in %d iterations", result.root, result.iterations)
        return result.root

    def equivalent_cds_spread(
        self,
        bond: BondAnalytic,
        yield_curve: Curve,
        bond_price: float,
        price_type: PriceType,
        cds: CDSAnalytic,
    ) -> float:
        """Par spread of ``cds`` off the flat credit curve implied by the bond price."""
        h = self.hazard_rate(bond, yield_curve, bond_price, price_type)
        curve = _flat_credit_curve(h, max(cds.protection_end, 1.0))
        return self.pricer.par_spread(cds, yield_curve, curve)


def _flat_credit_curve(rate: float, time: float) -> CreditCurve:
    return CreditCurve.make_flat(rate, time)
