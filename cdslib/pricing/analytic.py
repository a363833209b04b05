"""
Semi-analytic CDS pricer on time-based trade descriptions.

Between the knots of the yield and credit curves both forward rates are
constant, so the protection-leg integral

    (1 - R) / P(T_v) * integral_{T_a}^{T_b} P(t) dQ(t)

and the premium accrued up to a default have closed forms on every
sub-interval. When the combined log-discount increment ``dhrt`` of a
sub-interval is tiny, the closed forms lose precision to cancellation and
their Taylor expansions are used instead.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from cdslib.conventions.types import AccrualOnDefaultFormula, PriceType
from cdslib.errors import InvalidArgument
from cdslib.instruments.cds import CDSAnalytic
from cdslib.schedule.integration import get_integration_points, truncate_set_inclusive

if TYPE_CHECKING:
    from cdslib.curves.base import Curve

# Horner coefficients (highest order first) of the series of
# epsilon, epsilon' and epsilon'' about zero
COEFF1 = (1 / 24.0, 1 / 6.0, 0.5, 1.0)
COEFF2 = (1 / 30.0, 1 / 8.0, 1 / 3.0, 0.5)
COEFF3 = (1 / 48.0, 1 / 10.0, 1 / 4.0, 1 / 3.0)

SERIES_THRESHOLD = 1e-10
TAYLOR_THRESHOLD = 1e-5
HALF_DAY = 1 / 730.0


def _horner(coeffs: Sequence[float], x: float) -> float:
    total = coeffs[0]
    for c in coeffs[1:]:
        total = c + x * total
    return total


def epsilon(x: float) -> float:
    """``(exp(x) - 1) / x``, continuous at zero."""
    if abs(x) > SERIES_THRESHOLD:
        return math.expm1(x) / x
    return _horner(COEFF1, x)


def epsilon_p(x: float) -> float:
    """First derivative of ``epsilon``."""
    if abs(x) > SERIES_THRESHOLD:
        return ((x - 1.0) * math.expm1(x) + x) / x / x
    return _horner(COEFF2, x)


def epsilon_pp(x: float) -> float:
    """Second derivative of ``epsilon``."""
    if abs(x) > SERIES_THRESHOLD:
        x2 = x * x
        x3 = x * x2
        return (math.expm1(x) * (x2 - 2.0 * x + 2.0) + x2 - 2.0 * x) / x3
    return _horner(COEFF3, x)


class AnalyticCDSPricer:
    """Prices CDSs described by ``CDSAnalytic`` off a yield and a credit curve.

    All values are per unit notional, as seen at the cash-settlement time of
    the trade.
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self._formula = formula

    @property
    def formula(self) -> AccrualOnDefaultFormula:
        return self._formula

    @property
    def _use_correct_formula(self) -> bool:
        return self._formula is AccrualOnDefaultFormula.CORRECT

    # ------------------------------------------------------------------
    # PV
    # ------------------------------------------------------------------
    def pv(
        self,
        cds: CDSAnalytic,
        yield_curve: Curve,
        credit_curve: Curve,
        fractional_spread: float,
        price_type: PriceType = PriceType.CLEAN,
    ) -> float:
        """
        PV for the buyer of protection (payer of premium).

        Args:
            cds: Trade description
            yield_curve: Discount curve
            credit_curve: Survival curve
            fractional_spread: Premium as a fraction, e.g. 0.01 for 100bp
            price_type: CLEAN excludes accrued premium

        Returns:
            Protection leg less premium leg, per unit notional
        """
        rpv01 = self.rpv01(cds, yield_curve, credit_curve, price_type)
        pro_leg = self.protection_leg(cds, yield_curve, credit_curve)
        return pro_leg - fractional_spread * rpv01

    def par_spread(self, cds: CDSAnalytic, yield_curve: Curve, credit_curve: Curve) -> float:
        """Fractional spread at which the clean PV is zero."""
        rpv01 = self.rpv01(cds, yield_curve, credit_curve, PriceType.CLEAN)
        if rpv01 == 0.0:
            raise InvalidArgument("par spread undefined for a trade with zero RPV01")
        return self.protection_leg(cds, yield_curve, credit_curve) / rpv01

    # ------------------------------------------------------------------
    # Premium leg
    # ------------------------------------------------------------------
    def rpv01(
        self,
        cds: CDSAnalytic,
        yield_curve: Curve,
        credit_curve: Curve,
        price_type: PriceType = PriceType.CLEAN,
    ) -> float:
        """
        Risky PV of one unit of premium, including premium accrued on default.

        Args:
            cds: Trade description
            yield_curve: Discount curve
            credit_curve: Survival curve
            price_type: CLEAN subtracts the accrual fraction to step-in

        Returns:
            The RPV01 (per unit of fractional spread)
        """
        n = cds.n_payments
        pv = 0.0
        for coupon in cds.coupons:
            q = credit_curve.survival_probability(coupon.credit_observation_time)
            p = yield_curve.discount_factor(coupon.payment_time)
            pv += coupon.accrual_fraction * p * q

        if cds.pay_acc_on_default and n > 0:
            offset = -cds.curve_one_day if cds.protection_from_start_of_day else 0.0
            points = get_integration_points(
                cds.coupon(0).acc_start, cds.coupon(n - 1).acc_end, yield_curve, credit_curve
            )
            offset_stepin = cds.stepin + offset
            for coupon in cds.coupons:
                acc_start = coupon.acc_start + offset
                acc_end = coupon.acc_end + offset
                acc_rate = coupon.accrual_fraction / (acc_end - acc_start)
                pv += self._accrual_on_default(
                    acc_rate, offset_stepin, acc_start, acc_end, points, yield_curve, credit_curve
                )

        pv /= yield_curve.discount_factor(cds.valuation_time)
        if price_type is PriceType.CLEAN:
            pv -= cds.accrued
        return pv

    def _accrual_on_default(
        self,
        acc_rate: float,
        stepin: float,
        acc_start: float,
        acc_end: float,
        points: Sequence[float],
        yield_curve: Curve,
        credit_curve: Curve,
    ) -> float:
        start = max(acc_start, stepin)
        if start >= acc_end:
            return 0.0
        knots = truncate_set_inclusive(start, acc_end, points)

        t = knots[0]
        ht0 = credit_curve.get_rt(t)
        rt0 = yield_curve.get_rt(t)
        b0 = math.exp(-rt0 - ht0)
        t0 = 0.0 if self._use_correct_formula else t - acc_start + HALF_DAY

        pv = 0.0
        for j in range(1, len(knots)):
            t = knots[j]
            ht1 = credit_curve.get_rt(t)
            rt1 = yield_curve.get_rt(t)
            b1 = math.exp(-rt1 - ht1)

            dt = knots[j] - knots[j - 1]
            dht = ht1 - ht0
            drt = rt1 - rt0
            dhrt = dht + drt + 1e-50

            if self._use_correct_formula:
                if abs(dhrt) < TAYLOR_THRESHOLD:
                    t_pv = dht * dt * b0 * epsilon_p(-dhrt)
                else:
                    t_pv = dht * dt / dhrt * ((b0 - b1) / dhrt - b1)
            else:
                # ISDA shifts the accrual time by half a day
                t1 = t - acc_start + HALF_DAY
                if abs(dhrt) < TAYLOR_THRESHOLD:
                    t_pv = dht * b0 * (t0 * epsilon(-dhrt) + dt * epsilon_p(-dhrt))
                else:
                    t_pv = dht / dhrt * ((t0 + dt / dhrt) * b0 - (t1 + dt / dhrt) * b1)
                t0 = t1

            pv += t_pv
            ht0, rt0, b0 = ht1, rt1, b1
        return acc_rate * pv

    # ------------------------------------------------------------------
    # Protection leg
    # ------------------------------------------------------------------
    def protection_leg(self, cds: CDSAnalytic, yield_curve: Curve, credit_curve: Curve) -> float:
        """
        PV of the protection leg on unit notional.

        Zero when the loss given default is zero or the protection window
        has already closed.
        """
        if cds.lgd == 0.0 or cds.protection_end <= cds.protection_start:
            return 0.0
        nodes = get_integration_points(
            cds.protection_start, cds.protection_end, yield_curve, credit_curve
        )

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
                d_pv = dht * b0 * epsilon(-dhrt)
            else:
                d_pv = (b0 - b1) * dht / dhrt

            pv += d_pv
            ht0, rt0, b0 = ht1, rt1, b1

        pv *= cds.lgd
        return pv / yield_curve.discount_factor(cds.valuation_time)

    # ------------------------------------------------------------------
    # Sensitivities to a credit curve knot
    # ------------------------------------------------------------------
    def protection_leg_credit_sensitivity(
        self, cds: CDSAnalytic, yield_curve: Curve, credit_curve: Curve, node: int
    ) -> float:
        """Derivative of the protection leg with respect to the zero hazard rate at ``node``."""
        if not 0 <= node < credit_curve.n_knots:
            raise InvalidArgument(f"credit curve node {node} out of range")
        if cds.lgd == 0.0 or cds.protection_end <= cds.protection_start:
            return 0.0
        last = credit_curve.n_knots - 1
        if (node != 0 and cds.protection_end <= credit_curve.time_at(node - 1)) or (
            node != last and cds.protection_start >= credit_curve.time_at(node + 1)
        ):
            return 0.0

        nodes = get_integration_points(
            cds.protection_start, cds.protection_end, yield_curve, credit_curve
        )
        t = nodes[0]
        ht0 = credit_curve.get_rt(t)
        rt0 = yield_curve.get_rt(t)
        dqdr0 = credit_curve.single_node_discount_factor_sensitivity(t, node)
        q0 = math.exp(-ht0)
        p0 = math.exp(-rt0)

        sense = 0.0
        for t in nodes[1:]:
            ht1 = credit_curve.get_rt(t)
            rt1 = yield_curve.get_rt(t)
            dqdr1 = credit_curve.single_node_discount_factor_sensitivity(t, node)
            q1 = math.exp(-ht1)
            p1 = math.exp(-rt1)

            if dqdr0 != 0.0 or dqdr1 != 0.0:
                dht = ht1 - ht0
                drt = rt1 - rt0
                dhrt = dht + drt
                if abs(dhrt) < TAYLOR_THRESHOLD:
                    theta = epsilon(-dhrt)
                    theta_p = epsilon_p(-dhrt)
                    dpv_dq0 = p0 * ((1.0 + dht) * theta - dht * theta_p)
                    dpv_dq1 = -p0 * q0 / q1 * (theta - dht * theta_p)
                else:
                    temp = drt / dhrt * (p0 * q0 - p1 * q1)
                    dpv_dq0 = (p0 * dht + temp / q0) / dhrt
                    dpv_dq1 = -(p1 * dht + temp / q1) / dhrt
                sense += dpv_dq0 * dqdr0 + dpv_dq1 * dqdr1

            ht0, rt0, dqdr0, q0, p0 = ht1, rt1, dqdr1, q1, p1

        sense *= cds.lgd
        return sense / yield_curve.discount_factor(cds.valuation_time)

    def rpv01_credit_sensitivity(
        self, cds: CDSAnalytic, yield_curve: Curve, credit_curve: Curve, node: int
    ) -> float:
        """Derivative of the (clean or dirty) RPV01 with respect to the zero hazard rate at ``node``."""
        if not 0 <= node < credit_curve.n_knots:
            raise InvalidArgument(f"credit curve node {node} out of range")
        n = cds.n_payments
        sense = 0.0
        for coupon in cds.coupons:
            dqdr = credit_curve.single_node_discount_factor_sensitivity(
                coupon.credit_observation_time, node
            )
            p = yield_curve.discount_factor(coupon.payment_time)
            sense += coupon.accrual_fraction * p * dqdr

        if cds.pay_acc_on_default and n > 0:
            offset = -cds.curve_one_day if cds.protection_from_start_of_day else 0.0
            points = get_integration_points(
                cds.coupon(0).acc_start, cds.coupon(n - 1).acc_end, yield_curve, credit_curve
            )
            offset_stepin = cds.stepin + offset
            for coupon in cds.coupons:
                acc_start = coupon.acc_start + offset
                acc_end = coupon.acc_end + offset
                acc_rate = coupon.accrual_fraction / (acc_end - acc_start)
                sense += self._accrual_on_default_sensitivity(
                    acc_rate, offset_stepin, acc_start, acc_end, points, yield_curve, credit_curve, node
                )

        return sense / yield_curve.discount_factor(cds.valuation_time)

    def _accrual_on_default_sensitivity(
        self,
        acc_rate: float,
        stepin: float,
        acc_start: float,
        acc_end: float,
        points: Sequence[float],
        yield_curve: Curve,
        credit_curve: Curve,
        node: int,
    ) -> float:
        start = max(acc_start, stepin)
        if start >= acc_end:
            return 0.0
        knots = truncate_set_inclusive(start, acc_end, points)

        t = knots[0]
        ht0 = credit_curve.get_rt(t)
        rt0 = yield_curve.get_rt(t)
        p0 = math.exp(-rt0)
        q0 = math.exp(-ht0)
        b0 = p0 * q0
        dqdr0 = credit_curve.single_node_discount_factor_sensitivity(t, node)
        t0 = 0.0 if self._use_correct_formula else t - acc_start + HALF_DAY

        sense = 0.0
        for j in range(1, len(knots)):
            t = knots[j]
            ht1 = credit_curve.get_rt(t)
            rt1 = yield_curve.get_rt(t)
            p1 = math.exp(-rt1)
            q1 = math.exp(-ht1)
            b1 = p1 * q1
            dqdr1 = credit_curve.single_node_discount_factor_sensitivity(t, node)

            dt = knots[j] - knots[j - 1]
            dht = ht1 - ht0
            drt = rt1 - rt0
            dhrt = dht + drt + 1e-50

            if self._use_correct_formula:
                if abs(dhrt) < TAYLOR_THRESHOLD:
                    e_p = epsilon_p(-dhrt)
                    e_pp = epsilon_pp(-dhrt)
                    dpv_dq0 = p0 * dt * ((1.0 + dht) * e_p - dht * e_pp)
                    dpv_dq1 = -b0 * dt / q1 * (e_p - dht * e_pp)
                else:
                    c = (b0 - b1) / dhrt - b1
                    t_pv = dht * dt / dhrt * c
                    # t_pv / dht written out so a zero hazard increment is safe
                    per_dht = dt / dhrt * c
                    dpv_dq0 = (per_dht - t_pv / dhrt) / q0 + dht * dt / dhrt / dhrt * (
                        p0 - (b0 - b1) / q0 / dhrt
                    )
                    dpv_dq1 = -(per_dht - t_pv / dhrt) / q1 + dht * dt / dhrt * (
                        (b0 - b1) / q1 / dhrt / dhrt - p1 * (1.0 + 1.0 / dhrt)
                    )
            else:
                t1 = t - acc_start + HALF_DAY
                if abs(dhrt) < TAYLOR_THRESHOLD:
                    e = epsilon(-dhrt)
                    e_p = epsilon_p(-dhrt)
                    e_pp = epsilon_pp(-dhrt)
                    level = t0 * e + dt * e_p
                    slope = t0 * e_p + dt * e_pp
                    dpv_dq0 = p0 * ((1.0 + dht) * level - dht * slope)
                    dpv_dq1 = -b0 / q1 * (level - dht * slope)
                else:
                    a = t0 + dt / dhrt
                    b = t1 + dt / dhrt
                    per_dht = (a * b0 - b * b1) / dhrt
                    t_pv = dht * per_dht
                    dpv_dq0 = (per_dht - t_pv / dhrt) / q0 + dht / dhrt * (
                        a * p0 - dt * (b0 - b1) / q0 / dhrt / dhrt
                    )
                    dpv_dq1 = -(per_dht - t_pv / dhrt) / q1 - dht / dhrt * (
                        b * p1 - dt * (b0 - b1) / q1 / dhrt / dhrt
                    )
                t0 = t1

            sense += dpv_dq0 * dqdr0 + dpv_dq1 * dqdr1
            ht0, rt0, p0, q0, b0, dqdr0 = ht1, rt1, p1, q1, b1, dqdr1
        return acc_rate * sense

    def pv_credit_sensitivity(
        self,
        cds: CDSAnalytic,
        yield_curve: Curve,
        credit_curve: Curve,
        fractional_spread: float,
        node: int,
    ) -> float:
        """Derivative of the PV with respect to the zero hazard rate at ``node``."""
        rpv01_sense = self.rpv01_credit_sensitivity(cds, yield_curve, credit_curve, node)
        pro_sense = self.protection_leg_credit_sensitivity(cds, yield_curve, credit_curve, node)
        return pro_sense - fractional_spread * rpv01_sense
