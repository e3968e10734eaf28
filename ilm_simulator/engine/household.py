"""
Household Engine
================
Compares a fixed-payment amortising mortgage with a diminishing
co-ownership (musharakah) structure over the same house-price path.

Both schedules are stepped monthly and sampled on every 12-month
boundary (plus month 0) for the equity and cumulative-cost curves.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from ilm_simulator.config import RECESSION_INCOME_CUT, CalibrationProfile
from ilm_simulator.engine.inputs import HouseholdInputs, HouseholdTerms, resolve_household
from ilm_simulator.utils import clamp

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class EquityPoint:
    year: float
    equity_interest: float
    equity_islamic: float
    bank_share: float           # Financier's remaining co-ownership fraction


@dataclass(frozen=True)
class CostPoint:
    year: float
    cum_interest: float         # Cumulative mortgage payments
    cum_islamic: float          # Cumulative rent + purchase payments


@dataclass(frozen=True)
class HouseholdResult:
    total_paid_interest: float = 0.0
    total_paid_islamic: float = 0.0
    interest_cost: float = 0.0              # Total paid − principal
    monthly_payment_interest: float = 0.0
    avg_monthly_islamic: float = 0.0
    pti_interest: float = 0.0
    pti_islamic: float = 0.0
    pti_interest_stressed: float = 0.0
    risk_interest: str = NOT_AVAILABLE
    risk_islamic: str = NOT_AVAILABLE
    risk_interest_stressed: str = NOT_AVAILABLE
    ltv: float = 0.0
    ltv_band: str = NOT_AVAILABLE
    equity_curve: Tuple[EquityPoint, ...] = field(default_factory=tuple)
    cost_curve: Tuple[CostPoint, ...] = field(default_factory=tuple)

    def to_frame(self) -> pd.DataFrame:
        """Equity and cost curves joined on year."""
        equity = pd.DataFrame([vars(p) for p in self.equity_curve])
        cost = pd.DataFrame([vars(p) for p in self.cost_curve])
        if equity.empty:
            return equity
        return equity.merge(cost, on="year")


# ═══════════════════════════════════════════════════════════════════════════════
#  Building blocks
# ═══════════════════════════════════════════════════════════════════════════════

def _discount_gap(rate: float, periods: float) -> float:
    """1 − (1 + rate)^−periods, computed without overflow or cancellation."""
    return -math.expm1(-periods * math.log1p(rate))


def annuity_payment(principal: float, rate: float, periods: int) -> float:
    """Fixed payment that amortises ``principal`` over ``periods``."""
    if periods <= 0:
        return 0.0
    gap = _discount_gap(rate, periods) if rate > 0 else 0.0
    if gap <= 0:
        return principal / periods
    return principal * rate / gap


def outstanding_balance(principal: float, rate: float, periods: int, m: int) -> float:
    """Annuity balance after ``m`` of ``periods`` payments, floored at zero."""
    if m <= 0:
        return principal
    if m >= periods:
        return 0.0
    total_gap = _discount_gap(rate, periods) if rate > 0 else 0.0
    if total_gap <= 0:
        return max(principal * (1 - m / periods), 0.0)
    # (G^N − G^m) / (G^N − 1) rewritten with non-positive exponents
    remaining_gap = _discount_gap(rate, periods - m)
    return max(principal * remaining_gap / total_gap, 0.0)


def _growth_factor(rate: float, years: float) -> float:
    try:
        return (1 + rate) ** years
    except OverflowError:
        return math.inf


def pti_to_label(ratio: float, pti_stress: float) -> str:
    """Low below 70 % of the stress threshold, Moderate below it, else High."""
    if not math.isfinite(ratio):
        return NOT_AVAILABLE
    if ratio < pti_stress * 0.7:
        return "Low"
    if ratio < pti_stress:
        return "Moderate"
    return "High"


def ltv_band(ltv: float, calibration: CalibrationProfile) -> str:
    housing = calibration.housing
    bands = (
        (housing.average_ltv, "Standard"),
        (housing.ftb_ltv, "Elevated"),
        (housing.high_risk_ltv, "High"),
    )
    if all(limit is None for limit, _ in bands):
        return NOT_AVAILABLE
    for limit, label in bands:
        if limit is not None and ltv <= limit:
            return label
    return "Very high"


def _stressed_monthly_income(terms: HouseholdTerms) -> float:
    net_monthly = terms.income * terms.disposable_ratio / 12
    return net_monthly * (1 - RECESSION_INCOME_CUT)


def _ratio(payment: float, income: float) -> float:
    return payment / income if income > 0 else math.inf


# ═══════════════════════════════════════════════════════════════════════════════
#  Engine
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_household_metrics(
    inputs: HouseholdInputs,
    calibration: CalibrationProfile,
    terms: Optional[HouseholdTerms] = None,
) -> HouseholdResult:
    """
    Run both home-finance structures for one household.

    Parameters
    ----------
    inputs : raw household inputs (percent rates, may be missing)
    calibration : active calibration profile
    terms : already-resolved terms; resolved from ``inputs`` when omitted
    """
    terms = terms or resolve_household(inputs, calibration)
    P = terms.property_value
    principal = terms.principal

    if P <= 0 or terms.term_years <= 0 or terms.income <= 0 or principal <= 0:
        logger.debug("Household inputs degenerate (P=%s, principal=%s)", P, principal)
        return HouseholdResult()

    # Whole months only; a fractional final month is not paid
    N = int(math.floor(terms.term_years * 12 + 1e-9))
    if N <= 0:
        return HouseholdResult()

    r = terms.annual_rate / 12
    payment = annuity_payment(principal, r, N)
    horizon_value = P * _growth_factor(terms.house_growth, N / 12)
    if not all(math.isfinite(v) for v in (horizon_value, payment * N, P * terms.rental_yield * N)):
        logger.debug("Household path not representable (N=%d, rate=%s)", N, terms.annual_rate)
        return HouseholdResult()

    s_bank0 = principal / P
    delta_s = s_bank0 / N
    monthly_rent_rate = terms.rental_yield / 12

    total_paid_interest = 0.0
    total_paid_islamic = 0.0
    equity_curve: List[EquityPoint] = []
    cost_curve: List[CostPoint] = []

    for m in range(N + 1):
        year = m / 12
        balance = outstanding_balance(principal, r, N, m)
        house_value = P * _growth_factor(terms.house_growth, year)
        s_bank = clamp(s_bank0 - delta_s * m, 0.0, 1.0)
        if m == N:
            s_bank = 0.0

        if m > 0:
            total_paid_interest += payment
            rent = P * s_bank * monthly_rent_rate
            purchase = P * delta_s
            total_paid_islamic += rent + purchase

        if m % 12 == 0:
            equity_curve.append(EquityPoint(
                year=year,
                equity_interest=house_value - balance,
                equity_islamic=(1 - s_bank) * house_value,
                bank_share=s_bank,
            ))
            cost_curve.append(CostPoint(
                year=year,
                cum_interest=total_paid_interest,
                cum_islamic=total_paid_islamic,
            ))

    stressed_income = _stressed_monthly_income(terms)
    avg_monthly_islamic = total_paid_islamic / N
    pti_interest = _ratio(payment, stressed_income)
    pti_islamic = _ratio(avg_monthly_islamic, stressed_income)
    pti_stressed = _ratio(annuity_payment(principal, terms.stress_rate / 12, N),
                          stressed_income)
    ltv = principal / P

    logger.debug("Household run: N=%d payment=%.2f pti=%.3f/%.3f",
                 N, payment, pti_interest, pti_islamic)

    return HouseholdResult(
        total_paid_interest=total_paid_interest,
        total_paid_islamic=total_paid_islamic,
        interest_cost=total_paid_interest - principal,
        monthly_payment_interest=payment,
        avg_monthly_islamic=avg_monthly_islamic,
        pti_interest=pti_interest,
        pti_islamic=pti_islamic,
        pti_interest_stressed=pti_stressed,
        risk_interest=pti_to_label(pti_interest, terms.pti_stress),
        risk_islamic=pti_to_label(pti_islamic, terms.pti_stress),
        risk_interest_stressed=pti_to_label(pti_stressed, terms.pti_stress),
        ltv=ltv,
        ltv_band=ltv_band(ltv, calibration),
        equity_curve=tuple(equity_curve),
        cost_curve=tuple(cost_curve),
    )
