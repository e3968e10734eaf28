"""
National Macro Simulator
========================
Thirty annual steps per system from GDP index 100. Household debt drifts
upward, dragging on growth above a system-specific threshold; inflation
carries a credit term and a cyclical term; unemployment moves against the
growth gap; borrowing cost adds a leverage spread to the policy rate.

The reported stability scores come from the calibration's static
``top_scores`` (+10 for the Islamic system). The volatility-based scores
are still computed and kept on the result as ``computed_*`` diagnostics,
but they do not feed the headline figures.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Tuple

import numpy as np
import pandas as pd

from ilm_simulator.config import (
    NATIONAL_HORIZON_YEARS,
    TRAILING_WINDOW_YEARS,
    CalibrationProfile,
    Scenario,
    get_system,
)
from ilm_simulator.utils import clamp, sample_std

if TYPE_CHECKING:
    from ilm_simulator.stress_testing import SmeResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemDynamics:
    """Structural coefficients that differ between the two systems."""
    initial_unemployment: float
    debt_trend: float               # Annual drift in debt ratio (pp)
    drag_coefficient: float
    drag_threshold: float
    credit_coefficient: float
    credit_reference: float         # Multiple of calibration debt/income × 100
    cycle_amplitude: float
    spread_coefficient: float
    spread_threshold: float
    structural_discount: float      # Subtracted from borrowing cost (pp)
    stability_bonus: float


SYSTEM_DYNAMICS: Dict[str, SystemDynamics] = {
    "interest": SystemDynamics(
        initial_unemployment=5.0, debt_trend=2.0,
        drag_coefficient=0.03, drag_threshold=80.0,
        credit_coefficient=0.03, credit_reference=1.2,
        cycle_amplitude=0.7,
        spread_coefficient=0.02, spread_threshold=100.0,
        structural_discount=0.0, stability_bonus=0.0,
    ),
    "islamic": SystemDynamics(
        initial_unemployment=4.5, debt_trend=0.5,
        drag_coefficient=0.015, drag_threshold=60.0,
        credit_coefficient=0.01, credit_reference=0.7,
        cycle_amplitude=0.35,
        spread_coefficient=0.012, spread_threshold=80.0,
        structural_discount=0.4, stability_bonus=10.0,
    ),
}

BASE_POLICY_RATE = 4.0
OKUN_COEFFICIENT = 0.15
UNEMPLOYMENT_BOUNDS = (3.0, 16.0)


@dataclass(frozen=True)
class NationalYear:
    year: int
    gdp: float
    inflation: float
    debt_ratio: float
    unemployment: float
    borrowing_cost: float


@dataclass(frozen=True)
class NationalMetrics:
    economic_stability: int
    inflation_stability: int
    household_debt_ratio: int
    sme_default_rate: float
    unemployment_rate: float
    gov_borrow_cost: float
    computed_economic_stability: float
    computed_inflation_stability: float


@dataclass(frozen=True)
class NationalResult:
    system: str
    metrics: NationalMetrics
    series: Tuple[NationalYear, ...] = field(default_factory=tuple)
    gdp_index: Tuple[float, ...] = field(default_factory=tuple)     # Includes year 0

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([vars(p) for p in self.series])


def _trailing_mean(values: List[float], window: int = TRAILING_WINDOW_YEARS) -> float:
    tail = values[-window:]
    return sum(tail) / (len(tail) or 1)


def simulate_national_system(
    system: str,
    calibration: CalibrationProfile,
    sme: SmeResult,
    scenario: Scenario,
    years: int = NATIONAL_HORIZON_YEARS,
) -> NationalResult:
    """Run the macro path for one system."""
    dyn = SYSTEM_DYNAMICS[get_system(system)]
    macro = calibration.macro
    base_g = macro.gdp_growth * 100
    base_pi = macro.inflation_avg * 100

    gdp = 100.0
    debt = macro.household_debt_income * 100
    unemp = dyn.initial_unemployment

    gdp_index = [gdp]
    inflation_series: List[float] = []
    debt_series: List[float] = []
    unemp_series: List[float] = []
    borrow_series: List[float] = []
    series: List[NationalYear] = []

    for t in range(1, years + 1):
        crisis = scenario.is_crisis_year(t)

        # ── 1. Debt drift and growth drag ────────────────────────────
        debt += dyn.debt_trend
        drag = dyn.drag_coefficient * max(0.0, debt - dyn.drag_threshold)
        g = base_g - drag
        if crisis:
            g += scenario.extra_gdp_shock

        # ── 2. Inflation ─────────────────────────────────────────────
        credit_term = (dyn.credit_coefficient
                       * (debt - macro.household_debt_income * dyn.credit_reference * 100) / 50)
        cycle = dyn.cycle_amplitude * math.sin(t / 3)
        pi = base_pi + credit_term * 100 + cycle
        if crisis:
            pi += scenario.inflation_shock

        gdp *= 1 + g / 100

        # ── 3. Unemployment (Okun-style) ─────────────────────────────
        growth_gap = g - base_g
        shock = scenario.unemployment_shock if crisis else 0.0
        unemp = clamp(unemp - OKUN_COEFFICIENT * growth_gap + shock, *UNEMPLOYMENT_BOUNDS)

        # ── 4. Borrowing cost ────────────────────────────────────────
        spread = dyn.spread_coefficient * max(0.0, debt - dyn.spread_threshold) / 100
        premium = scenario.crisis_premium if crisis else 0.0
        borrowing_cost = BASE_POLICY_RATE + spread + premium - dyn.structural_discount

        gdp_index.append(gdp)
        inflation_series.append(pi)
        debt_series.append(debt)
        unemp_series.append(unemp)
        borrow_series.append(borrowing_cost)
        series.append(NationalYear(t, gdp, pi, debt, unemp, borrowing_cost))

    # ── Volatility scores (diagnostic only) ──────────────────────────────
    index = np.asarray(gdp_index)
    growth_rates = (index[1:] / index[:-1] - 1) * 100
    g_std = sample_std(growth_rates)
    pi_std = sample_std(inflation_series)
    computed_gdp = clamp(100 - 3 * (g_std / (macro.gdp_volatility * 100 or 2.5)), 0, 100)
    computed_pi = clamp(100 - 4 * (pi_std / (macro.inflation_volatility * 100 or 1.3)), 0, 100)

    # Static scores replace the computed ones
    top = calibration.top_scores
    gdp_stability = clamp(top.economic_stability_interest + dyn.stability_bonus, 0, 100)
    pi_stability = clamp(top.inflation_stability_interest + dyn.stability_bonus, 0, 100)

    survival = sme.survival_interest if system == "interest" else sme.survival_islamic
    sme_default_rate = 100 - survival

    metrics = NationalMetrics(
        economic_stability=int(round(gdp_stability)),
        inflation_stability=int(round(pi_stability)),
        household_debt_ratio=int(round(_trailing_mean(debt_series))),
        sme_default_rate=round(sme_default_rate, 1),
        unemployment_rate=round(_trailing_mean(unemp_series), 1),
        gov_borrow_cost=round(_trailing_mean(borrow_series), 1),
        computed_economic_stability=computed_gdp,
        computed_inflation_stability=computed_pi,
    )
    logger.debug("National %s/%s: gdp=%.1f debt=%d", system, scenario.id,
                 gdp, metrics.household_debt_ratio)

    return NationalResult(
        system=system,
        metrics=metrics,
        series=tuple(series),
        gdp_index=tuple(gdp_index),
    )


def simulate_all_national(
    calibration: CalibrationProfile,
    sme: SmeResult,
    scenario: Scenario,
) -> Dict[str, NationalResult]:
    """Run both systems; keys are ``interest`` and ``islamic``."""
    return {
        system: simulate_national_system(system, calibration, sme, scenario)
        for system in SYSTEM_DYNAMICS
    }
