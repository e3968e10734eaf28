"""
Summary & Elasticity Layer
==========================
Compares the two systems across every engine's output and translates the
bottom-40 % wealth share gain into illustrative social effects via fixed
elasticities. No simulation happens here; ``run_comparison`` only wires
the engines together for one set of inputs and selectors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ilm_simulator.config import (
    ELASTICITIES,
    get_bank_scenario,
    get_calibration,
    get_scenario,
    get_sector,
    get_zakat_rate,
)
from ilm_simulator.engine.household import HouseholdResult, calculate_household_metrics
from ilm_simulator.engine.inputs import BankInputs, HouseholdInputs, SmeInputs
from ilm_simulator.engine.national import NationalResult, simulate_all_national
from ilm_simulator.engine.wealth import WealthResult, simulate_wealth_distribution
from ilm_simulator.risk_modules.bank_stress import BankStressResult, run_bank_stress_both
from ilm_simulator.risk_modules.housing_support import (
    HousingSupportResult,
    calculate_housing_support,
)
from ilm_simulator.stress_testing import SmeResult, calculate_sme_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummaryResult:
    """Islamic-minus-interest deltas (sign chosen so positive favours Islamic)."""
    housing_diff: float             # Interest total paid − Islamic total paid
    housing_saving: float           # |housing_diff| when above £1, else 0
    sme_survival_diff: float
    econ_stability_diff: float
    inflation_stability_diff: float
    sme_default_diff: float
    unemployment_diff: float
    borrowing_cost_diff: float
    bottom40_diff: float
    top20_diff: float
    inequality_diff: float
    zakat_flow: float
    poverty_reduction: float
    crime_reduction: float
    consumption_lift: float
    gdp_lift: float
    capital_ratio_diff: Optional[float] = None
    shortfall_diff: Optional[float] = None
    households_helped: float = 0.0

    def as_rows(self) -> List[Dict]:
        """Display-ready rows for tables and the CLI report."""
        rows = [
            {"Area": "Housing", "Metric": "Lifetime outlay saving (£)", "Delta": round(self.housing_saving)},
            {"Area": "SME", "Metric": "Survival rate (pp)", "Delta": round(self.sme_survival_diff, 1)},
            {"Area": "Macro", "Metric": "GDP stability (pts)", "Delta": round(self.econ_stability_diff)},
            {"Area": "Macro", "Metric": "Inflation stability (pts)", "Delta": round(self.inflation_stability_diff)},
            {"Area": "Macro", "Metric": "SME default rate fall (pp)", "Delta": round(self.sme_default_diff, 1)},
            {"Area": "Macro", "Metric": "Unemployment fall (pp)", "Delta": round(self.unemployment_diff, 1)},
            {"Area": "Macro", "Metric": "Borrowing cost fall (pp)", "Delta": round(self.borrowing_cost_diff, 1)},
            {"Area": "Wealth", "Metric": "Top 20% share fall (pp)", "Delta": round(self.top20_diff, 1)},
            {"Area": "Wealth", "Metric": "Bottom 40% share gain (pp)", "Delta": round(self.bottom40_diff, 1)},
            {"Area": "Wealth", "Metric": "Inequality score (pts)", "Delta": round(self.inequality_diff, 1)},
            {"Area": "Society", "Metric": "Poverty reduction (pp)", "Delta": round(self.poverty_reduction, 1)},
            {"Area": "Society", "Metric": "Crime reduction (pp)", "Delta": round(self.crime_reduction, 1)},
            {"Area": "Society", "Metric": "Consumption lift (%)", "Delta": round(self.consumption_lift, 1)},
            {"Area": "Society", "Metric": "GDP lift (%)", "Delta": round(self.gdp_lift, 1)},
            {"Area": "Housing", "Metric": "Households cleared of arrears", "Delta": round(self.households_helped)},
        ]
        if self.capital_ratio_diff is not None:
            rows.append({"Area": "Bank", "Metric": "Capital ratio (pp)",
                         "Delta": round(self.capital_ratio_diff * 100, 2)})
        if self.shortfall_diff is not None:
            rows.append({"Area": "Bank", "Metric": "Shortfall probability fall (pp)",
                         "Delta": round(self.shortfall_diff, 2)})
        return rows


def build_summary(
    household: HouseholdResult,
    sme: SmeResult,
    national: Dict[str, NationalResult],
    wealth: Dict[str, WealthResult],
    bank: Optional[Dict[str, BankStressResult]] = None,
    housing_support: Optional[HousingSupportResult] = None,
) -> SummaryResult:
    ni = national["interest"].metrics
    na = national["islamic"].metrics
    wi = wealth["interest"]
    wa = wealth["islamic"]

    housing_diff = household.total_paid_interest - household.total_paid_islamic
    bottom40_diff = wa.bottom40 - wi.bottom40

    capital_ratio_diff = shortfall_diff = None
    if bank:
        capital_ratio_diff = bank["islamic"].capital_ratio - bank["interest"].capital_ratio
        shortfall_diff = bank["interest"].shortfall_prob - bank["islamic"].shortfall_prob

    return SummaryResult(
        housing_diff=housing_diff,
        housing_saving=abs(housing_diff) if abs(housing_diff) > 1 else 0.0,
        sme_survival_diff=sme.survival_islamic - sme.survival_interest,
        econ_stability_diff=na.economic_stability - ni.economic_stability,
        inflation_stability_diff=na.inflation_stability - ni.inflation_stability,
        sme_default_diff=ni.sme_default_rate - na.sme_default_rate,
        unemployment_diff=ni.unemployment_rate - na.unemployment_rate,
        borrowing_cost_diff=ni.gov_borrow_cost - na.gov_borrow_cost,
        bottom40_diff=bottom40_diff,
        top20_diff=wi.top20 - wa.top20,
        inequality_diff=wa.inequality_score - wi.inequality_score,
        zakat_flow=wa.zakat_share_year,
        poverty_reduction=bottom40_diff * ELASTICITIES["poverty"],
        crime_reduction=bottom40_diff * ELASTICITIES["crime"],
        consumption_lift=bottom40_diff * ELASTICITIES["consumption"],
        gdp_lift=bottom40_diff * ELASTICITIES["gdp"],
        capital_ratio_diff=capital_ratio_diff,
        shortfall_diff=shortfall_diff,
        households_helped=housing_support.households_helped if housing_support else 0.0,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Orchestration
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ComparisonResult:
    calibration_mode: str
    scenario_id: str
    zakat_policy: str
    household: HouseholdResult
    sme: SmeResult
    national: Dict[str, NationalResult]
    wealth: Dict[str, WealthResult]
    housing_support: HousingSupportResult
    bank: Dict[str, BankStressResult]
    summary: SummaryResult


def run_comparison(
    household_inputs: HouseholdInputs,
    sme_inputs: SmeInputs,
    bank_inputs: BankInputs,
    calibration_mode: str = "uk",
    scenario_id: str = "baseline",
    zakat_policy: str = "standard",
    rng=None,
) -> ComparisonResult:
    """
    Run every engine for one configuration.

    Selectors are validated up front so that an unknown id fails before
    any simulation work is done.
    """
    calibration = get_calibration(calibration_mode)
    scenario = get_scenario(scenario_id)
    sector = get_sector(sme_inputs.sector_id)
    get_zakat_rate(zakat_policy)
    get_bank_scenario(bank_inputs.scenario_id)

    household = calculate_household_metrics(household_inputs, calibration)
    sme = calculate_sme_metrics(sme_inputs, calibration, scenario, sector=sector, rng=rng)
    national = simulate_all_national(calibration, sme, scenario)
    wealth = {
        system: simulate_wealth_distribution(calibration, system, zakat_policy)
        for system in ("interest", "islamic")
    }
    housing_support = calculate_housing_support(wealth["islamic"].zakat_share_year, calibration)
    bank = run_bank_stress_both(bank_inputs)

    summary = build_summary(household, sme, national, wealth, bank, housing_support)
    logger.info("Comparison complete: mode=%s scenario=%s zakat=%s",
                calibration_mode, scenario_id, zakat_policy)

    return ComparisonResult(
        calibration_mode=calibration_mode,
        scenario_id=scenario_id,
        zakat_policy=zakat_policy,
        household=household,
        sme=sme,
        national=national,
        wealth=wealth,
        housing_support=housing_support,
        bank=bank,
        summary=summary,
    )
