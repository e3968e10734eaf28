"""
Input records and default resolution
====================================
Raw inputs arrive from the host as loosely typed values (``None``, strings,
NaN, negatives). Each ``resolve_*`` function coerces them and applies the
default order ``input → calibration → hard-coded fallback`` in one place,
returning a frozen ``*Terms`` record the engines consume.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from ilm_simulator.config import (
    BANK_ASSET_CLASSES,
    BANK_FUNDING_CLASSES,
    FALLBACK_DISPOSABLE_RATIO,
    FALLBACK_GROSS_INCOME,
    FALLBACK_MORTGAGE_RATE,
    FALLBACK_RENTAL_YIELD,
    FALLBACK_SME_MARGIN,
    FALLBACK_SME_TERM_YEARS,
    FALLBACK_TERM_YEARS,
    CalibrationProfile,
    SectorProfile,
    get_bank_scenario,
)


def coerce_number(value) -> float:
    """Coerce to a finite, non-negative float; anything else becomes 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def first_positive(*candidates) -> float:
    """Return the first candidate greater than zero, else 0.0."""
    for candidate in candidates:
        if candidate is not None and candidate > 0:
            return float(candidate)
    return 0.0


# ═══════════════════════════════════════════════════════════════════════════════
#  Household
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HouseholdInputs:
    salary: Optional[float] = None
    deposit: Optional[float] = None
    property_value: Optional[float] = None
    term_years: Optional[float] = None
    interest_rate: Optional[float] = None      # Percent, e.g. 4.7
    rental_yield: Optional[float] = None       # Percent, e.g. 5.5


@dataclass(frozen=True)
class HouseholdTerms:
    """Fully resolved household parameters (rates as decimals)."""
    income: float
    deposit: float
    property_value: float
    term_years: float
    annual_rate: float
    stress_rate: float
    rental_yield: float
    house_growth: float
    pti_stress: float
    disposable_ratio: float

    @property
    def principal(self) -> float:
        return max(self.property_value - self.deposit, 0.0)


def resolve_household(inputs: HouseholdInputs,
                      calibration: CalibrationProfile) -> HouseholdTerms:
    housing = calibration.housing
    annual_rate = first_positive(coerce_number(inputs.interest_rate) / 100,
                                 housing.mortgage_rate, FALLBACK_MORTGAGE_RATE)
    if housing.median_disposable_income and housing.median_gross_income:
        disposable_ratio = housing.median_disposable_income / housing.median_gross_income
    else:
        disposable_ratio = FALLBACK_DISPOSABLE_RATIO

    return HouseholdTerms(
        income=first_positive(coerce_number(inputs.salary),
                              housing.median_gross_income, FALLBACK_GROSS_INCOME),
        deposit=coerce_number(inputs.deposit),
        property_value=coerce_number(inputs.property_value),
        term_years=first_positive(coerce_number(inputs.term_years),
                                  housing.term_years_default, FALLBACK_TERM_YEARS),
        annual_rate=annual_rate,
        stress_rate=max(annual_rate, housing.mortgage_rate_stress or 0.0),
        rental_yield=first_positive(coerce_number(inputs.rental_yield) / 100,
                                    housing.rental_yield, FALLBACK_RENTAL_YIELD),
        house_growth=housing.house_price_growth,
        pti_stress=housing.pti_stress,
        disposable_ratio=disposable_ratio,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  SME
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SmeInputs:
    revenue: Optional[float] = None
    margin_percent: Optional[float] = None
    finance_required: Optional[float] = None
    term_years: Optional[float] = None
    sector_id: Optional[str] = None


@dataclass(frozen=True)
class SmeTerms:
    revenue: float
    margin: float
    finance_required: float
    years: int
    growth: float
    loan_rate: float
    revenue_volatility: float
    recession_shock: float
    sector_id: Optional[str] = None


def resolve_sme(inputs: SmeInputs, calibration: CalibrationProfile,
                sector: Optional[SectorProfile] = None) -> SmeTerms:
    """Sector values replace the calibration defaults; explicit inputs win."""
    sme = calibration.sme
    margin = first_positive(coerce_number(inputs.margin_percent) / 100,
                            sector.base_margin if sector else None,
                            sme.margin_default, FALLBACK_SME_MARGIN)
    years = first_positive(coerce_number(inputs.term_years), FALLBACK_SME_TERM_YEARS)

    return SmeTerms(
        revenue=coerce_number(inputs.revenue),
        margin=margin,
        finance_required=coerce_number(inputs.finance_required),
        years=int(round(years)),
        growth=calibration.macro.gdp_growth,
        loan_rate=sme.loan_rate,
        revenue_volatility=sector.revenue_volatility if sector else sme.revenue_volatility,
        recession_shock=sector.recession_shock if sector else sme.recession_shock,
        sector_id=sector.id if sector else None,
    )


# ═══════════════════════════════════════════════════════════════════════════════
#  Bank balance sheet
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BankInputs:
    total_assets: Optional[float] = None
    murabaha_pct: Optional[float] = None
    musharakah_pct: Optional[float] = None
    sukuk_pct: Optional[float] = None
    cash_pct: Optional[float] = None
    mudarabah_pct: Optional[float] = None
    current_pct: Optional[float] = None
    equity_pct: Optional[float] = None
    scenario_id: str = "normal"


@dataclass(frozen=True)
class BankTerms:
    total_assets: float
    asset_mix: Dict[str, float]         # Normalised, sums to 1 (or all zero)
    funding_mix: Dict[str, float]
    scenario_id: str


def normalise_mix(raw: Dict[str, float]) -> Dict[str, float]:
    """Scale shares to sum to one; a zero total is treated as 1."""
    total = sum(raw.values()) or 1.0
    return {name: value / total for name, value in raw.items()}


def resolve_bank(inputs: BankInputs) -> BankTerms:
    get_bank_scenario(inputs.scenario_id)
    asset_raw = {name: coerce_number(getattr(inputs, f"{name}_pct"))
                 for name in BANK_ASSET_CLASSES}
    funding_raw = {name: coerce_number(getattr(inputs, f"{name}_pct"))
                   for name in BANK_FUNDING_CLASSES}
    return BankTerms(
        total_assets=coerce_number(inputs.total_assets),
        asset_mix=normalise_mix(asset_raw),
        funding_mix=normalise_mix(funding_raw),
        scenario_id=inputs.scenario_id,
    )
