"""Zakat-funded mortgage arrears relief derived from the wealth simulation."""

from __future__ import annotations

from dataclasses import dataclass

from ilm_simulator.config import (
    AVERAGE_ARREARS,
    HOUSEHOLDS_AT_RISK,
    HOUSING_ZAKAT_SHARE,
    ZAKATABLE_WEALTH,
    CalibrationProfile,
)


@dataclass(frozen=True)
class HousingSupportResult:
    zakat_revenue: float = 0.0
    housing_fund: float = 0.0
    households_helped: float = 0.0          # Uncapped
    coverage: float = 0.0                   # Share of at-risk households, ≤ 1
    default_rate_reduction: float = 0.0     # Annual probability points


def calculate_housing_support(
    zakat_share_year: float,
    calibration: CalibrationProfile,
    zakatable_wealth: float = ZAKATABLE_WEALTH,
) -> HousingSupportResult:
    """
    Parameters
    ----------
    zakat_share_year : annual zakat flow in percent of wealth (Islamic system)
    calibration : supplies the baseline annual mortgage default probability
    zakatable_wealth : aggregate eligible wealth the share applies to
    """
    if zakat_share_year <= 0 or zakatable_wealth <= 0:
        return HousingSupportResult()

    revenue = zakatable_wealth * zakat_share_year / 100
    fund = revenue * HOUSING_ZAKAT_SHARE
    helped = fund / AVERAGE_ARREARS
    coverage = min(helped / HOUSEHOLDS_AT_RISK, 1.0)

    return HousingSupportResult(
        zakat_revenue=revenue,
        housing_fund=fund,
        households_helped=helped,
        coverage=coverage,
        default_rate_reduction=calibration.housing.annual_default_prob * coverage,
    )
