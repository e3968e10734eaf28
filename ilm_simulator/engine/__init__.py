"""Engine sub-package — household, national and wealth models."""

from ilm_simulator.engine.inputs import (
    BankInputs,
    HouseholdInputs,
    SmeInputs,
)
from ilm_simulator.engine.household import HouseholdResult, calculate_household_metrics
from ilm_simulator.engine.wealth import WealthResult, simulate_wealth_distribution
from ilm_simulator.engine.national import (
    NationalResult,
    simulate_all_national,
    simulate_national_system,
)

__all__ = [
    "BankInputs",
    "HouseholdInputs",
    "SmeInputs",
    "HouseholdResult",
    "calculate_household_metrics",
    "WealthResult",
    "simulate_wealth_distribution",
    "NationalResult",
    "simulate_all_national",
    "simulate_national_system",
]
