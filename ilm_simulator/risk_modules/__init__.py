"""Risk modules sub-package — bank balance sheet stress and housing support."""

from ilm_simulator.risk_modules.bank_stress import (
    BankStressEngine,
    BankStressResult,
    run_bank_stress,
    run_bank_stress_both,
)
from ilm_simulator.risk_modules.housing_support import (
    HousingSupportResult,
    calculate_housing_support,
)

__all__ = [
    "BankStressEngine",
    "BankStressResult",
    "run_bank_stress",
    "run_bank_stress_both",
    "HousingSupportResult",
    "calculate_housing_support",
]
