"""
Bank Stress Engine
==================
Implements:
  - Asset / funding mix normalisation
  - Risk-weighted assets under fixed standardised weights
  - Capital ratio (equity / RWA) and liquidity ratio (HQLA / assets)
  - Scenario-stressed expected loss per asset class (PD × LGD × EAD)
  - Loss coverage and capital shortfall probability

Asset classes are named for the Islamic balance sheet (murabaha,
musharakah, sukuk, cash); under the interest system the same slots hold
loans, equity participations, bonds and cash.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from ilm_simulator.config import (
    BANK_BASE_PD,
    BANK_LGD,
    BANK_RISK_WEIGHTS,
    LOSS_COVERAGE_SENTINEL,
    SYSTEMS,
    get_bank_scenario,
    get_system,
)
from ilm_simulator.engine.inputs import BankInputs, BankTerms, resolve_bank
from ilm_simulator.utils import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BankStressResult:
    """Balance sheet risk metrics for one system under one scenario."""
    system: str
    scenario_id: str
    total_assets: float
    exposures: Dict[str, float]
    funding: Dict[str, float]
    rwa: float
    equity: float
    capital_ratio: float
    hqla: float
    liquidity_ratio: float
    pd_by_class: Dict[str, float]
    loss_by_class: Dict[str, float]
    expected_loss: float
    loss_ratio: float
    loss_coverage: float
    shortfall_prob: float           # Percent


# ═══════════════════════════════════════════════════════════════════════════════
#  Main Bank Stress Engine
# ═══════════════════════════════════════════════════════════════════════════════

class BankStressEngine:
    """
    Single-period balance sheet stress for a bank of given size and mix.

    The same balance sheet can be evaluated under either system; only the
    base PDs and the scenario PD multiplier change.
    """

    def __init__(self, terms: BankTerms):
        self.terms = terms
        self.scenario = get_bank_scenario(terms.scenario_id)

    @property
    def exposures(self) -> Dict[str, float]:
        return {name: self.terms.total_assets * share
                for name, share in self.terms.asset_mix.items()}

    @property
    def funding(self) -> Dict[str, float]:
        return {name: self.terms.total_assets * share
                for name, share in self.terms.funding_mix.items()}

    def compute_rwa(self) -> float:
        return sum(balance * BANK_RISK_WEIGHTS[name]
                   for name, balance in self.exposures.items())

    def stressed_pd(self, system: str) -> Dict[str, float]:
        multiplier = self.scenario.pd_multiplier(system)
        return {name: pd_ * multiplier for name, pd_ in BANK_BASE_PD[system].items()}

    def compute_losses(self, system: str) -> Dict[str, float]:
        pds = self.stressed_pd(system)
        return {name: balance * pds[name] * BANK_LGD
                for name, balance in self.exposures.items()}

    def run(self, system: str) -> BankStressResult:
        get_system(system)
        assets = self.terms.total_assets
        exposures = self.exposures
        funding = self.funding

        rwa = self.compute_rwa()
        equity = funding["equity"]
        capital_ratio = equity / rwa if rwa > 0 else 0.0

        hqla = exposures["sukuk"] + exposures["cash"]
        liquidity_ratio = hqla / assets if assets > 0 else 0.0

        losses = self.compute_losses(system)
        total_loss = sum(losses.values())
        loss_ratio = total_loss / assets if assets > 0 else 0.0
        coverage = equity / total_loss if total_loss > 0 else LOSS_COVERAGE_SENTINEL

        shortfall = clamp(1 / (coverage + 0.1), 0.0, 1.0)
        shortfall = clamp(shortfall * self.scenario.shortfall_multiplier, 0.0, 1.0)

        logger.debug("Bank stress %s/%s: CR=%.3f loss=%.2f shortfall=%.2f%%",
                     system, self.scenario.id, capital_ratio, total_loss, shortfall * 100)

        return BankStressResult(
            system=system,
            scenario_id=self.scenario.id,
            total_assets=assets,
            exposures=exposures,
            funding=funding,
            rwa=rwa,
            equity=equity,
            capital_ratio=capital_ratio,
            hqla=hqla,
            liquidity_ratio=liquidity_ratio,
            pd_by_class=self.stressed_pd(system),
            loss_by_class=losses,
            expected_loss=total_loss,
            loss_ratio=loss_ratio,
            loss_coverage=coverage,
            shortfall_prob=shortfall * 100,
        )


def run_bank_stress(inputs: BankInputs, system: str) -> BankStressResult:
    """Resolve the raw balance sheet inputs and stress them for one system."""
    return BankStressEngine(resolve_bank(inputs)).run(system)


def run_bank_stress_both(inputs: BankInputs) -> Dict[str, BankStressResult]:
    engine = BankStressEngine(resolve_bank(inputs))
    return {system: engine.run(system) for system in SYSTEMS}
