"""Calibration profiles, scenario tables and registry lookups."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


class UnknownIdentifierError(LookupError):
    """Raised when a calibration / scenario / sector id is not registered."""

    def __init__(self, kind: str, identifier, valid):
        self.kind = kind
        self.identifier = identifier
        self.valid = sorted(valid)
        super().__init__(
            f"Unknown {kind} '{identifier}'. Valid options: {', '.join(self.valid)}"
        )


# ── Model constants ─────────────────────────────────────────────────────────
SME_RUNS = 350                  # Monte Carlo paths per financing mode
NATIONAL_HORIZON_YEARS = 30
WEALTH_HORIZON_YEARS = 30
TRAILING_WINDOW_YEARS = 5       # Window for reported macro averages

INITIAL_WEALTH_SHARES = (0.06, 0.10, 0.16, 0.24, 0.44)   # Bottom → top quintile

PROFIT_SHARE_RATIO = 0.30       # Financier share of positive SME profit
SEVERE_DROP_THRESHOLD = 0.40    # Owner income below 40 % of base profit
RECESSION_INCOME_CUT = 0.15     # Household income stress for PTI


# ── Systems ─────────────────────────────────────────────────────────────────
SYSTEMS = {
    "interest": "UK Interest System",
    "islamic": "Islamic System",
}


# ── Calibration profiles ────────────────────────────────────────────────────
@dataclass(frozen=True)
class HousingCalibration:
    """Mortgage market and household income parameters."""
    house_price_growth: float
    rental_yield: float
    annual_default_prob: float
    pti_stress: float
    median_gross_income: float
    median_disposable_income: float
    mortgage_rate: Optional[float] = None
    mortgage_rate_stress: Optional[float] = None
    mortgage_rate_low: Optional[float] = None
    term_years_default: Optional[int] = None
    average_ltv: Optional[float] = None
    ftb_ltv: Optional[float] = None          # First-time buyer
    high_risk_ltv: Optional[float] = None


@dataclass(frozen=True)
class SmeCalibration:
    survival_5yr_interest: float
    annual_insolvency: float
    loan_rate: float
    recession_shock: float
    revenue_volatility: float
    margin_default: float


@dataclass(frozen=True)
class MacroCalibration:
    gdp_growth: float
    gdp_volatility: float
    inflation_avg: float
    inflation_volatility: float
    household_debt_income: float
    private_credit_gdp: float
    sme_employment_share: float


@dataclass(frozen=True)
class TopScores:
    """Static stability scores that override the simulated ones."""
    economic_stability_interest: float
    inflation_stability_interest: float
    sme_default_rate_interest: float


@dataclass(frozen=True)
class CalibrationProfile:
    name: str
    label: str
    description: str
    housing: HousingCalibration
    sme: SmeCalibration
    macro: MacroCalibration
    top_scores: TopScores


STYLISED_CALIBRATION = CalibrationProfile(
    name="stylised",
    label="Stylised",
    description="Smooth, educational parameters not tied to a specific country.",
    housing=HousingCalibration(
        house_price_growth=0.02,
        rental_yield=0.04,
        annual_default_prob=0.004,
        pti_stress=0.38,
        median_gross_income=45_000,
        median_disposable_income=30_000,
        average_ltv=0.80,
        ftb_ltv=0.90,
        high_risk_ltv=0.95,
    ),
    sme=SmeCalibration(
        survival_5yr_interest=0.40,
        annual_insolvency=0.005,
        loan_rate=0.07,
        recession_shock=-0.35,
        revenue_volatility=0.12,
        margin_default=0.15,
    ),
    macro=MacroCalibration(
        gdp_growth=0.02,
        gdp_volatility=0.02,
        inflation_avg=0.025,
        inflation_volatility=0.012,
        household_debt_income=1.0,
        private_credit_gdp=1.0,
        sme_employment_share=0.6,
    ),
    top_scores=TopScores(
        economic_stability_interest=65,
        inflation_stability_interest=60,
        sme_default_rate_interest=0.005,
    ),
)

UK_CALIBRATION = CalibrationProfile(
    name="uk",
    label="UK calibrated",
    description=("Parameters anchored to typical UK averages for mortgages, "
                 "SMEs and macro series."),
    housing=HousingCalibration(
        mortgage_rate=0.047,
        mortgage_rate_stress=0.06,
        mortgage_rate_low=0.039,
        term_years_default=30,
        average_ltv=0.82,
        ftb_ltv=0.88,
        high_risk_ltv=0.95,
        house_price_growth=0.033,
        rental_yield=0.055,
        annual_default_prob=0.006,
        pti_stress=0.40,
        median_gross_income=55_200,
        median_disposable_income=34_500,
    ),
    sme=SmeCalibration(
        survival_5yr_interest=0.41,
        annual_insolvency=0.0053,
        loan_rate=0.076,
        recession_shock=-0.40,
        revenue_volatility=0.15,
        margin_default=0.15,
    ),
    macro=MacroCalibration(
        gdp_growth=0.022,
        gdp_volatility=0.025,
        inflation_avg=0.03,
        inflation_volatility=0.013,
        household_debt_income=1.18,
        private_credit_gdp=1.14,
        sme_employment_share=0.6,
    ),
    top_scores=TopScores(
        economic_stability_interest=60,
        inflation_stability_interest=50,
        sme_default_rate_interest=0.005,
    ),
)

CALIBRATION_MODES: Dict[str, CalibrationProfile] = {
    "stylised": STYLISED_CALIBRATION,
    "uk": UK_CALIBRATION,
}


# ── Hard-coded fallbacks (used when neither input nor calibration has a value)
FALLBACK_MORTGAGE_RATE = 0.05
FALLBACK_RENTAL_YIELD = 0.04
FALLBACK_TERM_YEARS = 25
FALLBACK_GROSS_INCOME = 45_000
FALLBACK_DISPOSABLE_RATIO = 0.75
FALLBACK_SME_TERM_YEARS = 5
FALLBACK_SME_MARGIN = 0.15


# ── Macro shock scenarios ───────────────────────────────────────────────────
@dataclass(frozen=True)
class Scenario:
    """Named macro shock applied to the SME and national simulations."""
    id: str
    label: str
    recession_shock_factor: float
    extra_gdp_shock: float          # Added to GDP growth (pp) in crisis years
    inflation_shock: float          # Added to inflation (pp) in crisis years
    crisis_years: Tuple[int, ...] = ()
    unemployment_shock: float = 0.0
    crisis_premium: float = 0.0     # Added to borrowing cost (pp)
    description: str = ""

    def is_crisis_year(self, year: int) -> bool:
        return year in self.crisis_years


BASELINE_SCENARIO = Scenario(
    id="baseline",
    label="Baseline cycle",
    recession_shock_factor=1.0,
    extra_gdp_shock=0.0,
    inflation_shock=0.0,
    description="Normal ups and downs with one moderate recession.",
)

SEVERE_SCENARIO = Scenario(
    id="severe",
    label="Severe crisis",
    recession_shock_factor=1.5,
    extra_gdp_shock=-3.0,
    inflation_shock=1.0,
    crisis_years=(10, 11),
    unemployment_shock=0.8,
    crisis_premium=0.5,
    description="Deep recession similar in scale to 2008 to test system resilience.",
)

SCENARIOS: Dict[str, Scenario] = {
    "baseline": BASELINE_SCENARIO,
    "severe": SEVERE_SCENARIO,
}


# ── SME sector risk profiles ────────────────────────────────────────────────
@dataclass(frozen=True)
class SectorProfile:
    id: str
    label: str
    base_margin: float
    revenue_volatility: float
    recession_shock: float


SECTOR_PROFILES: Dict[str, SectorProfile] = {
    "services":      SectorProfile("services", "Professional services", 0.18, 0.10, -0.30),
    "retail":        SectorProfile("retail", "Retail", 0.12, 0.15, -0.40),
    "hospitality":   SectorProfile("hospitality", "Hospitality", 0.10, 0.20, -0.55),
    "manufacturing": SectorProfile("manufacturing", "Manufacturing", 0.14, 0.13, -0.35),
    "construction":  SectorProfile("construction", "Construction", 0.11, 0.18, -0.45),
    "technology":    SectorProfile("technology", "Technology", 0.22, 0.22, -0.30),
}


# ── Bank balance sheet stress ───────────────────────────────────────────────
BANK_ASSET_CLASSES = ("murabaha", "musharakah", "sukuk", "cash")
BANK_FUNDING_CLASSES = ("mudarabah", "current", "equity")

# Standardised risk weights per asset class
BANK_RISK_WEIGHTS = {
    "murabaha": 0.75,       # Loans / cost-plus sale financing
    "musharakah": 1.00,     # Profit-share / equity participation
    "sukuk": 0.20,          # Bonds / asset-backed certificates
    "cash": 0.00,
}

# Base annual PD per asset class and balance sheet structure
BANK_BASE_PD = {
    "interest": {"murabaha": 0.025, "musharakah": 0.035, "sukuk": 0.005, "cash": 0.0},
    "islamic":  {"murabaha": 0.020, "musharakah": 0.030, "sukuk": 0.004, "cash": 0.0},
}

BANK_LGD = 0.40
LOSS_COVERAGE_SENTINEL = 999.0      # Reported when expected loss is zero


@dataclass(frozen=True)
class BankScenario:
    id: str
    label: str
    pd_multiplier_interest: float
    pd_multiplier_islamic: float
    shortfall_multiplier: float

    def pd_multiplier(self, system: str) -> float:
        return self.pd_multiplier_islamic if system == "islamic" else self.pd_multiplier_interest


BANK_SCENARIOS: Dict[str, BankScenario] = {
    "normal": BankScenario("normal", "Normal conditions", 1.0, 1.0, 1.0),
    "stress": BankScenario("stress", "Moderate stress", 1.6, 1.3, 1.1),
    "severe": BankScenario("severe", "Severe stress", 2.5, 1.8, 1.4),
}


# ── Wealth / zakat ──────────────────────────────────────────────────────────
ZAKAT_RATES = {
    "none": 0.0,
    "standard": 0.025,
    "enhanced": 0.03,
}

ZAKAT_RECIPIENT_WEIGHTS = (0.6, 0.4)        # Bottom and second quintile
ZAKAT_PAYER_QUINTILES = (2, 3, 4)           # Top three quintiles

WEALTH_GROWTH_FACTORS = {
    "interest": (1.010, 1.015, 1.020, 1.025, 1.030),
    "islamic":  (1.018, 1.020, 1.022, 1.022, 1.022),
}

NISAB_DEBT_THRESHOLD = 1.1      # Household debt/income above which full base applies
NISAB_REDUCED_MULTIPLIER = 0.9


# ── Housing support (zakat-funded arrears relief) ──────────────────────────
ZAKATABLE_WEALTH = 50_000_000_000.0     # Assumed aggregate eligible wealth (£)
HOUSING_ZAKAT_SHARE = 0.25              # Fraction of zakat directed to housing
AVERAGE_ARREARS = 6_000.0               # Average arrears per household (£)
HOUSEHOLDS_AT_RISK = 100_000


# ── Social elasticities (per pp of bottom-40 % wealth share) ───────────────
ELASTICITIES = {
    "poverty": 0.40,
    "crime": 0.25,
    "consumption": 0.30,
    "gdp": 0.15,
}


# ── Presets ─────────────────────────────────────────────────────────────────
HOUSEHOLD_PRESETS: List[Dict] = [
    {"id": "avg_buyer", "label": "Average buyer", "salary": 55_000,
     "deposit": 55_000, "property_value": 270_000, "term_years": 30,
     "interest_rate": 4.7, "rental_yield": 5.5},
    {"id": "high_ltv", "label": "High LTV buyer", "salary": 50_000,
     "deposit": 20_000, "property_value": 270_000, "term_years": 35,
     "interest_rate": 5.2, "rental_yield": 5.7},
    {"id": "stressed_rates", "label": "Rate shock", "salary": 55_000,
     "deposit": 60_000, "property_value": 270_000, "term_years": 30,
     "interest_rate": 6.0, "rental_yield": 5.5},
]

SME_PRESETS: List[Dict] = [
    {"id": "service_sme", "label": "Service business", "revenue": 250_000,
     "margin_percent": 18, "finance_required": 75_000, "term_years": 5},
    {"id": "retail_sme", "label": "Retail shop", "revenue": 400_000,
     "margin_percent": 12, "finance_required": 150_000, "term_years": 7},
    {"id": "growth_sme", "label": "High growth", "revenue": 600_000,
     "margin_percent": 22, "finance_required": 200_000, "term_years": 6},
]


# ── Registry lookups ────────────────────────────────────────────────────────
def get_calibration(mode: str) -> CalibrationProfile:
    try:
        return CALIBRATION_MODES[mode]
    except KeyError:
        raise UnknownIdentifierError("calibration mode", mode, CALIBRATION_MODES) from None


def get_scenario(scenario_id: str) -> Scenario:
    try:
        return SCENARIOS[scenario_id]
    except KeyError:
        raise UnknownIdentifierError("scenario", scenario_id, SCENARIOS) from None


def get_sector(sector_id: Optional[str]) -> Optional[SectorProfile]:
    """Return the sector profile, or None when no sector is selected."""
    if not sector_id:
        return None
    try:
        return SECTOR_PROFILES[sector_id]
    except KeyError:
        raise UnknownIdentifierError("sector", sector_id, SECTOR_PROFILES) from None


def get_bank_scenario(scenario_id: str) -> BankScenario:
    try:
        return BANK_SCENARIOS[scenario_id]
    except KeyError:
        raise UnknownIdentifierError("bank scenario", scenario_id, BANK_SCENARIOS) from None


def get_zakat_rate(policy: str) -> float:
    try:
        return ZAKAT_RATES[policy]
    except KeyError:
        raise UnknownIdentifierError("zakat policy", policy, ZAKAT_RATES) from None


def get_system(system: str) -> str:
    """Validate a system id and return it."""
    if system not in SYSTEMS:
        raise UnknownIdentifierError("system", system, SYSTEMS)
    return system
