"""
Test suite for the deterministic engines: configuration registry, input
resolution, household amortisation, wealth/zakat and the national macro path.
"""

import sys
import os
import dataclasses
import math
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from ilm_simulator.config import (
    CALIBRATION_MODES,
    UK_CALIBRATION,
    STYLISED_CALIBRATION,
    BASELINE_SCENARIO,
    SEVERE_SCENARIO,
    UnknownIdentifierError,
    get_calibration,
    get_scenario,
    get_sector,
    get_bank_scenario,
    get_zakat_rate,
    get_system,
)
from ilm_simulator.engine.inputs import (
    HouseholdInputs,
    SmeInputs,
    coerce_number,
    first_positive,
    normalise_mix,
    resolve_household,
    resolve_sme,
)
from ilm_simulator.engine.household import (
    annuity_payment,
    calculate_household_metrics,
    outstanding_balance,
    pti_to_label,
)
from ilm_simulator.engine.wealth import (
    gini_coefficient,
    nisab_multiplier,
    simulate_wealth_distribution,
)
from ilm_simulator.engine.national import simulate_all_national, simulate_national_system
from ilm_simulator.stress_testing import SmeResult


@pytest.fixture
def uk():
    return UK_CALIBRATION


@pytest.fixture
def avg_buyer():
    return HouseholdInputs(salary=55_000, deposit=55_000, property_value=270_000,
                           term_years=30, interest_rate=4.7, rental_yield=5.5)


@pytest.fixture
def sme_result():
    return SmeResult(survival_interest=80.0, survival_islamic=92.0, runs=350)


# ═══════════════════════════════════════════════════════════════════════════════
#  Calibration Registry
# ═══════════════════════════════════════════════════════════════════════════════

class TestRegistry:
    def test_profiles_registered(self):
        assert set(CALIBRATION_MODES) == {"stylised", "uk"}
        assert get_calibration("uk") is UK_CALIBRATION

    @pytest.mark.parametrize("lookup, bad_id", [
        (get_calibration, "us"),
        (get_scenario, "apocalypse"),
        (get_sector, "mining"),
        (get_bank_scenario, "panic"),
        (get_zakat_rate, "double"),
        (get_system, "barter"),
    ])
    def test_unknown_ids_fail_fast(self, lookup, bad_id):
        with pytest.raises(UnknownIdentifierError) as exc:
            lookup(bad_id)
        assert bad_id in str(exc.value)
        assert isinstance(exc.value, LookupError)

    def test_no_sector_selected(self):
        assert get_sector(None) is None
        assert get_sector("") is None

    def test_profiles_are_immutable(self, uk):
        with pytest.raises(dataclasses.FrozenInstanceError):
            uk.housing.mortgage_rate = 0.1

    def test_severe_crisis_years(self):
        assert SEVERE_SCENARIO.crisis_years == (10, 11)
        assert not BASELINE_SCENARIO.is_crisis_year(10)


# ═══════════════════════════════════════════════════════════════════════════════
#  Input Resolution
# ═══════════════════════════════════════════════════════════════════════════════

class TestInputResolution:
    @pytest.mark.parametrize("raw, expected", [
        (None, 0.0), ("12.5", 12.5), ("abc", 0.0), (-3, 0.0),
        (float("nan"), 0.0), (float("inf"), 0.0), (7, 7.0),
    ])
    def test_coerce_number(self, raw, expected):
        assert coerce_number(raw) == expected

    def test_first_positive(self):
        assert first_positive(0, None, 3, 4) == 3
        assert first_positive(0, None) == 0.0

    def test_normalise_mix_zero_total(self):
        assert normalise_mix({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}
        mix = normalise_mix({"a": 3.0, "b": 1.0})
        assert mix["a"] == pytest.approx(0.75)

    def test_household_falls_back_to_calibration(self, uk):
        terms = resolve_household(HouseholdInputs(property_value=200_000), uk)
        assert terms.annual_rate == pytest.approx(0.047)
        assert terms.income == uk.housing.median_gross_income
        assert terms.term_years == 30
        assert terms.rental_yield == pytest.approx(0.055)

    def test_household_hardcoded_fallbacks(self):
        terms = resolve_household(HouseholdInputs(), STYLISED_CALIBRATION)
        assert terms.annual_rate == pytest.approx(0.05)
        assert terms.term_years == 25

    def test_stress_rate_never_below_rate(self, uk):
        terms = resolve_household(HouseholdInputs(interest_rate=8.0), uk)
        assert terms.stress_rate == pytest.approx(0.08)

    def test_sector_overrides_calibration_defaults(self, uk):
        sector = get_sector("hospitality")
        terms = resolve_sme(SmeInputs(revenue=1, finance_required=1), uk, sector)
        assert terms.margin == pytest.approx(0.10)
        assert terms.revenue_volatility == pytest.approx(0.20)
        assert terms.recession_shock == pytest.approx(-0.55)
        assert terms.years == 5

    def test_explicit_margin_beats_sector(self, uk):
        terms = resolve_sme(SmeInputs(margin_percent=25), uk, get_sector("retail"))
        assert terms.margin == pytest.approx(0.25)


# ═══════════════════════════════════════════════════════════════════════════════
#  Household Engine
# ═══════════════════════════════════════════════════════════════════════════════

class TestHousehold:
    def test_curve_lengths_and_order(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        assert len(result.equity_curve) == 31
        assert len(result.cost_curve) == 31
        years = [p.year for p in result.equity_curve]
        assert years == sorted(years)
        assert years[0] == 0 and years[-1] == 30

    @pytest.mark.parametrize("term", [25.5, 25.97, 10.99, 0.97, 30])
    def test_fractional_term_curve_length(self, uk, term):
        inputs = HouseholdInputs(salary=60_000, deposit=40_000, property_value=250_000,
                                 term_years=term, interest_rate=5.0, rental_yield=5.0)
        result = calculate_household_metrics(inputs, uk)
        assert len(result.equity_curve) == math.floor(term) + 1
        assert len(result.cost_curve) == math.floor(term) + 1

    def test_bank_share_reaches_zero(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        assert result.equity_curve[0].bank_share == pytest.approx(215_000 / 270_000)
        assert result.equity_curve[-1].bank_share == pytest.approx(0.0, abs=1e-12)
        shares = [p.bank_share for p in result.equity_curve]
        assert all(a > b for a, b in zip(shares, shares[1:]))

    def test_mortgage_fully_repaid(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        last = result.equity_curve[-1]
        house_value = 270_000 * (1 + uk.housing.house_price_growth) ** 30
        assert last.equity_interest == pytest.approx(house_value, rel=1e-9)
        assert last.equity_islamic == pytest.approx(house_value, rel=1e-9)

    def test_totals_match_payments(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        payment = annuity_payment(215_000, 0.047 / 12, 360)
        assert result.monthly_payment_interest == pytest.approx(payment)
        assert result.total_paid_interest == pytest.approx(payment * 360)
        assert result.interest_cost == pytest.approx(payment * 360 - 215_000)
        assert result.cost_curve[-1].cum_interest == pytest.approx(result.total_paid_interest)
        assert result.total_paid_islamic > 215_000

    def test_cost_curves_monotonic(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        cum = [p.cum_islamic for p in result.cost_curve]
        assert all(b > a for a, b in zip(cum, cum[1:]))

    def test_zero_principal_is_degenerate(self, uk):
        inputs = HouseholdInputs(salary=50_000, deposit=300_000, property_value=270_000)
        result = calculate_household_metrics(inputs, uk)
        assert result.total_paid_interest == 0
        assert result.total_paid_islamic == 0
        assert result.risk_interest == "N/A"
        assert result.risk_islamic == "N/A"
        assert result.equity_curve == ()
        assert result.cost_curve == ()

    def test_missing_property_value_is_degenerate(self, uk):
        result = calculate_household_metrics(HouseholdInputs(), uk)
        assert result.equity_curve == ()
        assert result.to_frame().empty

    def test_nan_salary_uses_calibration_income(self, uk, avg_buyer):
        nan_inputs = dataclasses.replace(avg_buyer, salary=float("nan"))
        median_inputs = dataclasses.replace(avg_buyer, salary=uk.housing.median_gross_income)
        assert (calculate_household_metrics(nan_inputs, uk).pti_interest ==
                pytest.approx(calculate_household_metrics(median_inputs, uk).pti_interest))

    def test_low_risk_household(self, uk):
        inputs = HouseholdInputs(salary=200_000, deposit=50_000, property_value=100_000,
                                 term_years=25, interest_rate=4.0, rental_yield=5.0)
        result = calculate_household_metrics(inputs, uk)
        assert result.risk_interest == "Low"
        assert result.risk_islamic == "Low"

    def test_risk_labels_valid(self, uk, avg_buyer):
        result = calculate_household_metrics(avg_buyer, uk)
        for label in (result.risk_interest, result.risk_islamic, result.risk_interest_stressed):
            assert label in {"Low", "Moderate", "High"}
        assert result.pti_interest_stressed >= result.pti_interest

    def test_pti_labels(self):
        assert pti_to_label(0.1, 0.4) == "Low"
        assert pti_to_label(0.3, 0.4) == "Moderate"
        assert pti_to_label(0.4, 0.4) == "High"
        assert pti_to_label(float("inf"), 0.4) == "N/A"

    def test_ltv_bands(self, uk, avg_buyer):
        assert calculate_household_metrics(avg_buyer, uk).ltv_band == "Standard"
        high = dataclasses.replace(avg_buyer, deposit=20_000)
        assert calculate_household_metrics(high, uk).ltv_band == "High"

    def test_zero_rate_annuity(self):
        assert annuity_payment(1200, 0.0, 12) == pytest.approx(100)

    def test_vanishing_rate_amortises_linearly(self, uk, avg_buyer):
        inputs = dataclasses.replace(avg_buyer, interest_rate=1e-15)
        result = calculate_household_metrics(inputs, uk)
        assert result.monthly_payment_interest == pytest.approx(215_000 / 360)
        assert result.equity_curve[-1].equity_interest == pytest.approx(
            result.equity_curve[-1].equity_islamic)

    def test_extreme_rate_stays_finite(self, uk, avg_buyer):
        inputs = dataclasses.replace(avg_buyer, interest_rate=1e5)
        result = calculate_household_metrics(inputs, uk)
        assert result.risk_interest == "High"
        assert math.isfinite(result.total_paid_interest)
        for point in result.equity_curve:
            assert math.isfinite(point.equity_interest)
        for point in result.cost_curve:
            assert math.isfinite(point.cum_interest)
        assert result.equity_curve[-1].bank_share == 0

    def test_unrepresentable_horizon_is_degenerate(self, uk, avg_buyer):
        inputs = dataclasses.replace(avg_buyer, term_years=1e5)
        result = calculate_household_metrics(inputs, uk)
        assert result.risk_interest == "N/A"
        assert result.equity_curve == ()

    def test_balance_runs_to_zero(self):
        assert outstanding_balance(1000, 0.01, 12, 0) == 1000
        assert outstanding_balance(1000, 0.01, 12, 12) == 0
        assert outstanding_balance(1000, 0.0, 10, 5) == pytest.approx(500)
        # Balance after one payment equals principal grown by a month less the payment
        payment = annuity_payment(1000, 0.01, 12)
        assert outstanding_balance(1000, 0.01, 12, 1) == pytest.approx(1000 * 1.01 - payment)

    def test_frame_export(self, uk, avg_buyer):
        df = calculate_household_metrics(avg_buyer, uk).to_frame()
        assert len(df) == 31
        assert {"year", "equity_interest", "cum_islamic", "bank_share"} <= set(df.columns)

    def test_idempotent(self, uk, avg_buyer):
        assert (calculate_household_metrics(avg_buyer, uk) ==
                calculate_household_metrics(avg_buyer, uk))


# ═══════════════════════════════════════════════════════════════════════════════
#  Wealth / Zakat Simulator
# ═══════════════════════════════════════════════════════════════════════════════

class TestWealth:
    @pytest.mark.parametrize("mode", ["stylised", "uk"])
    @pytest.mark.parametrize("system", ["interest", "islamic"])
    @pytest.mark.parametrize("policy", ["none", "standard", "enhanced"])
    def test_shares_sum_to_one_every_year(self, mode, system, policy):
        result = simulate_wealth_distribution(get_calibration(mode), system, policy)
        assert len(result.snapshots) == 30
        for snap in result.snapshots:
            assert sum(snap.shares) == pytest.approx(1.0, abs=1e-9)

    def test_interest_system_collects_no_zakat(self, uk):
        result = simulate_wealth_distribution(uk, "interest", "enhanced")
        assert result.zakat_share_year == 0
        assert result.zakat_share_avg == 0

    def test_islamic_system_is_more_equal(self, uk):
        interest = simulate_wealth_distribution(uk, "interest")
        islamic = simulate_wealth_distribution(uk, "islamic")
        assert islamic.bottom40 > interest.bottom40
        assert islamic.top20 < interest.top20
        assert islamic.inequality_score > interest.inequality_score
        assert 0 <= islamic.inequality_score <= 100

    def test_enhanced_zakat_collects_more(self, uk):
        standard = simulate_wealth_distribution(uk, "islamic", "standard")
        enhanced = simulate_wealth_distribution(uk, "islamic", "enhanced")
        assert enhanced.zakat_share_year > standard.zakat_share_year > 0
        assert enhanced.bottom40 > standard.bottom40

    def test_nisab_multiplier(self):
        assert nisab_multiplier(UK_CALIBRATION) == 1.0
        assert nisab_multiplier(STYLISED_CALIBRATION) == 0.9

    def test_gini(self):
        assert gini_coefficient([0.2] * 5) == pytest.approx(0.0, abs=1e-12)
        assert gini_coefficient([0.06, 0.10, 0.16, 0.24, 0.44]) == pytest.approx(0.36)

    def test_unknown_policy_fails(self, uk):
        with pytest.raises(UnknownIdentifierError):
            simulate_wealth_distribution(uk, "islamic", "voluntary")


# ═══════════════════════════════════════════════════════════════════════════════
#  National Macro Simulator
# ═══════════════════════════════════════════════════════════════════════════════

class TestNational:
    def test_series_lengths(self, uk, sme_result):
        result = simulate_national_system("interest", uk, sme_result, BASELINE_SCENARIO)
        assert len(result.gdp_index) == 31
        assert result.gdp_index[0] == 100
        assert len(result.series) == 30
        assert [p.year for p in result.series] == list(range(1, 31))

    @pytest.mark.parametrize("system", ["interest", "islamic"])
    def test_severe_shock_hits_crisis_years(self, uk, sme_result, system):
        base = simulate_national_system(system, uk, sme_result, BASELINE_SCENARIO)
        severe = simulate_national_system(system, uk, sme_result, SEVERE_SCENARIO)
        for b, s in zip(base.series, severe.series):
            if b.year in (10, 11):
                assert s.inflation - b.inflation == pytest.approx(1.0)
            else:
                assert s.inflation == pytest.approx(b.inflation)
            if b.year < 10:
                assert s.unemployment == pytest.approx(b.unemployment)
        # Each crisis year adds Okun response to the GDP shock plus the direct shock
        crisis_step = 0.15 * 3.0 + 0.8
        gaps = [s.unemployment - b.unemployment for b, s in zip(base.series, severe.series)]
        assert gaps[8] == pytest.approx(0.0)
        assert gaps[9] == pytest.approx(crisis_step)
        assert gaps[10] - gaps[9] == pytest.approx(crisis_step)
        assert gaps[11] == pytest.approx(gaps[10])
        assert severe.series[9].borrowing_cost - base.series[9].borrowing_cost == pytest.approx(0.5)

    def test_static_stability_override(self, uk, sme_result):
        for scenario in (BASELINE_SCENARIO, SEVERE_SCENARIO):
            results = simulate_all_national(uk, sme_result, scenario)
            assert results["interest"].metrics.economic_stability == 60
            assert results["interest"].metrics.inflation_stability == 50
            assert results["islamic"].metrics.economic_stability == 70
            assert results["islamic"].metrics.inflation_stability == 60

    def test_computed_scores_kept_as_diagnostics(self, uk, sme_result):
        metrics = simulate_national_system("interest", uk, sme_result, SEVERE_SCENARIO).metrics
        assert 0 <= metrics.computed_economic_stability <= 100
        assert 0 <= metrics.computed_inflation_stability <= 100

    def test_sme_default_rate_from_survival(self, uk, sme_result):
        results = simulate_all_national(uk, sme_result, BASELINE_SCENARIO)
        assert results["interest"].metrics.sme_default_rate == pytest.approx(20.0)
        assert results["islamic"].metrics.sme_default_rate == pytest.approx(8.0)

    def test_trailing_averages(self, uk, sme_result):
        results = simulate_all_national(uk, sme_result, BASELINE_SCENARIO)
        assert results["interest"].metrics.household_debt_ratio == 174
        assert results["islamic"].metrics.household_debt_ratio == 132
        assert (results["islamic"].metrics.gov_borrow_cost <
                results["interest"].metrics.gov_borrow_cost)

    def test_unemployment_bounds(self, sme_result):
        for mode in CALIBRATION_MODES.values():
            for result in simulate_all_national(mode, sme_result, SEVERE_SCENARIO).values():
                assert all(3 <= p.unemployment <= 16 for p in result.series)

    def test_unknown_system(self, uk, sme_result):
        with pytest.raises(UnknownIdentifierError):
            simulate_national_system("gold", uk, sme_result, BASELINE_SCENARIO)
