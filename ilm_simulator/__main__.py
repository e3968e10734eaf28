"""
Main entry point — run every engine for one configuration and print a report.
Usage: python -m ilm_simulator [--mode uk] [--scenario severe] [--seed 42]
"""

import argparse
import logging

from ilm_simulator.config import (
    BANK_SCENARIOS,
    CALIBRATION_MODES,
    HOUSEHOLD_PRESETS,
    SCENARIOS,
    SECTOR_PROFILES,
    SME_PRESETS,
    ZAKAT_RATES,
)
from ilm_simulator.engine.inputs import BankInputs, HouseholdInputs, SmeInputs
from ilm_simulator.summary import run_comparison
from ilm_simulator.utils import NormalGenerator, format_gbp, format_pct


def _preset(presets, preset_id):
    for preset in presets:
        if preset["id"] == preset_id:
            return preset
    raise SystemExit(f"Unknown preset '{preset_id}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ilm_simulator",
        description="Compare interest-based and Islamic finance systems.",
    )
    parser.add_argument("--mode", default="uk", choices=sorted(CALIBRATION_MODES))
    parser.add_argument("--scenario", default="baseline", choices=sorted(SCENARIOS))
    parser.add_argument("--zakat", default="standard", choices=sorted(ZAKAT_RATES))
    parser.add_argument("--bank-scenario", default="normal", choices=sorted(BANK_SCENARIOS))
    parser.add_argument("--sector", default=None, choices=sorted(SECTOR_PROFILES))
    parser.add_argument("--household", default="avg_buyer",
                        choices=[p["id"] for p in HOUSEHOLD_PRESETS])
    parser.add_argument("--sme", default="service_sme",
                        choices=[p["id"] for p in SME_PRESETS])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s %(message)s")

    house = _preset(HOUSEHOLD_PRESETS, args.household)
    sme = _preset(SME_PRESETS, args.sme)

    result = run_comparison(
        HouseholdInputs(
            salary=house["salary"], deposit=house["deposit"],
            property_value=house["property_value"], term_years=house["term_years"],
            interest_rate=house["interest_rate"], rental_yield=house["rental_yield"],
        ),
        SmeInputs(
            revenue=sme["revenue"], margin_percent=sme["margin_percent"],
            finance_required=sme["finance_required"], term_years=sme["term_years"],
            sector_id=args.sector,
        ),
        BankInputs(
            total_assets=5_000, murabaha_pct=40, musharakah_pct=30, sukuk_pct=20,
            cash_pct=10, mudarabah_pct=60, current_pct=20, equity_pct=20,
            scenario_id=args.bank_scenario,
        ),
        calibration_mode=args.mode,
        scenario_id=args.scenario,
        zakat_policy=args.zakat,
        rng=NormalGenerator(args.seed),
    )

    print("=" * 72)
    print("  INTEREST vs ISLAMIC FINANCE — SYSTEM COMPARISON")
    print(f"  Mode: {CALIBRATION_MODES[args.mode].label} | "
          f"Scenario: {SCENARIOS[args.scenario].label} | Zakat: {args.zakat}")
    print("=" * 72)

    # ── Household ────────────────────────────────────────────────────────
    h = result.household
    print(f"\n{'─' * 40}")
    print(f"HOUSEHOLD — {house['label']}")
    print(f"{'─' * 40}")
    print(f"  Total paid (mortgage):     {format_gbp(h.total_paid_interest):>14}")
    print(f"  Total paid (co-ownership): {format_gbp(h.total_paid_islamic):>14}")
    print(f"  Risk (mortgage / co-own):  {h.risk_interest} / {h.risk_islamic}")
    print(f"  LTV band:                  {h.ltv_band}")

    # ── SME ──────────────────────────────────────────────────────────────
    s = result.sme
    print(f"\n{'─' * 40}")
    print(f"SME — {sme['label']} ({s.runs} runs)")
    print(f"{'─' * 40}")
    print(f"  Survival (debt / share):   {format_pct(s.survival_interest)} / "
          f"{format_pct(s.survival_islamic)}")
    print(f"  Severe shock (debt/share): {format_pct(s.severe_shock_interest)} / "
          f"{format_pct(s.severe_shock_islamic)}")
    print(f"  Owner income stability:    {s.owner_stability}")

    # ── National ─────────────────────────────────────────────────────────
    print(f"\n{'─' * 40}")
    print("NATIONAL (last 5 years)")
    print(f"{'─' * 40}")
    for system, nat in result.national.items():
        m = nat.metrics
        print(f"  {system:9s}: stability={m.economic_stability} "
              f"inflation={m.inflation_stability} debt={m.household_debt_ratio}% "
              f"unemp={m.unemployment_rate}% borrow={m.gov_borrow_cost}%")

    # ── Wealth ───────────────────────────────────────────────────────────
    print(f"\n{'─' * 40}")
    print("WEALTH DISTRIBUTION (year 30)")
    print(f"{'─' * 40}")
    for system, w in result.wealth.items():
        print(f"  {system:9s}: top20={format_pct(w.top20)} bottom40={format_pct(w.bottom40)} "
              f"inequality score={w.inequality_score:.1f}")

    # ── Bank ─────────────────────────────────────────────────────────────
    print(f"\n{'─' * 40}")
    print(f"BANK STRESS — {BANK_SCENARIOS[args.bank_scenario].label}")
    print(f"{'─' * 40}")
    for system, b in result.bank.items():
        print(f"  {system:9s}: capital={b.capital_ratio:.1%} liquidity={b.liquidity_ratio:.1%} "
              f"shortfall={format_pct(b.shortfall_prob, 2)}")

    # ── Summary ──────────────────────────────────────────────────────────
    print(f"\n{'─' * 40}")
    print("SUMMARY (Islamic vs interest)")
    print(f"{'─' * 40}")
    for row in result.summary.as_rows():
        print(f"  {row['Area']:8s} {row['Metric']:34s}: {row['Delta']:>10}")


if __name__ == "__main__":
    main()
