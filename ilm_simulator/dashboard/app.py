"""
Streamlit Dashboard — Interest vs Islamic Finance
=================================================
Presentation host for the simulation engines:
  1. Household — mortgage vs diminishing co-ownership
  2. SME — Monte Carlo survival under debt vs profit share
  3. National — 30-year macro paths
  4. Wealth — quintile shares, zakat and inequality
  5. Bank — balance sheet stress
  6. Summary — cross-system deltas and social elasticities

Launch: streamlit run ilm_simulator/dashboard/app.py
"""

import sys
import os
import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

# ── Ensure project root is importable ────────────────────────────────────────
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

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
from ilm_simulator.utils import (
    NormalGenerator,
    dict_list_to_df,
    format_gbp,
    format_pct,
    traffic_light,
)


# ══════════════════════════════════════════════════════════════════════════════
#  Page Configuration
# ══════════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Ilm Finance — System Comparison",
    page_icon="⚖️",
    layout="wide",
    initial_sidebar_state="expanded",
)

INTEREST_COLOUR = "#c62828"
ISLAMIC_COLOUR = "#2e7d32"


# ══════════════════════════════════════════════════════════════════════════════
#  Sidebar Controls
# ══════════════════════════════════════════════════════════════════════════════

st.sidebar.title("⚖️ Ilm Finance")
st.sidebar.markdown("**Interest vs Islamic System Simulator**")
st.sidebar.markdown("---")

mode = st.sidebar.selectbox(
    "Calibration", list(CALIBRATION_MODES),
    index=list(CALIBRATION_MODES).index("uk"),
    format_func=lambda k: CALIBRATION_MODES[k].label,
)
scenario_id = st.sidebar.selectbox(
    "Macro Scenario", list(SCENARIOS), format_func=lambda k: SCENARIOS[k].label,
)
zakat_policy = st.sidebar.selectbox("Zakat Policy", list(ZAKAT_RATES), index=1)
seed = st.sidebar.number_input("Monte Carlo Seed", value=42, step=1)

st.sidebar.markdown("---")
st.sidebar.markdown("### Household")
house_preset = st.sidebar.selectbox(
    "Preset", HOUSEHOLD_PRESETS, format_func=lambda p: p["label"],
)
salary = st.sidebar.number_input("Salary (£)", value=float(house_preset["salary"]), step=1000.0)
deposit = st.sidebar.number_input("Deposit (£)", value=float(house_preset["deposit"]), step=1000.0)
property_value = st.sidebar.number_input("Property Value (£)",
                                         value=float(house_preset["property_value"]), step=5000.0)
term_years = st.sidebar.number_input("Term (years)", value=float(house_preset["term_years"]), step=1.0)
interest_rate = st.sidebar.number_input("Mortgage Rate (%)", value=float(house_preset["interest_rate"]))
rental_yield = st.sidebar.number_input("Rental Yield (%)", value=float(house_preset["rental_yield"]))

st.sidebar.markdown("### Small Business")
sme_preset = st.sidebar.selectbox("SME Preset", SME_PRESETS, format_func=lambda p: p["label"])
sme_revenue = st.sidebar.number_input("Revenue (£)", value=float(sme_preset["revenue"]), step=10000.0)
sme_margin = st.sidebar.number_input("Margin (%)", value=float(sme_preset["margin_percent"]), step=1.0)
sme_finance = st.sidebar.number_input("Finance Required (£)",
                                      value=float(sme_preset["finance_required"]), step=5000.0)
sme_term = st.sidebar.number_input("SME Term (years)", value=float(sme_preset["term_years"]), step=1.0)
sector_id = st.sidebar.selectbox(
    "Sector", [None] + list(SECTOR_PROFILES),
    format_func=lambda k: "Calibration default" if k is None else SECTOR_PROFILES[k].label,
)

st.sidebar.markdown("### Bank Balance Sheet")
bank_scenario = st.sidebar.selectbox(
    "Bank Scenario", list(BANK_SCENARIOS), format_func=lambda k: BANK_SCENARIOS[k].label,
)
total_assets = st.sidebar.number_input("Total Assets (£m)", value=5000.0, step=100.0)
st.sidebar.markdown("Asset mix (%)")
murabaha_pct = st.sidebar.number_input("Murabaha / Loans", value=40.0, step=5.0)
musharakah_pct = st.sidebar.number_input("Musharakah / Equity Stakes", value=30.0, step=5.0)
sukuk_pct = st.sidebar.number_input("Sukuk / Bonds", value=20.0, step=5.0)
cash_pct = st.sidebar.number_input("Cash", value=10.0, step=5.0)
st.sidebar.markdown("Funding mix (%)")
mudarabah_pct = st.sidebar.number_input("Mudarabah / Term Deposits", value=60.0, step=5.0)
current_pct = st.sidebar.number_input("Current Accounts", value=20.0, step=5.0)
equity_pct = st.sidebar.number_input("Bank Equity", value=20.0, step=5.0)


# ══════════════════════════════════════════════════════════════════════════════
#  Run engines
# ══════════════════════════════════════════════════════════════════════════════

result = run_comparison(
    HouseholdInputs(salary=salary, deposit=deposit, property_value=property_value,
                    term_years=term_years, interest_rate=interest_rate,
                    rental_yield=rental_yield),
    SmeInputs(revenue=sme_revenue, margin_percent=sme_margin, finance_required=sme_finance,
              term_years=sme_term, sector_id=sector_id),
    BankInputs(total_assets=total_assets, murabaha_pct=murabaha_pct,
               musharakah_pct=musharakah_pct, sukuk_pct=sukuk_pct, cash_pct=cash_pct,
               mudarabah_pct=mudarabah_pct, current_pct=current_pct,
               equity_pct=equity_pct, scenario_id=bank_scenario),
    calibration_mode=mode,
    scenario_id=scenario_id,
    zakat_policy=zakat_policy,
    rng=NormalGenerator(int(seed)),
)

st.title("⚖️ Interest vs Islamic Finance — System Comparison")
st.markdown(f"**Mode: {CALIBRATION_MODES[mode].label}** — "
            f"Scenario: {SCENARIOS[scenario_id].label} — Zakat: {zakat_policy}")

tabs = st.tabs(["🏠 Household", "🏪 SME", "🌍 National", "💰 Wealth", "🏦 Bank", "📋 Summary"])


def _pair_chart(df: pd.DataFrame, x: str, interest_col: str, islamic_col: str,
                title: str, y_title: str) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=df[x], y=df[interest_col], mode="lines",
                             name="Interest", line=dict(width=3, color=INTEREST_COLOUR)))
    fig.add_trace(go.Scatter(x=df[x], y=df[islamic_col], mode="lines",
                             name="Islamic", line=dict(width=3, color=ISLAMIC_COLOUR)))
    fig.update_layout(title=title, xaxis_title=x.title(), yaxis_title=y_title, height=380)
    return fig


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 1 — Household
# ══════════════════════════════════════════════════════════════════════════════

with tabs[0]:
    h = result.household
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Paid — Mortgage", format_gbp(h.total_paid_interest))
    col2.metric("Total Paid — Co-ownership", format_gbp(h.total_paid_islamic))
    col3.metric("Risk — Mortgage", f"{traffic_light(h.risk_interest)} {h.risk_interest}")
    col4.metric("Risk — Co-ownership", f"{traffic_light(h.risk_islamic)} {h.risk_islamic}")

    df_house = h.to_frame()
    if df_house.empty:
        st.info("Enter a property value above the deposit to see the payment paths.")
    else:
        col_a, col_b = st.columns(2)
        col_a.plotly_chart(_pair_chart(df_house, "year", "equity_interest", "equity_islamic",
                                       "Home Equity", "£"), use_container_width=True)
        col_b.plotly_chart(_pair_chart(df_house, "year", "cum_interest", "cum_islamic",
                                       "Cumulative Cost", "£"), use_container_width=True)


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 2 — SME
# ══════════════════════════════════════════════════════════════════════════════

with tabs[1]:
    s = result.sme
    col1, col2, col3 = st.columns(3)
    col1.metric("Survival — Debt", format_pct(s.survival_interest))
    col2.metric("Survival — Profit Share", format_pct(s.survival_islamic),
                delta=f"{s.survival_islamic - s.survival_interest:+.1f}pp")
    col3.metric("Owner Income Stability",
                f"{traffic_light(s.owner_stability, good='High')} {s.owner_stability}")

    df_sme = s.to_frame()
    if not df_sme.empty:
        st.plotly_chart(_pair_chart(df_sme, "year", "owner_interest", "owner_islamic",
                                    f"Mean Owner Income ({s.runs} runs)", "£"),
                        use_container_width=True)


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 3 — National
# ══════════════════════════════════════════════════════════════════════════════

with tabs[2]:
    ni = result.national["interest"]
    na = result.national["islamic"]
    metrics_df = pd.DataFrame([
        {"System": "Interest", **vars(ni.metrics)},
        {"System": "Islamic", **vars(na.metrics)},
    ]).drop(columns=["computed_economic_stability", "computed_inflation_stability"])
    st.dataframe(metrics_df, use_container_width=True)

    df_nat = ni.to_frame().merge(na.to_frame(), on="year", suffixes=("_interest", "_islamic"))
    col_a, col_b = st.columns(2)
    col_a.plotly_chart(_pair_chart(df_nat, "year", "gdp_interest", "gdp_islamic",
                                   "GDP Index", "Index (year 0 = 100)"), use_container_width=True)
    col_b.plotly_chart(_pair_chart(df_nat, "year", "inflation_interest", "inflation_islamic",
                                   "Inflation", "%"), use_container_width=True)
    col_c, col_d = st.columns(2)
    col_c.plotly_chart(_pair_chart(df_nat, "year", "unemployment_interest", "unemployment_islamic",
                                   "Unemployment", "%"), use_container_width=True)
    col_d.plotly_chart(_pair_chart(df_nat, "year", "borrowing_cost_interest",
                                   "borrowing_cost_islamic", "Borrowing Cost", "%"),
                       use_container_width=True)


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 4 — Wealth
# ══════════════════════════════════════════════════════════════════════════════

with tabs[3]:
    wi = result.wealth["interest"]
    wa = result.wealth["islamic"]
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Top 20% Share", format_pct(wa.top20), delta=f"{wa.top20 - wi.top20:+.1f}pp",
                delta_color="inverse")
    col2.metric("Bottom 40% Share", format_pct(wa.bottom40),
                delta=f"{wa.bottom40 - wi.bottom40:+.1f}pp")
    col3.metric("Inequality Score", f"{wa.inequality_score:.1f}",
                delta=f"{wa.inequality_score - wi.inequality_score:+.1f}")
    col4.metric("Annual Zakat Flow", format_pct(wa.zakat_share_year, 2))

    quintiles = ["Q1 (bottom)", "Q2", "Q3", "Q4", "Q5 (top)"]
    df_q = pd.DataFrame({
        "Quintile": quintiles * 2,
        "Share (%)": [v * 100 for v in wi.final_shares] + [v * 100 for v in wa.final_shares],
        "System": ["Interest"] * 5 + ["Islamic"] * 5,
    })
    fig_q = px.bar(df_q, x="Quintile", y="Share (%)", color="System", barmode="group",
                   color_discrete_map={"Interest": INTEREST_COLOUR, "Islamic": ISLAMIC_COLOUR},
                   title="Wealth Shares After 30 Years")
    fig_q.update_layout(height=380)
    st.plotly_chart(fig_q, use_container_width=True)

    hs = result.housing_support
    st.subheader("Zakat-Funded Housing Support")
    col_a, col_b, col_c = st.columns(3)
    col_a.metric("Housing Fund", format_gbp(hs.housing_fund))
    col_b.metric("Households Cleared", f"{hs.households_helped:,.0f}")
    col_c.metric("Default Rate Reduction", f"{hs.default_rate_reduction * 100:.2f}pp")


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 5 — Bank
# ══════════════════════════════════════════════════════════════════════════════

with tabs[4]:
    rows = []
    for system, b in result.bank.items():
        rows.append({
            "System": system.title(),
            "RWA (£m)": b.rwa,
            "Capital Ratio (%)": b.capital_ratio * 100,
            "Liquidity Ratio (%)": b.liquidity_ratio * 100,
            "Expected Loss (£m)": b.expected_loss,
            "Loss Coverage (x)": b.loss_coverage,
            "Shortfall Prob (%)": b.shortfall_prob,
        })
    df_bank = dict_list_to_df(rows)
    st.dataframe(df_bank.style.format({
        "RWA (£m)": "{:,.1f}",
        "Capital Ratio (%)": "{:.2f}%",
        "Liquidity Ratio (%)": "{:.2f}%",
        "Expected Loss (£m)": "{:,.1f}",
        "Loss Coverage (x)": "{:.1f}",
        "Shortfall Prob (%)": "{:.2f}%",
    }), use_container_width=True)

    fig_loss = px.bar(
        pd.DataFrame([
            {"System": system.title(), "Asset Class": name, "Loss (£m)": loss}
            for system, b in result.bank.items() for name, loss in b.loss_by_class.items()
        ]),
        x="Asset Class", y="Loss (£m)", color="System", barmode="group",
        color_discrete_map={"Interest": INTEREST_COLOUR, "Islamic": ISLAMIC_COLOUR},
        title="Expected Loss by Asset Class",
    )
    fig_loss.update_layout(height=380)
    st.plotly_chart(fig_loss, use_container_width=True)


# ══════════════════════════════════════════════════════════════════════════════
#  TAB 6 — Summary
# ══════════════════════════════════════════════════════════════════════════════

with tabs[5]:
    st.header("Summary for this configuration")
    st.dataframe(dict_list_to_df(result.summary.as_rows()), use_container_width=True)
    st.caption("Social estimates use illustrative elasticities, not measured ones.")
