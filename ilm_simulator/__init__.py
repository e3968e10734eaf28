"""
Ilm Finance — Interest vs Islamic Finance Systems Simulator
==========================================================
Compares a conventional interest-bearing system with an asset-backed,
profit-sharing system for households, small businesses, the national
economy, the wealth distribution and a bank balance sheet.

Modules
-------
- config         : Calibration profiles, scenario tables, registry lookups
- engine         : Household amortisation, national macro path, wealth/zakat
- stress_testing : SME Monte Carlo survival simulation
- risk_modules   : Bank balance sheet stress, zakat-funded housing support
- summary        : Cross-system deltas, elasticities and orchestration
- dashboard      : Streamlit-based presentation host
"""

__version__ = "1.0.0"
