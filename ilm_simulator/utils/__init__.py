"""Numeric helpers, the seedable normal generator and display formatting."""

import math
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def sample_std(values: Sequence[float]) -> float:
    """Sample standard deviation (n − 1); 0 for fewer than two values."""
    if len(values) <= 1:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=1))


class NormalGenerator:
    """
    Standard-normal draws via the Box–Muller transform.

    Uniforms come from a seeded ``numpy`` generator so that every instance
    owns its own stream; two generators built with the same seed produce
    identical draws.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def _uniform(self) -> float:
        u = 0.0
        while u == 0.0:
            u = float(self.rng.random())
        return u

    def standard_normal(self) -> float:
        u = self._uniform()
        v = self._uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def format_pct(value: float, decimals: int = 1) -> str:
    """Format a value already expressed in percent."""
    return f"{value:.{decimals}f}%"


def format_gbp(value: float, decimals: int = 0) -> str:
    return f"£{value:,.{decimals}f}"


def dict_list_to_df(data: List[Dict]) -> pd.DataFrame:
    """Convert a list of dicts to a DataFrame."""
    return pd.DataFrame(data)


def traffic_light(label: str, good: str = "Low") -> str:
    """Return a traffic-light emoji for a Low/Moderate/High style label."""
    if label == "N/A":
        return "⚪"
    if label == good:
        return "🟢"
    elif label in ("Moderate", "Medium"):
        return "🟡"
    return "🔴"
