from __future__ import annotations
from typing import Optional

import numpy as np
import pandas as pd

from .granularity import Granularity


def plot_deposition_series(
    df: pd.DataFrame,
    granularity,
    *,
    value: str = "total_N_dep_log1p",
    ax=None,
    title: Optional[str] = None,
):
    """
    Scatter deposition per period, censored records drawn in a second colour.

    Parameters
    ----------
    df : aggregated records with year, month (except annual), value and censored
    granularity : Granularity or its name
    value : column to plot (default the log1p-transformed total)
    ax : matplotlib Axes or None; if None, a new fig/ax are created
    title : Optional title string

    Returns
    -------
    (fig, ax)
    """
    import matplotlib.pyplot as plt

    g = Granularity.parse(granularity)
    if value not in df.columns:
        raise KeyError(f"Column '{value}' not found; run add_transforms first?")

    if "month" in df.columns and g is not Granularity.ANNUAL:
        x = df["year"] + (df["month"] - 0.5) / 12.0
    else:
        x = df["year"].astype(float)
    censored = df["censored"].to_numpy(dtype=bool) if "censored" in df.columns \
        else np.zeros(len(df), dtype=bool)

    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(10, 4))
        created_fig = True
    else:
        fig = ax.figure

    ax.scatter(x[~censored], df[value][~censored], s=12, color="#2563eb", label="measured")
    if censored.any():
        ax.scatter(x[censored], df[value][censored], s=16, marker="v", color="#ef4444",
                   label="below detection (upper bound)")
    ax.set_title(title or f"{g.label.capitalize()} nitrogen deposition")
    ax.set_xlabel("Year")
    ax.set_ylabel(value)
    ax.legend(loc="upper right")

    if created_fig:
        fig.tight_layout()
    return fig, ax


def plot_annual_comparison(comparison: pd.DataFrame, *, ax=None, title: Optional[str] = None):
    """
    Grouped bars per year: weekly roll-up, monthly roll-up, published annual (kg/ha).
    Bars are annotated with the number of valid weeks.
    """
    import matplotlib.pyplot as plt

    cols = [c for c in ("weekly_sum", "monthly_sum", "annual_published") if c in comparison.columns]
    if not cols:
        raise KeyError("comparison has none of weekly_sum, monthly_sum, annual_published")

    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(12, 5))
        created_fig = True
    else:
        fig = ax.figure

    years = comparison.index.to_numpy()
    width = 0.8 / len(cols)
    colors = {"weekly_sum": "#93c5fd", "monthly_sum": "#2563eb", "annual_published": "#111827"}
    for i, col in enumerate(cols):
        ax.bar(years + (i - (len(cols) - 1) / 2) * width, comparison[col].fillna(0.0),
               width=width, color=colors[col], label=col)

    if "n_weeks" in comparison.columns and "weekly_sum" in cols:
        offset = (cols.index("weekly_sum") - (len(cols) - 1) / 2) * width
        for yr, total, n in zip(years, comparison["weekly_sum"].fillna(0.0), comparison["n_weeks"]):
            ax.text(yr + offset, total, str(int(n)), ha="center", va="bottom", fontsize=7, color="#374151")

    ax.set_title(title or "Nitrogen deposition: roll-ups vs. published annual")
    ax.set_xlabel("Year")
    ax.set_ylabel("kg N / ha")
    ax.legend(loc="upper left")

    if created_fig:
        fig.tight_layout()
    return fig, ax
