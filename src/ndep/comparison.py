"""
Roll-ups of fine-grained deposition records and side-by-side comparison with
the published coarser aggregates.

Nothing here passes or fails: roll-up sums are expected to fall short of the
published annual totals when a year is only partly covered, so the output is a
diagnostic table to look at (and plot), not a correctness check.
"""
from __future__ import annotations
import logging
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from .config import CRITERIA_THRESHOLDS, PUBLISHED_TOTAL_COL
from .granularity import Granularity

logger = logging.getLogger(__name__)

DEP_COL = "total_N_dep"


def rollup(df: pd.DataFrame, by: Union[str, Iterable[str], Granularity] = Granularity.ANNUAL,
           value: str = DEP_COL) -> pd.DataFrame:
    """
    Group df by calendar key(s) and sum the deposition totals.

    `by` is either column name(s) or the coarser Granularity being rolled up
    to, whose calendar_keys are used (ANNUAL -> year, MONTHLY -> year, month).
    Missing values are excluded from the sum. Groups where nothing is valid
    get a missing sum and n_valid 0, so a coverage gap never reads as zero
    deposition.

    Returns:
        DataFrame indexed by `by` with columns: sum, n_valid, n_records
    """
    if isinstance(by, Granularity):
        by = list(by.calendar_keys)
    elif isinstance(by, str):
        by = [by]
    else:
        by = list(by)
    missing = [c for c in by + [value] if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}. Available: {list(df.columns)[:20]}...")

    grouped = df.groupby(by, sort=True)[value]
    out = pd.DataFrame({
        "sum": grouped.sum(min_count=1),
        "n_valid": grouped.count(),
        "n_records": grouped.size(),
    })
    empty = out.index[out["n_valid"] == 0]
    if len(empty) > 0:
        logger.warning(f"{len(empty)} group(s) without any valid {value}: {list(empty)[:10]}")
    return out


def naive_completeness_scaling(rolled: pd.DataFrame, granularity) -> pd.Series:
    """
    Scale roll-up sums by expected_periods / n_valid (e.g. 52 / weeks observed).

    Over-corrects relative to the provider's own method for partly covered
    years; only for comparison, never applied to the roll-up itself.
    """
    g = Granularity.parse(granularity)
    n_valid = rolled["n_valid"].replace(0, np.nan)
    return (rolled["sum"] * g.expected_periods_per_year / n_valid).rename("scaled_sum")


def meets_criteria(annual: pd.DataFrame, thresholds: Optional[dict] = None) -> pd.Series:
    """
    True for rows where every present CriteriaN column reaches its threshold.

    Missing criteria values count as not met. When none of the criteria columns
    are present the result is all True.
    """
    thresholds = CRITERIA_THRESHOLDS if thresholds is None else thresholds
    ok = pd.Series(True, index=annual.index, name="meets_criteria")
    for col, threshold in thresholds.items():
        if col in annual.columns:
            ok &= annual[col].ge(threshold).fillna(False).astype(bool)
    return ok


def annual_comparison(
    weekly: pd.DataFrame,
    monthly: pd.DataFrame,
    annual: pd.DataFrame,
    value: str = DEP_COL,
    published: str = PUBLISHED_TOTAL_COL,
) -> pd.DataFrame:
    """
    Per-year table of weekly and monthly roll-ups next to the published annual value.

    Args:
        weekly: Aggregated weekly records (year, month, value)
        monthly: Aggregated monthly records (year, month, value)
        annual: Annual table with year and the published total; if `published`
            is absent, the annual records' own `value` column is used
        value: Deposition column of the fine-grained tables
        published: Published annual deposition column

    Returns:
        DataFrame indexed by year with columns weekly_sum, n_weeks, monthly_sum,
        n_months, annual_published, meets_criteria, weekly_diff, monthly_diff,
        weekly_rel_diff, monthly_rel_diff
    """
    w = rollup(weekly, Granularity.ANNUAL, value).rename(columns={"sum": "weekly_sum", "n_valid": "n_weeks"})
    m = rollup(monthly, Granularity.ANNUAL, value).rename(columns={"sum": "monthly_sum", "n_valid": "n_months"})

    year_keys = list(Granularity.ANNUAL.calendar_keys)
    pub_col = published if published in annual.columns else value
    if pub_col not in annual.columns:
        raise KeyError(f"Neither '{published}' nor '{value}' found in annual table.")
    a = (
        annual.assign(meets_criteria=meets_criteria(annual))
        .drop_duplicates(subset=year_keys)
        .set_index(year_keys)[[pub_col, "meets_criteria"]]
        .rename(columns={pub_col: "annual_published"})
    )

    out = pd.concat(
        [w[["weekly_sum", "n_weeks"]], m[["monthly_sum", "n_months"]], a],
        axis=1,
    ).sort_index()
    out.index.name = year_keys[0]
    for col in ("n_weeks", "n_months"):
        out[col] = out[col].fillna(0).astype(int)

    out["weekly_diff"] = out["weekly_sum"] - out["annual_published"]
    out["monthly_diff"] = out["monthly_sum"] - out["annual_published"]
    denom = out["annual_published"].replace(0, np.nan)
    out["weekly_rel_diff"] = out["weekly_diff"] / denom
    out["monthly_rel_diff"] = out["monthly_diff"] / denom

    logger.info(f"Compared {len(out)} year(s): {out.index.min()}-{out.index.max()}")
    return out


def monthly_comparison(weekly: pd.DataFrame, monthly: pd.DataFrame,
                       value: str = DEP_COL) -> pd.DataFrame:
    """Weekly roll-ups per (year, month) next to the monthly record values."""
    w = rollup(weekly, Granularity.MONTHLY, value).rename(
        columns={"sum": "weekly_sum", "n_valid": "n_weeks"})
    m = monthly.groupby(list(Granularity.MONTHLY.calendar_keys))[value].sum(min_count=1).rename("monthly_value")
    out = pd.concat([w[["weekly_sum", "n_weeks"]], m], axis=1).sort_index()
    out["n_weeks"] = out["n_weeks"].fillna(0).astype(int)
    out["diff"] = out["weekly_sum"] - out["monthly_value"]
    return out


def flag_anomalous_years(comparison: pd.DataFrame, column: str = "weekly_rel_diff",
                         tolerance: float = 0.25) -> pd.Index:
    """Years whose |relative difference| exceeds tolerance (missing values are skipped)."""
    if column not in comparison.columns:
        raise KeyError(f"Column '{column}' not found.")
    rel = comparison[column].abs()
    years = comparison.index[rel.gt(tolerance).fillna(False).to_numpy(dtype=bool)]
    if len(years) > 0:
        logger.warning(f"Years deviating more than {tolerance:.0%} ({column}): {list(years)}")
    return years
