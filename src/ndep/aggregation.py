"""
Per-record deposition (kg/ha) and censoring.

The deposition of a record is its total nitrogen concentration (kg/m3) times
its precipitation depth times the granularity's period factor (10 for mm,
100 for cm). A record is censored when at least one of its analytes was
reported below the detection limit, meaning the true total lies somewhere
below the computed value.
"""
from __future__ import annotations
import logging

import numpy as np
import pandas as pd

from .config import BELOW_DETECTION, FLAG_COLS, PPT_COL
from .conversion import MissingPolicy, add_nitrogen_columns
from .granularity import Granularity

logger = logging.getLogger(__name__)


def deposition(total_n_conc, ppt, granularity):
    """
    Nitrogen deposition in kg/ha.

    Args:
        total_n_conc: Total nitrogen concentration, kg/m3
        ppt: Precipitation depth in the granularity's unit (mm weekly, cm otherwise)
        granularity: Granularity or its name

    Returns:
        Same shape as the inputs; missing inputs give missing output
    """
    g = Granularity.parse(granularity)
    return total_n_conc * ppt * g.period_factor


def _is_below_detection(flags) -> np.ndarray:
    s = pd.Series(flags, dtype="object")
    return s.fillna("").astype(str).str.strip().eq(BELOW_DETECTION).to_numpy()


def censored_flag(flag_nh4, flag_no3):
    """
    OR of the per-analyte "below detection" flags.

    A missing flag counts as uncensored. Scalars return a bool, sequences a
    boolean ndarray, and a Series on either side gives a Series with its index
    (two Series are aligned on their labels first).
    """
    if isinstance(flag_nh4, pd.Series) and isinstance(flag_no3, pd.Series):
        flag_nh4, flag_no3 = flag_nh4.align(flag_no3)
    scalar = np.ndim(flag_nh4) == 0 and np.ndim(flag_no3) == 0
    out = _is_below_detection([flag_nh4] if np.ndim(flag_nh4) == 0 else flag_nh4) | \
        _is_below_detection([flag_no3] if np.ndim(flag_no3) == 0 else flag_no3)
    if scalar:
        return bool(out[0])
    for flags in (flag_nh4, flag_no3):
        if isinstance(flags, pd.Series):
            return pd.Series(out, index=flags.index, name="censored")
    return out


def aggregate_records(
    df: pd.DataFrame,
    granularity,
    policy: MissingPolicy = MissingPolicy.EXCLUDE,
) -> pd.DataFrame:
    """
    Add nitrogen concentrations, deposition and censoring to a copy of df.

    Adds columns:
        NH4_N, NO3_N, total_N (kg/m3), total_N_dep (kg/ha), censored (bool)

    Raises:
        KeyError: If the precipitation or analyte columns are absent
    """
    g = Granularity.parse(granularity)
    if PPT_COL not in df.columns:
        raise KeyError(f"Precipitation column '{PPT_COL}' not found in {g} table.")

    out = add_nitrogen_columns(df, policy=policy)
    out["total_N_dep"] = deposition(out["total_N"], out[PPT_COL].astype(float), g)

    flags = [out[FLAG_COLS[a]] if FLAG_COLS[a] in out.columns else pd.Series("", index=out.index)
             for a in ("NH4", "NO3")]
    out["censored"] = censored_flag(flags[0], flags[1]).astype(bool)

    logger.info(
        f"Aggregated {len(out)} {g} records: "
        f"{int(out['total_N_dep'].notna().sum())} with deposition, "
        f"{int(out['censored'].sum())} censored"
    )
    return out
