from __future__ import annotations
import logging
import re
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .config import MISSING_CODE, MISSING_PPT_CODE, TRACE_PPT_CODE, TRACE_PPT_MM, PPT_COL

logger = logging.getLogger(__name__)


def _header(name) -> str:
    name = re.sub(r"\s+", "_", str(name).strip().strip('"'))
    return re.sub(r"[^0-9A-Za-z_]", "", name)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Tidy the headers of a station export so the analyte, flag and key columns
    can be looked up by name ("NH4 " -> "NH4", "flag NO3" -> "flag_NO3").
    Quotes and punctuation go, case stays (NH4 and nh4 are different columns).

    Raises:
        ValueError: If two headers end up with the same name
    """
    renamed = {c: _header(c) for c in df.columns}
    clashes = pd.Series(list(renamed.values())).value_counts()
    clashes = clashes[clashes > 1]
    if len(clashes) > 0:
        raise ValueError(f"Headers collide after normalisation: {list(clashes.index)}")
    return df.rename(columns=renamed)


def _matches_code(s: pd.Series, code: float) -> pd.Series:
    num = pd.to_numeric(s, errors="coerce")
    return pd.Series(np.isclose(num.to_numpy(dtype=float), code, rtol=0.0, atol=1e-9),
                     index=s.index)


def replace_sentinels(
    df: pd.DataFrame,
    columns: Iterable[str],
    codes: Sequence[float] = (MISSING_CODE, MISSING_PPT_CODE),
) -> pd.DataFrame:
    """
    Replace provider sentinel codes with NaN in the given columns.

    Columns that are absent are skipped. String cells such as "-9" are matched
    too; every touched column ends up float.

    Args:
        df: Input DataFrame
        columns: Columns to scan
        codes: Sentinel values meaning "no value"

    Returns:
        DataFrame with sentinels replaced by NaN
    """
    df = df.copy()
    replaced = 0
    for col in columns:
        if col not in df.columns:
            continue
        mask = pd.Series(False, index=df.index)
        for code in codes:
            mask |= _matches_code(df[col], code)
        replaced += int(mask.sum())
        df[col] = pd.to_numeric(df[col].mask(mask), errors="raise").astype(float)
    logger.info(f"Replaced {replaced} sentinel value(s) with missing")
    return df


def map_trace_precipitation(df: pd.DataFrame, column: str = PPT_COL) -> pd.DataFrame:
    """
    Map the trace-precipitation code (-7) to TRACE_PPT_MM (0.051 mm).

    Weekly tables only: trace precipitation is below the gauge's minimum
    detectable depth but not zero.
    """
    df = df.copy()
    if column not in df.columns:
        raise KeyError(f"Precipitation column '{column}' not found.")
    mask = _matches_code(df[column], TRACE_PPT_CODE)
    df[column] = pd.to_numeric(df[column], errors="raise").astype(float).mask(mask, TRACE_PPT_MM)
    logger.info(f"Mapped {int(mask.sum())} trace precipitation record(s) to {TRACE_PPT_MM} mm")
    return df


def derive_calendar_fields(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """
    Derive year (and month) from a combined date integer.

    - YYYYMM (e.g. 200807) -> year=2008, month=7
    - YYYY -> year only
    - a date/datetime column (e.g. weekly dateOn) -> year, month of that date

    Raises:
        KeyError: If column is absent
        ValueError: If values are missing, not parseable, or months fall outside 1..12
    """
    if column not in df.columns:
        raise KeyError(f"Date column '{column}' not found.")
    df = df.copy()
    raw = df[column]
    nulls = raw.isna()
    if nulls.any():
        raise ValueError(
            f"Missing '{column}' in {int(nulls.sum())} row(s) "
            f"(index {raw.index[nulls].tolist()[:10]}); cannot derive calendar fields."
        )
    numeric = pd.to_numeric(raw, errors="coerce") if not pd.api.types.is_datetime64_any_dtype(raw) else None

    if numeric is None or not numeric.notna().all():
        dates = pd.to_datetime(raw, errors="raise")
        df["year"] = dates.dt.year.astype(int)
        df["month"] = dates.dt.month.astype(int)
        return df

    key = numeric.astype(int)
    if (key > 9999).all():
        df["year"] = key // 100
        df["month"] = key % 100
        if not df["month"].between(1, 12).all():
            bad = key[~df["month"].between(1, 12)].unique()[:10].tolist()
            raise ValueError(f"Invalid month in '{column}': {bad}")
    else:
        df["year"] = key
    return df


def drop_duplicates_on_keys(df: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    """Keep the first record per station period (e.g. siteID + dateOn); keys absent from df are ignored."""
    present = [k for k in keys if k in df.columns]
    if not present:
        return df
    out = df[~df.duplicated(subset=present, keep="first")]
    if len(out) < len(df):
        logger.warning(f"Dropped {len(df) - len(out)} duplicate row(s) on {present}")
    return out


def ensure_nonnegative(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """
    Validate that numeric columns contain only non-negative values (NaN allowed).

    A negative value left after sentinel replacement is an unknown code.

    Raises:
        ValueError: If negative values are found in specified columns
    """
    cols = [c for c in columns if c in df.columns]
    neg = (df[cols] < 0).any()
    if neg.any():
        raise ValueError(f"Negative values found in columns: {list(neg[neg].index)}")
    return df
