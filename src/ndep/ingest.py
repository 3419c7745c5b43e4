from __future__ import annotations
import logging
from pathlib import Path

import pandas as pd

from .config import (
    RAW_WEEKLY_CSV, RAW_MONTHLY_CSV, RAW_ANNUAL_CSV, KEYS, ANALYTE_COLS, FLAG_COLS,
    PPT_COL, PUBLISHED_TOTAL_COL, MISSING_CODE, MISSING_PPT_CODE, CRITERIA_THRESHOLDS,
)
from .cleaning import (
    normalize_columns, replace_sentinels, map_trace_precipitation,
    derive_calendar_fields, drop_duplicates_on_keys, ensure_nonnegative,
)
from .validators import validate_table

logger = logging.getLogger(__name__)

_MEASURED = [PPT_COL, *ANALYTE_COLS]


def _read_table(path) -> pd.DataFrame:
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(path, engine="openpyxl")
    else:
        df = pd.read_csv(path)
    logger.info(f"Read {len(df)} rows from {path}")
    return df


def read_weekly_raw(path: str | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_WEEKLY_CSV)


def read_monthly_raw(path: str | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_MONTHLY_CSV)


def read_annual_raw(path: str | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_ANNUAL_CSV)


def _clean_flags(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in FLAG_COLS.values():
        if col in df.columns:
            df[col] = df[col].astype("object").fillna("").astype(str).str.strip()
    return df


def clean_weekly(raw: pd.DataFrame) -> pd.DataFrame:
    df = normalize_columns(raw)
    df = replace_sentinels(df, _MEASURED, codes=(MISSING_CODE, MISSING_PPT_CODE))
    df = map_trace_precipitation(df, PPT_COL)
    df = ensure_nonnegative(df, _MEASURED)
    df = derive_calendar_fields(df, "yrMonth" if "yrMonth" in df.columns else "dateOn")
    df = drop_duplicates_on_keys(df, KEYS["weekly"])
    return _clean_flags(df)


def clean_monthly(raw: pd.DataFrame) -> pd.DataFrame:
    df = normalize_columns(raw)
    df = replace_sentinels(df, _MEASURED, codes=(MISSING_CODE, MISSING_PPT_CODE))
    df = ensure_nonnegative(df, _MEASURED)
    df = derive_calendar_fields(df, "yrMonth")
    df = drop_duplicates_on_keys(df, KEYS["monthly"])
    return _clean_flags(df)


def clean_annual(raw: pd.DataFrame, published_cols: list[str] | None = None) -> pd.DataFrame:
    """
    Clean an annual table. Besides the measured fields, the criteria columns and
    any published deposition columns (e.g. totalN) may carry the -9 sentinel.
    """
    df = normalize_columns(raw)
    if published_cols is None:
        published_cols = [PUBLISHED_TOTAL_COL]
    extra = list(CRITERIA_THRESHOLDS) + list(published_cols)
    df = replace_sentinels(df, _MEASURED + extra, codes=(MISSING_CODE, MISSING_PPT_CODE))
    df = ensure_nonnegative(df, _MEASURED + extra)
    df = derive_calendar_fields(df, "yr")
    df = drop_duplicates_on_keys(df, KEYS["annual"])
    return _clean_flags(df)


def load_weekly(path: str | None = None) -> pd.DataFrame:
    df = clean_weekly(read_weekly_raw(path))
    return validate_table(df, "weekly")


def load_monthly(path: str | None = None) -> pd.DataFrame:
    df = clean_monthly(read_monthly_raw(path))
    return validate_table(df, "monthly")


def load_annual(path: str | None = None, published_cols: list[str] | None = None) -> pd.DataFrame:
    df = clean_annual(read_annual_raw(path), published_cols=published_cols)
    return validate_table(df, "annual")
