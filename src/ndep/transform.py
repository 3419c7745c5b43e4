from __future__ import annotations
import numpy as np
import pandas as pd


class DomainError(ValueError):
    """Raised when a transform is asked for values outside its domain."""


def log_transform(values: pd.Series) -> pd.Series:
    """
    Natural log of deposition totals. Missing values stay missing.

    Raises DomainError for zero or negative totals; use log1p_transform
    when totals can legitimately be zero.
    """
    s = pd.Series(values, dtype=float)
    bad = s.notna() & (s <= 0)
    if bad.any():
        raise DomainError(
            f"log undefined for {int(bad.sum())} non-positive value(s), "
            f"e.g. {s[bad].iloc[0]!r}; use log1p_transform instead."
        )
    return np.log(s)


def log1p_transform(values: pd.Series) -> pd.Series:
    """log(1 + x); defined for x >= -1."""
    s = pd.Series(values, dtype=float)
    bad = s.notna() & (s < -1)
    if bad.any():
        raise DomainError(f"log1p undefined for {int(bad.sum())} value(s) below -1.")
    return np.log1p(s)


def add_transforms(df: pd.DataFrame, column: str = "total_N_dep",
                   include_log: bool = True) -> pd.DataFrame:
    """
    Add <column>_log1p and, unless include_log is False, <column>_log.
    Only meant for plotting.
    """
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not found.")
    out = df.copy()
    out[f"{column}_log1p"] = log1p_transform(out[column])
    if include_log:
        out[f"{column}_log"] = log_transform(out[column])
    return out
