from __future__ import annotations
import pandas as pd
from pandera import Column, DataFrameSchema, Check

from .config import BELOW_DETECTION, CRITERIA_THRESHOLDS, FLAG_COLS, PUBLISHED_TOTAL_COL
from .granularity import Granularity


def _nonneg(required: bool = True) -> Column:
    return Column(float, Check.ge(0), nullable=True, coerce=True, required=required)


def _flag() -> Column:
    return Column(str, Check.isin(["", BELOW_DETECTION]), nullable=False, required=False)


def _measured() -> dict:
    cols = {"ppt": _nonneg(), "NH4": _nonneg(), "NO3": _nonneg()}
    cols.update({flag: _flag() for flag in FLAG_COLS.values()})
    return cols


def _calendar(with_month: bool) -> dict:
    cols = {"year": Column(int, Check.in_range(1900, 2100), nullable=False, coerce=True)}
    if with_month:
        cols["month"] = Column(int, Check.in_range(1, 12), nullable=False, coerce=True)
    return cols


schema_weekly = DataFrameSchema({**_calendar(True), **_measured()})

schema_monthly = DataFrameSchema({**_calendar(True), **_measured()})

schema_annual = DataFrameSchema({
    **_calendar(False),
    **_measured(),
    **{c: Column(float, Check.in_range(0, 100), nullable=True, coerce=True, required=False)
       for c in CRITERIA_THRESHOLDS},
    PUBLISHED_TOTAL_COL: _nonneg(required=False),
})

SCHEMAS = {
    Granularity.WEEKLY: schema_weekly,
    Granularity.MONTHLY: schema_monthly,
    Granularity.ANNUAL: schema_annual,
}


def validate_table(df: pd.DataFrame, granularity) -> pd.DataFrame:
    """Validate a cleaned table; every violation is reported at once (SchemaErrors)."""
    return SCHEMAS[Granularity.parse(granularity)].validate(df, lazy=True)
