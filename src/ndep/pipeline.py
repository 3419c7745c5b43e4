from __future__ import annotations
import logging
from dataclasses import dataclass

import pandas as pd

from .aggregation import aggregate_records
from .comparison import annual_comparison, monthly_comparison
from .conversion import MissingPolicy
from .granularity import Granularity
from .ingest import load_weekly, load_monthly, load_annual
from .transform import add_transforms

logger = logging.getLogger(__name__)


@dataclass
class DepositionReport:
    """Derived tables of one analysis session (in memory only)."""
    weekly: pd.DataFrame
    monthly: pd.DataFrame
    annual: pd.DataFrame
    annual_comparison: pd.DataFrame
    monthly_comparison: pd.DataFrame


def build_report(
    weekly_path: str | None = None,
    monthly_path: str | None = None,
    annual_path: str | None = None,
    policy: MissingPolicy = MissingPolicy.EXCLUDE,
    include_log: bool = False,
) -> DepositionReport:
    """
    Load the three station tables, compute deposition per record and compare
    the roll-ups with the published annual values.

    include_log adds the plain log transform next to log1p; it raises
    DomainError if any record has zero deposition.
    """
    # ---- Weekly ----
    weekly = aggregate_records(load_weekly(weekly_path), Granularity.WEEKLY, policy=policy)
    weekly = add_transforms(weekly, include_log=include_log)

    # ---- Monthly ----
    monthly = aggregate_records(load_monthly(monthly_path), Granularity.MONTHLY, policy=policy)
    monthly = add_transforms(monthly, include_log=include_log)

    # ---- Annual ----
    annual = aggregate_records(load_annual(annual_path), Granularity.ANNUAL, policy=policy)

    report = DepositionReport(
        weekly=weekly,
        monthly=monthly,
        annual=annual,
        annual_comparison=annual_comparison(weekly, monthly, annual),
        monthly_comparison=monthly_comparison(weekly, monthly),
    )
    logger.info(
        f"Report built: {len(weekly)} weeks, {len(monthly)} months, {len(annual)} years"
    )
    return report
