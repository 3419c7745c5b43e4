"""
ndep - nitrogen deposition reconciliation for a precipitation-chemistry station.

Converts NH4/NO3 concentrations to nitrogen deposition (kg/ha) at weekly,
monthly and annual granularity and compares the roll-ups with published
annual totals.
"""

from .granularity import Granularity
from .conversion import (
    Analyte, MissingPolicy, nitrogen_concentration, total_nitrogen_concentration,
    add_nitrogen_columns,
)
from .aggregation import deposition, censored_flag, aggregate_records
from .transform import DomainError, log_transform, log1p_transform, add_transforms
from .comparison import (
    rollup, annual_comparison, monthly_comparison, meets_criteria,
    naive_completeness_scaling, flag_anomalous_years,
)
from .pipeline import DepositionReport, build_report

__all__ = [
    "Granularity",
    "Analyte",
    "MissingPolicy",
    "nitrogen_concentration",
    "total_nitrogen_concentration",
    "add_nitrogen_columns",
    "deposition",
    "censored_flag",
    "aggregate_records",
    "DomainError",
    "log_transform",
    "log1p_transform",
    "add_transforms",
    "rollup",
    "annual_comparison",
    "monthly_comparison",
    "meets_criteria",
    "naive_completeness_scaling",
    "flag_anomalous_years",
    "DepositionReport",
    "build_report",
]

__version__ = "0.1.0"
