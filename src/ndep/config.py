from __future__ import annotations
import logging
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
RAW = DATA / "raw"

# raw station exports (adjust to yours)
RAW_WEEKLY_CSV = RAW / "weekly.csv"
RAW_MONTHLY_CSV = RAW / "monthly.csv"
RAW_ANNUAL_CSV = RAW / "annual.csv"

# keys
SITE_COL = "siteID"
KEYS = {
    "weekly": [SITE_COL, "dateOn"],
    "monthly": [SITE_COL, "yrMonth"],
    "annual": [SITE_COL, "yr"],
}

# sentinel codes used by the data provider
MISSING_CODE = -9
MISSING_PPT_CODE = -9.99
TRACE_PPT_CODE = -7
TRACE_PPT_MM = 0.051  # stand-in for gauge precipitation below detection

# analytes and their data-quality flag columns
ANALYTE_COLS = ["NH4", "NO3"]
FLAG_COLS = {"NH4": "flagNH4", "NO3": "flagNO3"}
BELOW_DETECTION = "<"
PPT_COL = "ppt"
PUBLISHED_TOTAL_COL = "totalN"  # published annual nitrogen deposition, kg/ha

# official completeness thresholds for annual aggregates (percent)
CRITERIA_THRESHOLDS = {"Criteria1": 75.0, "Criteria2": 90.0, "Criteria3": 75.0}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Route ndep log records to stderr. Call once from the analysis session."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
