import pandas as pd
import pytest


@pytest.fixture
def raw_weekly():
    """Weekly export: ppt in mm, -9 missing, -7 trace precipitation."""
    return pd.DataFrame({
        "siteID": ["XX01"] * 6,
        "dateOn": ["2008-07-01 09:00", "2008-07-08 09:00", "2008-07-15 09:00",
                   "2008-07-22 09:00", "2008-07-29 09:00", "2008-07-29 09:00"],
        "yrMonth": [200807] * 6,
        "ppt": [10.0, -7, 4.2, -9.99, 6.0, 6.0],
        "NH4": [0.5, 0.2, -9, 0.4, 0.1, 0.1],
        "NO3": [0.3, 0.6, -9, 0.5, 0.2, 0.2],
        "flagNH4": ["", "", "", "", "<", "<"],
        "flagNO3": ["", "", "", "", "", ""],
    })


@pytest.fixture
def raw_monthly():
    """Monthly export: ppt in cm."""
    return pd.DataFrame({
        "siteID": ["XX01", "XX01"],
        "yrMonth": [200807, 200808],
        "ppt": [2.2, -9.99],
        "NH4": [0.3, -9],
        "NO3": [0.4, -9],
        "flagNH4": ["", ""],
        "flagNO3": ["", ""],
    })


@pytest.fixture
def raw_annual():
    return pd.DataFrame({
        "siteID": ["XX01"],
        "yr": [2008],
        "Criteria1": [80.0],
        "Criteria2": [95.0],
        "Criteria3": [90.0],
        "ppt": [60.0],
        "NH4": [0.3],
        "NO3": [0.4],
        "totalN": [2.5],
    })


@pytest.fixture
def raw_files(tmp_path, raw_weekly, raw_monthly, raw_annual):
    paths = {}
    for name, df in (("weekly", raw_weekly), ("monthly", raw_monthly), ("annual", raw_annual)):
        paths[name] = tmp_path / f"{name}.csv"
        df.to_csv(paths[name], index=False)
    return paths
