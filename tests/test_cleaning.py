# tests/test_cleaning.py
import numpy as np
import pandas as pd
import pytest
from ndep.cleaning import (
    normalize_columns, replace_sentinels, map_trace_precipitation,
    derive_calendar_fields, drop_duplicates_on_keys, ensure_nonnegative,
)

def test_normalize_columns_keeps_case():
    df = pd.DataFrame({" NH4 ": [1], "flag NO3": [""]})
    out = normalize_columns(df)
    assert list(out.columns) == ["NH4", "flag_NO3"]

def test_replace_sentinels_every_analyte_column():
    df = pd.DataFrame({"NH4": [-9, 0.5], "NO3": [0.3, -9.0], "ppt": [-9.99, 12.0], "siteID": ["X", "X"]})
    out = replace_sentinels(df, ["NH4", "NO3", "ppt"])
    assert np.isnan(out.loc[0, "NH4"]) and np.isnan(out.loc[1, "NO3"]) and np.isnan(out.loc[0, "ppt"])
    assert out.loc[1, "NH4"] == 0.5
    assert out["siteID"].tolist() == ["X", "X"]

def test_replace_sentinels_string_cells():
    df = pd.DataFrame({"NH4": ["-9", "0.25"]})
    out = replace_sentinels(df, ["NH4"])
    assert np.isnan(out.loc[0, "NH4"])
    assert out.loc[1, "NH4"] == pytest.approx(0.25)

def test_trace_precipitation_maps_to_0051():
    df = pd.DataFrame({"ppt": [-7, 0.0, 3.2]})
    out = map_trace_precipitation(df)
    assert out["ppt"].tolist() == [0.051, 0.0, 3.2]
    assert not out["ppt"].isna().any()

def test_derive_calendar_fields_yrmonth():
    df = pd.DataFrame({"yrMonth": [200807, 200812]})
    out = derive_calendar_fields(df, "yrMonth")
    assert out["year"].tolist() == [2008, 2008]
    assert out["month"].tolist() == [7, 12]

def test_derive_calendar_fields_year_only_and_dates():
    out = derive_calendar_fields(pd.DataFrame({"yr": [2009]}), "yr")
    assert out["year"].tolist() == [2009] and "month" not in out.columns
    out = derive_calendar_fields(pd.DataFrame({"dateOn": ["2010-03-02 09:00"]}), "dateOn")
    assert (out.loc[0, "year"], out.loc[0, "month"]) == (2010, 3)

def test_derive_calendar_fields_rejects_bad_month():
    with pytest.raises(ValueError):
        derive_calendar_fields(pd.DataFrame({"yrMonth": [200813]}), "yrMonth")

def test_drop_duplicates_on_keys_is_per_station():
    df = pd.DataFrame({
        "siteID": ["XX01", "XX01", "YY02"],
        "dateOn": ["2008-07-01 09:00"] * 3,
        "NH4": [0.5, 0.7, 0.2],
    })
    out = drop_duplicates_on_keys(df, keys=["siteID", "dateOn"])
    assert out["siteID"].tolist() == ["XX01", "YY02"]
    assert out["NH4"].tolist() == [0.5, 0.2]
    # only the keys present in the table are used
    assert len(drop_duplicates_on_keys(df, keys=["siteID", "yrMonth"])) == 2

def test_ensure_nonnegative_flags_unknown_codes():
    df = pd.DataFrame({"NH4": [0.1, -3.0], "NO3": [0.2, np.nan]})
    with pytest.raises(ValueError):
        ensure_nonnegative(df, ["NH4", "NO3"])
    assert ensure_nonnegative(df.iloc[[0]], ["NH4", "NO3"]) is not None

def test_derive_calendar_fields_rejects_missing_keys():
    df = pd.DataFrame({"yrMonth": [200807, np.nan]})
    with pytest.raises(ValueError, match="Missing 'yrMonth' in 1 row"):
        derive_calendar_fields(df, "yrMonth")

def test_normalize_columns_rejects_colliding_headers():
    df = pd.DataFrame([[1, 2]], columns=["NH4", " NH4 "])
    with pytest.raises(ValueError):
        normalize_columns(df)
