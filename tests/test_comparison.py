import numpy as np
import pandas as pd
import pytest

from ndep.granularity import Granularity
from ndep.comparison import (
    rollup, annual_comparison, monthly_comparison, meets_criteria,
    naive_completeness_scaling, flag_anomalous_years,
)


@pytest.fixture
def weekly():
    # five weeks in July 2008 (one missing), two weeks in January 2009
    return pd.DataFrame({
        "year": [2008] * 5 + [2009] * 2,
        "month": [7] * 5 + [1] * 2,
        "total_N_dep": [0.04, 0.02, np.nan, 0.05, 0.01, 0.03, 0.06],
    })


@pytest.fixture
def monthly():
    return pd.DataFrame({
        "year": [2008, 2009],
        "month": [7, 1],
        "total_N_dep": [0.13, 0.08],
    })


@pytest.fixture
def annual():
    return pd.DataFrame({
        "year": [2008, 2009],
        "totalN": [0.15, 1.2],
        "Criteria1": [80.0, 40.0],
        "Criteria2": [95.0, 95.0],
        "Criteria3": [90.0, 90.0],
    })


def test_rollup_month_sums_valid_weeks(weekly):
    out = rollup(weekly, ["year", "month"])
    july = out.loc[(2008, 7)]
    assert july["sum"] == pytest.approx(0.04 + 0.02 + 0.05 + 0.01)
    assert july["n_valid"] == 4
    assert july["n_records"] == 5


def test_rollup_all_missing_group_has_missing_sum():
    df = pd.DataFrame({"year": [2010, 2010], "total_N_dep": [np.nan, np.nan]})
    out = rollup(df, "year")
    assert np.isnan(out.loc[2010, "sum"])
    assert out.loc[2010, "n_valid"] == 0


def test_rollup_missing_columns():
    with pytest.raises(KeyError):
        rollup(pd.DataFrame({"year": [2008]}), "year")


def test_meets_criteria(annual):
    assert meets_criteria(annual).tolist() == [True, False]
    assert meets_criteria(annual.drop(columns=["Criteria1", "Criteria2", "Criteria3"])).all()


def test_annual_comparison(weekly, monthly, annual):
    out = annual_comparison(weekly, monthly, annual)
    assert list(out.index) == [2008, 2009]
    assert out.loc[2008, "weekly_sum"] == pytest.approx(0.12)
    assert out.loc[2008, "n_weeks"] == 4
    assert out.loc[2008, "monthly_sum"] == pytest.approx(0.13)
    assert out.loc[2008, "n_months"] == 1
    assert out.loc[2008, "annual_published"] == pytest.approx(0.15)
    assert out.loc[2008, "weekly_diff"] == pytest.approx(0.12 - 0.15)
    assert out.loc[2009, "weekly_rel_diff"] == pytest.approx((0.09 - 1.2) / 1.2)
    assert bool(out.loc[2009, "meets_criteria"]) is False


def test_monthly_comparison(weekly, monthly):
    out = monthly_comparison(weekly, monthly)
    assert out.loc[(2008, 7), "weekly_sum"] == pytest.approx(0.12)
    assert out.loc[(2008, 7), "n_weeks"] == 4
    assert out.loc[(2009, 1), "diff"] == pytest.approx(0.09 - 0.08)


def test_naive_scaling_uses_expected_periods(weekly):
    rolled = rollup(weekly, "year")
    scaled = naive_completeness_scaling(rolled, "weekly")
    assert scaled.loc[2009] == pytest.approx(0.09 * 52 / 2)
    # the roll-up itself is left alone
    assert rolled.loc[2009, "sum"] == pytest.approx(0.09)


def test_flag_anomalous_years(weekly, monthly, annual):
    out = annual_comparison(weekly, monthly, annual)
    assert list(flag_anomalous_years(out, tolerance=0.5)) == [2009]


def test_rollup_keys_follow_granularity(weekly):
    by_month = rollup(weekly, Granularity.MONTHLY)
    assert list(by_month.index.names) == list(Granularity.MONTHLY.calendar_keys)
    by_year = rollup(weekly, Granularity.ANNUAL)
    assert by_year.index.name == "year"
    assert by_year.loc[2009, "n_valid"] == 2


def test_year_without_valid_weeks_is_a_gap_not_a_shortfall(monthly, annual):
    weekly = pd.DataFrame({
        "year": [2008, 2008],
        "month": [7, 8],
        "total_N_dep": [np.nan, np.nan],
    })
    out = annual_comparison(weekly, monthly, annual.assign(totalN=[1.0, 1.2]))
    assert out.loc[2008, "n_weeks"] == 0
    assert np.isnan(out.loc[2008, "weekly_sum"])
    assert np.isnan(out.loc[2008, "weekly_rel_diff"])
    # 2009 has no weekly rows at all and is treated the same way
    assert np.isnan(out.loc[2009, "weekly_rel_diff"])
    assert list(flag_anomalous_years(out, tolerance=0.25)) == []

    by_month = monthly_comparison(weekly, monthly)
    assert np.isnan(by_month.loc[(2008, 8), "weekly_sum"])
    assert by_month.loc[(2008, 8), "n_weeks"] == 0
