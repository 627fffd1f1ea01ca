import pandas as pd
import pytest

from flow_dash.analysis.monthly import deaccumulate, month_label, monthly_hpd, monthly_rollup
from flow_dash.analysis.weekly_series import week_buckets
from flow_dash.ingest.records import work_items_frame


@pytest.fixture
def series():
    return pd.DataFrame({
        "WeekLabel": ["21/01/2024", "28/01/2024", "04/02/2024", "11/02/2024"],
        "PeriodStart": pd.to_datetime(["2024-01-21", "2024-01-28", "2024-02-04", "2024-02-11"]),
        "CumulativeConsumed": [10.0, 10.0, 25.0, 25.0],
    })


def test_deaccumulate(series):
    assert list(deaccumulate(series)) == [10.0, 0.0, 15.0, 0.0]


def test_monthly_rollup(series):
    m = monthly_rollup(series)
    assert list(m["Label"]) == ["Jan/24", "Fev/24"]
    assert list(m["Value"]) == [10.0, 15.0]
    assert list(monthly_rollup(series, locale="en")["Label"]) == ["Jan/24", "Feb/24"]


def test_deaccumulated_weeks_sum_to_final_total(series):
    assert deaccumulate(series).sum() == series["CumulativeConsumed"].iloc[-1]


def test_monthly_rollup_across_year_boundary():
    w = week_buckets(pd.Timestamp("2024-12-01"), pd.Timestamp("2025-01-20"))
    w["CumulativeConsumed"] = [float(i) for i in range(1, len(w) + 1)]
    m = monthly_rollup(w)
    assert list(zip(m["Year"], m["Month"], m["Value"])) == [(2024, 12, 4.0), (2025, 1, 4.0)]


def test_week_53_label_rolls_into_next_january():
    w = week_buckets(pd.Timestamp("2024-12-01"), pd.Timestamp("2024-12-31"), fmt="long")
    w["CumulativeConsumed"] = [1.0, 2.0, 3.0, 4.0, 5.0]
    m = monthly_rollup(w)
    assert list(m["Label"]) == ["Dez/24", "Jan/25"]
    assert list(m["Value"]) == [4.0, 1.0]


def test_monthly_rollup_empty():
    assert monthly_rollup(pd.DataFrame()).empty


def test_month_label():
    assert month_label(2024, 3) == "Mar/24"
    assert month_label(2024, 5, "en") == "May/24"


def test_monthly_hpd():
    items = work_items_frame([
        {"id": "1", "end_date": "2024-01-05", "effort_upstream": 4, "effort_downstream": 6},
        {"id": "2", "end_date": "2024-01-20", "effort_upstream": 20},
        {"id": "3", "end_date": "2024-02-02", "effort_downstream": 6},
        {"id": "4", "end_date": None, "effort_upstream": 50},
    ])
    m = monthly_hpd(items)
    assert list(m["Label"]) == ["Jan/24", "Fev/24"]
    assert list(m["TotalHours"]) == [30.0, 6.0]
    assert list(m["Count"]) == [2, 1]
    assert list(m["HpD"]) == [15.0, 6.0]
