import pandas as pd
import pytest

from flow_dash.analysis.burnup import (burnup_frame, current_week_index, demands_needed,
                                       hours_needed, ideal_progress, pace_deficit,
                                       weekly_rate_needed)
from flow_dash.analysis.weekly_series import build_weekly_series, empty_series


@pytest.fixture
def series():
    obs = pd.DataFrame({"Value": [40.0], "Date": pd.to_datetime(["2024-01-15"])})
    return build_weekly_series(obs, pd.Timestamp("2024-01-01"), pd.Timestamp("2024-02-29"),
                               total_scope=100)


def test_ideal_progress_is_linear_up_to_final_scope(series):
    ideal = ideal_progress(series)
    assert len(ideal) == 9
    assert ideal[0] == pytest.approx(100 / 9)
    assert ideal[-1] == pytest.approx(100)
    assert len(ideal_progress(empty_series())) == 0


def test_current_week_index_exact_match(series):
    assert current_week_index(series, pd.Timestamp("2024-01-15")) == 2


def test_current_week_index_outside_range(series):
    assert current_week_index(series, pd.Timestamp("2024-06-01")) == len(series) - 1
    assert current_week_index(series, pd.Timestamp("2023-12-01")) == 0
    assert current_week_index(empty_series(), pd.Timestamp("2024-01-15")) == -1


def test_current_week_index_without_label_match_takes_previous_bucket():
    s = pd.DataFrame({
        "WeekLabel": ["07/01", "21/01", "04/02"],
        "PeriodStart": pd.to_datetime(["2024-01-07", "2024-01-21", "2024-02-04"]),
        "TotalScope": 3.0, "CumulativeConsumed": [0.0, 1.0, 2.0],
    })
    # 2024-01-09 is labelled 14/01, which this series skips
    assert current_week_index(s, pd.Timestamp("2024-01-09")) == 0
    assert current_week_index(s, pd.Timestamp("2024-01-22")) == 1


def test_pace_deficit_and_derived_metrics(series):
    assert pace_deficit(series, 2) == pytest.approx(100 / 9 * 3 - 40)
    assert hours_needed(series, 2) == -6
    assert demands_needed(series, 2) == 0
    assert hours_needed(series, 1) == 23
    assert weekly_rate_needed(series, 2) == pytest.approx(60 / 7)


def test_pace_metrics_on_degenerate_input(series):
    assert pace_deficit(empty_series(), 0) == 0.0
    assert pace_deficit(series, -1) == 0.0
    assert demands_needed(series, -1) == 0
    assert weekly_rate_needed(empty_series(), 0) == 0.0


def test_final_scope_override(series):
    assert pace_deficit(series, 8, final_scope=40) == pytest.approx(0.0)


def test_burnup_frame_marks_one_current_week(series):
    out = burnup_frame(series, pd.Timestamp("2024-01-15"))
    assert out["IsCurrentWeek"].sum() == 1
    assert bool(out["IsCurrentWeek"].iloc[2])
    assert out["IdealProgress"].iloc[-1] == pytest.approx(100)
    assert "IdealProgress" in burnup_frame(empty_series(), pd.Timestamp("2024-01-15")).columns
