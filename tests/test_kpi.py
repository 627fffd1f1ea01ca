import pandas as pd
import pytest

from flow_dash.analysis.views import hours_burnup, scope_burnup
from flow_dash.ingest.effort_normalizer import normalize
from flow_dash.ingest.records import Contract, work_items_frame
from flow_dash.metrics.kpi import hours_summary, scope_summary


@pytest.fixture
def items():
    return work_items_frame([
        {"id": "A", "commitment_date": "2024-01-02", "end_date": "2024-01-10",
         "effort_upstream": 4, "effort_downstream": 6},
        {"id": "B", "commitment_date": "2024-01-16", "end_date": None, "effort_upstream": 5},
        {"id": "C", "commitment_date": None, "end_date": None},
        {"id": "D", "commitment_date": "2024-01-03", "end_date": None, "discarded_at": "2024-01-05"},
    ])


@pytest.fixture
def contract():
    return Contract(pd.Timestamp("2024-01-01"), pd.Timestamp("2024-02-29"), 100.0)


def test_hours_summary_totals(items, contract):
    k = hours_summary(items, contract)
    assert k["Hours_Consumed"] == 15.0
    assert k["Demands_Completed"] == 1
    assert k["HpD"] == 15.0
    assert k["Hours_Used_Pct"] == pytest.approx(15.0)
    assert k["Hours_Remaining"] == 85.0
    assert k["Current_Week_Index"] == -1
    assert k["Hours_Needed"] == 0


def test_hours_summary_pace(items, contract):
    obs = normalize([{"effort_value": 40, "start_time_to_computation": "2024-01-15"}], None)
    series = hours_burnup(obs, contract)
    k = hours_summary(items, contract, series, now=pd.Timestamp("2024-01-15"))
    assert k["Current_Week_Index"] == 2
    assert k["Hours_Needed"] == -6
    assert k["Hours_Exceeded"] is True
    assert k["Hours_Per_Week_Needed"] == pytest.approx(60 / 7)


def test_hours_summary_without_contract_or_items():
    k = hours_summary(work_items_frame([]), None)
    assert k["Hours_Consumed"] == 0.0
    assert k["HpD"] == 0.0
    assert k["Hours_Used_Pct"] == 0.0
    assert k["Hours_Remaining"] == 0.0


def test_scope_summary(items):
    project = Contract(pd.Timestamp("2024-01-01"), pd.Timestamp("2024-01-31"), 2)
    now = pd.Timestamp("2024-01-22")
    series = scope_burnup(items, project, now)
    k = scope_summary(items, 2, series, now)
    assert k["Scope_Total"] == 5
    assert k["Delivered"] == 1
    assert k["Completion_Rate"] == pytest.approx(20.0)
    # week 28/01 is index 3: ideal 5 / 5 * 4 = 4, one delivered
    assert k["Current_Week_Index"] == 3
    assert k["Demands_Needed"] == 3


def test_scope_summary_empty():
    k = scope_summary(work_items_frame([]))
    assert k == {"Scope_Total": 0, "Delivered": 0, "Completion_Rate": 0.0,
                 "Current_Week_Index": -1, "Demands_Needed": 0}
