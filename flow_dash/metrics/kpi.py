# flow_dash/metrics/kpi.py
from __future__ import annotations
from typing import Optional
import pandas as pd
from ..analysis.burnup import current_week_index, demands_needed, hours_needed, weekly_rate_needed
from ..ingest.records import Contract, in_scope

def hours_summary(items: pd.DataFrame,
                  contract: Optional[Contract],
                  series: Optional[pd.DataFrame] = None,
                  now=None, fmt: str = "short") -> dict:
    k = {}
    if items is None or items.empty:
        hours = pd.Series(dtype=float)
        completed = 0
    else:
        hours = items["EffortUpstream"].fillna(0.0) + items["EffortDownstream"].fillna(0.0)
        completed = int(items["CompletionDate"].notna().sum())
    total = float(hours.sum())
    contract_hours = float(contract.total_scope) if contract is not None else 0.0
    k["Hours_Consumed"] = total
    k["Demands_Completed"] = completed
    k["HpD"] = total / completed if completed > 0 else 0.0
    k["Contract_Hours"] = contract_hours
    k["Hours_Used_Pct"] = total / contract_hours * 100 if contract_hours > 0 else 0.0
    k["Hours_Remaining"] = max(contract_hours - total, 0.0)

    idx = current_week_index(series, now, fmt) if series is not None and now is not None else -1
    k["Current_Week_Index"] = idx
    k["Hours_Needed"] = hours_needed(series, idx, contract_hours) if idx >= 0 else 0
    k["Hours_Exceeded"] = k["Hours_Needed"] < 0
    k["Hours_Per_Week_Needed"] = weekly_rate_needed(series, idx, contract_hours) if idx >= 0 else 0.0
    return k

def scope_summary(items: pd.DataFrame,
                  initial_scope: float = 0.0,
                  series: Optional[pd.DataFrame] = None,
                  now=None, fmt: str = "short") -> dict:
    live = in_scope(items)
    k = {}
    k["Scope_Total"] = int(len(live) + (initial_scope or 0))
    k["Delivered"] = int(live["CompletionDate"].notna().sum()) if not live.empty else 0
    k["Completion_Rate"] = k["Delivered"] / k["Scope_Total"] * 100 if k["Scope_Total"] > 0 else 0.0
    idx = current_week_index(series, now, fmt) if series is not None and now is not None else -1
    k["Current_Week_Index"] = idx
    k["Demands_Needed"] = demands_needed(series, idx) if idx >= 0 else 0
    return k
