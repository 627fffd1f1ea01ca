# flow_dash/analysis/views.py
"""
The two burnup views of the dashboard, expressed as configurations of the
same weekly builder:

* hours: scope fixed at the contracted hours, consumption = effort hours.
* scope: scope counted from demand commitment dates on top of the project's
  initial scope, consumption = demands delivered up to ``now``.
"""
from __future__ import annotations
from typing import Optional
import pandas as pd
from .weekly_series import build_weekly_series, empty_series, resolve_range
from ..ingest.effort_normalizer import unit_observations, within
from ..ingest.records import Contract, in_scope

def hours_burnup(observations: pd.DataFrame, contract: Optional[Contract],
                 fmt: str = "short", max_week: int = 52,
                 clip_to_contract: bool = True) -> pd.DataFrame:
    if contract is None or not contract.is_valid or observations is None or observations.empty:
        return empty_series()
    obs = within(observations, contract.start_date, contract.end_date) if clip_to_contract else observations
    start, end = resolve_range(contract, obs["Date"])
    return build_weekly_series(obs, start, end, total_scope=contract.total_scope,
                               fmt=fmt, max_week=max_week)

def scope_burnup(items: pd.DataFrame, project: Optional[Contract], now,
                 fmt: str = "short", max_week: int = 52) -> pd.DataFrame:
    if items is None or items.empty:
        return empty_series()
    live = in_scope(items)
    if live.empty:
        return empty_series()
    created = live["CommitmentDate"]
    now = pd.Timestamp(now)
    delivered = live.loc[live["CompletionDate"].notna() & (live["CompletionDate"] <= now), "CompletionDate"]
    fallback = pd.concat([created, live["CompletionDate"]], ignore_index=True)
    start, end = resolve_range(project, created, fallback)
    seed = project.total_scope if project is not None else 0.0
    return build_weekly_series(unit_observations(delivered), start, end,
                               total_scope=seed, scope_dates=created,
                               fmt=fmt, max_week=max_week)
