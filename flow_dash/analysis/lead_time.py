# flow_dash/analysis/lead_time.py
from __future__ import annotations
from typing import Iterable, Optional
import numpy as np
import pandas as pd
from .weekly_series import assign_weeks, week_buckets
from ..ingest.records import in_scope

DAY = pd.Timedelta(days=1)

def lead_time_days(item) -> Optional[float]:
    """
    Days between commitment and completion, as a fraction. Absolute value:
    a completion recorded before the commitment still yields a positive
    duration. None for discarded items or when either date is missing.
    """
    if not pd.isna(item.get("DiscardedAt")):
        return None
    start, end = item.get("CommitmentDate"), item.get("CompletionDate")
    if pd.isna(start) or pd.isna(end):
        return None
    return abs(pd.Timestamp(end) - pd.Timestamp(start)) / DAY

def compute_lead_times(items: pd.DataFrame) -> pd.DataFrame:
    """In-scope items with both dates, newest completion first."""
    cols = list(items.columns) + ["LeadTimeDays"] if items is not None else ["LeadTimeDays"]
    if items is None or items.empty:
        return pd.DataFrame(columns=cols)
    work = in_scope(items)
    work = work.loc[work["CommitmentDate"].notna() & work["CompletionDate"].notna()].copy()
    if work.empty:
        return pd.DataFrame(columns=cols)
    work["LeadTimeDays"] = ((work["CompletionDate"] - work["CommitmentDate"]).abs() / DAY).astype(float)
    return work.sort_values("CompletionDate", ascending=False, kind="stable").reset_index(drop=True)

def percentile(values: Iterable[float], q: float = 0.8) -> float:
    """Linear-interpolation percentile (rank = q * (n - 1)); 0 for no data."""
    x = np.asarray(list(values), dtype=float)
    x = x[np.isfinite(x)]
    if x.size == 0:
        return 0.0
    return float(np.quantile(x, q, method="linear"))

def percentile80(values: Iterable[float]) -> float:
    return percentile(values, 0.8)

def weekly_p80_series(items: pd.DataFrame, now, fmt: str = "short",
                      q: float = 0.8, max_week: int = 52) -> pd.DataFrame:
    """
    P80 lead time as it stood at the end of every week, from the week of the
    first completion through the current week. Weeks are the same WeekKey
    buckets the burnups use, so a point carries the label ``label_for`` gives
    its completions. Each point uses all items completed in that week or an
    earlier one; a week with nothing to measure keeps the previous value.
    """
    out_cols = ["WeekLabel", "PeriodStart", "P80", "Count"]
    lt = compute_lead_times(items)
    if lt.empty:
        return pd.DataFrame(columns=out_cols)
    first, ref = lt["CompletionDate"].min(), pd.Timestamp(now)
    weeks = week_buckets(first, ref, fmt, max_week)
    if weeks.empty:
        return pd.DataFrame(columns=out_cols)
    slots = pd.Series(assign_weeks(weeks, lt["CompletionDate"], first, ref, fmt),
                      index=lt.index, dtype="float")
    rows, prev = [], 0.0
    for i, (label, start) in enumerate(zip(weeks["WeekLabel"], weeks["PeriodStart"])):
        vals = lt.loc[slots <= i, "LeadTimeDays"]
        value = percentile(vals, q) if len(vals) else prev
        rows.append({"WeekLabel": label, "PeriodStart": start, "P80": value, "Count": int(len(vals))})
        prev = value
    return pd.DataFrame(rows, columns=out_cols)

def lead_time_summary(items: pd.DataFrame, q: float = 0.8) -> dict:
    lt = compute_lead_times(items)
    vals = lt["LeadTimeDays"].astype(float) if not lt.empty else pd.Series(dtype=float)
    return {
        "count": int(len(vals)),
        "p80": round(percentile(vals, q), 2),
        "mean": round(float(vals.mean()), 2) if len(vals) else 0.0,
        "max": round(float(vals.max()), 2) if len(vals) else 0.0,
    }
