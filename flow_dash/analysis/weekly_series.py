# flow_dash/analysis/weekly_series.py
"""
Contiguous weekly buckets with a cumulative consumption line and a total
scope line. Used by the hours burnup (fixed scope = contracted hours) and the
scope burnup (scope counted from demand creation events).
"""
from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import numpy as np
import pandas as pd
from .weeks import iter_week_keys, label_for, week_label, week_number, week_start

SERIES_COLUMNS = ["WeekLabel", "PeriodStart", "WeekNumber", "Year",
                  "TotalScope", "CumulativeConsumed"]

def empty_series() -> pd.DataFrame:
    return pd.DataFrame(columns=SERIES_COLUMNS)

def month_start(ts) -> pd.Timestamp:
    return pd.Timestamp(ts).normalize().replace(day=1)

def resolve_range(contract=None,
                  observation_dates: Optional[pd.Series] = None,
                  fallback_dates: Optional[pd.Series] = None) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """
    With a valid contract: from the first day of the contract's start month
    (or of the earliest observation's month when one predates it) to the
    contract end. Without one: min/max of ``fallback_dates``. ``(NaT, NaT)``
    when neither yields a range.
    """
    if contract is not None and contract.is_valid:
        start = month_start(contract.start_date)
        dated = observation_dates.dropna() if observation_dates is not None else pd.Series(dtype="datetime64[ns]")
        if len(dated) and dated.min() < start:
            start = month_start(dated.min())
        return start, pd.Timestamp(contract.end_date)
    dates = fallback_dates.dropna() if fallback_dates is not None else pd.Series(dtype="datetime64[ns]")
    if dates.empty:
        return pd.NaT, pd.NaT
    return pd.Timestamp(dates.min()), pd.Timestamp(dates.max())

def week_buckets(start, end, fmt: str = "short", max_week: int = 52) -> pd.DataFrame:
    """One row per week key between ``start`` and ``end``; the last row always
    carries the end week's label."""
    if pd.isna(start) or pd.isna(end) or pd.Timestamp(start) > pd.Timestamp(end):
        return empty_series()
    end_key = week_number(end)
    end_label = week_label(*end_key, fmt)
    keys: List[Tuple[int, int]] = []
    labels: List[str] = []
    for key in iter_week_keys(week_number(start), end_key, max_week):
        lbl = week_label(*key, fmt)
        # week 53 and week 1 of the next year can name the same Sunday
        if labels and labels[-1] == lbl:
            continue
        keys.append(key)
        labels.append(lbl)
    if end_label in labels:
        cut = labels.index(end_label) + 1
        keys, labels = keys[:cut], labels[:cut]
    else:
        keys.append(end_key)
        labels.append(end_label)
    return pd.DataFrame({
        "WeekLabel": labels,
        "PeriodStart": [week_start(w, y) for w, y in keys],
        "WeekNumber": [w for w, _ in keys],
        "Year": [y for _, y in keys],
        "TotalScope": 0.0,
        "CumulativeConsumed": 0.0,
    }, columns=SERIES_COLUMNS)

def _label_index(labels) -> Dict[str, int]:
    idx: Dict[str, int] = {}
    for i, lbl in enumerate(labels):
        idx.setdefault(lbl, i)
    return idx

def assign_weeks(weeks: pd.DataFrame, dates, start, end,
                 fmt: str = "short") -> List[Optional[int]]:
    """
    Bucket index for every date: the bucket carrying the date's week label,
    or, for a date inside ``[start, end]`` whose label the 52-week rollover
    skipped, the last bucket starting on or before it. None for undated
    dates and dates outside the range.
    """
    lookup = _label_index(weeks["WeekLabel"])
    starts = pd.to_datetime(weeks["PeriodStart"]).values
    lo = pd.Timestamp(start)
    hi = pd.Timestamp(end).normalize() + pd.Timedelta(days=1)
    out: List[Optional[int]] = []
    for d in dates:
        if pd.isna(d):
            out.append(None)
            continue
        d = pd.Timestamp(d)
        i = lookup.get(label_for(d, fmt))
        if i is None and lo <= d < hi:
            i = max(int(np.searchsorted(starts, d.to_datetime64(), side="right")) - 1, 0)
        out.append(i)
    return out

def build_weekly_series(observations: Optional[pd.DataFrame], start, end,
                        total_scope: float = 0.0,
                        scope_dates: Optional[pd.Series] = None,
                        fmt: str = "short", max_week: int = 52) -> pd.DataFrame:
    """
    ``observations``: (Value, Date) frame of consumed work.
    ``total_scope``: seed for every bucket's TotalScope.
    ``scope_dates``: creation dates of counted scope items; each adds 1 to its
    creation week and every later week. Undated items count from the first
    week, items created before ``start`` too; items created after the range
    are not in view yet and are skipped.

    Observations with a non-positive value are ignored. Undated ones and those
    whose week is not in the range go to the first bucket.
    """
    has_obs = observations is not None and not observations.empty
    has_scope = scope_dates is not None and len(scope_dates) > 0
    if not has_obs and not has_scope:
        return empty_series()
    weeks = week_buckets(start, end, fmt, max_week)
    if weeks.empty:
        return weeks
    n = len(weeks)
    lo = pd.Timestamp(start)

    scope_inc = np.zeros(n)
    if has_scope:
        for d, i in zip(scope_dates, assign_weeks(weeks, scope_dates, start, end, fmt)):
            if pd.isna(d):
                scope_inc[0] += 1
            elif i is not None:
                scope_inc[i] += 1
            elif d < lo:
                scope_inc[0] += 1
    weeks["TotalScope"] = float(total_scope) + np.cumsum(scope_inc)

    raw = np.zeros(n)
    if has_obs:
        slots = assign_weeks(weeks, observations["Date"], start, end, fmt)
        for value, i in zip(observations["Value"], slots):
            if pd.isna(value) or value <= 0:
                continue
            raw[0 if i is None else i] += float(value)
    weeks["CumulativeConsumed"] = np.cumsum(raw)
    return weeks

def to_records(df: pd.DataFrame, value_col: str, label_col: str = "WeekLabel") -> List[dict]:
    """``[{label, value}]`` pairs for chart/table consumers."""
    if df is None or df.empty:
        return []
    return [{"label": str(l), "value": float(v)} for l, v in zip(df[label_col], df[value_col])]
