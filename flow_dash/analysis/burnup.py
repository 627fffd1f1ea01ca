# flow_dash/analysis/burnup.py
from __future__ import annotations
import math
from typing import Optional
import numpy as np
import pandas as pd
from .weeks import label_for

def _final_scope(series: pd.DataFrame, final_scope: Optional[float]) -> float:
    if final_scope is not None:
        return float(final_scope)
    return float(series["TotalScope"].iloc[-1])

def ideal_progress(series: pd.DataFrame, final_scope: Optional[float] = None) -> np.ndarray:
    """Straight line from 0 to the final scope: ``final / n * (i + 1)``."""
    if series is None or series.empty:
        return np.array([], dtype=float)
    n = len(series)
    return _final_scope(series, final_scope) / n * np.arange(1, n + 1, dtype=float)

def current_week_index(series: pd.DataFrame, now, fmt: str = "short") -> int:
    """
    Index of the bucket labelled like ``now``. Without an exact label match,
    the bucket right before the first one that lies in the future (0 if that
    is the first bucket), or the last bucket when none does. -1 when empty.
    """
    if series is None or series.empty:
        return -1
    now = pd.Timestamp(now)
    hits = np.flatnonzero(series["WeekLabel"].values == label_for(now, fmt))
    if len(hits):
        return int(hits[0])
    today = now.normalize()
    for i, start in enumerate(series["PeriodStart"]):
        if pd.Timestamp(start).normalize() > today:
            return i - 1 if i > 0 else 0
    return len(series) - 1

def pace_deficit(series: pd.DataFrame, week_idx: int,
                 final_scope: Optional[float] = None,
                 consumed_col: str = "CumulativeConsumed") -> float:
    """Ideal value at ``week_idx`` minus what was actually consumed by then.
    Positive = behind the ideal line, negative = ahead of it."""
    if series is None or series.empty or week_idx < 0 or week_idx >= len(series):
        return 0.0
    ideal = _final_scope(series, final_scope) / len(series) * (week_idx + 1)
    return float(ideal - series[consumed_col].iloc[week_idx])

def demands_needed(series: pd.DataFrame, week_idx: int,
                   final_scope: Optional[float] = None) -> int:
    # a negative count cannot be delivered
    return max(0, int(math.ceil(pace_deficit(series, week_idx, final_scope))))

def hours_needed(series: pd.DataFrame, week_idx: int,
                 final_scope: Optional[float] = None) -> int:
    """Hours to consume to get back on the ideal line. Negative values mean
    the ideal was exceeded and are returned as such."""
    return int(math.ceil(pace_deficit(series, week_idx, final_scope)))

def weekly_rate_needed(series: pd.DataFrame, week_idx: int,
                       final_scope: Optional[float] = None) -> float:
    """Remaining scope spread over the remaining weeks (current one included)."""
    if series is None or series.empty or week_idx < 0 or week_idx >= len(series):
        return 0.0
    remaining = _final_scope(series, final_scope) - float(series["CumulativeConsumed"].iloc[week_idx])
    return remaining / (len(series) - week_idx)

def burnup_frame(series: pd.DataFrame, now, fmt: str = "short",
                 final_scope: Optional[float] = None) -> pd.DataFrame:
    """Series plus the IdealProgress line and an IsCurrentWeek flag."""
    out = series.copy()
    if out.empty:
        out["IdealProgress"] = pd.Series(dtype=float)
        out["IsCurrentWeek"] = pd.Series(dtype=bool)
        return out
    out["IdealProgress"] = ideal_progress(out, final_scope)
    idx = current_week_index(out, now, fmt)
    out["IsCurrentWeek"] = np.arange(len(out)) == idx
    return out
