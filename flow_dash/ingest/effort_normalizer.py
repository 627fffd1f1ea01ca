# flow_dash/ingest/effort_normalizer.py
from __future__ import annotations
from typing import Iterable, Optional
import pandas as pd
from .records import parse_date, now_in

OBS_COLUMNS = ["Value", "Date"]

def _empty() -> pd.DataFrame:
    return pd.DataFrame({"Value": pd.Series(dtype=float),
                         "Date": pd.Series(dtype="datetime64[ns]")})

def observations_frame(records: Iterable[dict] | None, value_key: str, date_key: str,
                       tz: Optional[str] = None) -> pd.DataFrame:
    rows = [{"Value": r.get(value_key, r.get("value")),
             "Date": parse_date(r.get(date_key, r.get("date")), tz)}
            for r in records or []]
    if not rows:
        return _empty()
    df = pd.DataFrame(rows, columns=OBS_COLUMNS)
    df["Value"] = pd.to_numeric(df["Value"], errors="coerce").fillna(0.0).astype(float)
    df["Date"] = pd.to_datetime(df["Date"])
    return df

def normalize(demand_efforts: Iterable[dict] | None,
              additional_hours: Iterable[dict] | None,
              tz: Optional[str] = None) -> pd.DataFrame:
    """
    Merge effort records ``{effort_value, start_time_to_computation}`` and
    manual hour entries ``{hours, event_date}`` into one (Value, Date) frame.
    Order is not meaningful. Unparseable dates stay NaT; the weekly builder
    attributes them to its first bucket.
    """
    parts = [observations_frame(demand_efforts, "effort_value", "start_time_to_computation", tz),
             observations_frame(additional_hours, "hours", "event_date", tz)]
    parts = [p for p in parts if not p.empty]
    if not parts:
        return _empty()
    return pd.concat(parts, ignore_index=True)

def demand_hour_observations(items: pd.DataFrame, now=None,
                             tz: Optional[str] = None) -> pd.DataFrame:
    """One observation per demand: upstream + downstream effort, dated by the
    completion date, else the commitment date, else ``now``."""
    if items is None or items.empty:
        return _empty()
    ref = now_in(tz, now)
    value = items["EffortUpstream"].fillna(0.0) + items["EffortDownstream"].fillna(0.0)
    when = items["CompletionDate"].fillna(items["CommitmentDate"]).fillna(ref)
    return pd.DataFrame({"Value": value.astype(float).values,
                         "Date": pd.to_datetime(when).values})

def unit_observations(dates: pd.Series) -> pd.DataFrame:
    """Count-style observations (value 1 each) from a date column."""
    if dates is None or len(dates) == 0:
        return _empty()
    return pd.DataFrame({"Value": 1.0, "Date": pd.to_datetime(dates).values})

def within(obs: pd.DataFrame, start, end) -> pd.DataFrame:
    """Keep observations dated inside ``[start day, end day]``; undated rows stay."""
    if obs is None or obs.empty or pd.isna(start) or pd.isna(end):
        return obs if obs is not None else _empty()
    lo = pd.Timestamp(start).normalize()
    hi = pd.Timestamp(end).normalize() + pd.Timedelta(days=1)
    keep = obs["Date"].isna() | ((obs["Date"] >= lo) & (obs["Date"] < hi))
    return obs.loc[keep].reset_index(drop=True)
