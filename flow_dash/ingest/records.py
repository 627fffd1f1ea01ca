# flow_dash/ingest/records.py
"""
Coerce raw API records (plain dicts with ISO-8601 strings) into the frames
and value objects the analysis modules work on. Nothing here raises on bad
data: unparseable dates become NaT, missing numbers become 0.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional
import pandas as pd
from dateutil.parser import parse as dtparse

WORK_ITEM_COLUMNS = ["Id", "Slug", "Title", "CommitmentDate", "CompletionDate",
                     "DiscardedAt", "EffortUpstream", "EffortDownstream"]

@dataclass(frozen=True)
class Contract:
    start_date: pd.Timestamp
    end_date: pd.Timestamp
    total_scope: float = 0.0

    @property
    def is_valid(self) -> bool:
        return (not pd.isna(self.start_date) and not pd.isna(self.end_date)
                and self.start_date <= self.end_date)

def parse_date(value, tz: Optional[str] = None) -> pd.Timestamp:
    if value is None:
        return pd.NaT
    if isinstance(value, (pd.Timestamp, datetime, date)):
        ts = pd.Timestamp(value)
    else:
        s = str(value).strip()
        if not s or s.lower() in ("nan", "nat", "none", "null"):
            return pd.NaT
        try:
            ts = pd.Timestamp(dtparse(s))
        except (ValueError, OverflowError, TypeError):
            return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz or "UTC").tz_localize(None)
    return ts

def now_in(tz: Optional[str] = None, now=None) -> pd.Timestamp:
    """Resolve the clock: an explicit ``now`` wins, else wall time in ``tz``."""
    if now is not None:
        ts = parse_date(now, tz)
        if not pd.isna(ts):
            return ts
    return pd.Timestamp.now(tz=tz or "UTC").tz_localize(None)

def _num(v) -> float:
    if v is None:
        return 0.0
    x = pd.to_numeric(v, errors="coerce")
    return 0.0 if pd.isna(x) else float(x)

def work_items_frame(records: Iterable[dict] | None, tz: Optional[str] = None) -> pd.DataFrame:
    rows = []
    for r in records or []:
        rows.append({
            "Id": r.get("id"),
            "Slug": r.get("slug") or "",
            "Title": r.get("demand_title") or r.get("title") or "",
            "CommitmentDate": parse_date(r.get("commitment_date"), tz),
            "CompletionDate": parse_date(r.get("end_date"), tz),
            "DiscardedAt": parse_date(r.get("discarded_at"), tz),
            "EffortUpstream": _num(r.get("effort_upstream")),
            "EffortDownstream": _num(r.get("effort_downstream")),
        })
    df = pd.DataFrame(rows, columns=WORK_ITEM_COLUMNS)
    for c in ("CommitmentDate", "CompletionDate", "DiscardedAt"):
        df[c] = pd.to_datetime(df[c])
    return df

def in_scope(items: pd.DataFrame) -> pd.DataFrame:
    if items is None or items.empty:
        return pd.DataFrame(columns=WORK_ITEM_COLUMNS)
    return items.loc[items["DiscardedAt"].isna()].copy()

def contract_from_record(rec: dict | None, tz: Optional[str] = None) -> Optional[Contract]:
    if not rec:
        return None
    scope = rec.get("total_hours")
    if scope is None:
        scope = rec.get("initial_scope")
    return Contract(parse_date(rec.get("start_date"), tz),
                    parse_date(rec.get("end_date"), tz),
                    _num(scope))

def active_contract(records: Iterable[dict] | None, now=None,
                    tz: Optional[str] = None) -> Optional[Contract]:
    ref = now_in(tz, now)
    for rec in records or []:
        c = contract_from_record(rec, tz)
        if c is not None and c.is_valid and c.start_date <= ref <= c.end_date:
            return c
    return None
