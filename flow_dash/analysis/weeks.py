# flow_dash/analysis/weeks.py
"""
Week keys used by every weekly chart of the dashboard.

A week key is ``(week_number, year)`` where
``week_number = ceil((days_since_jan1 + weekday_of_jan1 + 1) / 7)`` and
weekdays count from Sunday = 0. Days since Jan 1st are fractional, so the
time of day takes part in the computation exactly as the dashboard always
did. This is not ISO-8601 numbering; labels only stay stable if the formula
is reproduced as is.

The label of a key is the first Sunday of ``year`` advanced by
``week_number - 1`` weeks, formatted ``DD/MM`` or ``DD/MM/YYYY``.
"""
from __future__ import annotations
import math
from typing import Iterator, Optional, Tuple
import pandas as pd

LABEL_FORMATS = {"short": "%d/%m", "long": "%d/%m/%Y"}

def _sunday_based_weekday(ts: pd.Timestamp) -> int:
    # pandas: Monday=0 ... Sunday=6
    return (ts.weekday() + 1) % 7

def week_number(date) -> Tuple[int, int]:
    ts = pd.Timestamp(date)
    jan1 = ts.normalize().replace(month=1, day=1)
    past_days = (ts - jan1) / pd.Timedelta(days=1)
    return int(math.ceil((past_days + _sunday_based_weekday(jan1) + 1) / 7)), ts.year

def first_sunday(year: int) -> pd.Timestamp:
    jan1 = pd.Timestamp(year=year, month=1, day=1)
    dow = _sunday_based_weekday(jan1)
    return jan1 + pd.Timedelta(days=0 if dow == 0 else 7 - dow)

def week_start(week_num: int, year: int) -> pd.Timestamp:
    """Sunday named by the week key (may fall in ``year + 1`` for week 53)."""
    return first_sunday(year) + pd.Timedelta(weeks=week_num - 1)

def week_label(week_num: int, year: int, fmt: str = "short") -> str:
    return week_start(week_num, year).strftime(LABEL_FORMATS[fmt])

def label_for(date, fmt: str = "short") -> str:
    w, y = week_number(date)
    return week_label(w, y, fmt)

def parse_label(label: str, year_hint: Optional[int] = None) -> Optional[pd.Timestamp]:
    """``DD/MM/YYYY`` or ``DD/MM`` (+ ``year_hint``) back to a Timestamp."""
    parts = str(label or "").split("/")
    try:
        day, month = int(parts[0]), int(parts[1])
        year = int(parts[2]) if len(parts) > 2 else year_hint
        if year is None:
            return None
        return pd.Timestamp(year=year, month=month, day=day)
    except (ValueError, IndexError):
        return None

def iter_week_keys(start: Tuple[int, int], end: Tuple[int, int],
                   max_week: int = 52) -> Iterator[Tuple[int, int]]:
    """Walk week keys from ``start`` to ``end`` inclusive, rolling to week 1
    of the next year once the number passes ``max_week``."""
    week_num, year = start
    end_week, end_year = end
    while year < end_year or (year == end_year and week_num <= end_week):
        yield week_num, year
        week_num += 1
        if week_num > max_week:
            week_num = 1
            year += 1
