# flow_dash/analysis/monthly.py
from __future__ import annotations
import pandas as pd
from .weeks import parse_label

MONTH_NAMES = {
    "pt": ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"],
    "en": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
}
MONTHLY_COLUMNS = ["Year", "Month", "Label", "Value"]

def month_label(year: int, month: int, locale: str = "pt") -> str:
    names = MONTH_NAMES.get(locale, MONTH_NAMES["en"])
    return f"{names[int(month) - 1]}/{str(int(year))[-2:]}"

def deaccumulate(series: pd.DataFrame, col: str = "CumulativeConsumed") -> pd.Series:
    """Per-week amounts back from a running total."""
    if series is None or series.empty:
        return pd.Series(dtype=float)
    cum = series[col].astype(float).reset_index(drop=True)
    raw = cum.diff()
    raw.iloc[0] = cum.iloc[0]
    return raw

def _label_month(label: str, period_start) -> tuple:
    hint = pd.Timestamp(period_start).year if not pd.isna(period_start) else None
    ts = parse_label(label, hint)
    if ts is None:
        ts = pd.Timestamp(period_start)
    return ts.year, ts.month

def monthly_rollup(series: pd.DataFrame, col: str = "CumulativeConsumed",
                   locale: str = "pt") -> pd.DataFrame:
    """
    Weekly running total -> plain monthly totals. A week belongs to the
    month (and year) its label names, so a label in early January is summed
    into January even when the week key belongs to the previous year.
    """
    if series is None or series.empty:
        return pd.DataFrame(columns=MONTHLY_COLUMNS)
    raw = deaccumulate(series, col)
    ym = [_label_month(l, p) for l, p in zip(series["WeekLabel"], series["PeriodStart"])]
    df = pd.DataFrame({"Year": [y for y, _ in ym], "Month": [m for _, m in ym], "Value": raw.values})
    out = df.groupby(["Year", "Month"], sort=True)["Value"].sum().reset_index()
    out["Label"] = [month_label(y, m, locale) for y, m in zip(out["Year"], out["Month"])]
    return out[MONTHLY_COLUMNS]

def monthly_hpd(items: pd.DataFrame, locale: str = "pt") -> pd.DataFrame:
    """Completed demands grouped by completion month: total hours, count and
    hours per demand."""
    cols = ["Year", "Month", "Label", "TotalHours", "Count", "HpD"]
    if items is None or items.empty:
        return pd.DataFrame(columns=cols)
    done = items.loc[items["CompletionDate"].notna()].copy()
    if done.empty:
        return pd.DataFrame(columns=cols)
    done["Hours"] = done["EffortUpstream"].fillna(0.0) + done["EffortDownstream"].fillna(0.0)
    done["Year"] = done["CompletionDate"].dt.year
    done["Month"] = done["CompletionDate"].dt.month
    out = (done.groupby(["Year", "Month"], sort=True)
               .agg(TotalHours=("Hours", "sum"), Count=("Hours", "size"))
               .reset_index())
    out["HpD"] = out["TotalHours"] / out["Count"]
    out["Label"] = [month_label(y, m, locale) for y, m in zip(out["Year"], out["Month"])]
    return out[cols]
