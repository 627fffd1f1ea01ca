# flow_dash/pipeline/orchestrator.py
from __future__ import annotations
import os, json
from typing import Any, Dict, Optional
import pandas as pd

from ..config import Config
from ..utils.logging_utils import get_logger, ensure_dirs
from ..ingest.records import work_items_frame, active_contract, contract_from_record, now_in
from ..ingest.effort_normalizer import normalize, demand_hour_observations
from ..analysis.views import hours_burnup, scope_burnup
from ..analysis.burnup import burnup_frame
from ..analysis.monthly import monthly_rollup, monthly_hpd
from ..analysis.lead_time import compute_lead_times, weekly_p80_series, lead_time_summary
from ..analysis.weekly_series import to_records
from ..metrics.kpi import hours_summary, scope_summary
from ..viz.charts import (save_hours_burnup_chart, save_scope_burnup_chart,
                          save_monthly_bar_chart, save_p80_chart)

log = get_logger()

def _json_default(o):
    if isinstance(o, pd.Timestamp):
        return o.isoformat()
    if hasattr(o, "item"):
        return o.item()
    return str(o)

def _save_charts(res: Dict[str, Any], figdir: str) -> Dict[str, Optional[str]]:
    charts = {
        "hours_burnup": save_hours_burnup_chart(res["hours_burnup"], os.path.join(figdir, "hours_burnup.png")),
        "scope_burnup": save_scope_burnup_chart(res["scope_burnup"], os.path.join(figdir, "scope_burnup.png")),
        "monthly_hours": save_monthly_bar_chart(res["monthly_hours"], os.path.join(figdir, "monthly_hours.png")),
        "monthly_hpd": save_monthly_bar_chart(res["monthly_hpd"], os.path.join(figdir, "monthly_hpd.png"),
                                              value_col="HpD", title="Hours per Demand (HpD) by Month"),
        "p80": save_p80_chart(res["p80_weekly"], os.path.join(figdir, "lead_time_p80.png")),
    }
    for k, v in charts.items():
        if v is None:
            log.info(f"[chart] {k}: no data, skipped")
    return charts

def run_pipeline(payload: Dict[str, Any], config: Optional[Config] = None,
                 now=None, outdir: Optional[str] = None) -> Dict[str, Any]:
    """
    payload keys (all optional): demands, demand_efforts, additional_hours,
    contracts, project. Returns frames, chart-ready records and a flat summary.
    """
    cfg = config or Config()
    tz, fmt = cfg.timezone, cfg.label_format
    ref = now_in(tz, now)
    log.info(f"Running analytics (now={ref:%Y-%m-%d %H:%M}, labels={fmt})")

    items = work_items_frame(payload.get("demands"), tz)
    log.info(f"Demands loaded: {len(items)}")
    contract = active_contract(payload.get("contracts"), ref, tz)
    if contract is None:
        log.warning("No active contract for the reference date; hours burnup will be empty")
    project = contract_from_record(payload.get("project"), tz)

    obs = normalize(payload.get("demand_efforts"), payload.get("additional_hours"), tz)
    if obs.empty:
        log.info("No effort records; using demand upstream/downstream effort")
        obs = demand_hour_observations(items, ref, tz)
    undated = int(obs["Date"].isna().sum()) if not obs.empty else 0
    if undated:
        log.warning(f"{undated} effort record(s) without a valid date; counted in the first week")

    hours = burnup_frame(hours_burnup(obs, contract, fmt, cfg.max_week), ref, fmt)
    scope = burnup_frame(scope_burnup(items, project, ref, fmt, cfg.max_week), ref, fmt)
    res: Dict[str, Any] = {
        "hours_burnup": hours,
        "scope_burnup": scope,
        "monthly_hours": monthly_rollup(hours, locale=cfg.locale),
        "monthly_hpd": monthly_hpd(items, locale=cfg.locale),
        "lead_times": compute_lead_times(items),
        "p80_weekly": weekly_p80_series(items, ref, fmt, cfg.percentile, cfg.max_week),
    }
    initial = project.total_scope if project is not None else 0.0
    summary = {}
    summary.update(hours_summary(items, contract, hours, ref, fmt))
    summary.update({f"Scope_{k}" if not k.startswith("Scope") else k: v
                    for k, v in scope_summary(items, initial, scope, ref, fmt).items()})
    summary.update({f"LeadTime_{k}": v for k, v in lead_time_summary(items, cfg.percentile).items()})
    res["summary"] = summary
    res["records"] = {
        "hours_consumed": to_records(hours, "CumulativeConsumed"),
        "hours_scope": to_records(hours, "TotalScope"),
        "hours_ideal": to_records(hours, "IdealProgress"),
        "scope_total": to_records(scope, "TotalScope"),
        "scope_delivered": to_records(scope, "CumulativeConsumed"),
        "scope_ideal": to_records(scope, "IdealProgress"),
        "monthly_hours": to_records(res["monthly_hours"], "Value", "Label"),
        "monthly_hpd": to_records(res["monthly_hpd"], "HpD", "Label"),
        "p80_weekly": to_records(res["p80_weekly"], "P80"),
    }

    if outdir:
        ensure_dirs(outdir)
        if cfg.save_charts:
            figdir = os.path.join(outdir, "fig")
            ensure_dirs(figdir)
            res["charts"] = _save_charts(res, figdir)
        path = os.path.join(outdir, "summary.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"summary": summary, "series": res["records"]}, f,
                      ensure_ascii=False, indent=2, default=_json_default)
        log.info(f"Summary written: {path}")
    return res
