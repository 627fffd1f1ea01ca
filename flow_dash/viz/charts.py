# flow_dash/viz/charts.py
from __future__ import annotations
import os
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# ====== THEME ======
PALETTE = {
    "bg":      "#0B1021",
    "panel":   "#12172B",
    "grid":    "#2B3150",
    "text":    "#EAF0FF",
    "muted":   "#A7B0C8",
    "primary": "#5B8FF9",
    "accent":  "#5AD8A6",
    "warn":    "#F6BD16",
    "danger":  "#F4664A",
    "purple":  "#9B5DE5",
}

def _apply_theme():
    plt.rcParams.update({
        "figure.facecolor": PALETTE["bg"],
        "axes.facecolor":   PALETTE["panel"],
        "savefig.facecolor":PALETTE["bg"],
        "axes.edgecolor":   PALETTE["grid"],
        "axes.labelcolor":  PALETTE["text"],
        "axes.titlecolor":  PALETTE["text"],
        "xtick.color":      PALETTE["muted"],
        "ytick.color":      PALETTE["muted"],
        "grid.color":       PALETTE["grid"],
        "text.color":       PALETTE["text"],
        "font.size":        11,
        "axes.titleweight": "bold",
        "axes.grid":        True,
        "grid.linestyle":   "--",
        "grid.linewidth":   0.6,
        "legend.frameon":   False,
    })

def _save(figpath: str):
    os.makedirs(os.path.dirname(figpath) or ".", exist_ok=True)
    plt.tight_layout()
    plt.savefig(figpath, dpi=160, bbox_inches="tight")
    plt.close()
    return figpath

def _annotate_last(x, y, label_fmt="{:.1f}", color=None):
    if len(x) == 0:
        return
    xv, yv = x[-1], y[-1]
    plt.scatter([xv], [yv], s=40, color=color or PALETTE["accent"], zorder=5)
    plt.annotate(label_fmt.format(yv), (xv, yv), textcoords="offset points", xytext=(8, 6),
                 color=color or PALETTE["accent"])

def _week_axis(labels):
    x = np.arange(len(labels))
    step = max(1, len(labels) // 12)
    plt.xticks(x[::step], [labels[i] for i in x[::step]], rotation=45, ha="right")
    return x

def _current_week_marker(df: pd.DataFrame):
    if "IsCurrentWeek" not in df.columns or not df["IsCurrentWeek"].any():
        return
    idx = int(np.flatnonzero(df["IsCurrentWeek"].values)[0])
    plt.axvline(idx, color=PALETTE["danger"], linestyle="--", linewidth=1.6, label="Current week")

def _burnup(df: pd.DataFrame, out_path: str, title: str, ylabel: str,
            scope_label: str, done_label: str):
    if df is None or df.empty:
        return None
    _apply_theme()
    plt.figure(figsize=(9.5, 5.2))
    labels = df["WeekLabel"].astype(str).tolist()
    x = _week_axis(labels)
    scope = df["TotalScope"].astype(float).values
    done = df["CumulativeConsumed"].astype(float).values
    plt.plot(x, scope, linewidth=2.0, color=PALETTE["primary"], label=scope_label)
    plt.fill_between(x, scope, color=PALETTE["primary"], alpha=0.08)
    if "IdealProgress" in df.columns:
        plt.plot(x, df["IdealProgress"].astype(float).values, linewidth=1.8,
                 linestyle="--", color=PALETTE["warn"], label="Ideal progress")
    plt.plot(x, done, marker="o", markersize=3, linewidth=2.2, color=PALETTE["accent"], label=done_label)
    _annotate_last(x, done, color=PALETTE["accent"])
    _current_week_marker(df)
    plt.legend(loc="upper left")
    plt.title(title)
    plt.xlabel("Week (Sunday)"); plt.ylabel(ylabel)
    return _save(out_path)

def save_hours_burnup_chart(df: pd.DataFrame, out_path: str):
    return _burnup(df, out_path, "Burnup — Contract Hours", "Hours",
                   "Contracted hours", "Consumed hours")

def save_scope_burnup_chart(df: pd.DataFrame, out_path: str):
    return _burnup(df, out_path, "Burnup — Scope vs Delivered Demands", "Demands",
                   "Total scope", "Delivered demands")

def save_monthly_bar_chart(df: pd.DataFrame, out_path: str, value_col: str = "Value",
                           title: str = "Hours per Month", ylabel: str = "Hours"):
    if df is None or df.empty:
        return None
    _apply_theme()
    plt.figure(figsize=(8.5, 4.8))
    x = np.arange(len(df))
    y = df[value_col].astype(float).values
    plt.bar(x, y, color=PALETTE["primary"], alpha=0.9)
    for xi, yi in zip(x, y):
        plt.annotate(f"{yi:.1f}", (xi, yi), textcoords="offset points", xytext=(0, 4),
                     ha="center", color=PALETTE["muted"], fontsize=9)
    plt.xticks(x, df["Label"].astype(str).tolist(), rotation=45, ha="right")
    plt.title(title)
    plt.ylabel(ylabel)
    return _save(out_path)

def save_p80_chart(df: pd.DataFrame, out_path: str):
    if df is None or df.empty:
        return None
    _apply_theme()
    plt.figure(figsize=(9.5, 4.8))
    labels = df["WeekLabel"].astype(str).tolist()
    x = _week_axis(labels)
    y = df["P80"].astype(float).values
    plt.step(x, y, where="post", linewidth=2.2, color=PALETTE["purple"])
    _annotate_last(x, y, label_fmt="{:.2f}", color=PALETTE["warn"])
    plt.title("Lead Time P80 by Week")
    plt.xlabel("Week (Sunday)"); plt.ylabel("Days")
    return _save(out_path)
