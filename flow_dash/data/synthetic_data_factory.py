import pandas as pd, numpy as np, random

TITLES = ["checkout api", "report export", "login flow", "billing job", "search index",
          "mobile push", "admin panel", "audit log", "data import", "sso"]

def _iso(ts):
    return None if ts is None else pd.Timestamp(ts).isoformat()

def make(n_demands=60, now=None, seed=42, contract_hours=800.0, initial_scope=5):
    """Demo payload shaped like the API export: demands, demand_efforts,
    additional_hours, contracts and project."""
    random.seed(seed); np.random.seed(seed)
    now = pd.Timestamp(now) if now is not None else pd.Timestamp.today().normalize()
    start = (now - pd.Timedelta(weeks=16)).normalize()
    end = (now + pd.Timedelta(weeks=12)).normalize()
    demands, efforts = [], []
    for i in range(n_demands):
        commit = start + pd.Timedelta(days=random.randint(0, 110), hours=random.randint(8, 18))
        done = None
        if random.random() < 0.6:
            done = commit + pd.Timedelta(days=float(np.random.gamma(2.0, 4.0)))
            if done > now:
                done = None
        discarded = commit + pd.Timedelta(days=3) if random.random() < 0.05 else None
        up = round(float(np.random.gamma(2.0, 3.0)), 1)
        down = round(float(np.random.gamma(2.0, 5.0)), 1)
        demands.append({
            "id": str(i + 1),
            "slug": f"DEM-{i + 1:03d}",
            "demand_title": f"{random.choice(TITLES)} #{i + 1}",
            "commitment_date": _iso(commit) if random.random() > 0.05 else None,
            "end_date": _iso(done),
            "discarded_at": _iso(discarded),
            "effort_upstream": up,
            "effort_downstream": down,
        })
        efforts.append({"effort_value": up + down,
                        "start_time_to_computation": _iso(done or commit)})
    extra = [{"hours": round(float(np.random.uniform(2, 12)), 1),
              "event_date": _iso(start + pd.Timedelta(days=random.randint(0, 100)))}
             for _ in range(8)]
    return {
        "demands": demands,
        "demand_efforts": efforts,
        "additional_hours": extra,
        "contracts": [{"id": 1, "start_date": _iso(start), "end_date": _iso(end),
                       "total_hours": contract_hours}],
        "project": {"start_date": _iso(start), "end_date": _iso(end),
                    "initial_scope": initial_scope},
    }
