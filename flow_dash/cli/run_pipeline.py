import argparse
import json
import sys

from ..config import Config
from ..pipeline.orchestrator import run_pipeline
from ..data.synthetic_data_factory import make as make_synth
from ..utils.logging_utils import get_logger

log = get_logger()


def _read_json_safely(path: str) -> dict:
    """
    Read an API export from a file, or from STDIN when path == "-".
    The export is one JSON object with the keys demands, demand_efforts,
    additional_hours, contracts and project.
    """
    try:
        if path == "-":
            log.info("Reading JSON from STDIN...")
            data = json.load(sys.stdin)
        else:
            log.info(f"Reading JSON from: {path}")
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError) as e:
        log.error(f"Failed to read JSON [{path}]: {e}")
        raise
    if not isinstance(data, dict):
        raise SystemExit("The JSON export must be an object with demands/contracts/project keys.")
    return data


def _load_payload(args: argparse.Namespace) -> dict:
    if args.demo:
        payload = make_synth(n_demands=args.demo_demands, now=args.now)
        log.info(f"Using synthetic demo payload (n_demands={len(payload['demands'])})")
        return payload
    if args.json:
        return _read_json_safely(args.json)
    raise SystemExit("Please provide one data source: --demo OR --json PATH_OR_-")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Flow Dash — weekly burnup, lead time and hour consumption analytics"
    )
    ap.add_argument("--demo", action="store_true", help="Use a synthetic payload")
    ap.add_argument("--demo-demands", type=int, default=60, help="Number of synthetic demands")
    ap.add_argument("--json", type=str, help="Path to the API export (use '-' for STDIN)")

    ap.add_argument("--now", type=str, help="Reference date (ISO-8601); defaults to the current time")
    ap.add_argument("--tz", type=str, default=Config.timezone, help="Timezone for dates with an offset")
    ap.add_argument("--label-format", choices=["short", "long"], default=Config.label_format,
                    help="Week labels as DD/MM (short) or DD/MM/YYYY (long)")
    ap.add_argument("--locale", choices=["pt", "en"], default=Config.locale, help="Month names")

    ap.add_argument("--out", type=str, default=Config.outdir, help="Output folder")
    ap.add_argument("--no-charts", action="store_true", help="Skip PNG charts")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    cfg = Config(timezone=args.tz, label_format=args.label_format, locale=args.locale,
                 outdir=args.out, save_charts=not args.no_charts)

    payload = _load_payload(args)
    if not payload.get("demands"):
        log.warning("Payload has no demands; scope and lead time views will be empty")

    res = run_pipeline(payload, config=cfg, now=args.now, outdir=cfg.outdir)
    log.info("=== EXECUTIVE SUMMARY ===")
    for k, v in res.get("summary", {}).items():
        log.info(f"{k}: {v}")
    log.info("Pipeline finished.")
    return res


if __name__ == "__main__":
    main()
