import logging, os, sys

LEVEL_ENV = "FLOW_DASH_LOG_LEVEL"

def get_logger(name="FlowDash", level=None):
    """Stdout logger shared by the pipeline and the CLI. The level comes from
    ``level``, else $FLOW_DASH_LOG_LEVEL, else INFO; unknown names fall back
    to INFO."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    if level is None:
        level = os.environ.get(LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s - %(message)s"))
    logger.addHandler(h)
    logger.propagate = False
    return logger

def ensure_dirs(*paths):
    for p in paths:
        os.makedirs(p, exist_ok=True)
