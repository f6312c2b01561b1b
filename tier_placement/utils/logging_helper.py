"""
logging_helper.py – one-call setup: file + stdout.

Usage:
    from tier_placement.utils.logging_helper import get_logger
    log = get_logger()                  # derives name from caller's file
    log.info("It works")
"""

from __future__ import annotations
import inspect, logging, sys, os
from pathlib import Path

from .paths import LOG_DIR

DEF_FMT  = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEF_DATE = "%Y-%m-%d %H:%M:%S"


def _env_level(default: int) -> int:
    name = os.getenv("TIER_PLACEMENT_LOG_LEVEL")
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def get_logger(level: int | None = None,
               log_dir: str | Path | None = None,
               name: str | None = None) -> logging.Logger:
    """
    Create (or return existing) logger whose name is the caller's module
    (e.g. 'session'). Writes to <log_dir>/<name>.log and echoes to stdout.

    Pass a dotted *name* (e.g. 'tier_placement.core.placement') to attach
    the same handlers to an existing logger hierarchy; its last component
    names the log file.

    *level* defaults to $TIER_PLACEMENT_LOG_LEVEL (INFO when unset) and
    *log_dir* to $TIER_PLACEMENT_LOG_DIR (``<root>/logs`` when unset).
    """
    if name:
        logger_name = name
        name = name.split(".")[-1]
    else:
        # ── derive name from caller ───────────────────────────────────────
        caller = inspect.stack()[1]
        module = inspect.getmodule(caller[0])
        if module and module.__name__ != "__main__":
            name = module.__name__.split(".")[-1]
        else:
            # called as a script: use the file-stem (e.g., place_item)
            name = os.path.splitext(os.path.basename(caller.filename))[0]
        logger_name = f"tier_placement.{name}"

    logger = logging.getLogger(logger_name)
    if logger.handlers:                 # already initialised
        return logger

    level = _env_level(logging.INFO) if level is None else level
    log_dir = Path(log_dir or os.getenv("TIER_PLACEMENT_LOG_DIR", LOG_DIR))
    logger.setLevel(level)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{name}.log"

    # file handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(logging.Formatter(DEF_FMT, DEF_DATE))
    fh.setLevel(level)

    # console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    ch.setLevel(level)

    logger.addHandler(fh)
    logger.addHandler(ch)
    logger.propagate = False
    return logger
