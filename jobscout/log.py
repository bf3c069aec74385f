"""Logging setup for the scraper, the scheduler and the surfaces."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOG_DIR: Path = Path(os.environ.get("SCOUT_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; the first call installs the root handlers."""
    if not _configured:
        configure()
    return logging.getLogger(name)


def configure(level: str | None = None) -> None:
    """Install console + daily file handlers once; later calls only adjust the level."""
    global _configured
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved)

    if _configured:
        for handler in root.handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(resolved)
        return
    if root.handlers:
        # someone else (a host app, the test runner) owns the handlers
        _configured = True
        return

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    root.addHandler(console)

    # Per-card extraction failures only show up at DEBUG, so the file keeps everything.
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(LOG_DIR / f"scout_{datetime.now():%Y-%m-%d}.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except OSError:
        pass
    _configured = True
