#!/usr/bin/env python3
"""Entry point for the job scout.

    python run_scraper.py run          # scrape now, then every N minutes
    python run_scraper.py once
    python run_scraper.py keywords add python django
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobscout.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
