"""Load scout configuration from config/scout.yaml, .env and the environment."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobscout.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT / "config"
CONFIG_PATH: Path = CONFIG_DIR / "scout.yaml"
DATA_DIR: Path = Path(os.environ.get("SCOUT_DATA_DIR", ROOT / "data"))
STORE_PATH: Path = DATA_DIR / "store.json"

DEFAULT_TARGET_URL = "https://www.upwork.com/nx/search/jobs/"

DEFAULTS: dict[str, Any] = {
    "target_url": DEFAULT_TARGET_URL,
    "page_load_timeout_seconds": 60,
    "headless": True,
    "preview_size": 50,
    "yield_every": 15,
    "message_retry_delay_seconds": 1.0,
    "notification_title": "Job Scout",
    # Chromium profile dir; reuse it to keep a manual marketplace login between runs
    "user_data_dir": "",
}

# env var -> (config key, parser)
_ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "SCOUT_TARGET_URL": ("target_url", str),
    "RUN_HEADLESS": ("headless", lambda v: v.lower() in ("1", "true", "yes")),
    "SCOUT_PAGE_TIMEOUT": ("page_load_timeout_seconds", int),
    "SCOUT_USER_DATA_DIR": ("user_data_dir", str),
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Defaults, then the YAML file (if any), then environment overrides."""
    cfg = dict(DEFAULTS)
    path = path or CONFIG_PATH
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must contain a mapping, got {type(data).__name__}")
        unknown = set(data) - set(DEFAULTS)
        if unknown:
            log.warning("Ignoring unknown config keys in %s: %s", path.name, ", ".join(sorted(unknown)))
        cfg.update({k: v for k, v in data.items() if k in DEFAULTS})

    for env_key, (cfg_key, parse) in _ENV_OVERRIDES.items():
        raw = get_env(env_key)
        if not raw:
            continue
        try:
            cfg[cfg_key] = parse(raw)
        except ValueError:
            log.warning("Invalid %s=%r, keeping %r", env_key, raw, cfg[cfg_key])
    return cfg


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
