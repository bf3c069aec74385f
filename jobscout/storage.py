"""Small JSON key-value store for settings, keywords and the shortlist."""
from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable

from jobscout.log import get_logger

log = get_logger(__name__)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class JsonStore:
    """Whole-file JSON object; ``set`` does a read-modify-write under a lock.

    Every reader and writer, in any process, takes an fcntl lock on the
    ``<name>.lock`` sidecar: shared for ``get``, exclusive for the whole of
    ``set``. Writes go to a temp file that replaces the store, so a reader
    never sees a truncated file.

    There is no schema versioning: absent keys come back as the caller's
    defaults.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._mutex = threading.Lock()

    @contextmanager
    def _locked(self, exclusive: bool):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._mutex, open(self.lock_path, "a", encoding="utf-8") as lf:
            _lock(lf, exclusive=exclusive)
            try:
                yield
            finally:
                _unlock(lf)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path.name} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, keys: Iterable[str], defaults: dict[str, Any] | None = None) -> dict[str, Any]:
        defaults = defaults or {}
        with self._locked(exclusive=False):
            data = self._read()
        return {k: data.get(k, defaults.get(k)) for k in keys}

    def set(self, values: dict[str, Any]) -> None:
        with self._locked(exclusive=True):
            data = self._read()
            data.update(values)
            self._write(data)
        log.debug("Stored %s → %s", ", ".join(sorted(values)), self.path.name)
