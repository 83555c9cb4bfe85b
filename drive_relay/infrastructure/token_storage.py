"""Infrastructure implementations of token persistence."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from drive_relay.infrastructure.log_utils import log_message

_LOCKS: Dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def lock_for(path: Path) -> threading.RLock:
    """Return the process-wide lock serialising access to ``path``."""
    key = Path(path).resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


class JsonFileTokenStorage:
    """Persist tokens to a JSON file on disk.

    Writes go to a sibling temporary file that replaces the target in one
    rename, so readers see either the old payload or the new one.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self.lock = lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def read_tokens(self) -> Optional[Dict[str, object]]:
        with self.lock:
            if not self._path.exists():
                return None
            with self._path.open("r", encoding="utf-8") as handle:
                return json.load(handle)

    def save_tokens(self, tokens: Dict[str, object]) -> None:
        with self.lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(tokens, handle, indent=2)
                try:
                    os.chmod(tmp_name, 0o600)
                except OSError as exc:  # pragma: no cover - depends on platform
                    log_message(f"Could not set permissions on {tmp_name}: {exc}", "WARN")
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise


__all__ = ["JsonFileTokenStorage", "lock_for"]
