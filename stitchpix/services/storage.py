"""Durable string key/value storage backed by a JSON file."""

import json
import logging
import os
import tempfile
from pathlib import Path


logger = logging.getLogger(__name__)


class LocalStorage:
    """A tiny localStorage: string keys, string values, one JSON file.
    
    Every write rewrites the file through a temp file and ``os.replace`` so a
    crash never leaves a half-written store behind. Concurrent writers are not
    coordinated; the last write wins.
    """
    
    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: dict[str, str] = self._read()
    
    def get_item(self, key: str) -> str | None:
        return self._items.get(key)
    
    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._write()
    
    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write()
    
    def clear(self) -> None:
        self._items.clear()
        self._write()
    
    def keys(self) -> list[str]:
        return list(self._items)
    
    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}
    
    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
