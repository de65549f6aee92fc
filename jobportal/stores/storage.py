"""
Client storage backends - localStorage-style key/value persistence.

Each key holds one JSON object, written as {"state": {...}, "version": n}
by the stores. JsonFileStorage keeps every key in a single JSON file;
MemoryStorage is the in-process equivalent.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Dict-backed storage (tests, one-shot CLI sessions)."""

    def __init__(self, initial: Optional[Dict[str, dict]] = None):
        self._items: Dict[str, dict] = dict(initial or {})

    def get_item(self, key: str) -> Optional[dict]:
        value = self._items.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def set_item(self, key: str, value: dict):
        # Round-trip through JSON so only serialisable state is accepted
        self._items[key] = json.loads(json.dumps(value))

    def remove_item(self, key: str):
        self._items.pop(key, None)


class JsonFileStorage:
    """
    All keys in one JSON file.

    A missing or unreadable file reads as empty. Writes go to a temp file in
    the same directory and are swapped in with os.replace.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable client storage %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, dict]):
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[dict]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: dict):
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str):
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
