# src/pocket_todo/storage/json_file.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceReadError, PersistenceWriteError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class JsonFilePersistence:
    """
    One JSON file per key inside `directory`.

    Writes go to a temp file first and are moved into place with os.replace,
    so a reader sees either the previous snapshot or the new one.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info("JsonFilePersistence ready dir=%s", self._dir)

    def path_for(self, key: str) -> Path:
        name = _UNSAFE_KEY_CHARS.sub("_", key).strip("._") or "default"
        return self._dir / f"{name}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text("utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            raise PersistenceReadError(f"Cannot read {path}: {e}") from e

    def save(self, key: str, snapshot: list[dict[str, Any]]) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(snapshot, ensure_ascii=False), "utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise PersistenceWriteError(f"Cannot write {path}: {e}") from e
        with contextlib.suppress(OSError):
            # Personal data: keep the file private on disk.
            os.chmod(path, 0o600)
