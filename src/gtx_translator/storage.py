from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Durable JSON-backed key-value store.

    The whole document is read once on construction and rewritten on every
    ``set``/``update`` so that a mutation is on disk before the call returns.
    Writes are serialized, so concurrent callers each land whole; the last
    writer of a key wins.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("{}", encoding="utf-8")
            logger.info(f"Created empty store file: {self.path}")
        raw = self.path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid store file: {self.path}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Store file must hold a JSON object: {self.path}")
        self._data = data
        logger.debug(f"Loaded {len(self._data)} keys from {self.path}")

    def save(self) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self.save()

    def update(self, values: dict[str, Any]) -> None:
        with self._lock:
            self._data.update(values)
            self.save()
