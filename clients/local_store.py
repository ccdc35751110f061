from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from utils.errors import StorageUnavailable

log = logging.getLogger(__name__)


class LocalRecordStore:
    """
    JSON-file backed store: {user_id: {key: value}}.

    - path=None keeps everything in memory (used as a cache in tests).
    - Read/write failures raise StorageUnavailable; callers decide whether
      that is fatal.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._memory: dict[str, dict[str, Any]] = {}

    # ---------- internal helpers ----------

    def _load(self) -> dict:
        if self.path is None:
            return self._memory
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageUnavailable(f"Could not read {self.path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def _save(self, store: dict) -> None:
        if self.path is None:
            self._memory = store
            return
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(store, f, indent=2)
            tmp.replace(self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageUnavailable(f"Could not write {self.path}: {exc}") from exc

    # ---------- public methods ----------

    def get(self, user_id: str, key: str, default=None):
        user = self._load().get(user_id) or {}
        if key not in user:
            return default
        return copy.deepcopy(user[key])

    def set(self, user_id: str, key: str, value) -> bool:
        store = self._load()
        store.setdefault(user_id, {})[key] = copy.deepcopy(value)
        self._save(store)
        return True

    def append(self, user_id: str, key: str, record) -> bool:
        store = self._load()
        user = store.setdefault(user_id, {})
        items = user.get(key)
        if not isinstance(items, list):
            if items is not None:
                log.warning("Replacing non-list %r for user %s", key, user_id)
            items = []
        items.append(copy.deepcopy(record))
        user[key] = items
        self._save(store)
        return True

    def delete_user(self, user_id: str) -> bool:
        store = self._load()
        if store.pop(user_id, None) is not None:
            self._save(store)
        return True

    def users(self) -> list[str]:
        return list(self._load().keys())
