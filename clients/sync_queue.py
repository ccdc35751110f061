from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from utils.errors import StorageUnavailable

log = logging.getLogger(__name__)

ACTIONS = ("set", "append", "delete_user")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PendingWrite:
    user_id: str
    action: str
    key: str | None = None
    value: Any = None
    queued_at: str = field(default_factory=_now_iso)


class SyncQueue:
    """
    Ordered buffer of writes that could not reach the remote store.

    Replay is at-most-once: a write is removed from the persisted queue
    before it is applied. If the remote is still unavailable the write goes
    back to the head of the queue and replay stops, keeping enqueue order.
    Any other failure drops the write: it is logged and kept in `dropped`
    for this process only.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._memory: list[dict] = []
        self.dropped: list[PendingWrite] = []

    def _load(self) -> list[dict]:
        if self.path is None:
            return list(self._memory)
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageUnavailable(f"Could not read sync queue {self.path}: {exc}") from exc
        return data if isinstance(data, list) else []

    def _save(self, items: list[dict]) -> None:
        if self.path is None:
            self._memory = list(items)
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(items, f, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageUnavailable(f"Could not write sync queue {self.path}: {exc}") from exc

    def enqueue(self, write: PendingWrite) -> None:
        if write.action not in ACTIONS:
            raise ValueError(f"Unknown write action {write.action!r}")
        items = self._load()
        items.append(asdict(write))
        self._save(items)
        log.info("Queued %s of %r for %s (%d pending)", write.action, write.key, write.user_id, len(items))

    def pending(self, user_id: str | None = None) -> list[PendingWrite]:
        writes = []
        for item in self._load():
            try:
                writes.append(PendingWrite(**item))
            except TypeError:
                log.warning("Ignoring unreadable queue entry %r", item)
        if user_id is None:
            return writes
        return [w for w in writes if w.user_id == user_id]

    def __len__(self) -> int:
        return len(self._load())

    def discard_user(self, user_id: str) -> int:
        items = self._load()
        kept = [i for i in items if i.get("user_id") != user_id]
        if len(kept) != len(items):
            self._save(kept)
        return len(items) - len(kept)

    def replay(self, apply: Callable[[PendingWrite], Any]) -> int:
        """Apply queued writes in order; return how many were replayed."""
        replayed = 0
        while True:
            items = self._load()
            if not items:
                break
            head, rest = items[0], items[1:]
            self._save(rest)

            try:
                write = PendingWrite(**head)
            except TypeError:
                log.error("Dropped unreadable queue entry %r", head)
                continue
            try:
                apply(write)
            except StorageUnavailable as exc:
                self._save([head] + self._load())
                log.warning("Replay stopped, remote still unavailable: %s", exc)
                break
            except Exception:
                # already dequeued; the write is lost, not retried
                log.exception("Dropped queued %s of %r for %s", write.action, write.key, write.user_id)
                self.dropped.append(write)
                continue
            replayed += 1

        if replayed:
            log.info("Replayed %d queued writes", replayed)
        return replayed
