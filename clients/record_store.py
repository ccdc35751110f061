from __future__ import annotations

import logging
from typing import Any, Protocol

from utils.errors import StorageUnavailable

from .local_store import LocalRecordStore
from .sync_queue import PendingWrite, SyncQueue

log = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Backend contract. Backends raise StorageUnavailable on I/O failure."""

    def get(self, user_id: str, key: str, default=None) -> Any: ...

    def set(self, user_id: str, key: str, value) -> bool: ...

    def append(self, user_id: str, key: str, record) -> bool: ...

    def delete_user(self, user_id: str) -> bool: ...

    def ping(self) -> bool: ...


class SyncingRecordStore:
    """
    Local cache in front of an optional remote store.

    Every write lands in the local cache first. Remote writes that fail with
    StorageUnavailable (or that would overtake already-queued writes) go to
    the sync queue and are replayed in order by flush(). Nothing here raises
    StorageUnavailable; failures are logged and reported as False.
    """

    def __init__(
        self,
        local: LocalRecordStore,
        queue: SyncQueue,
        remote: RecordStore | None = None,
    ) -> None:
        self.local = local
        self.queue = queue
        self.remote = remote

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    def has_pending(self, user_id: str | None = None) -> bool:
        try:
            return bool(self.queue.pending(user_id))
        except StorageUnavailable as exc:
            log.error("Sync queue unreadable: %s", exc)
            return False

    def pending_count(self, user_id: str | None = None) -> int:
        try:
            return len(self.queue.pending(user_id))
        except StorageUnavailable as exc:
            log.error("Sync queue unreadable: %s", exc)
            return 0

    def remote_online(self) -> bool:
        """Cheap round trip to the remote; False when there is none or it fails."""
        if self.remote is None:
            return False
        try:
            return bool(self.remote.ping())
        except StorageUnavailable as exc:
            log.info("Remote store offline: %s", exc)
            return False

    # ---------- reads ----------

    def get(self, user_id: str, key: str, default=None):
        # queued writes mean the remote copy is stale
        if self.remote is not None and not self.has_pending(user_id):
            try:
                value = self.remote.get(user_id, key, None)
            except StorageUnavailable as exc:
                log.warning("Remote read of %r for %s failed, using local copy: %s", key, user_id, exc)
            else:
                if value is not None:
                    self._cache(user_id, key, value)
                    return value

        try:
            return self.local.get(user_id, key, default)
        except StorageUnavailable as exc:
            log.error("Local read of %r for %s failed: %s", key, user_id, exc)
            return default

    def _cache(self, user_id: str, key: str, value) -> None:
        try:
            self.local.set(user_id, key, value)
        except StorageUnavailable as exc:
            log.warning("Could not refresh local cache of %r for %s: %s", key, user_id, exc)

    # ---------- writes ----------

    def _write(self, write: PendingWrite) -> bool:
        local_ok = True
        try:
            self._apply(self.local, write)
        except StorageUnavailable as exc:
            log.error("Local %s of %r for %s failed: %s", write.action, write.key, write.user_id, exc)
            local_ok = False

        if self.remote is None:
            return local_ok

        if not self.has_pending(write.user_id):
            try:
                self._apply(self.remote, write)
                return True
            except StorageUnavailable as exc:
                log.warning("Remote %s of %r for %s failed, queueing: %s", write.action, write.key, write.user_id, exc)

        try:
            self.queue.enqueue(write)
        except StorageUnavailable as exc:
            log.error("Could not queue %s of %r for %s: %s", write.action, write.key, write.user_id, exc)
            return local_ok
        return True

    @staticmethod
    def _apply(store, write: PendingWrite):
        if write.action == "set":
            return store.set(write.user_id, write.key, write.value)
        if write.action == "append":
            return store.append(write.user_id, write.key, write.value)
        return store.delete_user(write.user_id)

    def set(self, user_id: str, key: str, value) -> bool:
        return self._write(PendingWrite(user_id=user_id, action="set", key=key, value=value))

    def append(self, user_id: str, key: str, record) -> bool:
        return self._write(PendingWrite(user_id=user_id, action="append", key=key, value=record))

    def delete_user(self, user_id: str) -> bool:
        try:
            dropped = self.queue.discard_user(user_id)
            if dropped:
                log.info("Dropped %d queued writes for %s", dropped, user_id)
        except StorageUnavailable as exc:
            log.error("Could not prune sync queue for %s: %s", user_id, exc)
        return self._write(PendingWrite(user_id=user_id, action="delete_user"))

    # ---------- sync ----------

    def flush(self) -> int:
        """Replay queued writes against the remote; returns how many went through."""
        if self.remote is None:
            return 0
        try:
            return self.queue.replay(lambda w: self._apply(self.remote, w))
        except StorageUnavailable as exc:
            log.error("Sync queue unavailable: %s", exc)
            return 0
