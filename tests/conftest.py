import copy

import pytest

from clients.local_store import LocalRecordStore
from clients.record_store import SyncingRecordStore
from clients.sync_queue import SyncQueue
from utils.errors import StorageUnavailable
from utils.workout_schema import WorkoutRecord, WorkoutSet
from workout_log import WorkoutLog


class FakeRemote:
    """In-memory stand-in for the Firestore store with an on/off switch."""

    def __init__(self):
        self.online = True
        self.error = None
        self.docs = {}
        self.calls = []

    def _check(self):
        if not self.online:
            raise StorageUnavailable("offline")
        if self.error is not None:
            raise self.error

    def ping(self):
        self._check()
        return True

    def get(self, user_id, key, default=None):
        self._check()
        return copy.deepcopy(self.docs.get(user_id, {}).get(key, default))

    def set(self, user_id, key, value):
        self._check()
        self.calls.append(("set", user_id, key))
        self.docs.setdefault(user_id, {})[key] = copy.deepcopy(value)
        return True

    def append(self, user_id, key, record):
        self._check()
        self.calls.append(("append", user_id, key))
        self.docs.setdefault(user_id, {}).setdefault(key, []).append(copy.deepcopy(record))
        return True

    def delete_user(self, user_id):
        self._check()
        self.calls.append(("delete_user", user_id, None))
        self.docs.pop(user_id, None)
        return True


def make_record(date, **exercises):
    """make_record("2025-01-01", Bench=[(100, 10), (None, 5)])"""
    return WorkoutRecord(
        date=date,
        exercises={
            name.replace("_", " "): tuple(WorkoutSet(weight=w, reps=r) for w, r in sets)
            for name, sets in exercises.items()
        },
    )


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def store(tmp_path, remote):
    return SyncingRecordStore(
        local=LocalRecordStore(tmp_path / "records.json"),
        queue=SyncQueue(tmp_path / "queue.json"),
        remote=remote,
    )


@pytest.fixture
def local_only_store(tmp_path):
    return SyncingRecordStore(
        local=LocalRecordStore(tmp_path / "records.json"),
        queue=SyncQueue(tmp_path / "queue.json"),
    )


@pytest.fixture
def workout_log(store):
    return WorkoutLog(store)
