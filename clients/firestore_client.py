from __future__ import annotations

import json
import logging
from functools import wraps

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.oauth2 import service_account

from utils.errors import StorageUnavailable

log = logging.getLogger(__name__)

USERS_COLLECTION = "users"

_REMOTE_ERRORS = (
    api_exceptions.GoogleAPICallError,
    api_exceptions.RetryError,
    auth_exceptions.GoogleAuthError,
    ConnectionError,
    TimeoutError,
)


def _remote_call(method):
    """Turn transport/API failures into StorageUnavailable."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except _REMOTE_ERRORS as exc:
            log.warning("Firestore %s failed: %s", method.__name__, exc)
            raise StorageUnavailable(f"Firestore {method.__name__} failed: {exc}") from exc
    return wrapper


class FirestoreRecordStore:
    """
    Remote record store on Cloud Firestore.

    - One document per user in the `users` collection.
    - Each store key is a top-level field of that document
      (`workouts` is an array, `progress` a map).
    - Credentials come from a service-account JSON string; without one the
      client falls back to application default credentials.
    """

    def __init__(self, project: str, credentials_json: str | None = None, timeout: float = 5.0) -> None:
        self.timeout = timeout
        creds = None
        if credentials_json:
            try:
                info = json.loads(credentials_json)
            except json.JSONDecodeError as exc:
                raise RuntimeError("FIRESTORE_CREDENTIALS_JSON is not valid JSON.") from exc
            creds = service_account.Credentials.from_service_account_info(info)
        self.client = firestore.Client(project=project, credentials=creds)

    def _doc(self, user_id: str):
        return self.client.collection(USERS_COLLECTION).document(user_id)

    # ---------- public methods ----------

    @_remote_call
    def get(self, user_id: str, key: str, default=None):
        snap = self._doc(user_id).get(timeout=self.timeout)
        if not snap.exists:
            return default
        data = snap.to_dict() or {}
        return data.get(key, default)

    @_remote_call
    def set(self, user_id: str, key: str, value) -> bool:
        self._doc(user_id).set({key: value}, merge=True, timeout=self.timeout)
        return True

    @_remote_call
    def append(self, user_id: str, key: str, record) -> bool:
        # ArrayUnion skips an identical element, so a replayed append is not doubled
        self._doc(user_id).set({key: firestore.ArrayUnion([record])}, merge=True, timeout=self.timeout)
        return True

    @_remote_call
    def delete_user(self, user_id: str) -> bool:
        self._doc(user_id).delete(timeout=self.timeout)
        return True

    @_remote_call
    def ping(self) -> bool:
        self.client.collection("_health").document("online").get(timeout=self.timeout)
        return True
