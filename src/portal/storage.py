"""Whole-document persistence for portal collections.

Every collection (routine, students, users, ...) is one named key inside a single
JSON document. Reads fetch the whole document; saves fetch it, replace one key
and write the whole document back. There is no merge or concurrency token, so
the last write wins.
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.portal.config import PortalConfig
from src.portal.errors import StorageError, TransientStorageError, ValidationError
from src.portal.logging import get_logger

log = get_logger(__name__)

COLLECTIONS: tuple[str, ...] = (
    "routine",
    "completedTasks",
    "students",
    "users",
    "feedback",
    "notifications",
    "syllabusData",
    "userSettings",
)

_DEFAULTS: dict[str, Any] = {
    "routine": {"days": {}},
    "completedTasks": {},
    "students": [],
    "users": [],
    "feedback": [],
    "notifications": [],
    "syllabusData": {},
    "userSettings": {},
}

DEFAULT_USER_SETTINGS: dict[str, bool] = {
    "emailNotifications": True,
    "pushNotifications": True,
}

# Status codes worth retrying: rate limiting and server-side failures
_TRANSIENT_STATUS = frozenset({429, 500, 502, 503, 504})


def empty_document() -> dict[str, Any]:
    """Return a fresh document with every collection at its default."""
    return copy.deepcopy(_DEFAULTS)


class DocumentStore:
    """Collection accessors over a whole-document backend.

    Subclasses implement ``load_document`` and ``store_document``.
    """

    def load_document(self) -> dict[str, Any]:
        raise NotImplementedError

    def store_document(self, document: dict[str, Any]) -> None:
        raise NotImplementedError

    def get(self, collection: str) -> Any:
        """Return a copy of one collection, or its default if absent."""
        _check_collection(collection)
        document = self.load_document()
        value = document.get(collection)
        if value is None:
            value = _DEFAULTS[collection]
        return copy.deepcopy(value)

    def save(self, collection: str, value: Any) -> None:
        """Replace one collection, rewriting the whole document."""
        _check_collection(collection)
        document = self.load_document()
        document[collection] = copy.deepcopy(value)
        self.store_document(document)
        log.debug("collection_saved", collection=collection)

    def get_routine(self) -> dict:
        return self.get("routine")

    def save_routine(self, routine: dict) -> None:
        self.save("routine", routine)

    def get_completed_tasks(self) -> dict:
        return self.get("completedTasks")

    def save_completed_tasks(self, tasks: dict) -> None:
        self.save("completedTasks", tasks)

    def get_students(self) -> list:
        return self.get("students")

    def save_students(self, students: list) -> None:
        self.save("students", students)

    def get_users(self) -> list:
        return self.get("users")

    def save_users(self, users: list) -> None:
        self.save("users", users)

    def get_feedback(self) -> list:
        return self.get("feedback")

    def save_feedback(self, feedback: list) -> None:
        self.save("feedback", feedback)

    def get_notifications(self) -> list:
        return self.get("notifications")

    def save_notifications(self, notifications: list) -> None:
        self.save("notifications", notifications)

    def get_syllabus_data(self) -> dict:
        return self.get("syllabusData")

    def save_syllabus_data(self, data: dict) -> None:
        self.save("syllabusData", data)

    def get_user_settings(self, username: str) -> dict:
        """Settings for one user, falling back to the defaults."""
        all_settings = self.get("userSettings")
        return all_settings.get(username) or dict(DEFAULT_USER_SETTINGS)

    def save_user_settings(self, username: str, settings: dict) -> None:
        document = self.load_document()
        all_settings = document.get("userSettings") or {}
        all_settings[username] = dict(settings)
        document["userSettings"] = all_settings
        self.store_document(document)
        log.debug("collection_saved", collection="userSettings", username=username)


def _check_collection(collection: str) -> None:
    if collection not in _DEFAULTS:
        raise ValidationError(
            f"Unknown collection {collection!r}. Valid: {list(COLLECTIONS)}"
        )


class HttpDocumentStore(DocumentStore):
    """Document store behind a single HTTP endpoint.

    GET returns the full JSON document; POST with a JSON body replaces it.
    Transient failures are retried, everything else raises StorageError.
    """

    def __init__(
        self,
        url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 15.0,
        max_retries: int = 3,
        retry_wait: float = 1.0,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self._retrying = retry(
            stop=stop_after_attempt(max(1, max_retries)),
            wait=wait_fixed(retry_wait),
            retry=retry_if_exception_type(TransientStorageError),
            reraise=True,
        )

    def load_document(self) -> dict[str, Any]:
        return self._retrying(self._fetch)()

    def store_document(self, document: dict[str, Any]) -> None:
        self._retrying(self._push)(document)

    def _fetch(self) -> dict[str, Any]:
        resp = self._request("GET")
        try:
            document = resp.json()
        except ValueError as e:
            log.error("document_invalid_json", url=self.url, error=str(e))
            raise StorageError(f"Document at {self.url} is not valid JSON") from e
        if not isinstance(document, dict):
            raise StorageError(f"Document at {self.url} is not a JSON object")
        return document

    def _push(self, document: dict[str, Any]) -> None:
        self._request("POST", json=document)

    def _request(self, method: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, self.url, timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            log.warning("storage_unreachable", method=method, url=self.url, error=str(e))
            raise TransientStorageError(f"{method} {self.url} failed: {e}") from e
        except requests.RequestException as e:
            log.error("storage_request_error", method=method, url=self.url, error=str(e))
            raise StorageError(f"{method} {self.url} failed: {e}") from e

        if resp.status_code in _TRANSIENT_STATUS:
            log.warning("storage_transient_status", method=method, status=resp.status_code)
            raise TransientStorageError(
                f"{method} {self.url} returned {resp.status_code}"
            )
        if not 200 <= resp.status_code < 300:
            log.error(
                "storage_rejected",
                method=method,
                status=resp.status_code,
                body=resp.text[:200],
            )
            raise StorageError(f"{method} {self.url} returned {resp.status_code}")
        return resp


class FileDocumentStore(DocumentStore):
    """Document store kept in a local JSON file.

    The file is created with empty collections on first access. Writes go
    through a temporary file in the same directory and are swapped in with
    os.replace, so a reader never sees half a document.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            document = empty_document()
            self.store_document(document)
            log.info("document_created", path=str(self.path))
            return document
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            log.error("document_read_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return document

    def store_document(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            log.error("document_write_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Could not write {self.path}: {e}") from e


def build_store(config: PortalConfig) -> DocumentStore:
    """Pick the backend named by the configuration."""
    if config.portal_data_file:
        log.info("store_selected", backend="file", path=config.portal_data_file)
        return FileDocumentStore(config.portal_data_file)
    log.info("store_selected", backend="http", url=config.portal_api_url)
    return HttpDocumentStore(
        config.portal_api_url,
        timeout=config.request_timeout_seconds,
        max_retries=config.max_retries,
        retry_wait=config.retry_wait_seconds,
    )
