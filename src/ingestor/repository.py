# ── src/ingestor/repository.py ───────────────────────────────────────────────
"""
Repository interfaces for the two document collections, plus the in-memory
backend used for local runs and tests. The Cosmos backend lives in
`ingestor.cosmos`.

LogRepository:  insert_one(doc) -> id, find(query_filter) -> [doc]
UserRepository: get(username) -> doc | None, create(doc) -> id
"""

from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .errors import DuplicateUsername

if TYPE_CHECKING:  # pragma: no cover
    from .query import QueryFilter


class LogRepository(ABC):
    @abstractmethod
    def insert_one(self, doc: Dict[str, Any]) -> str:
        """Persist one log document; returns its id."""

    @abstractmethod
    def find(self, query_filter: "QueryFilter") -> List[Dict[str, Any]]:
        """Return every document matching the filter, in store order."""


class UserRepository(ABC):
    @abstractmethod
    def get(self, username: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def create(self, doc: Dict[str, Any]) -> str:
        """Persist a new user; raises DuplicateUsername if the id is taken."""


# ───────────────────────── in-memory backend ─────────────────────────

class InMemoryLogRepository(LogRepository):
    def __init__(self):
        self._docs: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def insert_one(self, doc: Dict[str, Any]) -> str:
        with self._lock:
            self._docs.append(copy.deepcopy(doc))
        return doc["id"]

    def find(self, query_filter: "QueryFilter") -> List[Dict[str, Any]]:
        with self._lock:
            snapshot = list(self._docs)
        return [copy.deepcopy(d) for d in snapshot if query_filter.matches(d)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self._users: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, username: str) -> Optional[Dict[str, Any]]:
        doc = self._users.get(username)
        return copy.deepcopy(doc) if doc is not None else None

    def create(self, doc: Dict[str, Any]) -> str:
        with self._lock:
            if doc["id"] in self._users:
                raise DuplicateUsername()
            self._users[doc["id"]] = copy.deepcopy(doc)
        return doc["id"]

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


__all__ = [
    "LogRepository",
    "UserRepository",
    "InMemoryLogRepository",
    "InMemoryUserRepository",
]
