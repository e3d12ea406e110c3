# ── src/ingestor/cosmos.py ───────────────────────────────────────────────────
"""
Azure Cosmos DB (NoSQL API) backend.

Users container: partition key /username, id == username, so lookups are point
reads. Logs container: any partition key; queries run cross-partition.

Log filters are compiled into one parameterized SQL statement:

    EQUALS   c.f = @pN
    PATTERN  CONTAINS(c.f, @pN, true)
    RANGE    (c.f >= @pN AND c.f <= @pM)       timestamps are ISO strings
    TEXT     FullTextContainsAny(c.message, ...) AND NOT FullTextContains(...)
    ABSENT   (NOT IS_DEFINED(c.f) OR IS_NULL(c.f))

Full-text clauses need a full-text policy/index on the text fields of the logs
container.

Any azure-core failure (HTTP error, transport, credential) surfaces as
PersistenceError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, exceptions
from azure.identity import DefaultAzureCredential

from .config import Settings
from .errors import DuplicateUsername, PersistenceError
from .query import TEXT_FIELDS, Clause, LogField, MatchKind, QueryFilter, format_timestamp
from .repository import LogRepository, UserRepository

_logger = logging.getLogger(__name__)

_SYSTEM_PROPS = ("_rid", "_self", "_etag", "_attachments", "_ts")


def _strip_system(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in _SYSTEM_PROPS}


def _ref(field: LogField) -> str:
    return "c." + ".".join(field.path)


# ───────────────────────── SQL compilation ─────────────────────────

class _Params:
    def __init__(self):
        self.items: List[Dict[str, Any]] = []

    def add(self, value: Any) -> str:
        name = f"@p{len(self.items)}"
        self.items.append({"name": name, "value": value})
        return name


def _compile_clause(clause: Clause, params: _Params) -> str:
    if clause.kind is MatchKind.TEXT:
        tq = clause.value
        phrases = tq.phrases()
        parts = []
        for f in TEXT_FIELDS:
            ref = _ref(f)
            if phrases:
                cond = f"FullTextContainsAny({ref}, {', '.join(params.add(p) for p in phrases)})"
            else:
                cond = "false"
            for neg in tq.negated():
                cond += f" AND NOT FullTextContains({ref}, {params.add(neg)})"
            parts.append(f"({cond})")
        return "(" + " OR ".join(parts) + ")"

    ref = _ref(clause.field)
    if clause.kind is MatchKind.ABSENT:
        return f"(NOT IS_DEFINED({ref}) OR IS_NULL({ref}))"
    if clause.kind is MatchKind.EQUALS:
        return f"{ref} = {params.add(clause.value)}"
    if clause.kind is MatchKind.PATTERN:
        return f"CONTAINS({ref}, {params.add(clause.value)}, true)"
    if clause.kind is MatchKind.RANGE:
        start, end = clause.value
        if start is None or end is None:
            return "false"
        return (
            f"({ref} >= {params.add(format_timestamp(start))} "
            f"AND {ref} <= {params.add(format_timestamp(end))})"
        )
    raise ValueError(f"Unsupported match kind: {clause.kind}")


def compile_filter(query_filter: QueryFilter) -> Tuple[str, List[Dict[str, Any]]]:
    """Return (query, parameters) for `container.query_items`."""
    params = _Params()
    conditions = [_compile_clause(c, params) for c in query_filter.clauses]
    query = "SELECT * FROM c"
    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    return query, params.items


# ───────────────────────── repositories ─────────────────────────

class CosmosLogRepository(LogRepository):
    def __init__(self, container):
        self._container = container

    def insert_one(self, doc: Dict[str, Any]) -> str:
        try:
            self._container.create_item(doc)
        except AzureError as exc:
            raise PersistenceError(f"Cosmos insert failed: {exc.message}") from exc
        return doc["id"]

    def find(self, query_filter: QueryFilter) -> List[Dict[str, Any]]:
        query, parameters = compile_filter(query_filter)
        try:
            items = list(self._container.query_items(
                query=query,
                parameters=parameters,
                enable_cross_partition_query=True,
            ))
        except AzureError as exc:
            raise PersistenceError(f"Cosmos query failed: {exc.message}") from exc
        return [_strip_system(it) for it in items]


class CosmosUserRepository(UserRepository):
    def __init__(self, container):
        self._container = container

    def get(self, username: str) -> Optional[Dict[str, Any]]:
        """Fast point-read via id == partition key (/username)."""
        try:
            return _strip_system(self._container.read_item(item=username, partition_key=username))
        except exceptions.CosmosResourceNotFoundError:
            return None
        except AzureError as exc:
            raise PersistenceError(f"Cosmos read failed: {exc.message}") from exc

    def create(self, doc: Dict[str, Any]) -> str:
        try:
            self._container.create_item(doc)
        except exceptions.CosmosResourceExistsError:
            raise DuplicateUsername() from None
        except AzureError as exc:
            raise PersistenceError(f"Cosmos insert failed: {exc.message}") from exc
        return doc["id"]


def connect(settings: Settings) -> Tuple[CosmosUserRepository, CosmosLogRepository]:
    """Build both repositories from one client (key auth, else managed identity)."""
    if settings.cosmos_key:
        client = CosmosClient(settings.cosmos_endpoint, credential=settings.cosmos_key)
    else:
        client = CosmosClient(settings.cosmos_endpoint, credential=DefaultAzureCredential())

    database = client.get_database_client(settings.cosmos_database)
    users = database.get_container_client(settings.users_container)
    logs = database.get_container_client(settings.logs_container)
    _logger.info(
        "Connected to Cosmos database %s (users=%s, logs=%s)",
        settings.cosmos_database, settings.users_container, settings.logs_container,
    )
    return CosmosUserRepository(users), CosmosLogRepository(logs)


__all__ = [
    "compile_filter",
    "CosmosLogRepository",
    "CosmosUserRepository",
    "connect",
]
