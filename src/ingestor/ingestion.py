# ── src/ingestor/ingestion.py ────────────────────────────────────────────────
"""
Log ingestion.

Only admins may ingest. The payload is trusted: apart from stamping `issuer`,
`id` and a default `timestamp`, the record is stored exactly as received.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import Any, Callable, Dict

from .errors import PermissionDenied
from .query import format_timestamp
from .repository import LogRepository
from .tokens import Identity

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class IngestionService:
    def __init__(
        self,
        logs: LogRepository,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        self._logs = logs
        self._clock = clock

    def ingest(self, identity: Identity, payload: Dict[str, Any]) -> Dict[str, Any]:
        if identity is None or not identity.is_admin:
            raise PermissionDenied()

        record = dict(payload)
        ts = record.get("timestamp")
        if ts is None:
            record["timestamp"] = format_timestamp(self._clock())
        elif isinstance(ts, datetime.datetime):
            record["timestamp"] = format_timestamp(ts)
        record["issuer"] = identity.username
        record["id"] = uuid.uuid4().hex

        log_id = self._logs.insert_one(record)
        _logger.info("Ingested log %s (issuer=%s, level=%s)", log_id, identity.username, record.get("level"))
        return {"status": "success", "id": log_id}


__all__ = ["IngestionService"]
