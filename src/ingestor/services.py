# ── src/ingestor/services.py ─────────────────────────────────────────────────
"""
Service container built once at startup and stored on `app.state.services`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .config import BACKEND_COSMOS, Settings
from .credentials import CredentialStore, PasswordScheme
from .ingestion import IngestionService
from .query import QueryEngine
from .repository import (
    InMemoryLogRepository,
    InMemoryUserRepository,
    LogRepository,
    UserRepository,
)
from .tokens import TokenService

_logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings:    Settings
    tokens:      TokenService
    credentials: CredentialStore
    ingestion:   IngestionService
    queries:     QueryEngine


def build_services(
    settings: Settings,
    users: Optional[UserRepository] = None,
    logs: Optional[LogRepository] = None,
) -> Services:
    if users is None or logs is None:
        if settings.storage_backend == BACKEND_COSMOS:
            from .cosmos import connect
            cosmos_users, cosmos_logs = connect(settings)
            users = users or cosmos_users
            logs = logs or cosmos_logs
        else:
            _logger.warning("Using in-memory storage; data is lost on restart")
            users = users or InMemoryUserRepository()
            logs = logs or InMemoryLogRepository()

    return Services(
        settings=settings,
        tokens=TokenService(settings.jwt_secret, settings.token_ttl_seconds),
        credentials=CredentialStore(users, PasswordScheme(settings.password_scheme)),
        ingestion=IngestionService(logs),
        queries=QueryEngine(logs, omit_unset=settings.omit_unset_filters),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


__all__ = ["Services", "build_services", "get_services"]
