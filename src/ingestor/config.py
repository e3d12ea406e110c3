# ── src/ingestor/config.py ───────────────────────────────────────────────────
"""
Process configuration.

All settings come from the environment and are read once, at startup, by
`load_settings()`. The resulting `Settings` object is handed to the app factory
which builds the repositories and the token service from it; no module reads
`os.environ` on its own.

Environment (all optional):
- JWT_SECRET:          signing secret (falls back to SECRET, then "change-me")
- TOKEN_TTL_SECONDS:   token lifetime, default 3600
- STORAGE_BACKEND:     "cosmos" | "memory" (default: cosmos when COSMOS_ENDPOINT is set)
- COSMOS_ENDPOINT / COSMOS_KEY / COSMOS_DATABASE
- USERS_CONTAINER / LOGS_CONTAINER
- PASSWORD_SCHEME:     "sha256_crypt" (default) | "plaintext"
- OMIT_UNSET_FILTERS:  "1" to drop unset query params instead of matching absent fields
- FRONTEND_ORIGIN:     comma/space separated CORS origins
- LOG_LEVEL:           default INFO
- PORT:                default 3000
"""

from __future__ import annotations

import os as _os
from dataclasses import dataclass, field
from typing import List, Optional

BACKEND_COSMOS = "cosmos"
BACKEND_MEMORY = "memory"


# ───────────────────────── env helpers ─────────────────────────

def _env_bool(name: str, default: bool = False) -> bool:
    v = (_os.getenv(name) or "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def _env_str(name: str, default: str = "") -> str:
    return (_os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def parse_origins(env_value: str) -> List[str]:
    if not env_value:
        return []
    # split by comma or whitespace, trim, drop empties and trailing slashes
    raw = [p.strip() for chunk in env_value.split(",") for p in chunk.split()]
    origins: List[str] = []
    for o in raw:
        o = o.rstrip("/")
        if o and o not in origins:
            origins.append(o)
    return origins


# ───────────────────────── settings ─────────────────────────

@dataclass(frozen=True)
class Settings:
    jwt_secret:         str            = "change-me"
    token_ttl_seconds:  int            = 3600
    storage_backend:    str            = BACKEND_MEMORY
    cosmos_endpoint:    Optional[str]  = None
    cosmos_key:         Optional[str]  = None
    cosmos_database:    str            = "logsdb"
    users_container:    str            = "users"
    logs_container:     str            = "logs"
    password_scheme:    str            = "sha256_crypt"
    omit_unset_filters: bool           = False
    frontend_origins:   List[str]      = field(default_factory=list)
    log_level:          str            = "INFO"
    port:               int            = 3000


def load_settings() -> Settings:
    endpoint = _env_str("COSMOS_ENDPOINT") or None
    backend = _env_str("STORAGE_BACKEND").lower()
    if not backend:
        backend = BACKEND_COSMOS if endpoint else BACKEND_MEMORY
    if backend not in (BACKEND_COSMOS, BACKEND_MEMORY):
        raise ValueError(f"Unsupported STORAGE_BACKEND: {backend}")
    if backend == BACKEND_COSMOS and not endpoint:
        raise ValueError("STORAGE_BACKEND=cosmos requires COSMOS_ENDPOINT")

    return Settings(
        jwt_secret=_env_str("JWT_SECRET") or _env_str("SECRET") or "change-me",
        token_ttl_seconds=_env_int("TOKEN_TTL_SECONDS", 3600),
        storage_backend=backend,
        cosmos_endpoint=endpoint,
        cosmos_key=_env_str("COSMOS_KEY") or None,
        cosmos_database=_env_str("COSMOS_DATABASE", "logsdb"),
        users_container=_env_str("USERS_CONTAINER", "users"),
        logs_container=_env_str("LOGS_CONTAINER", "logs"),
        password_scheme=_env_str("PASSWORD_SCHEME", "sha256_crypt").lower(),
        omit_unset_filters=_env_bool("OMIT_UNSET_FILTERS", False),
        frontend_origins=parse_origins(_env_str("FRONTEND_ORIGIN")),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        port=_env_int("PORT", 3000),
    )


__all__ = [
    "BACKEND_COSMOS",
    "BACKEND_MEMORY",
    "Settings",
    "load_settings",
    "parse_origins",
]
