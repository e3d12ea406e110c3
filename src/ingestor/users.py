# ── src/ingestor/users.py ────────────────────────────────────────────────────
"""
Shared helpers for user documents.

- ADMIN_ROLE: the only role with special meaning (may ingest logs).
- DEFAULT_ROLE: assigned when registration omits a role.
- build_user_doc(...): single source of truth for the stored document shape
  (username doubles as id and partition key).
"""

from typing import Any, Dict, Optional

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


def build_user_doc(username: str, stored_password: str, role: Optional[str]) -> Dict[str, Any]:
    return {
        "id":       username,          # id == PK for cheap point-reads
        "username": username,
        "password": stored_password,
        "role":     role or DEFAULT_ROLE,
    }


__all__ = ["ADMIN_ROLE", "DEFAULT_ROLE", "build_user_doc"]
