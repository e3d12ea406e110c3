# ── src/ingestor/gates.py ────────────────────────────────────────────────────
"""
Access control for protected routes.

A gate is `gate(request, tokens) -> None`: it either records something on
`request.state` or raises. Gates run in order and the first failure
short-circuits the request before any handler runs.

    bearer_gate  Authorization: Bearer <token> present   → else AuthMissing
    token_gate   token verifies (signature + expiry)      → else AuthInvalid

On success `request.state.identity` holds the decoded `Identity`.
`require_admin` adds the role check for admin-only routes; it resolves
before the request body is validated.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from fastapi import Depends, Request

from .errors import AuthInvalid, AuthMissing, PermissionDenied, TokenError
from .services import Services, get_services
from .tokens import Identity, TokenService

_logger = logging.getLogger(__name__)

Gate = Callable[[Request, TokenService], None]


def bearer_gate(request: Request, tokens: TokenService) -> None:
    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith("bearer "):
        _logger.debug("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise AuthMissing()
    request.state.bearer_token = auth.split(" ", 1)[1].strip()


def token_gate(request: Request, tokens: TokenService) -> None:
    try:
        request.state.identity = tokens.verify_token(request.state.bearer_token)
    except TokenError as exc:
        # reason stays server-side; clients only see "Invalid token"
        _logger.debug("Rejected %s %s: %s (%s)", request.method, request.url.path,
                      type(exc).__name__, exc)
        raise AuthInvalid() from exc


DEFAULT_GATES: Sequence[Gate] = (bearer_gate, token_gate)


def run_gates(request: Request, tokens: TokenService, gates: Sequence[Gate] = DEFAULT_GATES) -> Identity:
    for gate in gates:
        gate(request, tokens)
    return request.state.identity


def require_identity(request: Request, services: Services = Depends(get_services)) -> Identity:
    """FastAPI dependency guarding every protected route."""
    return run_gates(request, services.tokens)


def require_admin(identity: Identity = Depends(require_identity)) -> Identity:
    if not identity.is_admin:
        _logger.info("Rejected admin-only request by %s (role=%s)", identity.username, identity.role)
        raise PermissionDenied()
    return identity


__all__ = [
    "Gate",
    "bearer_gate",
    "token_gate",
    "DEFAULT_GATES",
    "run_gates",
    "require_identity",
    "require_admin",
]
