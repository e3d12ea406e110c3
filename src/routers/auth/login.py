# ── src/routers/auth/login.py ────────────────────────────────────────────────
from fastapi import APIRouter, Depends

from ingestor.models import LoginIn, TokenOut
from ingestor.services import Services, get_services

# ──────────────────────────── Router ────────────────────────────
router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenOut)
def login(creds: LoginIn, services: Services = Depends(get_services)):
    """
    Exchange username + password for a bearer token (HS256, 1 h by default).
    Earlier tokens of the same user stay valid until they expire.
    """
    token = services.credentials.login(creds.username, creds.password, services.tokens)
    return {"token": token}
