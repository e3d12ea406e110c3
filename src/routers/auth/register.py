# ── src/routers/auth/register.py ─────────────────────────────────────────────
from fastapi import APIRouter, Depends, status

from ingestor.models import UserCreate, UserRead
from ingestor.services import Services, get_services

# ──────────────────────────── Router ────────────────────────────
router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, services: Services = Depends(get_services)):
    # DuplicateUsername → 400 via the app-level error handler
    user_id = services.credentials.register(user.username, user.password, user.role)
    return {"message": "User registered successfully", "id": user_id}
