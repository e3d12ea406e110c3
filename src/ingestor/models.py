# ── src/ingestor/models.py ───────────────────────────────────────────────────
"""Request / response bodies."""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ────────────────────────── auth ──────────────────────────
class UserCreate(BaseModel):
    username: str            = Field(..., min_length=1)
    password: str
    role:     Optional[str]  = None


class UserRead(BaseModel):
    message: str = "User registered successfully"
    id:      str


class LoginIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    token: str


# ────────────────────────── logs ──────────────────────────
class LogMetadata(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    parentResourceId: Optional[str] = None


class LogRecordIn(BaseModel):
    """Incoming record. Unknown keys are kept verbatim; numbers sent for the
    string fields are stored as strings."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    level:      Optional[str]                = None
    message:    Optional[str]                = None
    resourceId: Optional[str]                = None
    timestamp:  Optional[datetime.datetime]  = None
    traceId:    Optional[str]                = None
    spanId:     Optional[str]                = None
    commit:     Optional[str]                = None
    metadata:   Optional[LogMetadata]        = None


class LogRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id:         str
    level:      Optional[str]          = None
    message:    Optional[str]          = None
    resourceId: Optional[str]          = None
    timestamp:  Optional[str]          = None
    traceId:    Optional[str]          = None
    spanId:     Optional[str]          = None
    commit:     Optional[str]          = None
    metadata:   Optional[LogMetadata]  = None
    issuer:     Optional[str]          = None


class IngestAck(BaseModel):
    status: str = "success"
    id:     str
