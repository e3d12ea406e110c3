# ── src/routers/logs/__init__.py ─────────────────────────────────────
"""
Log sub-router.

POST /ingest            admin-only ingestion
GET  /logs, /logsBy*    query endpoints

Every route here sits behind the bearer-token gate pipeline.
"""
from .endpoints import router  # re-export for `include_router`
