# ── src/routers/logs/endpoints.py ─────────────────────────────────────
"""
Aggregator for the protected log routes. The gate pipeline runs as a
router-level dependency, so no handler executes for an unauthenticated call.
"""
from fastapi import APIRouter, Depends

from ingestor.gates import require_identity

from .ingest import router as ingest_router
from .query  import router as query_router

router = APIRouter(dependencies=[Depends(require_identity)])

router.include_router(ingest_router)
router.include_router(query_router)
