# ── src/routers/logs/ingest.py ────────────────────────────────────────
from fastapi import APIRouter, Depends

from ingestor.gates import require_admin
from ingestor.models import IngestAck, LogRecordIn
from ingestor.services import Services, get_services
from ingestor.tokens import Identity

router = APIRouter(tags=["logs"])


@router.post("/ingest", response_model=IngestAck, summary="Ingest one log record (admin only)")
def ingest(
    payload: LogRecordIn,
    identity: Identity = Depends(require_admin),
    services: Services = Depends(get_services),
):
    return services.ingestion.ingest(identity, payload.model_dump(exclude_unset=True))
