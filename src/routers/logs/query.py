# ── src/routers/logs/query.py ─────────────────────────────────────────
"""
Read endpoints. Each one maps its query string onto a single QueryEngine
call; an empty match is `200 []`.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ingestor.models import LogRecord
from ingestor.services import Services, get_services

router = APIRouter(tags=["logs"])

_opts = dict(response_model=List[LogRecord], response_model_exclude_unset=True)


@router.get("/logs", summary="Level filter + full-text search", **_opts)
def search_logs(
    level: Optional[str] = Query(None),
    q:     Optional[str] = Query(None, description="Full-text search term"),
    services: Services = Depends(get_services),
):
    return services.queries.search(level, q)


@router.get("/logsByMessage", summary="Case-insensitive substring match on message", **_opts)
def logs_by_message(
    message: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_message(message)


@router.get("/logsByResourceId", **_opts)
def logs_by_resource_id(
    resourceId: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_resource_id(resourceId)


@router.get("/logsByTimestampRange", summary="Multi-filter with inclusive time range", **_opts)
def logs_by_timestamp_range(
    level:            Optional[str] = Query(None),
    message:          Optional[str] = Query(None),
    resourceId:       Optional[str] = Query(None),
    parentResourceId: Optional[str] = Query(None, alias="metadata.parentResourceId"),
    startDate:        Optional[str] = Query(None),
    endDate:          Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_timestamp_range(
        level=level,
        message=message,
        resource_id=resourceId,
        parent_resource_id=parentResourceId,
        start_date=startDate,
        end_date=endDate,
    )


@router.get("/logsByTraceId", **_opts)
def logs_by_trace_id(
    traceId: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_trace_id(traceId)


@router.get("/logsBySpanId", **_opts)
def logs_by_span_id(
    spanId: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_span_id(spanId)


@router.get("/logsByCommit", **_opts)
def logs_by_commit(
    commit: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_commit(commit)


@router.get("/logsByParentResourceId", **_opts)
def logs_by_parent_resource_id(
    parentResourceId: Optional[str] = Query(None),
    services: Services = Depends(get_services),
):
    return services.queries.by_parent_resource_id(parentResourceId)
