"""
Live viewer endpoints
=====================

POST /api/v1/viewers -- heartbeat from an open client, returns the count
GET  /api/v1/viewers -- current number of active viewers
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_viewer_registry
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    ViewerCountResponse,
    ViewerHeartbeatRequest,
    ViewerHeartbeatResponse,
)
from src.infrastructure.viewers import ViewerRegistry

router = APIRouter(prefix="/viewers", tags=["viewers"])


@router.post(
    "",
    response_model=ViewerHeartbeatResponse,
    summary="Record a viewer heartbeat",
    description="Viewers silent for longer than the timeout stop counting.",
)
@limiter.limit(RATE_LIMIT)
async def heartbeat(
    request: Request,
    body: ViewerHeartbeatRequest,
    registry: ViewerRegistry = Depends(get_viewer_registry),
):
    count = await registry.heartbeat(body.viewer_id)
    return ViewerHeartbeatResponse(active_viewers=count)


@router.get(
    "", response_model=ViewerCountResponse, summary="Count active viewers"
)
@limiter.limit(RATE_LIMIT)
async def active_viewers(
    request: Request,
    registry: ViewerRegistry = Depends(get_viewer_registry),
):
    return ViewerCountResponse(active_viewers=await registry.active_count())
