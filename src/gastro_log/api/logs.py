"""Log, safe-list, medication and analysis endpoints with bearer auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from gastro_log.api.models import (
    AnalyzeRequest,
    MedicationsRequest,
    SafeListRequest,
    SaveLogsRequest,
)
from gastro_log.domain.models import Identity

if TYPE_CHECKING:
    from gastro_log.containers import ServerContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["logs"])


def _container(request: Request) -> ServerContainer:
    return request.app.state.container


async def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> Identity:
    """Resolve the bearer token to a user or reject the request."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    token = authorization.removeprefix("Bearer ").strip()
    identity = _container(request).user_resolver.resolve(token) if token else None
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return identity


@router.get("/logs")
async def list_logs(
    request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Return the user's logs, newest first."""
    records = _container(request).cloud_store_service.list_logs(user.user_id)
    return {"logs": [record.to_wire() for record in records]}


@router.post("/logs")
async def save_logs(
    body: SaveLogsRequest, request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Upsert logs by id."""
    service = _container(request).cloud_store_service
    count = service.save_logs(user.user_id, body.logs)
    return {"success": True, "count": count}


@router.delete("/logs/{log_id}")
async def delete_log(
    log_id: str, request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Delete one of the user's logs."""
    _container(request).cloud_store_service.delete_log(user.user_id, log_id)
    return {"success": True}


@router.get("/safelist")
async def get_safe_list(
    request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Return the user's safe-list."""
    service = _container(request).cloud_store_service
    return {"items": service.get_safe_list(user.user_id)}


@router.post("/safelist")
async def replace_safe_list(
    body: SafeListRequest, request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Replace the user's safe-list."""
    service = _container(request).cloud_store_service
    service.replace_safe_list(user.user_id, body.items)
    return {"success": True}


@router.get("/medications")
async def list_medications(
    request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Return medication names the user has entered before."""
    service = _container(request).cloud_store_service
    return {"medications": service.list_medications(user.user_id)}


@router.post("/medications")
async def record_medications(
    body: MedicationsRequest, request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Add medication names to the user's history."""
    service = _container(request).cloud_store_service
    service.record_medications(user.user_id, body.medications)
    return {"synced": True}


@router.post("/analyze")
async def analyze(
    body: AnalyzeRequest, request: Request, user: Identity = Depends(require_user)
) -> dict[str, object]:
    """Classify a meal photo and memo."""
    classifier = _container(request).classifier
    if classifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis is not configured",
        )
    if not body.image and not body.memo.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide an image or a memo",
        )
    try:
        ingredients = await classifier.classify(
            image=body.image, memo=body.memo.strip() or None, model=body.model
        )
    except Exception as exc:
        logger.exception("Analysis failed for %s", user.user_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Analysis failed"
        ) from exc
    return {"ingredients": ingredients}
