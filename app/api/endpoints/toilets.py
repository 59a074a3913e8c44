"""Toilet endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_cache, get_current_identity, get_toilet_service, require_admin
from app.core.security import Identity
from app.models.vote import VoteType
from app.schemas.toilet import ToiletCreate, ToiletOut
from app.services.cache import QueryCache
from app.services.toilets import ToiletService

router = APIRouter(tags=["toilets"])


@router.get("/toilets", response_model=list[ToiletOut])
def search_toilets(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, allow_inf_nan=False, description="Search radius in meters"),
    service: ToiletService = Depends(get_toilet_service),
) -> list[ToiletOut]:
    """Visible toilets around a point; the radius is clamped server-side."""
    return service.search(lat, lng, radius)


@router.post("/toilets", response_model=ToiletOut, status_code=status.HTTP_201_CREATED)
def add_toilet(
    payload: ToiletCreate,
    identity: Identity = Depends(get_current_identity),
    service: ToiletService = Depends(get_toilet_service),
) -> ToiletOut:
    """Add a missing toilet; the submitter must stand next to it."""
    return service.submit(payload, identity)


@router.get("/toilets/hidden", response_model=list[ToiletOut])
def list_hidden_toilets(
    _admin: Identity = Depends(require_admin),
    service: ToiletService = Depends(get_toilet_service),
) -> list[ToiletOut]:
    return service.list_hidden()


@router.get("/toilets/{toilet_id}", response_model=ToiletOut)
def get_toilet(toilet_id: int, service: ToiletService = Depends(get_toilet_service)) -> ToiletOut:
    return service.get(toilet_id)


@router.post("/toilets/{toilet_id}/report", response_model=ToiletOut)
def report_toilet(
    toilet_id: int,
    identity: Identity = Depends(get_current_identity),
    service: ToiletService = Depends(get_toilet_service),
) -> ToiletOut:
    return service.vote(toilet_id, identity, VoteType.REPORT)


@router.post("/toilets/{toilet_id}/verify", response_model=ToiletOut)
def verify_toilet(
    toilet_id: int,
    identity: Identity = Depends(get_current_identity),
    service: ToiletService = Depends(get_toilet_service),
) -> ToiletOut:
    return service.vote(toilet_id, identity, VoteType.VERIFY)


@router.post("/toilets/{toilet_id}/restore", response_model=ToiletOut)
def restore_toilet(
    toilet_id: int,
    _admin: Identity = Depends(require_admin),
    service: ToiletService = Depends(get_toilet_service),
) -> ToiletOut:
    return service.restore(toilet_id)


@router.delete("/toilets/{toilet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_toilet(
    toilet_id: int,
    _admin: Identity = Depends(require_admin),
    service: ToiletService = Depends(get_toilet_service),
) -> Response:
    service.delete(toilet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/debug/cache", tags=["debug"])
def inspect_cache(
    _admin: Identity = Depends(require_admin),
    cache: QueryCache = Depends(get_cache),
) -> dict:
    """Live query-cache keys."""
    return {"keys": cache.keys(), "ttlSeconds": cache.ttl_seconds}
