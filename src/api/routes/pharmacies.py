"""
Pharmacy endpoints
==================

GET    /api/v1/pharmacies          -- list / search pharmacies
GET    /api/v1/pharmacies/nearby   -- pharmacies within a radius, nearest first
GET    /api/v1/pharmacies/{id}     -- fetch one pharmacy
POST   /api/v1/pharmacies          -- register a pharmacy
PATCH  /api/v1/pharmacies/{id}     -- partial update
DELETE /api/v1/pharmacies/{id}     -- delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import Page, get_db
from src.api.errors import conflict, ensure_exists, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    GeoPoint,
    NearbyPharmaciesResponse,
    NearbyPharmacy,
    PharmacyCreateRequest,
    PharmacyResponse,
    PharmacyUpdateRequest,
)
from src.domain.distance import SEARCH_PRECISION, haversine_km
from src.infrastructure.models import PharmacyModel
from src.infrastructure.repositories import PharmacyRepository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pharmacies", tags=["pharmacies"])

MAX_NEARBY_RADIUS_KM = 50
MAX_NEARBY_RESULTS = 50


@router.get("", response_model=list[PharmacyResponse], summary="List pharmacies")
@limiter.limit(RATE_LIMIT)
async def list_pharmacies(
    request: Request,
    search: Optional[str] = Query(
        None, max_length=100, description="Matches name, address or license."
    ),
    is_active: Optional[bool] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await PharmacyRepository(db).find(
        search=search, is_active=is_active, limit=page.limit, offset=page.offset
    )


@router.get(
    "/nearby",
    response_model=NearbyPharmaciesResponse,
    summary="Find pharmacies near a location",
    description=(
        "Great-circle distance from the given point to every pharmacy; "
        "results inside the radius are sorted nearest first."
    ),
)
@limiter.limit(RATE_LIMIT)
async def nearby_pharmacies(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(10.0, gt=0, le=MAX_NEARBY_RADIUS_KM, description="km"),
    limit: int = Query(10, ge=1, description=f"Clamped to {MAX_NEARBY_RESULTS}."),
    is_active: bool = Query(True, description="false also returns inactive ones."),
    db: AsyncSession = Depends(get_db),
):
    pharmacies = await PharmacyRepository(db).get_all(active_only=is_active)

    in_range: list[tuple[float, PharmacyModel]] = []
    for pharmacy in pharmacies:
        distance = haversine_km(
            latitude,
            longitude,
            pharmacy.latitude,
            pharmacy.longitude,
            precision=SEARCH_PRECISION,
        )
        if distance <= radius:
            in_range.append((distance, pharmacy))
    in_range.sort(key=lambda pair: pair[0])

    results = [
        NearbyPharmacy(
            **PharmacyResponse.model_validate(pharmacy).model_dump(),
            distance=distance,
        )
        for distance, pharmacy in in_range[: min(limit, MAX_NEARBY_RESULTS)]
    ]
    return NearbyPharmaciesResponse(
        pharmacies=results,
        user_location=GeoPoint(latitude=latitude, longitude=longitude),
        radius=radius,
        count=len(results),
    )


@router.get(
    "/{pharmacy_id}", response_model=PharmacyResponse, summary="Get a pharmacy"
)
@limiter.limit(RATE_LIMIT)
async def get_pharmacy(
    request: Request,
    pharmacy_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(PharmacyRepository(db), pharmacy_id, "Pharmacy")


@router.post(
    "",
    status_code=201,
    response_model=PharmacyResponse,
    summary="Register a pharmacy",
    responses={409: {"description": "License number already registered."}},
)
@limiter.limit(RATE_LIMIT)
async def create_pharmacy(
    request: Request,
    body: PharmacyCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = PharmacyRepository(db)
    if await repo.get_by_license(body.license_number):
        raise conflict("A pharmacy with this license number already exists")
    await ensure_exists(UserRepository(db), body.user_id, "User")

    pharmacy = await repo.create(PharmacyModel(**body.model_dump()))
    logger.info(
        "Registered pharmacy %s (%s)", pharmacy.id, pharmacy.license_number
    )
    return pharmacy


@router.patch(
    "/{pharmacy_id}", response_model=PharmacyResponse, summary="Update a pharmacy"
)
@limiter.limit(RATE_LIMIT)
async def update_pharmacy(
    request: Request,
    pharmacy_id: int,
    body: PharmacyUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = PharmacyRepository(db)
    pharmacy = await get_or_404(repo, pharmacy_id, "Pharmacy")
    changes = body.changes()

    if "license_number" in changes:
        existing = await repo.get_by_license(changes["license_number"])
        if existing and existing.id != pharmacy.id:
            raise conflict("A pharmacy with this license number already exists")
    await ensure_exists(UserRepository(db), changes.get("user_id"), "User")

    return await repo.update(pharmacy, changes)


@router.delete(
    "/{pharmacy_id}",
    response_model=DeleteResponse[PharmacyResponse],
    summary="Delete a pharmacy",
)
@limiter.limit(RATE_LIMIT)
async def delete_pharmacy(
    request: Request,
    pharmacy_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = PharmacyRepository(db)
    pharmacy = await get_or_404(repo, pharmacy_id, "Pharmacy")
    deleted = PharmacyResponse.model_validate(pharmacy)
    await repo.delete(pharmacy)
    logger.info("Deleted pharmacy %s", pharmacy_id)
    return DeleteResponse[PharmacyResponse](
        message="Pharmacy deleted successfully", deleted=deleted
    )
