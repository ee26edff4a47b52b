"""
Inventory endpoints
===================

GET    /api/v1/inventory              -- list stock rows
GET    /api/v1/inventory/check-stock  -- where a medicine is in stock
GET    /api/v1/inventory/{id}         -- fetch one stock row
POST   /api/v1/inventory              -- add stock for a pharmacy / medicine
PATCH  /api/v1/inventory/{id}         -- partial update (re-stamps last_updated)
DELETE /api/v1/inventory/{id}         -- delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import MAX_PAGE_SIZE, Page, get_db
from src.api.errors import ensure_exists, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    InventoryCreateRequest,
    InventoryResponse,
    InventoryUpdateRequest,
    MedicineResponse,
    SearchArea,
    StockAvailability,
    StockCheckResponse,
)
from src.domain.distance import SEARCH_PRECISION, haversine_km
from src.domain.pricing import discounted_price
from src.domain.timeutils import utcnow
from src.infrastructure.models import InventoryModel
from src.infrastructure.repositories import (
    InventoryRepository,
    MedicineRepository,
    PharmacyRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=list[InventoryResponse], summary="List inventory")
@limiter.limit(RATE_LIMIT)
async def list_inventory(
    request: Request,
    pharmacy_id: Optional[int] = Query(None, gt=0),
    medicine_id: Optional[int] = Query(None, gt=0),
    is_available: Optional[bool] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryRepository(db).find(
        pharmacy_id=pharmacy_id,
        medicine_id=medicine_id,
        is_available=is_available,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/check-stock",
    response_model=StockCheckResponse,
    summary="Check which pharmacies stock a medicine",
    description=(
        "Only available, non-empty stock at active pharmacies is returned. "
        "With a location the results are limited to the radius and sorted "
        "nearest first; otherwise they are sorted by discounted price."
    ),
)
@limiter.limit(RATE_LIMIT)
async def check_stock(
    request: Request,
    medicine_id: int = Query(..., gt=0),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(20.0, gt=0, description="km"),
    limit: int = Query(20, ge=1, description=f"Clamped to {MAX_PAGE_SIZE}."),
    db: AsyncSession = Depends(get_db),
):
    if (latitude is None) != (longitude is None):
        raise HTTPException(
            status_code=400,
            detail="latitude and longitude must be provided together",
        )
    medicine = await get_or_404(MedicineRepository(db), medicine_id, "Medicine")
    has_location = latitude is not None

    availability: list[StockAvailability] = []
    for stock, pharmacy in await InventoryRepository(db).get_in_stock(medicine_id):
        distance = None
        if has_location:
            distance = haversine_km(
                latitude,
                longitude,
                pharmacy.latitude,
                pharmacy.longitude,
                precision=SEARCH_PRECISION,
            )
            if distance > radius:
                continue
        availability.append(
            StockAvailability(
                pharmacy_id=pharmacy.id,
                pharmacy_name=pharmacy.pharmacy_name,
                address=pharmacy.address,
                phone=pharmacy.phone,
                latitude=pharmacy.latitude,
                longitude=pharmacy.longitude,
                rating=pharmacy.rating or 0.0,
                quantity=stock.quantity,
                price=stock.price,
                discount_percentage=stock.discount_percentage or 0.0,
                final_price=discounted_price(stock.price, stock.discount_percentage),
                distance=distance,
                last_updated=stock.last_updated,
            )
        )

    if has_location:
        availability.sort(key=lambda a: a.distance)
    else:
        availability.sort(key=lambda a: a.final_price)

    return StockCheckResponse(
        medicine=MedicineResponse.model_validate(medicine),
        availability=availability[: min(limit, MAX_PAGE_SIZE)],
        total_pharmacies=len(availability),
        user_location=(
            SearchArea(latitude=latitude, longitude=longitude, radius=radius)
            if has_location
            else None
        ),
    )


@router.get(
    "/{inventory_id}", response_model=InventoryResponse, summary="Get a stock row"
)
@limiter.limit(RATE_LIMIT)
async def get_inventory(
    request: Request,
    inventory_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(InventoryRepository(db), inventory_id, "Inventory item")


@router.post(
    "", status_code=201, response_model=InventoryResponse, summary="Add stock"
)
@limiter.limit(RATE_LIMIT)
async def create_inventory(
    request: Request,
    body: InventoryCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(PharmacyRepository(db), body.pharmacy_id, "Pharmacy")
    await ensure_exists(MedicineRepository(db), body.medicine_id, "Medicine")

    stock = await InventoryRepository(db).create(
        InventoryModel(**body.model_dump(), last_updated=utcnow())
    )
    logger.info(
        "Added stock %s: medicine %s at pharmacy %s",
        stock.id,
        stock.medicine_id,
        stock.pharmacy_id,
    )
    return stock


@router.patch(
    "/{inventory_id}", response_model=InventoryResponse, summary="Update stock"
)
@limiter.limit(RATE_LIMIT)
async def update_inventory(
    request: Request,
    inventory_id: int,
    body: InventoryUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = InventoryRepository(db)
    stock = await get_or_404(repo, inventory_id, "Inventory item")
    return await repo.update(stock, {**body.changes(), "last_updated": utcnow()})


@router.delete(
    "/{inventory_id}",
    response_model=DeleteResponse[InventoryResponse],
    summary="Delete a stock row",
)
@limiter.limit(RATE_LIMIT)
async def delete_inventory(
    request: Request,
    inventory_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = InventoryRepository(db)
    stock = await get_or_404(repo, inventory_id, "Inventory item")
    deleted = InventoryResponse.model_validate(stock)
    await repo.delete(stock)
    logger.info("Deleted stock %s", inventory_id)
    return DeleteResponse[InventoryResponse](
        message="Inventory item deleted successfully", deleted=deleted
    )
