"""
Medicine catalogue endpoints
============================

GET    /api/v1/medicines               -- list medicines
GET    /api/v1/medicines/search        -- filtered, sorted catalogue search
GET    /api/v1/medicines/alternatives  -- same salt composition, cheapest first
GET    /api/v1/medicines/{id}          -- fetch one medicine
POST   /api/v1/medicines               -- add to the catalogue
PATCH  /api/v1/medicines/{id}          -- partial update
DELETE /api/v1/medicines/{id}          -- delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import MAX_PAGE_SIZE, Page, get_db
from src.api.errors import get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    AlternativesResponse,
    DeleteResponse,
    MedicineCreateRequest,
    MedicineResponse,
    MedicineSearchResponse,
    MedicineUpdateRequest,
)
from src.domain.enums import MedicineCategory, MedicineSortField, SortOrder
from src.infrastructure.models import MedicineModel
from src.infrastructure.repositories import MedicineRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/medicines", tags=["medicines"])

MAX_ALTERNATIVES = 50


@router.get("", response_model=list[MedicineResponse], summary="List medicines")
@limiter.limit(RATE_LIMIT)
async def list_medicines(
    request: Request,
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[MedicineCategory] = None,
    requires_prescription: Optional[bool] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await MedicineRepository(db).find(
        search=search,
        category=category,
        requires_prescription=requires_prescription,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/search",
    response_model=MedicineSearchResponse,
    summary="Search the catalogue",
    description="`count` is the total number of matches, not the page size.",
)
@limiter.limit(RATE_LIMIT)
async def search_medicines(
    request: Request,
    q: str = Query("", max_length=100, description="Name, brand or salt."),
    category: Optional[MedicineCategory] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    requires_prescription: Optional[bool] = None,
    sort_by: MedicineSortField = MedicineSortField.NAME,
    order: SortOrder = SortOrder.ASC,
    limit: int = Query(20, ge=1, description=f"Clamped to {MAX_PAGE_SIZE}."),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    if min_price is not None and max_price is not None and min_price > max_price:
        raise HTTPException(
            status_code=400, detail="min_price cannot be greater than max_price"
        )

    limit = min(limit, MAX_PAGE_SIZE)
    rows, total = await MedicineRepository(db).search(
        q=q,
        category=category,
        min_price=min_price,
        max_price=max_price,
        requires_prescription=requires_prescription,
        sort_by=sort_by,
        order=order,
        limit=limit,
        offset=offset,
    )
    return MedicineSearchResponse(
        results=[MedicineResponse.model_validate(m) for m in rows],
        count=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/alternatives",
    response_model=AlternativesResponse,
    summary="Find medicines with the same salt composition",
    description=(
        "Look up by `medicine_id` (the medicine itself is excluded) or by "
        "`salt_composition` directly."
    ),
)
@limiter.limit(RATE_LIMIT)
async def medicine_alternatives(
    request: Request,
    medicine_id: Optional[int] = Query(None, gt=0),
    salt_composition: Optional[str] = Query(None, min_length=1, max_length=255),
    limit: int = Query(10, ge=1, description=f"Clamped to {MAX_ALTERNATIVES}."),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    repo = MedicineRepository(db)
    original: Optional[MedicineModel] = None

    if medicine_id is not None:
        original = await get_or_404(repo, medicine_id, "Medicine")
        salt_composition = original.salt_composition
    elif not salt_composition or not salt_composition.strip():
        raise HTTPException(
            status_code=400,
            detail="Either medicine_id or salt_composition is required",
        )

    rows, total = await repo.alternatives(
        salt_composition.strip(),
        exclude_id=medicine_id,
        limit=min(limit, MAX_ALTERNATIVES),
        offset=offset,
    )
    return AlternativesResponse(
        alternatives=[MedicineResponse.model_validate(m) for m in rows],
        salt_composition=salt_composition.strip(),
        count=total,
        original_medicine=(
            MedicineResponse.model_validate(original) if original else None
        ),
    )


@router.get(
    "/{medicine_id}", response_model=MedicineResponse, summary="Get a medicine"
)
@limiter.limit(RATE_LIMIT)
async def get_medicine(
    request: Request,
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(MedicineRepository(db), medicine_id, "Medicine")


@router.post(
    "", status_code=201, response_model=MedicineResponse, summary="Add a medicine"
)
@limiter.limit(RATE_LIMIT)
async def create_medicine(
    request: Request,
    body: MedicineCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    medicine = await MedicineRepository(db).create(MedicineModel(**body.model_dump()))
    logger.info("Added medicine %s (%s)", medicine.id, medicine.name)
    return medicine


@router.patch(
    "/{medicine_id}", response_model=MedicineResponse, summary="Update a medicine"
)
@limiter.limit(RATE_LIMIT)
async def update_medicine(
    request: Request,
    medicine_id: int,
    body: MedicineUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = MedicineRepository(db)
    medicine = await get_or_404(repo, medicine_id, "Medicine")
    return await repo.update(medicine, body.changes())


@router.delete(
    "/{medicine_id}",
    response_model=DeleteResponse[MedicineResponse],
    summary="Delete a medicine",
)
@limiter.limit(RATE_LIMIT)
async def delete_medicine(
    request: Request,
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = MedicineRepository(db)
    medicine = await get_or_404(repo, medicine_id, "Medicine")
    deleted = MedicineResponse.model_validate(medicine)
    await repo.delete(medicine)
    logger.info("Deleted medicine %s", medicine_id)
    return DeleteResponse[MedicineResponse](
        message="Medicine deleted successfully", deleted=deleted
    )
