"""
Prescription endpoints
======================

GET    /api/v1/prescriptions        -- list uploads
GET    /api/v1/prescriptions/{id}   -- fetch one upload
POST   /api/v1/prescriptions        -- upload a prescription
PATCH  /api/v1/prescriptions/{id}   -- verification update
DELETE /api/v1/prescriptions/{id}   -- delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import Page, get_db
from src.api.errors import ensure_exists, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    PrescriptionCreateRequest,
    PrescriptionResponse,
    PrescriptionUpdateRequest,
)
from src.domain.timeutils import utcnow
from src.infrastructure.models import PrescriptionModel
from src.infrastructure.repositories import (
    OrderRepository,
    PharmacyRepository,
    PrescriptionRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


@router.get(
    "", response_model=list[PrescriptionResponse], summary="List prescriptions"
)
@limiter.limit(RATE_LIMIT)
async def list_prescriptions(
    request: Request,
    user_id: Optional[int] = Query(None, gt=0),
    order_id: Optional[int] = Query(None, gt=0),
    is_verified: Optional[bool] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await PrescriptionRepository(db).find(
        user_id=user_id,
        order_id=order_id,
        is_verified=is_verified,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    summary="Get a prescription",
)
@limiter.limit(RATE_LIMIT)
async def get_prescription(
    request: Request,
    prescription_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(
        PrescriptionRepository(db), prescription_id, "Prescription"
    )


@router.post(
    "",
    status_code=201,
    response_model=PrescriptionResponse,
    summary="Upload a prescription",
)
@limiter.limit(RATE_LIMIT)
async def create_prescription(
    request: Request,
    body: PrescriptionCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(UserRepository(db), body.user_id, "User")
    await ensure_exists(OrderRepository(db), body.order_id, "Order")
    await ensure_exists(PharmacyRepository(db), body.verified_by, "Pharmacy")

    prescription = await PrescriptionRepository(db).create(
        PrescriptionModel(**body.model_dump(), uploaded_at=utcnow())
    )
    logger.info(
        "Uploaded prescription %s for user %s", prescription.id, prescription.user_id
    )
    return prescription


@router.patch(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    summary="Update a prescription",
    description=(
        "Setting `is_verified` to true stamps `verified_at` unless one is "
        "given or already recorded."
    ),
)
@limiter.limit(RATE_LIMIT)
async def update_prescription(
    request: Request,
    prescription_id: int,
    body: PrescriptionUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = PrescriptionRepository(db)
    prescription = await get_or_404(repo, prescription_id, "Prescription")
    changes = body.changes()
    await ensure_exists(OrderRepository(db), changes.get("order_id"), "Order")
    await ensure_exists(PharmacyRepository(db), changes.get("verified_by"), "Pharmacy")

    if changes.get("is_verified") and prescription.verified_at is None:
        changes.setdefault("verified_at", utcnow())
        logger.info("Prescription %s verified", prescription.id)

    return await repo.update(prescription, changes)


@router.delete(
    "/{prescription_id}",
    response_model=DeleteResponse[PrescriptionResponse],
    summary="Delete a prescription",
)
@limiter.limit(RATE_LIMIT)
async def delete_prescription(
    request: Request,
    prescription_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = PrescriptionRepository(db)
    prescription = await get_or_404(repo, prescription_id, "Prescription")
    deleted = PrescriptionResponse.model_validate(prescription)
    await repo.delete(prescription)
    logger.info("Deleted prescription %s", prescription_id)
    return DeleteResponse[PrescriptionResponse](
        message="Prescription deleted successfully", deleted=deleted
    )
