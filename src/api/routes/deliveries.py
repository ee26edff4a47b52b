"""
Delivery endpoints
==================

GET    /api/v1/deliveries         -- list deliveries
GET    /api/v1/deliveries/track   -- customer-facing tracking view
GET    /api/v1/deliveries/{id}    -- fetch one delivery
POST   /api/v1/deliveries         -- assign a delivery to an order
PATCH  /api/v1/deliveries/{id}    -- status / position update
DELETE /api/v1/deliveries/{id}    -- delete

Status moves through assigned -> accepted -> picked_up -> on_the_way ->
delivered (or failed).  No transition table is enforced; moving to
``picked_up`` / ``delivered`` stamps the matching timestamp once.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import Page, get_db
from src.api.errors import conflict, ensure_exists, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    DeliveryCreateRequest,
    DeliveryResponse,
    DeliveryUpdateRequest,
    GeoPoint,
    TrackedCourier,
    TrackedDestination,
    TrackedPharmacy,
    TrackingInfo,
    TrackingResponse,
    TrackingTimeline,
)
from src.config import settings
from src.domain.entities import Delivery, Location
from src.domain.enums import DeliveryStatus
from src.domain.eta import LinearTravelTime
from src.domain.timeutils import utcnow
from src.domain.tracking import estimate_tracking
from src.infrastructure.models import DeliveryModel
from src.infrastructure.repositories import (
    DeliveryRepository,
    OrderRepository,
    PharmacyRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deliveries", tags=["deliveries"])

tracking_model = LinearTravelTime(minutes_per_km=settings.tracking_minutes_per_km)


def _point(location: Optional[Location]) -> Optional[GeoPoint]:
    if location is None:
        return None
    return GeoPoint(latitude=location.latitude, longitude=location.longitude)


@router.get("", response_model=list[DeliveryResponse], summary="List deliveries")
@limiter.limit(RATE_LIMIT)
async def list_deliveries(
    request: Request,
    order_id: Optional[int] = Query(None, gt=0),
    delivery_person_id: Optional[int] = Query(None, gt=0),
    status: Optional[DeliveryStatus] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await DeliveryRepository(db).find(
        order_id=order_id,
        delivery_person_id=delivery_person_id,
        status=status,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/track",
    response_model=TrackingResponse,
    summary="Track an order's delivery",
    description=(
        "Look up by `order_id` or `order_number`.  Distance, remaining time "
        "and progress are estimates; progress is not guaranteed to be "
        "monotonic between status changes."
    ),
)
@limiter.limit(RATE_LIMIT)
async def track_delivery(
    request: Request,
    order_id: Optional[int] = Query(None, gt=0),
    order_number: Optional[str] = Query(None, min_length=1, max_length=64),
    db: AsyncSession = Depends(get_db),
):
    orders = OrderRepository(db)
    if order_id is not None:
        order = await orders.get_by_id(order_id)
    elif order_number and order_number.strip():
        order = await orders.get_by_order_number(order_number.strip())
    else:
        raise HTTPException(
            status_code=400, detail="Either order_id or order_number is required"
        )
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    delivery = await DeliveryRepository(db).get_by_order_id(order.id)
    if delivery is None:
        raise HTTPException(status_code=404, detail="No delivery found for this order")

    pharmacy = await PharmacyRepository(db).get_by_id(order.pharmacy_id)
    if pharmacy is None:
        raise HTTPException(status_code=404, detail="Pharmacy not found")

    courier = None
    if delivery.delivery_person_id is not None:
        courier = await UserRepository(db).get_by_id(delivery.delivery_person_id)

    origin = Location(pharmacy.latitude, pharmacy.longitude)
    destination = Location.maybe(order.delivery_latitude, order.delivery_longitude)
    live_position = Location.maybe(delivery.current_latitude, delivery.current_longitude)

    estimate = estimate_tracking(
        status=delivery.status,
        pharmacy=origin,
        destination=destination,
        courier=live_position,
        picked_up_at=delivery.picked_up_at,
        delivered_at=delivery.delivered_at,
        travel_model=tracking_model,
    )
    logger.debug(
        "Tracking order %s: status=%s progress=%s%% remaining=%s km",
        order.id,
        delivery.status.value,
        estimate.progress_percentage,
        estimate.current_distance,
    )

    return TrackingResponse(
        order_id=order.id,
        order_number=order.order_number,
        delivery_status=delivery.status,
        order_status=order.status,
        timeline=TrackingTimeline(
            order_placed=order.created_at,
            delivery_assigned=delivery.assigned_at,
            picked_up=delivery.picked_up_at,
            estimated_delivery=estimate.estimated_delivery,
            delivered=delivery.delivered_at,
        ),
        pharmacy=TrackedPharmacy(
            id=pharmacy.id,
            name=pharmacy.pharmacy_name,
            address=pharmacy.address,
            location=_point(origin),
        ),
        delivery_destination=TrackedDestination(
            address=order.delivery_address,
            location=_point(destination),
        ),
        delivery_person=(
            TrackedCourier(
                id=courier.id,
                name=courier.name,
                phone=courier.phone,
                current_location=_point(live_position),
            )
            if courier
            else None
        ),
        tracking=TrackingInfo(
            current_distance=estimate.current_distance,
            estimated_time_remaining=estimate.estimated_time_remaining,
            progress_percentage=estimate.progress_percentage,
        ),
        notes=delivery.notes,
    )


@router.get(
    "/{delivery_id}", response_model=DeliveryResponse, summary="Get a delivery"
)
@limiter.limit(RATE_LIMIT)
async def get_delivery(
    request: Request,
    delivery_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(DeliveryRepository(db), delivery_id, "Delivery")


@router.post(
    "",
    status_code=201,
    response_model=DeliveryResponse,
    summary="Assign a delivery",
    responses={409: {"description": "The order already has a delivery."}},
)
@limiter.limit(RATE_LIMIT)
async def create_delivery(
    request: Request,
    body: DeliveryCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(OrderRepository(db), body.order_id, "Order")
    await ensure_exists(UserRepository(db), body.delivery_person_id, "Delivery person")

    repo = DeliveryRepository(db)
    if await repo.get_by_order_id(body.order_id):
        raise conflict("A delivery already exists for this order")

    data = body.model_dump()
    data["assigned_at"] = data["assigned_at"] or utcnow()
    delivery = await repo.create(DeliveryModel(**data))
    logger.info(
        "Assigned delivery %s for order %s to courier %s",
        delivery.id,
        delivery.order_id,
        delivery.delivery_person_id,
    )
    return delivery


@router.patch(
    "/{delivery_id}", response_model=DeliveryResponse, summary="Update a delivery"
)
@limiter.limit(RATE_LIMIT)
async def update_delivery(
    request: Request,
    delivery_id: int,
    body: DeliveryUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = DeliveryRepository(db)
    delivery = await get_or_404(repo, delivery_id, "Delivery")
    changes = body.changes()
    await ensure_exists(
        UserRepository(db), changes.get("delivery_person_id"), "Delivery person"
    )

    if "status" in changes:
        current = Delivery(
            status=delivery.status,
            picked_up_at=delivery.picked_up_at,
            delivered_at=delivery.delivered_at,
        )
        for field, stamp in current.stamp_for(changes["status"], utcnow()).items():
            changes.setdefault(field, stamp)
        if changes["status"] != delivery.status:
            logger.info(
                "Delivery %s: %s -> %s",
                delivery.id,
                delivery.status.value,
                changes["status"].value,
            )

    return await repo.update(delivery, changes)


@router.delete(
    "/{delivery_id}",
    response_model=DeleteResponse[DeliveryResponse],
    summary="Delete a delivery",
)
@limiter.limit(RATE_LIMIT)
async def delete_delivery(
    request: Request,
    delivery_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = DeliveryRepository(db)
    delivery = await get_or_404(repo, delivery_id, "Delivery")
    deleted = DeliveryResponse.model_validate(delivery)
    await repo.delete(delivery)
    logger.info("Deleted delivery %s", delivery_id)
    return DeleteResponse[DeliveryResponse](
        message="Delivery deleted successfully", deleted=deleted
    )
