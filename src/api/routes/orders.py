"""
Order endpoints
===============

GET    /api/v1/orders                    -- list orders
POST   /api/v1/orders/estimate-delivery  -- quote distance, time and fee
GET    /api/v1/orders/{id}               -- fetch one order
POST   /api/v1/orders                    -- place an order
PATCH  /api/v1/orders/{id}               -- partial update
DELETE /api/v1/orders/{id}               -- delete
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
    DeliveryEstimateRequest,
    DeliveryEstimateResponse,
    GeoPoint,
    OrderCreateRequest,
    OrderResponse,
    OrderUpdateRequest,
    TimeBreakdown,
)
from src.config import settings
from src.domain.entities import Location
from src.domain.enums import OrderStatus
from src.domain.eta import DeliveryEstimator
from src.infrastructure.models import OrderModel
from src.infrastructure.repositories import (
    OrderRepository,
    PharmacyRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

estimator = DeliveryEstimator(
    preparation_minutes=settings.preparation_minutes,
    buffer_minutes=settings.buffer_minutes,
)


@router.get("", response_model=list[OrderResponse], summary="List orders")
@limiter.limit(RATE_LIMIT)
async def list_orders(
    request: Request,
    user_id: Optional[int] = Query(None, gt=0),
    pharmacy_id: Optional[int] = Query(None, gt=0),
    status: Optional[OrderStatus] = None,
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await OrderRepository(db).find(
        user_id=user_id,
        pharmacy_id=pharmacy_id,
        status=status,
        limit=page.limit,
        offset=page.offset,
    )


@router.post(
    "/estimate-delivery",
    response_model=DeliveryEstimateResponse,
    summary="Estimate delivery time and fee",
    description=(
        "total = preparation + travel(distance) + buffer.  Travel time and "
        "fee are stepped by distance."
    ),
)
@limiter.limit(RATE_LIMIT)
async def estimate_delivery(
    request: Request,
    body: DeliveryEstimateRequest,
    db: AsyncSession = Depends(get_db),
):
    pharmacy = await get_or_404(PharmacyRepository(db), body.pharmacy_id, "Pharmacy")
    origin = Location(pharmacy.latitude, pharmacy.longitude)
    destination = Location(body.delivery_latitude, body.delivery_longitude)

    quote = estimator.quote(origin, destination)
    return DeliveryEstimateResponse(
        pharmacy_id=pharmacy.id,
        pharmacy_name=pharmacy.pharmacy_name,
        pharmacy_address=pharmacy.address,
        pharmacy_location=GeoPoint(
            latitude=origin.latitude, longitude=origin.longitude
        ),
        delivery_location=GeoPoint(
            latitude=destination.latitude, longitude=destination.longitude
        ),
        distance=quote.distance_km,
        estimated_delivery_time=quote.total_minutes,
        breakdown=TimeBreakdown(
            preparation_time=quote.preparation_minutes,
            travel_time=quote.travel_minutes,
            buffer_time=quote.buffer_minutes,
        ),
        delivery_fee=quote.delivery_fee,
        estimated_delivery_at=quote.estimated_delivery_at,
    )


@router.get("/{order_id}", response_model=OrderResponse, summary="Get an order")
@limiter.limit(RATE_LIMIT)
async def get_order(
    request: Request,
    order_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(OrderRepository(db), order_id, "Order")


@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    summary="Place an order",
    responses={409: {"description": "Order number already used."}},
)
@limiter.limit(RATE_LIMIT)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(UserRepository(db), body.user_id, "User")
    await ensure_exists(PharmacyRepository(db), body.pharmacy_id, "Pharmacy")

    repo = OrderRepository(db)
    if await repo.get_by_order_number(body.order_number):
        raise conflict("An order with this order number already exists")

    order = await repo.create(OrderModel(**body.model_dump()))
    logger.info(
        "Placed order %s (%s) for user %s",
        order.id,
        order.order_number,
        order.user_id,
    )
    return order


@router.patch("/{order_id}", response_model=OrderResponse, summary="Update an order")
@limiter.limit(RATE_LIMIT)
async def update_order(
    request: Request,
    order_id: int,
    body: OrderUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = OrderRepository(db)
    order = await get_or_404(repo, order_id, "Order")
    changes = body.changes()
    if "status" in changes and changes["status"] != order.status:
        logger.info(
            "Order %s: %s -> %s",
            order.id,
            order.status.value,
            changes["status"].value,
        )
    return await repo.update(order, changes)


@router.delete(
    "/{order_id}",
    response_model=DeleteResponse[OrderResponse],
    summary="Delete an order",
)
@limiter.limit(RATE_LIMIT)
async def delete_order(
    request: Request,
    order_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = OrderRepository(db)
    order = await get_or_404(repo, order_id, "Order")
    deleted = OrderResponse.model_validate(order)
    await repo.delete(order)
    logger.info("Deleted order %s", order_id)
    return DeleteResponse[OrderResponse](
        message="Order deleted successfully", deleted=deleted
    )
