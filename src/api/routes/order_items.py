"""
Order line-item endpoints
=========================

GET    /api/v1/order-items        -- list line items
GET    /api/v1/order-items/{id}   -- fetch one line item
POST   /api/v1/order-items        -- add a line item to an order
PATCH  /api/v1/order-items/{id}   -- partial update (empty body rejected)
DELETE /api/v1/order-items/{id}   -- delete
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import Page, get_db
from src.api.errors import ensure_exists, get_or_404
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    DeleteResponse,
    OrderItemCreateRequest,
    OrderItemResponse,
    OrderItemUpdateRequest,
)
from src.infrastructure.models import OrderItemModel
from src.infrastructure.repositories import (
    MedicineRepository,
    OrderItemRepository,
    OrderRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/order-items", tags=["order-items"])


@router.get(
    "", response_model=list[OrderItemResponse], summary="List order line items"
)
@limiter.limit(RATE_LIMIT)
async def list_order_items(
    request: Request,
    order_id: Optional[int] = Query(None, gt=0),
    medicine_id: Optional[int] = Query(None, gt=0),
    page: Page = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await OrderItemRepository(db).find(
        order_id=order_id,
        medicine_id=medicine_id,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/{item_id}", response_model=OrderItemResponse, summary="Get a line item"
)
@limiter.limit(RATE_LIMIT)
async def get_order_item(
    request: Request,
    item_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(OrderItemRepository(db), item_id, "Order item")


@router.post(
    "", status_code=201, response_model=OrderItemResponse, summary="Add a line item"
)
@limiter.limit(RATE_LIMIT)
async def create_order_item(
    request: Request,
    body: OrderItemCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(OrderRepository(db), body.order_id, "Order")
    await ensure_exists(MedicineRepository(db), body.medicine_id, "Medicine")

    item = await OrderItemRepository(db).create(OrderItemModel(**body.model_dump()))
    logger.info("Added item %s to order %s", item.id, item.order_id)
    return item


@router.patch(
    "/{item_id}", response_model=OrderItemResponse, summary="Update a line item"
)
@limiter.limit(RATE_LIMIT)
async def update_order_item(
    request: Request,
    item_id: int,
    body: OrderItemUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = OrderItemRepository(db)
    item = await get_or_404(repo, item_id, "Order item")
    changes = body.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    return await repo.update(item, changes)


@router.delete(
    "/{item_id}",
    response_model=DeleteResponse[OrderItemResponse],
    summary="Delete a line item",
)
@limiter.limit(RATE_LIMIT)
async def delete_order_item(
    request: Request,
    item_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = OrderItemRepository(db)
    item = await get_or_404(repo, item_id, "Order item")
    deleted = OrderItemResponse.model_validate(item)
    await repo.delete(item)
    logger.info("Deleted order item %s", item_id)
    return DeleteResponse[OrderItemResponse](
        message="Order item deleted successfully", deleted=deleted
    )
