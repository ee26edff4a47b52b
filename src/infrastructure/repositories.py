"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Writes are flushed, never committed: the
``get_db`` dependency owns the transaction.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base
from .models import (
    DeliveryModel,
    InventoryModel,
    MedicineModel,
    OrderItemModel,
    OrderModel,
    PharmacyModel,
    PrescriptionModel,
    UserModel,
)
from src.domain.enums import (
    DeliveryStatus,
    MedicineCategory,
    MedicineSortField,
    OrderStatus,
    SortOrder,
    UserRole,
)

ModelT = TypeVar("ModelT", bound=Base)


class _Repository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, obj_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, obj_id)

    async def exists(self, obj_id: int) -> bool:
        return await self.get_by_id(obj_id) is not None

    async def create(self, obj: ModelT) -> ModelT:
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def update(self, obj: ModelT, changes: dict[str, Any]) -> ModelT:
        for field, value in changes.items():
            setattr(obj, field, value)
        await self.session.flush()
        return obj

    async def delete(self, obj: ModelT) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    async def _page(
        self, query: Select, limit: int, offset: int
    ) -> list[ModelT]:
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def _count(self, query: Select) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        return result.scalar() or 0


def _matches_any(term: str, *columns) -> Any:
    return or_(*(col.icontains(term, autoescape=True) for col in columns))


def _where_all(query: Select, conditions: Sequence[Any]) -> Select:
    return query.where(and_(*conditions)) if conditions else query


class UserRepository(_Repository[UserModel]):
    model = UserModel

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        *,
        search: str | None = None,
        role: UserRole | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[UserModel]:
        conditions = []
        if search:
            conditions.append(
                _matches_any(search, UserModel.name, UserModel.email, UserModel.phone)
            )
        if role is not None:
            conditions.append(UserModel.role == role)
        query = _where_all(select(UserModel), conditions).order_by(
            UserModel.created_at.desc(), UserModel.id.desc()
        )
        return await self._page(query, limit, offset)


class PharmacyRepository(_Repository[PharmacyModel]):
    model = PharmacyModel

    async def get_by_license(self, license_number: str) -> Optional[PharmacyModel]:
        result = await self.session.execute(
            select(PharmacyModel).where(
                PharmacyModel.license_number == license_number
            )
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        *,
        search: str | None = None,
        is_active: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[PharmacyModel]:
        conditions = []
        if search:
            conditions.append(
                _matches_any(
                    search,
                    PharmacyModel.pharmacy_name,
                    PharmacyModel.address,
                    PharmacyModel.license_number,
                )
            )
        if is_active is not None:
            conditions.append(PharmacyModel.is_active.is_(is_active))
        query = _where_all(select(PharmacyModel), conditions).order_by(
            PharmacyModel.created_at.desc(), PharmacyModel.id.desc()
        )
        return await self._page(query, limit, offset)

    async def get_all(self, active_only: bool = True) -> list[PharmacyModel]:
        """Every pharmacy (optionally active only) for in-memory geo filtering."""
        query = select(PharmacyModel)
        if active_only:
            query = query.where(PharmacyModel.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())


class MedicineRepository(_Repository[MedicineModel]):
    model = MedicineModel

    _SORT_COLUMNS = {
        MedicineSortField.PRICE: MedicineModel.price,
        MedicineSortField.NAME: MedicineModel.name,
        MedicineSortField.CREATED_AT: MedicineModel.created_at,
    }

    @staticmethod
    def _text_match(term: str) -> Any:
        return _matches_any(
            term,
            MedicineModel.name,
            MedicineModel.brand,
            MedicineModel.salt_composition,
        )

    async def find(
        self,
        *,
        search: str | None = None,
        category: MedicineCategory | None = None,
        requires_prescription: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[MedicineModel]:
        conditions = []
        if search and search.strip():
            conditions.append(self._text_match(search.strip()))
        if category is not None:
            conditions.append(MedicineModel.category == category)
        if requires_prescription is not None:
            conditions.append(
                MedicineModel.requires_prescription.is_(requires_prescription)
            )
        query = _where_all(select(MedicineModel), conditions).order_by(
            MedicineModel.created_at.desc(), MedicineModel.id.desc()
        )
        return await self._page(query, limit, offset)

    async def search(
        self,
        *,
        q: str = "",
        category: MedicineCategory | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        requires_prescription: bool | None = None,
        sort_by: MedicineSortField = MedicineSortField.NAME,
        order: SortOrder = SortOrder.ASC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[MedicineModel], int]:
        """Filtered, sorted page plus the total number of matches."""
        conditions = []
        if q.strip():
            conditions.append(self._text_match(q.strip()))
        if category is not None:
            conditions.append(MedicineModel.category == category)
        if min_price is not None:
            conditions.append(MedicineModel.price >= min_price)
        if max_price is not None:
            conditions.append(MedicineModel.price <= max_price)
        if requires_prescription is not None:
            conditions.append(
                MedicineModel.requires_prescription.is_(requires_prescription)
            )

        base = _where_all(select(MedicineModel), conditions)
        column = self._SORT_COLUMNS[sort_by]
        ordering = column.desc() if order == SortOrder.DESC else column.asc()
        rows = await self._page(
            base.order_by(ordering, MedicineModel.id), limit, offset
        )
        return rows, await self._count(base)

    async def alternatives(
        self,
        salt_composition: str,
        *,
        exclude_id: int | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[MedicineModel], int]:
        """Medicines sharing a salt composition, cheapest first."""
        conditions = [MedicineModel.salt_composition == salt_composition]
        if exclude_id is not None:
            conditions.append(MedicineModel.id != exclude_id)
        base = _where_all(select(MedicineModel), conditions)
        rows = await self._page(
            base.order_by(MedicineModel.price, MedicineModel.id), limit, offset
        )
        return rows, await self._count(base)


class InventoryRepository(_Repository[InventoryModel]):
    model = InventoryModel

    async def find(
        self,
        *,
        pharmacy_id: int | None = None,
        medicine_id: int | None = None,
        is_available: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[InventoryModel]:
        conditions = []
        if pharmacy_id is not None:
            conditions.append(InventoryModel.pharmacy_id == pharmacy_id)
        if medicine_id is not None:
            conditions.append(InventoryModel.medicine_id == medicine_id)
        if is_available is not None:
            conditions.append(InventoryModel.is_available.is_(is_available))
        query = _where_all(select(InventoryModel), conditions).order_by(
            InventoryModel.id
        )
        return await self._page(query, limit, offset)

    async def get_in_stock(
        self, medicine_id: int
    ) -> list[tuple[InventoryModel, PharmacyModel]]:
        """Available, non-empty stock of *medicine_id* at active pharmacies."""
        result = await self.session.execute(
            select(InventoryModel, PharmacyModel)
            .join(PharmacyModel, InventoryModel.pharmacy_id == PharmacyModel.id)
            .where(
                InventoryModel.medicine_id == medicine_id,
                InventoryModel.is_available.is_(True),
                InventoryModel.quantity > 0,
                PharmacyModel.is_active.is_(True),
            )
        )
        return [(row[0], row[1]) for row in result.all()]


class OrderRepository(_Repository[OrderModel]):
    model = OrderModel

    async def get_by_order_number(self, order_number: str) -> Optional[OrderModel]:
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.order_number == order_number)
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        *,
        user_id: int | None = None,
        pharmacy_id: int | None = None,
        status: OrderStatus | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[OrderModel]:
        conditions = []
        if user_id is not None:
            conditions.append(OrderModel.user_id == user_id)
        if pharmacy_id is not None:
            conditions.append(OrderModel.pharmacy_id == pharmacy_id)
        if status is not None:
            conditions.append(OrderModel.status == status)
        query = _where_all(select(OrderModel), conditions).order_by(
            OrderModel.created_at.desc(), OrderModel.id.desc()
        )
        return await self._page(query, limit, offset)


class OrderItemRepository(_Repository[OrderItemModel]):
    model = OrderItemModel

    async def find(
        self,
        *,
        order_id: int | None = None,
        medicine_id: int | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[OrderItemModel]:
        conditions = []
        if order_id is not None:
            conditions.append(OrderItemModel.order_id == order_id)
        if medicine_id is not None:
            conditions.append(OrderItemModel.medicine_id == medicine_id)
        query = _where_all(select(OrderItemModel), conditions).order_by(
            OrderItemModel.id
        )
        return await self._page(query, limit, offset)


class DeliveryRepository(_Repository[DeliveryModel]):
    model = DeliveryModel

    async def get_by_order_id(self, order_id: int) -> Optional[DeliveryModel]:
        result = await self.session.execute(
            select(DeliveryModel).where(DeliveryModel.order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        *,
        order_id: int | None = None,
        delivery_person_id: int | None = None,
        status: DeliveryStatus | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[DeliveryModel]:
        conditions = []
        if order_id is not None:
            conditions.append(DeliveryModel.order_id == order_id)
        if delivery_person_id is not None:
            conditions.append(DeliveryModel.delivery_person_id == delivery_person_id)
        if status is not None:
            conditions.append(DeliveryModel.status == status)
        query = _where_all(select(DeliveryModel), conditions).order_by(
            DeliveryModel.id.desc()
        )
        return await self._page(query, limit, offset)


class PrescriptionRepository(_Repository[PrescriptionModel]):
    model = PrescriptionModel

    async def find(
        self,
        *,
        user_id: int | None = None,
        order_id: int | None = None,
        is_verified: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[PrescriptionModel]:
        conditions = []
        if user_id is not None:
            conditions.append(PrescriptionModel.user_id == user_id)
        if order_id is not None:
            conditions.append(PrescriptionModel.order_id == order_id)
        if is_verified is not None:
            conditions.append(PrescriptionModel.is_verified.is_(is_verified))
        query = _where_all(select(PrescriptionModel), conditions).order_by(
            PrescriptionModel.uploaded_at.desc(), PrescriptionModel.id.desc()
        )
        return await self._page(query, limit, offset)
