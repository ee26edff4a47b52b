"""
SQLAlchemy ORM models.

Tables
------
* ``users``          -- customers, pharmacy staff and couriers
* ``pharmacies``     -- stores with a fixed geo-location
* ``medicines``      -- catalogue entries grouped by salt composition
* ``inventory``      -- per-pharmacy stock and shelf price
* ``orders``         -- customer orders with delivery destination
* ``order_items``    -- line items of an order
* ``deliveries``     -- one courier assignment per order
* ``prescriptions``  -- uploaded prescriptions and their verification

Coordinates are stored as plain floats; distance filtering happens in the
domain layer with the Haversine formula.

Indexes
-------
* **B-Tree** on foreign keys, status columns and the columns used for
  ordering / filtering by the list endpoints.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from .database import Base
from src.domain.enums import (
    DeliveryStatus,
    MedicineCategory,
    OrderStatus,
    UserRole,
)
from src.domain.timeutils import utcnow


def _values(enum_cls):
    return [member.value for member in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), nullable=False)
    role = Column(
        Enum(UserRole, name="userrole", values_callable=_values), nullable=False
    )
    address = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_users_role", "role"),
        Index("idx_users_created", "created_at"),
    )


class PharmacyModel(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    pharmacy_name = Column(String(200), nullable=False)
    license_number = Column(String(64), unique=True, nullable=False)
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255), nullable=False)
    opening_time = Column(String(5), nullable=True)  # "HH:MM"
    closing_time = Column(String(5), nullable=True)
    is_active = Column(Boolean, default=True)
    rating = Column(Float, default=0.0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_pharmacies_active", "is_active"),
        Index("idx_pharmacies_user", "user_id"),
    )


class MedicineModel(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    brand = Column(String(200), nullable=False)
    salt_composition = Column(String(255), nullable=False)
    category = Column(
        Enum(MedicineCategory, name="medicinecategory", values_callable=_values),
        nullable=False,
    )
    description = Column(Text, nullable=True)
    manufacturer = Column(String(200), nullable=True)
    unit = Column(String(64), nullable=False)
    price = Column(Float, nullable=False)
    requires_prescription = Column(Boolean, default=False)
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_medicines_salt", "salt_composition"),
        Index("idx_medicines_category", "category"),
        Index("idx_medicines_price", "price"),
    )


class InventoryModel(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, default=0, nullable=False)
    price = Column(Float, nullable=False)
    discount_percentage = Column(Float, default=0.0)
    is_available = Column(Boolean, default=True)
    last_updated = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_inventory_pharmacy", "pharmacy_id"),
        Index("idx_inventory_medicine", "medicine_id"),
    )


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    order_number = Column(String(64), unique=True, nullable=False)
    status = Column(
        Enum(OrderStatus, name="orderstatus", values_callable=_values),
        nullable=False,
    )
    total_amount = Column(Float, nullable=False)
    delivery_fee = Column(Float, default=0.0)
    delivery_address = Column(Text, nullable=False)
    delivery_latitude = Column(Float, nullable=True)
    delivery_longitude = Column(Float, nullable=True)
    estimated_delivery_time = Column(Integer, nullable=True)  # minutes
    prescription_required = Column(Boolean, default=False)
    prescription_verified = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_orders_user", "user_id"),
        Index("idx_orders_pharmacy", "pharmacy_id"),
        Index("idx_orders_status", "status"),
        Index("idx_orders_created", "created_at"),
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    discount = Column(Float, default=0.0)
    subtotal = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_order_items_order", "order_id"),
        Index("idx_order_items_medicine", "medicine_id"),
    )


class DeliveryModel(Base):
    __tablename__ = "deliveries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    delivery_person_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = Column(
        Enum(DeliveryStatus, name="deliverystatus", values_callable=_values),
        nullable=False,
    )
    current_latitude = Column(Float, nullable=True)
    current_longitude = Column(Float, nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    picked_up_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_deliveries_person", "delivery_person_id"),
        Index("idx_deliveries_status", "status"),
    )


class PrescriptionModel(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    prescription_url = Column(Text, nullable=False)
    verified_by = Column(Integer, ForeignKey("pharmacies.id"), nullable=True)
    is_verified = Column(Boolean, default=False)
    verification_notes = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_prescriptions_user", "user_id"),
        Index("idx_prescriptions_order", "order_id"),
        Index("idx_prescriptions_uploaded", "uploaded_at"),
    )
