"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from src.domain.enums import (
    DeliveryStatus,
    MedicineCategory,
    OrderStatus,
    UserRole,
)
from src.domain.timeutils import as_utc

Latitude = Annotated[float, Field(ge=-90, le=90)]
Longitude = Annotated[float, Field(ge=-180, le=180)]
NonBlank = Annotated[str, Field(min_length=1)]
PositiveId = Annotated[int, Field(gt=0)]
# Stored naive by SQLite; always exchanged as UTC
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
Email = Annotated[EmailStr, AfterValidator(str.lower)]

T = TypeVar("T")


# ── Bases ─────────────────────────────────────────────────────────────


class _Request(BaseModel):
    model_config = {"str_strip_whitespace": True}


class _Patch(_Request):
    """Partial update: only fields present in the body are applied."""

    # Columns that may be reset to NULL by sending ``null``
    nullable: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in self.nullable
        }


class _Response(BaseModel):
    model_config = {"from_attributes": True}


class GeoPoint(BaseModel):
    latitude: float
    longitude: float


class DeleteResponse(BaseModel, Generic[T]):
    message: str
    deleted: T


# ── Users ─────────────────────────────────────────────────────────────


class UserCreateRequest(_Request):
    name: NonBlank
    email: Email
    phone: NonBlank
    role: UserRole
    address: Optional[str] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None


class UserUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {"address", "latitude", "longitude"}
    )

    name: Optional[NonBlank] = None
    email: Optional[Email] = None
    phone: Optional[NonBlank] = None
    role: Optional[UserRole] = None
    address: Optional[str] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None


class UserResponse(_Response):
    id: int
    name: str
    email: str
    phone: str
    role: UserRole
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


# ── Pharmacies ────────────────────────────────────────────────────────


class PharmacyCreateRequest(_Request):
    pharmacy_name: NonBlank
    license_number: NonBlank
    address: NonBlank
    latitude: Latitude
    longitude: Longitude
    phone: NonBlank
    email: Email
    user_id: Optional[PositiveId] = None
    opening_time: Optional[str] = Field(None, max_length=5)
    closing_time: Optional[str] = Field(None, max_length=5)
    is_active: bool = True
    rating: float = Field(0.0, ge=0, le=5)


class PharmacyUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {"user_id", "opening_time", "closing_time"}
    )

    pharmacy_name: Optional[NonBlank] = None
    license_number: Optional[NonBlank] = None
    address: Optional[NonBlank] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None
    phone: Optional[NonBlank] = None
    email: Optional[Email] = None
    user_id: Optional[PositiveId] = None
    opening_time: Optional[str] = Field(None, max_length=5)
    closing_time: Optional[str] = Field(None, max_length=5)
    is_active: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0, le=5)


class PharmacyResponse(_Response):
    id: int
    user_id: Optional[int] = None
    pharmacy_name: str
    license_number: str
    address: str
    latitude: float
    longitude: float
    phone: str
    email: str
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    is_active: bool = True
    rating: float = 0.0
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class NearbyPharmacy(PharmacyResponse):
    distance: float
    distance_unit: str = "km"


class NearbyPharmaciesResponse(BaseModel):
    pharmacies: list[NearbyPharmacy]
    user_location: GeoPoint
    radius: float
    count: int


# ── Medicines ─────────────────────────────────────────────────────────


class MedicineCreateRequest(_Request):
    name: NonBlank
    brand: NonBlank
    salt_composition: NonBlank
    category: MedicineCategory
    unit: NonBlank
    price: float = Field(..., gt=0)
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    requires_prescription: bool = False
    image_url: Optional[str] = None


class MedicineUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {"description", "manufacturer", "image_url"}
    )

    name: Optional[NonBlank] = None
    brand: Optional[NonBlank] = None
    salt_composition: Optional[NonBlank] = None
    category: Optional[MedicineCategory] = None
    unit: Optional[NonBlank] = None
    price: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    requires_prescription: Optional[bool] = None
    image_url: Optional[str] = None


class MedicineResponse(_Response):
    id: int
    name: str
    brand: str
    salt_composition: str
    category: MedicineCategory
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    unit: str
    price: float
    requires_prescription: bool = False
    image_url: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class MedicineSearchResponse(BaseModel):
    results: list[MedicineResponse]
    count: int
    limit: int
    offset: int


class AlternativesResponse(BaseModel):
    alternatives: list[MedicineResponse]
    salt_composition: str
    count: int
    original_medicine: Optional[MedicineResponse] = None


# ── Inventory ─────────────────────────────────────────────────────────


class InventoryCreateRequest(_Request):
    pharmacy_id: PositiveId
    medicine_id: PositiveId
    quantity: int = Field(..., ge=0)
    price: float = Field(..., gt=0)
    discount_percentage: float = Field(0.0, ge=0, le=100)
    is_available: bool = True


class InventoryUpdateRequest(_Patch):
    quantity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, gt=0)
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    is_available: Optional[bool] = None


class InventoryResponse(_Response):
    id: int
    pharmacy_id: int
    medicine_id: int
    quantity: int
    price: float
    discount_percentage: float = 0.0
    is_available: bool = True
    last_updated: Optional[UtcDatetime] = None


class StockAvailability(BaseModel):
    pharmacy_id: int
    pharmacy_name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    rating: float
    quantity: int
    price: float
    discount_percentage: float
    final_price: float
    distance: Optional[float] = None
    last_updated: Optional[UtcDatetime] = None


class SearchArea(GeoPoint):
    radius: float


class StockCheckResponse(BaseModel):
    medicine: MedicineResponse
    availability: list[StockAvailability]
    total_pharmacies: int
    user_location: Optional[SearchArea] = None


# ── Orders ────────────────────────────────────────────────────────────


class OrderCreateRequest(_Request):
    user_id: PositiveId
    pharmacy_id: PositiveId
    order_number: NonBlank
    status: OrderStatus
    total_amount: float = Field(..., ge=0)
    delivery_address: NonBlank
    delivery_fee: float = Field(0.0, ge=0)
    delivery_latitude: Optional[Latitude] = None
    delivery_longitude: Optional[Longitude] = None
    estimated_delivery_time: Optional[int] = Field(
        None, ge=0, description="Minutes until delivery."
    )
    prescription_required: bool = False
    prescription_verified: bool = False


class OrderUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {"delivery_latitude", "delivery_longitude", "estimated_delivery_time"}
    )

    status: Optional[OrderStatus] = None
    total_amount: Optional[float] = Field(None, ge=0)
    delivery_fee: Optional[float] = Field(None, ge=0)
    delivery_address: Optional[NonBlank] = None
    delivery_latitude: Optional[Latitude] = None
    delivery_longitude: Optional[Longitude] = None
    estimated_delivery_time: Optional[int] = Field(None, ge=0)
    prescription_required: Optional[bool] = None
    prescription_verified: Optional[bool] = None


class OrderResponse(_Response):
    id: int
    user_id: int
    pharmacy_id: int
    order_number: str
    status: OrderStatus
    total_amount: float
    delivery_fee: float = 0.0
    delivery_address: str
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    estimated_delivery_time: Optional[int] = None
    prescription_required: bool = False
    prescription_verified: bool = False
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class DeliveryEstimateRequest(_Request):
    pharmacy_id: PositiveId
    delivery_latitude: Latitude
    delivery_longitude: Longitude


class TimeBreakdown(BaseModel):
    preparation_time: int
    travel_time: int
    buffer_time: int


class DeliveryEstimateResponse(BaseModel):
    pharmacy_id: int
    pharmacy_name: str
    pharmacy_address: str
    pharmacy_location: GeoPoint
    delivery_location: GeoPoint
    distance: float
    estimated_delivery_time: int = Field(..., description="Total minutes.")
    breakdown: TimeBreakdown
    delivery_fee: float
    estimated_delivery_at: UtcDatetime


# ── Order items ───────────────────────────────────────────────────────


class OrderItemCreateRequest(_Request):
    order_id: PositiveId
    medicine_id: PositiveId
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0)
    subtotal: float = Field(..., ge=0)


class OrderItemUpdateRequest(_Patch):
    quantity: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    subtotal: Optional[float] = Field(None, ge=0)


class OrderItemResponse(_Response):
    id: int
    order_id: int
    medicine_id: int
    quantity: int
    price: float
    discount: float = 0.0
    subtotal: float


# ── Deliveries ────────────────────────────────────────────────────────


class DeliveryCreateRequest(_Request):
    order_id: PositiveId
    status: DeliveryStatus
    delivery_person_id: Optional[PositiveId] = None
    current_latitude: Optional[Latitude] = None
    current_longitude: Optional[Longitude] = None
    assigned_at: Optional[UtcDatetime] = None
    picked_up_at: Optional[UtcDatetime] = None
    delivered_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None


class DeliveryUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {
            "delivery_person_id",
            "current_latitude",
            "current_longitude",
            "assigned_at",
            "picked_up_at",
            "delivered_at",
            "notes",
        }
    )

    status: Optional[DeliveryStatus] = None
    delivery_person_id: Optional[PositiveId] = None
    current_latitude: Optional[Latitude] = None
    current_longitude: Optional[Longitude] = None
    assigned_at: Optional[UtcDatetime] = None
    picked_up_at: Optional[UtcDatetime] = None
    delivered_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None


class DeliveryResponse(_Response):
    id: int
    order_id: int
    delivery_person_id: Optional[int] = None
    status: DeliveryStatus
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    assigned_at: Optional[UtcDatetime] = None
    picked_up_at: Optional[UtcDatetime] = None
    delivered_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None


class TrackingTimeline(BaseModel):
    order_placed: Optional[UtcDatetime] = None
    delivery_assigned: Optional[UtcDatetime] = None
    picked_up: Optional[UtcDatetime] = None
    estimated_delivery: Optional[UtcDatetime] = None
    delivered: Optional[UtcDatetime] = None


class TrackedPharmacy(BaseModel):
    id: int
    name: str
    address: str
    location: GeoPoint


class TrackedDestination(BaseModel):
    address: str
    location: Optional[GeoPoint] = None


class TrackedCourier(BaseModel):
    id: int
    name: str
    phone: str
    current_location: Optional[GeoPoint] = None


class TrackingInfo(BaseModel):
    current_distance: Optional[float] = None
    estimated_time_remaining: Optional[int] = None
    progress_percentage: int = Field(0, ge=0, le=100)


class TrackingResponse(BaseModel):
    order_id: int
    order_number: str
    delivery_status: DeliveryStatus
    order_status: OrderStatus
    timeline: TrackingTimeline
    pharmacy: TrackedPharmacy
    delivery_destination: TrackedDestination
    delivery_person: Optional[TrackedCourier] = None
    tracking: TrackingInfo
    notes: Optional[str] = None


# ── Prescriptions ─────────────────────────────────────────────────────


class PrescriptionCreateRequest(_Request):
    user_id: PositiveId
    prescription_url: NonBlank
    order_id: Optional[PositiveId] = None
    verified_by: Optional[PositiveId] = None
    is_verified: bool = False
    verification_notes: Optional[str] = None
    verified_at: Optional[UtcDatetime] = None


class PrescriptionUpdateRequest(_Patch):
    nullable: ClassVar[frozenset[str]] = frozenset(
        {"order_id", "verified_by", "verification_notes", "verified_at"}
    )

    order_id: Optional[PositiveId] = None
    verified_by: Optional[PositiveId] = None
    is_verified: Optional[bool] = None
    verification_notes: Optional[str] = None
    verified_at: Optional[UtcDatetime] = None


class PrescriptionResponse(_Response):
    id: int
    user_id: int
    order_id: Optional[int] = None
    prescription_url: str
    verified_by: Optional[int] = None
    is_verified: bool = False
    verification_notes: Optional[str] = None
    uploaded_at: Optional[UtcDatetime] = None
    verified_at: Optional[UtcDatetime] = None


# ── Viewers ───────────────────────────────────────────────────────────


class ViewerHeartbeatRequest(_Request):
    viewer_id: str = Field(..., min_length=1, max_length=128)


class ViewerCountResponse(BaseModel):
    active_viewers: int


class ViewerHeartbeatResponse(ViewerCountResponse):
    success: bool = True


# ── Misc ──────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
