"""Domain enumerations and delivery phase groupings."""

import enum


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    PHARMACY = "pharmacy"
    DELIVERY = "delivery"


class MedicineCategory(str, enum.Enum):
    PRESCRIPTION = "prescription"
    OTC = "otc"
    SUPPLEMENT = "supplement"
    DEVICE = "device"
    FIRST_AID = "first_aid"
    BABY_CARE = "baby_care"
    PERSONAL_CARE = "personal_care"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DeliveryStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    PICKED_UP = "picked_up"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    FAILED = "failed"


# Phases used by the tracking estimate.  Statuses follow a linear sequence;
# no transition table is enforced.
AWAITING_PICKUP: frozenset[DeliveryStatus] = frozenset(
    {DeliveryStatus.ASSIGNED, DeliveryStatus.ACCEPTED}
)
IN_TRANSIT: frozenset[DeliveryStatus] = frozenset(
    {DeliveryStatus.PICKED_UP, DeliveryStatus.ON_THE_WAY}
)


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class MedicineSortField(str, enum.Enum):
    PRICE = "price"
    NAME = "name"
    CREATED_AT = "created_at"
