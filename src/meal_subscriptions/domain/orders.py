"""Domain models for placed orders."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

CASH_ON_DELIVERY = "COD - (Cash On Delivery)"


class OrderStatus(StrEnum):
    """Admin review state of an order."""

    PENDING = "pending"
    CONFIRM = "confirm"
    REJECTED = "rejected"


class DeliveryStatus(StrEnum):
    """Fulfilment state of an order."""

    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class StatusField(StrEnum):
    """Order fields an admin may transition."""

    ORDER_STATUS = "order_status"
    DELIVERY_STATUS = "delivery_status"
    PAID_STATUS = "paid_status"


@dataclass(frozen=True)
class CustomerAccount:
    """Account facts checked before an order is accepted."""

    id: UUID
    phone: str | None
    profile_verified: bool
    disabled_by_admin: bool = False
    is_admin: bool = False


@dataclass(frozen=True)
class OrderInput:
    """Checkout details supplied by the customer."""

    delivery_address: dict[str, object] = field(default_factory=dict)
    note_from_user: str | None = None
    payment_method: str = CASH_ON_DELIVERY
    number_of_meals_per_day: int | None = None
    plan_duration: int | None = None


@dataclass(frozen=True)
class Order:
    """Immutable snapshot of carts at checkout with mutable statuses."""

    id: UUID
    user_id: UUID
    order_details: dict[str, object]
    delivery_address: dict[str, object]
    note_from_user: str | None
    payment_method: str
    number_of_meals_per_day: int | None
    plan_duration: int | None
    order_status: OrderStatus
    delivery_status: DeliveryStatus
    paid_status: bool
    created_at: datetime


@dataclass(frozen=True)
class OrderPlacement:
    """Identifier and snapshot of a newly placed order."""

    order_id: UUID
    order_details: dict[str, object]


@dataclass(frozen=True)
class OrderQuery:
    """Date filters for order listings."""

    start: datetime | None = None
    end: datetime | None = None
