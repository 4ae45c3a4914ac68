"""Supabase repositories for orders and customer accounts."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.orders import (
    CustomerAccount,
    DeliveryStatus,
    Order,
    OrderQuery,
    OrderStatus,
    StatusField,
)
from meal_subscriptions.services.orders import AccountRepository, OrderRepository

_ORDER_COLUMNS = (
    "id, user_id, order_details, delivery_address, note_from_user, payment_method, "
    "number_of_meals_per_day, plan_duration, order_status, delivery_status, "
    "paid_status, created_at"
)


@dataclass
class SupabaseAccountRepository(AccountRepository):
    """Supabase implementation for customer accounts."""

    client: Client

    def get_account(self, user_id: UUID) -> CustomerAccount | None:
        """Return the account of a user."""
        response = (
            self.client.table("accounts")
            .select("id, phone, profile_verified, disabled_by_admin, is_admin")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return CustomerAccount(
            id=UUID(row["id"]),
            phone=row.get("phone"),
            profile_verified=bool(row.get("profile_verified", False)),
            disabled_by_admin=bool(row.get("disabled_by_admin", False)),
            is_admin=bool(row.get("is_admin", False)),
        )


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for orders."""

    client: Client

    def create_order(self, order: Order) -> Order:
        """Insert an order row."""
        response = (
            self.client.table("orders")
            .insert(
                {
                    "id": str(order.id),
                    "user_id": str(order.user_id),
                    "order_details": order.order_details,
                    "delivery_address": order.delivery_address,
                    "note_from_user": order.note_from_user,
                    "payment_method": order.payment_method,
                    "number_of_meals_per_day": order.number_of_meals_per_day,
                    "plan_duration": order.plan_duration,
                    "order_status": order.order_status.value,
                    "delivery_status": order.delivery_status.value,
                    "paid_status": order.paid_status,
                    "created_at": order.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order")
        return _parse_order(response.data[0])

    def get_order(self, order_id: UUID) -> Order | None:
        """Return an order by id."""
        response = (
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("id", str(order_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_order(response.data[0])

    def update_status(
        self,
        order_id: UUID,
        field: StatusField,
        value: OrderStatus | DeliveryStatus | bool,
    ) -> None:
        """Set one status column of an order."""
        stored = value if isinstance(value, bool) else value.value
        self.client.table("orders").update({field.value: stored}).eq(
            "id", str(order_id)
        ).execute()

    def list_orders(
        self, user_id: UUID | None, query: OrderQuery, offset: int, limit: int
    ) -> list[Order]:
        """Return orders newest first."""
        request = self._filtered(
            self.client.table("orders").select(_ORDER_COLUMNS), user_id, query
        )
        response = (
            request.order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [_parse_order(row) for row in response.data or []]

    def count_orders(self, user_id: UUID | None, query: OrderQuery) -> int:
        """Return the number of matching orders."""
        request = self._filtered(
            self.client.table("orders").select("id", count="exact"), user_id, query
        )
        response = request.execute()
        return response.count or 0

    @staticmethod
    def _filtered(request, user_id: UUID | None, query: OrderQuery):
        if user_id is not None:
            request = request.eq("user_id", str(user_id))
        if query.start is not None:
            request = request.gte("created_at", query.start.isoformat())
        if query.end is not None:
            request = request.lte("created_at", query.end.isoformat())
        return request


def _parse_order(row: dict[str, object]) -> Order:
    meals = row.get("number_of_meals_per_day")
    duration = row.get("plan_duration")
    return Order(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        order_details=dict(row.get("order_details") or {}),
        delivery_address=dict(row.get("delivery_address") or {}),
        note_from_user=row.get("note_from_user"),
        payment_method=str(row["payment_method"]),
        number_of_meals_per_day=int(meals) if meals is not None else None,
        plan_duration=int(duration) if duration is not None else None,
        order_status=OrderStatus(row["order_status"]),
        delivery_status=DeliveryStatus(row["delivery_status"]),
        paid_status=bool(row.get("paid_status", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
