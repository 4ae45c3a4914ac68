"""Supabase repositories for carts."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.carts import (
    CartCategory,
    CartLine,
    CustomizedCart,
    CustomizedCartDay,
    CustomizedCartMeal,
    QuantityCart,
)
from meal_subscriptions.services.apportionment import CustomizedCartRepository
from meal_subscriptions.services.carts import CartRepository


@dataclass
class SupabaseCartRepository(CartRepository):
    """Supabase implementation for main and offered carts."""

    client: Client

    def get_cart(self, user_id: UUID, category: CartCategory) -> QuantityCart | None:
        """Return the user's cart of a category."""
        response = (
            self.client.table("carts")
            .select("id, user_id, category, lines")
            .eq("user_id", str(user_id))
            .eq("category", category.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return QuantityCart(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            category=CartCategory(row["category"]),
            lines=[
                CartLine(
                    menu_item_id=UUID(line["menu_item_id"]),
                    quantity=int(line["quantity"]),
                )
                for line in row.get("lines") or []
            ],
        )

    def save_cart(self, cart: QuantityCart) -> None:
        """Insert or replace a cart row."""
        self.client.table("carts").upsert(
            {
                "id": str(cart.id),
                "user_id": str(cart.user_id),
                "category": cart.category.value,
                "lines": [
                    {"menu_item_id": str(line.menu_item_id), "quantity": line.quantity}
                    for line in cart.lines
                ],
            },
            on_conflict="id",
        ).execute()

    def clear_cart(self, user_id: UUID, category: CartCategory) -> None:
        """Empty the user's cart of a category."""
        self.client.table("carts").update({"lines": []}).eq(
            "user_id", str(user_id)
        ).eq("category", category.value).execute()


@dataclass
class SupabaseCustomizedCartRepository(CustomizedCartRepository):
    """Supabase implementation for customized carts.

    Days and their meals are stored as a jsonb array on the cart row.
    """

    client: Client

    def get_customized_cart(self, user_id: UUID) -> CustomizedCart | None:
        """Return the user's customized cart."""
        response = (
            self.client.table("customized_carts")
            .select("id, user_id, days")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return CustomizedCart(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            days=[_parse_day(day) for day in row.get("days") or []],
        )

    def save_customized_cart(self, cart: CustomizedCart) -> None:
        """Insert or replace a customized cart row."""
        self.client.table("customized_carts").upsert(
            {
                "id": str(cart.id),
                "user_id": str(cart.user_id),
                "days": [_dump_day(day) for day in cart.days],
            },
            on_conflict="id",
        ).execute()

    def clear_customized_cart(self, user_id: UUID) -> None:
        """Remove every day from the user's customized cart."""
        self.client.table("customized_carts").update({"days": []}).eq(
            "user_id", str(user_id)
        ).execute()


def _dump_day(day: CustomizedCartDay) -> dict[str, object]:
    return {
        "day": day.day,
        "price_for_specific_day": day.price_for_specific_day,
        "meals": [
            {
                "id": str(meal.id),
                "menu_item_id": str(meal.menu_item_id),
                "quantity_of_oil": meal.quantity_of_oil,
                "extra_oil": meal.extra_oil,
                "quantity_of_starch": meal.quantity_of_starch,
                "quantity_of_meat": meal.quantity_of_meat,
            }
            for meal in day.meals
        ],
    }


def _parse_day(row: dict[str, object]) -> CustomizedCartDay:
    return CustomizedCartDay(
        day=str(row["day"]),
        price_for_specific_day=float(row.get("price_for_specific_day", 0.0)),
        meals=[
            CustomizedCartMeal(
                id=UUID(meal["id"]),
                menu_item_id=UUID(meal["menu_item_id"]),
                quantity_of_oil=float(meal.get("quantity_of_oil", 0.0)),
                extra_oil=float(meal.get("extra_oil", 0.0)),
                quantity_of_starch=float(meal.get("quantity_of_starch", 0.0)),
                quantity_of_meat=float(meal.get("quantity_of_meat", 0.0)),
            )
            for meal in row.get("meals") or []
        ],
    )
