"""Supabase repository for menu catalogs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.catalog import (
    CustomizedMealItem,
    MainMealItem,
    OfferedMealItem,
)
from meal_subscriptions.services.catalog import CatalogRepository

_CUSTOMIZED_COLUMNS = (
    "id, name, diet, protein, fadd, carbs, prp, prc, prf, mf, sf, of, fmf, visible"
)


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase implementation for the menu catalogs."""

    client: Client

    def get_main_meal(self, menu_item_id: UUID) -> MainMealItem | None:
        """Return a main menu item by id."""
        items = self.list_main_meals([menu_item_id])
        return items[0] if items else None

    def get_offered_meal(self, menu_item_id: UUID) -> OfferedMealItem | None:
        """Return an offered package by id."""
        items = self.list_offered_meals([menu_item_id])
        return items[0] if items else None

    def get_customized_meal(self, menu_item_id: UUID) -> CustomizedMealItem | None:
        """Return a customizable meal by id."""
        items = self.list_customized_meals([menu_item_id])
        return items[0] if items else None

    def list_main_meals(self, menu_item_ids: list[UUID]) -> list[MainMealItem]:
        """Return main menu items for the given ids."""
        if not menu_item_ids:
            return []
        response = (
            self.client.table("main_meal_menus")
            .select("id, name, regular_price, visible")
            .in_("id", [str(item_id) for item_id in menu_item_ids])
            .execute()
        )
        return [
            MainMealItem(
                id=UUID(row["id"]),
                name=row["name"],
                regular_price=float(row["regular_price"]),
                visible=bool(row.get("visible", True)),
            )
            for row in response.data or []
        ]

    def list_offered_meals(self, menu_item_ids: list[UUID]) -> list[OfferedMealItem]:
        """Return offered packages for the given ids."""
        if not menu_item_ids:
            return []
        response = (
            self.client.table("offered_meal_menus")
            .select("id, name, price, visible")
            .in_("id", [str(item_id) for item_id in menu_item_ids])
            .execute()
        )
        return [
            OfferedMealItem(
                id=UUID(row["id"]),
                name=row["name"],
                price=float(row["price"]),
                visible=bool(row.get("visible", True)),
            )
            for row in response.data or []
        ]

    def list_customized_meals(
        self, menu_item_ids: list[UUID]
    ) -> list[CustomizedMealItem]:
        """Return customizable meals for the given ids."""
        if not menu_item_ids:
            return []
        response = (
            self.client.table("customized_meal_menus")
            .select(_CUSTOMIZED_COLUMNS)
            .in_("id", [str(item_id) for item_id in menu_item_ids])
            .execute()
        )
        return [_parse_customized(row) for row in response.data or []]

    def has_meals_per_day_option(self, meals_count: int) -> bool:
        """Return true when a visible meals-per-day option exists."""
        response = (
            self.client.table("meals_per_day_options")
            .select("id")
            .eq("meals_count", meals_count)
            .eq("visible", True)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def has_plan_duration_option(self, days_number: int) -> bool:
        """Return true when a visible plan-duration option exists."""
        response = (
            self.client.table("plan_duration_options")
            .select("id")
            .eq("days_number", days_number)
            .eq("visible", True)
            .limit(1)
            .execute()
        )
        return bool(response.data)


def _parse_customized(row: dict[str, object]) -> CustomizedMealItem:
    return CustomizedMealItem(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        diet=str(row.get("diet", "")),
        protein=float(row.get("protein", 0.0)),
        fadd=float(row.get("fadd", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        prp=float(row.get("prp", 0.0)),
        prc=float(row.get("prc", 0.0)),
        prf=float(row.get("prf", 0.0)),
        mf=float(row.get("mf", 0.0)),
        sf=float(row.get("sf", 0.0)),
        of=float(row.get("of", 0.0)),
        fmf=float(row.get("fmf", 0.0)),
        visible=bool(row.get("visible", True)),
    )
