"""Catalog lookups consumed by carts and orders."""

from typing import Protocol
from uuid import UUID

from meal_subscriptions.domain.catalog import (
    CustomizedMealItem,
    MainMealItem,
    OfferedMealItem,
)


class CatalogRepository(Protocol):
    """Read-only access to menu items and plan options."""

    def get_main_meal(self, menu_item_id: UUID) -> MainMealItem | None:
        """Return a main menu item by id."""

    def get_offered_meal(self, menu_item_id: UUID) -> OfferedMealItem | None:
        """Return an offered package by id."""

    def get_customized_meal(self, menu_item_id: UUID) -> CustomizedMealItem | None:
        """Return a customizable meal by id."""

    def list_main_meals(self, menu_item_ids: list[UUID]) -> list[MainMealItem]:
        """Return main menu items for the given ids."""

    def list_offered_meals(self, menu_item_ids: list[UUID]) -> list[OfferedMealItem]:
        """Return offered packages for the given ids."""

    def list_customized_meals(
        self, menu_item_ids: list[UUID]
    ) -> list[CustomizedMealItem]:
        """Return customizable meals for the given ids."""

    def has_meals_per_day_option(self, meals_count: int) -> bool:
        """Return true when a visible meals-per-day option exists."""

    def has_plan_duration_option(self, days_number: int) -> bool:
        """Return true when a visible plan-duration option exists."""
