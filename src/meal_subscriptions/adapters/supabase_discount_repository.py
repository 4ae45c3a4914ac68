"""Supabase repository for discount rules."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.discounts import (
    DiscountCategory,
    DiscountRange,
    DiscountRule,
)
from meal_subscriptions.services.discounts import DiscountRepository

_COLUMNS = "id, category, ranges, created_by"


@dataclass
class SupabaseDiscountRepository(DiscountRepository):
    """Supabase implementation for discount rules.

    Ranges are stored as a jsonb array on the rule row.
    """

    client: Client

    def get_by_category(self, category: DiscountCategory) -> DiscountRule | None:
        """Return the rule for a category."""
        response = (
            self.client.table("discounts")
            .select(_COLUMNS)
            .eq("category", category.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_rule(response.data[0])

    def get_by_id(self, discount_id: UUID) -> DiscountRule | None:
        """Return a rule by id."""
        response = (
            self.client.table("discounts")
            .select(_COLUMNS)
            .eq("id", str(discount_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_rule(response.data[0])

    def list_rules(self, category: DiscountCategory | None) -> list[DiscountRule]:
        """Return rules, optionally filtered by category."""
        query = self.client.table("discounts").select(_COLUMNS)
        if category is not None:
            query = query.eq("category", category.value)
        response = query.order("category", desc=False).execute()
        return [_parse_rule(row) for row in response.data or []]

    def create_rule(self, rule: DiscountRule) -> DiscountRule:
        """Insert a rule row."""
        response = (
            self.client.table("discounts")
            .insert(
                {
                    "id": str(rule.id),
                    "category": rule.category.value,
                    "ranges": _dump_ranges(rule.ranges),
                    "created_by": str(rule.created_by) if rule.created_by else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create discount")
        return _parse_rule(response.data[0])

    def save_ranges(self, discount_id: UUID, ranges: list[DiscountRange]) -> None:
        """Replace the ranges stored on a rule."""
        self.client.table("discounts").update({"ranges": _dump_ranges(ranges)}).eq(
            "id", str(discount_id)
        ).execute()


def _dump_ranges(ranges: list[DiscountRange]) -> list[dict[str, object]]:
    return [
        {
            "id": str(entry.id),
            "min": entry.min,
            "max": entry.max,
            "percentage": entry.percentage,
            "is_active": entry.is_active,
        }
        for entry in ranges
    ]


def _parse_rule(row: dict[str, object]) -> DiscountRule:
    created_by = row.get("created_by")
    return DiscountRule(
        id=UUID(str(row["id"])),
        category=DiscountCategory(row["category"]),
        ranges=[
            DiscountRange(
                id=UUID(str(entry["id"])),
                min=float(entry["min"]),
                max=float(entry["max"]),
                percentage=float(entry["percentage"]),
                is_active=bool(entry.get("is_active", False)),
            )
            for entry in row.get("ranges") or []
        ],
        created_by=UUID(str(created_by)) if created_by else None,
    )
