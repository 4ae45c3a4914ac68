"""Supabase repository for customized meal profiles and their configs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_subscriptions.domain.profiles import (
    CustomizedMealConfig,
    CustomizedMealProfile,
    DietCategory,
)
from meal_subscriptions.services.customized_meals import (
    CustomizedMealProfileRepository,
)

_PROFILE_COLUMNS = (
    "id, user_id, protein, fat, carbs, category, calories, meal_per_day, "
    "meal_duration_repeat"
)
_CONFIG_COLUMNS = (
    "id, category, calories_divider, minimum_protein, maximum_protein, "
    "minimum_fat, maximum_fat, minimum_carb, maximum_carb, minimum_calories, "
    "maximum_calories"
)


@dataclass
class SupabaseProfileRepository(CustomizedMealProfileRepository):
    """Supabase implementation for intake profiles and admin bounds."""

    client: Client

    def get_profile_by_user(self, user_id: UUID) -> CustomizedMealProfile | None:
        """Return the profile of a user."""
        response = (
            self.client.table("customized_meal_profiles")
            .select(_PROFILE_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def get_profile(self, profile_id: UUID) -> CustomizedMealProfile | None:
        """Return a profile by id."""
        response = (
            self.client.table("customized_meal_profiles")
            .select(_PROFILE_COLUMNS)
            .eq("id", str(profile_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create_profile(self, profile: CustomizedMealProfile) -> CustomizedMealProfile:
        """Insert a profile row."""
        response = (
            self.client.table("customized_meal_profiles")
            .insert(
                {
                    "id": str(profile.id),
                    "user_id": str(profile.user_id),
                    "protein": profile.protein,
                    "fat": profile.fat,
                    "carbs": profile.carbs,
                    "category": profile.category.value,
                    "calories": profile.calories,
                    "meal_per_day": profile.meal_per_day,
                    "meal_duration_repeat": profile.meal_duration_repeat,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create customized meal profile")
        return _parse_profile(response.data[0])

    def update_meal_duration_repeat(self, profile_id: UUID, value: int) -> None:
        """Set the number of customized days."""
        self.client.table("customized_meal_profiles").update(
            {"meal_duration_repeat": value}
        ).eq("id", str(profile_id)).execute()

    def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile row."""
        self.client.table("customized_meal_profiles").delete().eq(
            "id", str(profile_id)
        ).execute()

    def list_profiles(self, offset: int, limit: int) -> list[CustomizedMealProfile]:
        """Return a page of profiles."""
        response = (
            self.client.table("customized_meal_profiles")
            .select(_PROFILE_COLUMNS)
            .order("id", desc=False)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [_parse_profile(row) for row in response.data or []]

    def count_profiles(self) -> int:
        """Return the number of stored profiles."""
        response = (
            self.client.table("customized_meal_profiles")
            .select("id", count="exact")
            .execute()
        )
        return response.count or 0

    def get_config(self, category: DietCategory) -> CustomizedMealConfig | None:
        """Return the admin bounds for a diet category."""
        response = (
            self.client.table("customized_meal_configs")
            .select(_CONFIG_COLUMNS)
            .eq("category", category.value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_config(response.data[0])

    def create_config(self, config: CustomizedMealConfig) -> CustomizedMealConfig:
        """Insert admin bounds for a category."""
        response = (
            self.client.table("customized_meal_configs")
            .insert(_dump_config(config))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create customized meal config")
        return _parse_config(response.data[0])

    def update_config(self, config: CustomizedMealConfig) -> None:
        """Replace admin bounds for a category."""
        payload = _dump_config(config)
        payload.pop("id")
        self.client.table("customized_meal_configs").update(payload).eq(
            "id", str(config.id)
        ).execute()


def _dump_config(config: CustomizedMealConfig) -> dict[str, object]:
    return {
        "id": str(config.id),
        "category": config.category.value,
        "calories_divider": config.calories_divider,
        "minimum_protein": config.minimum_protein,
        "maximum_protein": config.maximum_protein,
        "minimum_fat": config.minimum_fat,
        "maximum_fat": config.maximum_fat,
        "minimum_carb": config.minimum_carb,
        "maximum_carb": config.maximum_carb,
        "minimum_calories": config.minimum_calories,
        "maximum_calories": config.maximum_calories,
    }


def _parse_profile(row: dict[str, object]) -> CustomizedMealProfile:
    return CustomizedMealProfile(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        protein=float(row["protein"]),
        fat=float(row["fat"]),
        carbs=float(row["carbs"]),
        category=DietCategory(row["category"]),
        calories=float(row["calories"]),
        meal_per_day=int(row["meal_per_day"]),
        meal_duration_repeat=int(row.get("meal_duration_repeat") or 0),
    )


def _parse_config(row: dict[str, object]) -> CustomizedMealConfig:
    return CustomizedMealConfig(
        id=UUID(str(row["id"])),
        category=DietCategory(row["category"]),
        calories_divider=float(row["calories_divider"]),
        minimum_protein=float(row["minimum_protein"]),
        maximum_protein=float(row["maximum_protein"]),
        minimum_fat=float(row["minimum_fat"]),
        maximum_fat=float(row["maximum_fat"]),
        minimum_carb=float(row["minimum_carb"]),
        maximum_carb=float(row["maximum_carb"]),
        minimum_calories=float(row["minimum_calories"]),
        maximum_calories=float(row["maximum_calories"]),
    )
