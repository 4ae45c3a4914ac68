"""Supabase repository for calculator coefficients."""

from dataclasses import asdict, dataclass

from supabase import Client

from meal_subscriptions.domain.calculator import (
    DEFAULT_ACTIVITY_FACTORS,
    BodyType,
    CalculatorSettings,
    KetoGoal,
    MacroGoal,
    MacroSplit,
)
from meal_subscriptions.services.calculator import CalculatorSettingsRepository


@dataclass
class SupabaseCalculatorRepository(CalculatorSettingsRepository):
    """Supabase implementation for the single coefficients row."""

    client: Client

    def get_settings(self) -> CalculatorSettings | None:
        """Return the stored coefficients."""
        response = (
            self.client.table("calculator_settings")
            .select("id, activity_factors, keto_splits, macro_splits")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return CalculatorSettings(
            activity_factors=tuple(
                float(value) for value in row.get("activity_factors") or []
            )
            or DEFAULT_ACTIVITY_FACTORS,
            keto_splits={
                KetoGoal(goal): MacroSplit(**split)
                for goal, split in (row.get("keto_splits") or {}).items()
            },
            macro_splits={
                MacroGoal(goal): {
                    BodyType(body_type): MacroSplit(**split)
                    for body_type, split in splits.items()
                }
                for goal, splits in (row.get("macro_splits") or {}).items()
            },
        )

    def create_settings(self, settings: CalculatorSettings) -> None:
        """Insert the coefficients row."""
        response = (
            self.client.table("calculator_settings")
            .insert({"id": 1, **_dump_settings(settings)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create calculator settings")

    def update_settings(self, settings: CalculatorSettings) -> None:
        """Replace the coefficients row."""
        self.client.table("calculator_settings").update(_dump_settings(settings)).eq(
            "id", 1
        ).execute()


def _dump_settings(settings: CalculatorSettings) -> dict[str, object]:
    return {
        "activity_factors": list(settings.activity_factors),
        "keto_splits": {
            goal.value: asdict(split) for goal, split in settings.keto_splits.items()
        },
        "macro_splits": {
            goal.value: {
                body_type.value: asdict(split) for body_type, split in splits.items()
            }
            for goal, splits in settings.macro_splits.items()
        },
    }
