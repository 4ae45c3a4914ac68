"""Customized meal intake profiles and their admin bounds."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

MAX_MEAL_DURATION_REPEAT = 7


class DietCategory(StrEnum):
    """Diet families supported by customized meal plans."""

    KETO = "keto diet"
    CLEAN = "clean diet"


@dataclass(frozen=True)
class CustomizedMealProfile:
    """Daily macro targets a user submitted for customized meals."""

    id: UUID
    user_id: UUID
    protein: float
    fat: float
    carbs: float
    category: DietCategory
    calories: float
    meal_per_day: int
    meal_duration_repeat: int = 0


@dataclass(frozen=True)
class CustomizedMealConfig:
    """Admin bounds for one diet category.

    Fat and carb bounds are ratios applied to the submitted protein grams.
    """

    id: UUID
    category: DietCategory
    calories_divider: float
    minimum_protein: float
    maximum_protein: float
    minimum_fat: float
    maximum_fat: float
    minimum_carb: float
    maximum_carb: float
    minimum_calories: float
    maximum_calories: float


@dataclass(frozen=True)
class IntakeSummary:
    """Derived values returned after a successful intake."""

    profile_id: UUID
    calories: float
    meal_per_day: int
