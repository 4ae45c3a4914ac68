"""Pydantic request bodies for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field

from meal_subscriptions.domain.calculator import (
    DEFAULT_ACTIVITY_FACTORS,
    BodyMetrics,
    BodyType,
    CalculatorSettings,
    Gender,
    KetoGoal,
    MacroGoal,
    MacroSplit,
)
from meal_subscriptions.domain.discounts import DiscountCategory, RangeInput
from meal_subscriptions.domain.orders import CASH_ON_DELIVERY, OrderInput
from meal_subscriptions.domain.profiles import DietCategory
from meal_subscriptions.services.customized_meals import ConfigInput, IntakeInput


class CartLineRequest(BaseModel):
    """Main menu or offered meal to add to a cart."""

    menu_item_id: UUID
    quantity: int


class CustomizedLineRequest(BaseModel):
    """Customized meal to add to a plan day."""

    menu_item_id: UUID
    day: str


class OrderRequest(BaseModel):
    """Checkout details."""

    delivery_address: dict[str, object] = Field(default_factory=dict)
    note_from_user: str | None = None
    payment_method: str = CASH_ON_DELIVERY
    number_of_meals_per_day: int | None = None
    plan_duration: int | None = None

    def to_input(self) -> OrderInput:
        return OrderInput(**self.model_dump())


class IntakeRequest(BaseModel):
    """Daily macro grams for customized meals."""

    protein: float
    fat: float
    carbs: float
    category: DietCategory

    def to_input(self) -> IntakeInput:
        return IntakeInput(**self.model_dump())


class BodyMetricsRequest(BaseModel):
    gender: Gender
    weight: float
    height: float
    age: float
    fat_percentage: float
    activity_level: int

    def to_metrics(self) -> BodyMetrics:
        return BodyMetrics(
            gender=self.gender,
            weight=self.weight,
            height=self.height,
            age=self.age,
            fat_percentage=self.fat_percentage,
            activity_level=self.activity_level,
        )


class KetoCalculatorRequest(BodyMetricsRequest):
    goal: KetoGoal


class MacroCalculatorRequest(BodyMetricsRequest):
    goal: MacroGoal
    body_type: BodyType


class RangeRequest(BaseModel):
    """Discount range supplied by an admin."""

    min: float
    max: float
    percentage: float
    is_active: bool = True

    def to_input(self) -> RangeInput:
        return RangeInput(**self.model_dump())


class DiscountRequest(BaseModel):
    """Ranges to add to a category's discount rule."""

    category: DiscountCategory
    ranges: list[RangeRequest]


class StatusUpdateRequest(BaseModel):
    """Single order status change."""

    field: str
    value: bool | str


class MealDurationRequest(BaseModel):
    value: int | None = None


class CustomizedMealConfigRequest(BaseModel):
    """Admin bounds for a diet category."""

    calories_divider: float
    minimum_protein: float
    maximum_protein: float
    minimum_fat: float
    maximum_fat: float
    minimum_carb: float
    maximum_carb: float
    minimum_calories: float
    maximum_calories: float

    def to_input(self) -> ConfigInput:
        return ConfigInput(**self.model_dump())


class MacroSplitRequest(BaseModel):
    calories: float
    protein: float
    carb: float
    fat: float


class CalculatorSettingsRequest(BaseModel):
    """Calculator coefficients."""

    activity_factors: list[float] = Field(
        default_factory=lambda: list(DEFAULT_ACTIVITY_FACTORS)
    )
    keto_splits: dict[KetoGoal, MacroSplitRequest] = Field(default_factory=dict)
    macro_splits: dict[MacroGoal, dict[BodyType, MacroSplitRequest]] = Field(
        default_factory=dict
    )

    def to_settings(self) -> CalculatorSettings:
        return CalculatorSettings(
            activity_factors=tuple(self.activity_factors),
            keto_splits={
                goal: MacroSplit(**split.model_dump())
                for goal, split in self.keto_splits.items()
            },
            macro_splits={
                goal: {
                    body_type: MacroSplit(**split.model_dump())
                    for body_type, split in splits.items()
                }
                for goal, splits in self.macro_splits.items()
            },
        )
