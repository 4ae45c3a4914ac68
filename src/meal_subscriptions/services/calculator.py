"""Keto and macro calculators.

Both calculators share the BMR and TDEE formulas. The keto calculator converts
the fat share at 4 kcal/g while the macro calculator uses 9 kcal/g.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from meal_subscriptions.domain.calculator import (
    BodyMetrics,
    BodyType,
    CalculatorSettings,
    Gender,
    KetoGoal,
    MacroGoal,
    MacroSplit,
    MacroTargets,
)
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)

_logger = logging.getLogger(__name__)

MIN_FAT_PERCENTAGE = 5
ACTIVITY_LEVELS = 6

# Lower bound of each 5%-wide body-fat bucket and its factor.
_BODY_FAT_BUCKETS = (
    (40, 0.42),
    (35, 0.37),
    (30, 0.32),
    (25, 0.27),
    (20, 0.22),
    (15, 0.17),
    (10, 0.07),
)
_LOWEST_BODY_FAT_FACTOR = 0.07

INVALID_FAT_PERCENTAGE = Message(
    en=f"Fat percentage must be greater than or equal to {MIN_FAT_PERCENTAGE}",
    ar=f"يجب أن تكون نسبة الدهون أكبر من أو تساوي {MIN_FAT_PERCENTAGE}",
)
INVALID_ACTIVITY_LEVEL = Message(
    en="ALF must be an integer between 1 and 6",
    ar="يجب أن يكون ALF عددًا صحيحًا بين 1 و 6",
)
INVALID_BODY_METRICS = Message(
    en="Weight, height and age must be positive numbers.",
    ar="يجب أن يكون الوزن والطول والعمر أرقامًا موجبة",
)
SETTINGS_NOT_CONFIGURED = Message(
    en="Calculator coefficients are not configured for this goal.",
    ar="لم يتم إعداد معاملات الحاسبة لهذا الهدف",
)
SETTINGS_EXIST = Message(
    en="A keto admin record already exists. You cannot create another one.",
    ar="توجد بالفعل سجلات كيتو المشرف. لا يمكنك إنشاء واحدة أخرى",
)
SETTINGS_CREATED = Message(
    en="Admin created keto data successfully.",
    ar="تم إنشاء بيانات كيتو المشرف بنجاح",
)
SETTINGS_NOT_FOUND = Message(
    en="No existing keto admin record found for update.",
    ar="لم يتم العثور على سجل كيتو المشرف الحالي للتحديث",
)
SETTINGS_UPDATED = Message(
    en="Admin keto data updated successfully.",
    ar="تم تحديث بيانات كيتو المشرف بنجاح",
)
INVALID_ACTIVITY_FACTORS = Message(
    en="Exactly six positive activity level factors are required.",
    ar="مطلوب ستة معاملات موجبة لمستوى النشاط",
)


class CalculatorSettingsRepository(Protocol):
    """Persistence interface for calculator coefficients."""

    def get_settings(self) -> CalculatorSettings | None:
        """Return the stored coefficients, if any."""

    def create_settings(self, settings: CalculatorSettings) -> None:
        """Persist the single coefficients record."""

    def update_settings(self, settings: CalculatorSettings) -> None:
        """Replace the coefficients record."""


def body_fat_factor(fat_percentage: float) -> float:
    """Return the lean-mass adjustment factor for a body-fat percentage."""
    for lower_bound, factor in _BODY_FAT_BUCKETS:
        if fat_percentage >= lower_bound:
            return factor
    return _LOWEST_BODY_FAT_FACTOR


def basal_metabolic_rate(metrics: BodyMetrics) -> float:
    """Average of Mifflin-St Jeor and the body-fat adjusted formula."""
    gender_offset = 5 if metrics.gender is Gender.MAN else -161
    lean_term = 370 + 21.6 * (1 - body_fat_factor(metrics.fat_percentage)) * (
        metrics.weight
    )
    return (
        10 * metrics.weight
        + 6.25 * metrics.height
        - 5 * metrics.age
        + gender_offset
        + lean_term
    ) / 2


def total_daily_energy(
    bmr: float, activity_level: int, activity_factors: tuple[float, ...]
) -> float:
    """Return TDEE for a 1-based activity level."""
    return bmr * activity_factors[activity_level - 1]


def split_macros(
    bmr: float, tdee: float, split: MacroSplit, fat_kcal_per_gram: float
) -> MacroTargets:
    """Apply a calorie fraction and macro shares to TDEE."""
    calories = tdee * split.calories
    return MacroTargets(
        bmr=bmr,
        tdee=tdee,
        calories=calories,
        protein=split.protein * calories / 4,
        carb=split.carb * calories / 4,
        fat=split.fat * calories / fat_kcal_per_gram,
    )


@dataclass
class CalculatorService:
    """Computes macro targets from admin-configured coefficients."""

    repository: CalculatorSettingsRepository

    def compute_keto_macros(
        self, metrics: BodyMetrics, goal: KetoGoal
    ) -> Result[MacroTargets]:
        """Return BMR, TDEE and keto macro grams."""
        return self._compute(
            metrics, lambda settings: settings.keto_splits.get(goal), 4
        )

    def compute_macros(
        self, metrics: BodyMetrics, goal: MacroGoal, body_type: BodyType
    ) -> Result[MacroTargets]:
        """Return BMR, TDEE and macro grams for a goal and body type."""
        return self._compute(
            metrics,
            lambda settings: settings.macro_splits.get(goal, {}).get(body_type),
            9,
        )

    def get_settings(self) -> Result[CalculatorSettings]:
        """Return the stored coefficients or the defaults."""
        try:
            return Ok(self.repository.get_settings() or CalculatorSettings())
        except Exception:
            _logger.exception("Failed to load calculator settings")
            return system_failure()

    def create_settings(
        self, settings: CalculatorSettings
    ) -> Result[CalculatorSettings]:
        """Create the single coefficients record."""
        if not _valid_factors(settings.activity_factors):
            return Failure(ErrorKind.VALIDATION, INVALID_ACTIVITY_FACTORS)
        try:
            if self.repository.get_settings() is not None:
                return Failure(ErrorKind.BUSINESS_RULE, SETTINGS_EXIST)
            self.repository.create_settings(settings)
        except Exception:
            _logger.exception("Failed to create calculator settings")
            return system_failure()
        return Ok(settings, SETTINGS_CREATED)

    def update_settings(
        self, settings: CalculatorSettings
    ) -> Result[CalculatorSettings]:
        """Replace the coefficients record."""
        if not _valid_factors(settings.activity_factors):
            return Failure(ErrorKind.VALIDATION, INVALID_ACTIVITY_FACTORS)
        try:
            if self.repository.get_settings() is None:
                return Failure(ErrorKind.NOT_FOUND, SETTINGS_NOT_FOUND)
            self.repository.update_settings(settings)
        except Exception:
            _logger.exception("Failed to update calculator settings")
            return system_failure()
        return Ok(settings, SETTINGS_UPDATED)

    def _compute(
        self,
        metrics: BodyMetrics,
        select_split: Callable[[CalculatorSettings], MacroSplit | None],
        fat_kcal_per_gram: float,
    ) -> Result[MacroTargets]:
        rejection = _validate_metrics(metrics)
        if rejection is not None:
            return rejection
        try:
            settings = self.repository.get_settings() or CalculatorSettings()
        except Exception:
            _logger.exception("Failed to load calculator settings")
            return system_failure()
        split = select_split(settings)
        if split is None:
            return Failure(ErrorKind.NOT_FOUND, SETTINGS_NOT_CONFIGURED)
        bmr = basal_metabolic_rate(metrics)
        tdee = total_daily_energy(
            bmr, metrics.activity_level, settings.activity_factors
        )
        return Ok(split_macros(bmr, tdee, split, fat_kcal_per_gram))


def _validate_metrics(metrics: BodyMetrics) -> Failure | None:
    if metrics.fat_percentage < MIN_FAT_PERCENTAGE:
        return Failure(ErrorKind.VALIDATION, INVALID_FAT_PERCENTAGE)
    if not 1 <= metrics.activity_level <= ACTIVITY_LEVELS:
        return Failure(ErrorKind.VALIDATION, INVALID_ACTIVITY_LEVEL)
    if min(metrics.weight, metrics.height, metrics.age) <= 0:
        return Failure(ErrorKind.VALIDATION, INVALID_BODY_METRICS)
    return None


def _valid_factors(factors: tuple[float, ...]) -> bool:
    return len(factors) == ACTIVITY_LEVELS and all(factor > 0 for factor in factors)
