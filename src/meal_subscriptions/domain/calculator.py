"""Models for the keto and macro calculators."""

from dataclasses import dataclass, field
from enum import StrEnum

DEFAULT_ACTIVITY_FACTORS = (1.2, 1.375, 1.465, 1.55, 1.725, 1.9)


class Gender(StrEnum):
    MAN = "man"
    WOMAN = "woman"


class KetoGoal(StrEnum):
    MAINTAIN = "maintain weight & muscles"
    LOSS_FAT = "loss fat"


class MacroGoal(StrEnum):
    GAIN_MUSCLES = "gain muscles"
    MAINTAIN_MUSCLES = "maintain muscles"
    LOSS_FAT = "loss fat"


class BodyType(StrEnum):
    ECTOMORPH = "ectomorph"
    MESOMORPH = "mesomorph"
    ANDROMORPH = "andromorph"


@dataclass(frozen=True)
class MacroSplit:
    """Calorie fraction of TDEE and the protein/carb/fat shares of it."""

    calories: float
    protein: float
    carb: float
    fat: float


@dataclass(frozen=True)
class CalculatorSettings:
    """Admin coefficients shared by both calculators."""

    activity_factors: tuple[float, ...] = DEFAULT_ACTIVITY_FACTORS
    keto_splits: dict[KetoGoal, MacroSplit] = field(default_factory=dict)
    macro_splits: dict[MacroGoal, dict[BodyType, MacroSplit]] = field(
        default_factory=dict
    )


@dataclass(frozen=True)
class BodyMetrics:
    """Body measurements submitted to a calculator."""

    gender: Gender
    weight: float
    height: float
    age: float
    fat_percentage: float
    activity_level: int


@dataclass(frozen=True)
class MacroTargets:
    """Calculator output in kcal and grams."""

    bmr: float
    tdee: float
    calories: float
    protein: float
    carb: float
    fat: float
