"""Domain models for tiered discounts."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID


class DiscountCategory(StrEnum):
    """Pricing bucket a discount rule applies to."""

    MAIN_MENU = "mainMenu"
    CUSTOMIZE_ORDER = "customizeOrder"
    OFFERS = "offers"
    TOTAL_ORDER = "totalOrder"


@dataclass(frozen=True)
class DiscountRange:
    """Closed subtotal interval with a discount percentage."""

    id: UUID
    min: float
    max: float
    percentage: float
    is_active: bool = False

    def contains(self, amount: float) -> bool:
        """Return true when the amount falls inside the interval."""
        return self.min <= amount <= self.max

    def overlaps(self, other: "DiscountRange") -> bool:
        """Return true when both closed intervals intersect."""
        return self.min <= other.max and self.max >= other.min


@dataclass(frozen=True)
class DiscountRule:
    """All discount ranges configured for one category."""

    id: UUID
    category: DiscountCategory
    ranges: list[DiscountRange] = field(default_factory=list)
    created_by: UUID | None = None


@dataclass(frozen=True)
class RangeInput:
    """Range values supplied by an admin."""

    min: float
    max: float
    percentage: float
    is_active: bool = True


@dataclass(frozen=True)
class DiscountQuote:
    """Discount applied to a subtotal."""

    amount: float
    percentage: float


NO_DISCOUNT = DiscountQuote(amount=0.0, percentage=0.0)
