"""Domain models for carts and cart totals."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

WEEK_DAYS = tuple(f"day{number}" for number in range(1, 8))


class CartCategory(StrEnum):
    """Categories of carts priced by quantity."""

    MAIN_MENU = "mainMenu"
    OFFERS = "offers"


@dataclass(frozen=True)
class CartLine:
    """Menu item and quantity in a main or offered cart."""

    menu_item_id: UUID
    quantity: int


@dataclass(frozen=True)
class QuantityCart:
    """Cart of main or offered meals."""

    id: UUID
    user_id: UUID
    category: CartCategory
    lines: list[CartLine] = field(default_factory=list)


@dataclass(frozen=True)
class CustomizedCartMeal:
    """Meal chosen for a day with its derived kitchen quantities.

    ``quantity_of_oil`` holds meat-derived fat grams while ``extra_oil`` holds
    the oil added to cover the fat shortfall.
    """

    id: UUID
    menu_item_id: UUID
    quantity_of_oil: float = 0.0
    extra_oil: float = 0.0
    quantity_of_starch: float = 0.0
    quantity_of_meat: float = 0.0


@dataclass(frozen=True)
class CustomizedCartDay:
    """Meals chosen for one plan day and the cached day price."""

    day: str
    meals: list[CustomizedCartMeal] = field(default_factory=list)
    price_for_specific_day: float = 0.0


@dataclass(frozen=True)
class CustomizedCart:
    """Per-day customized meal selections for a user."""

    id: UUID
    user_id: UUID
    days: list[CustomizedCartDay] = field(default_factory=list)

    def find_day(self, day: str) -> CustomizedCartDay | None:
        """Return the entry for a day label, if present."""
        for entry in self.days:
            if entry.day == day:
                return entry
        return None


@dataclass(frozen=True)
class LineTotal:
    """Priced cart line joined to its menu item."""

    menu_item_id: UUID
    name: str
    unit_price: float
    quantity: int
    sub_total: float


@dataclass(frozen=True)
class CustomizedMealSummary:
    """Customized meal line joined to its menu item."""

    line_id: UUID
    menu_item_id: UUID
    name: str
    quantity_of_oil: float
    extra_oil: float
    quantity_of_starch: float
    quantity_of_meat: float


@dataclass(frozen=True)
class CustomizedDaySummary:
    """Visible meals of a day with the cached day price."""

    day: str
    meals: list[CustomizedMealSummary]
    price_for_specific_day: float


@dataclass(frozen=True)
class QuantityCartSummary:
    """Totals for a main or offered cart."""

    cart_id: UUID
    lines: list[LineTotal]
    subtotal: float
    discount: float
    discount_percentage: float
    subtotal_after_discount: float


@dataclass(frozen=True)
class CustomizedCartSummary:
    """Totals for a customized cart."""

    cart_id: UUID
    days: list[CustomizedDaySummary]
    subtotal: float
    discount: float
    discount_percentage: float
    subtotal_after_discount: float


@dataclass(frozen=True)
class CartsAggregate:
    """All carts of a user with the grand-total discount applied."""

    main_meal_cart: QuantityCartSummary | None
    offered_meal_cart: QuantityCartSummary | None
    customized_meal_cart: CustomizedCartSummary | None
    grand_total: float
    discount: float
    discount_percentage_on_grand_total: float
    grand_total_after_discount: float

    @property
    def is_empty(self) -> bool:
        """Return true when no cart contributes priced items."""
        return (
            self.main_meal_cart is None
            and self.offered_meal_cart is None
            and self.customized_meal_cart is None
        )
