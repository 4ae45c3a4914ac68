"""Cart totals with per-category and grand-total discounts."""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from uuid import UUID

from meal_subscriptions.domain.carts import (
    CartCategory,
    CartsAggregate,
    CustomizedCart,
    CustomizedCartSummary,
    CustomizedDaySummary,
    CustomizedMealSummary,
    LineTotal,
    QuantityCart,
    QuantityCartSummary,
)
from meal_subscriptions.domain.discounts import DiscountCategory
from meal_subscriptions.domain.results import Ok, Result, system_failure
from meal_subscriptions.services.apportionment import CustomizedCartRepository
from meal_subscriptions.services.carts import CartRepository
from meal_subscriptions.services.catalog import CatalogRepository
from meal_subscriptions.services.discounts import DiscountService

_logger = logging.getLogger(__name__)


@dataclass
class CartAggregator:
    """Read-only pricing of all carts of a user."""

    cart_repository: CartRepository
    customized_cart_repository: CustomizedCartRepository
    catalog_repository: CatalogRepository
    discount_service: DiscountService

    def aggregate(self, user_id: UUID) -> Result[CartsAggregate]:
        """Return every cart summary with the grand total."""
        try:
            return Ok(self.compute(user_id))
        except Exception:
            _logger.exception(
                "Failed to aggregate carts", extra={"user_id": str(user_id)}
            )
            return system_failure()

    def compute(self, user_id: UUID) -> CartsAggregate:
        """Return every cart summary; repository errors propagate."""
        main = self._main_summary(
            self.cart_repository.get_cart(user_id, CartCategory.MAIN_MENU)
        )
        offered = self._offered_summary(
            self.cart_repository.get_cart(user_id, CartCategory.OFFERS)
        )
        customized = self._customized_summary(
            self.customized_cart_repository.get_customized_cart(user_id)
        )
        grand_total = sum(
            summary.subtotal_after_discount
            for summary in (main, offered, customized)
            if summary is not None
        )
        quote = self.discount_service.quote(DiscountCategory.TOTAL_ORDER, grand_total)
        return CartsAggregate(
            main_meal_cart=main,
            offered_meal_cart=offered,
            customized_meal_cart=customized,
            grand_total=grand_total,
            discount=quote.amount,
            discount_percentage_on_grand_total=quote.percentage,
            grand_total_after_discount=grand_total - quote.amount,
        )

    def _main_summary(self, cart: QuantityCart | None) -> QuantityCartSummary | None:
        if cart is None or not cart.lines:
            return None
        items = {
            item.id: item
            for item in self.catalog_repository.list_main_meals(
                [line.menu_item_id for line in cart.lines]
            )
            if item.visible
        }
        lines = [
            LineTotal(
                menu_item_id=line.menu_item_id,
                name=items[line.menu_item_id].name,
                unit_price=items[line.menu_item_id].regular_price,
                quantity=line.quantity,
                sub_total=items[line.menu_item_id].regular_price * line.quantity,
            )
            for line in cart.lines
            if line.menu_item_id in items
        ]
        return self._quantity_summary(cart.id, lines, DiscountCategory.MAIN_MENU)

    def _offered_summary(
        self, cart: QuantityCart | None
    ) -> QuantityCartSummary | None:
        if cart is None or not cart.lines:
            return None
        items = {
            item.id: item
            for item in self.catalog_repository.list_offered_meals(
                [line.menu_item_id for line in cart.lines]
            )
            if item.visible
        }
        lines = [
            LineTotal(
                menu_item_id=line.menu_item_id,
                name=items[line.menu_item_id].name,
                unit_price=items[line.menu_item_id].price,
                quantity=line.quantity,
                sub_total=items[line.menu_item_id].price * line.quantity,
            )
            for line in cart.lines
            if line.menu_item_id in items
        ]
        return self._quantity_summary(cart.id, lines, DiscountCategory.OFFERS)

    def _quantity_summary(
        self, cart_id: UUID, lines: list[LineTotal], category: DiscountCategory
    ) -> QuantityCartSummary | None:
        if not lines:
            return None
        subtotal = sum(line.sub_total for line in lines)
        quote = self.discount_service.quote(category, subtotal)
        return QuantityCartSummary(
            cart_id=cart_id,
            lines=lines,
            subtotal=subtotal,
            discount=quote.amount,
            discount_percentage=quote.percentage,
            subtotal_after_discount=subtotal - quote.amount,
        )

    def _customized_summary(
        self, cart: CustomizedCart | None
    ) -> CustomizedCartSummary | None:
        if cart is None or not cart.days:
            return None
        items = {
            item.id: item
            for item in self.catalog_repository.list_customized_meals(
                list({meal.menu_item_id for day in cart.days for meal in day.meals})
            )
            if item.visible
        }
        days = []
        for day in cart.days:
            meals = [
                CustomizedMealSummary(
                    line_id=meal.id,
                    menu_item_id=meal.menu_item_id,
                    name=items[meal.menu_item_id].name,
                    quantity_of_oil=meal.quantity_of_oil,
                    extra_oil=meal.extra_oil,
                    quantity_of_starch=meal.quantity_of_starch,
                    quantity_of_meat=meal.quantity_of_meat,
                )
                for meal in day.meals
                if meal.menu_item_id in items
            ]
            if meals:
                days.append(
                    CustomizedDaySummary(
                        day=day.day,
                        meals=meals,
                        price_for_specific_day=day.price_for_specific_day,
                    )
                )
        if not days:
            return None
        subtotal = sum(day.price_for_specific_day for day in days)
        quote = self.discount_service.quote(DiscountCategory.CUSTOMIZE_ORDER, subtotal)
        return CustomizedCartSummary(
            cart_id=cart.id,
            days=days,
            subtotal=subtotal,
            discount=quote.amount,
            discount_percentage=quote.percentage,
            subtotal_after_discount=subtotal - quote.amount,
        )


def snapshot(aggregate: CartsAggregate) -> dict[str, object]:
    """Return a JSON-ready copy of an aggregate for order storage."""
    return {key: _jsonable(value) for key, value in asdict(aggregate).items()}


def _jsonable(value: object) -> object:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_jsonable(item) for item in value]
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value
