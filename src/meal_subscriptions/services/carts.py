"""Main and offered meal cart operations."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.domain.carts import CartCategory, CartLine, QuantityCart
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)
from meal_subscriptions.services.catalog import CatalogRepository

_logger = logging.getLogger(__name__)

INVALID_CART_DATA = Message(
    en="Invalid data provided.", ar="البيانات التي تم تقديمها غير صالحة"
)
MEAL_NOT_AVAILABLE = Message(
    en="This meal isn't available. So you can't add it to the cart",
    ar="هذه الوجبة غير متوفرة. لذلك لا يمكنك إضافتها إلى السلة",
)
QUANTITY_NOT_AVAILABLE = Message(
    en="The number of quantity isn't available", ar="عدد الكمية غير متوفر"
)
ITEM_ADDED = Message(
    en="Item successfully added to the cart",
    ar="تمت إضافة العنصر بنجاح إلى السلة",
)
CART_NOT_FOUND = Message(en="Cart not found.", ar="السلة غير موجودة")
MENU_NOT_IN_CART = Message(
    en="Menu not found in the cart.", ar="القائمة غير موجودة في السلة"
)
MEAL_REMOVED = Message(
    en="Meal successfully removed from the cart",
    ar="تمت إزالة الوجبة بنجاح من السلة",
)


class CartRepository(Protocol):
    """Persistence interface for main and offered carts."""

    def get_cart(self, user_id: UUID, category: CartCategory) -> QuantityCart | None:
        """Return the user's cart of a category, if present."""

    def save_cart(self, cart: QuantityCart) -> None:
        """Create or replace a cart."""

    def clear_cart(self, user_id: UUID, category: CartCategory) -> None:
        """Remove every line from the user's cart of a category."""


@dataclass
class CartService:
    """Adds and removes lines in quantity-priced carts."""

    repository: CartRepository
    catalog_repository: CatalogRepository

    def add_main_meal(
        self, user_id: UUID, menu_item_id: UUID, quantity: int
    ) -> Result[QuantityCart]:
        """Add a main menu meal for a visible plan length."""
        return self._add(user_id, CartCategory.MAIN_MENU, menu_item_id, quantity)

    def add_offered_meal(
        self, user_id: UUID, menu_item_id: UUID, quantity: int
    ) -> Result[QuantityCart]:
        """Add an offered package."""
        return self._add(user_id, CartCategory.OFFERS, menu_item_id, quantity)

    def remove_main_meal(
        self, user_id: UUID, menu_item_id: UUID
    ) -> Result[QuantityCart]:
        """Remove a main menu meal line."""
        return self._remove(user_id, CartCategory.MAIN_MENU, menu_item_id)

    def remove_offered_meal(
        self, user_id: UUID, menu_item_id: UUID
    ) -> Result[QuantityCart]:
        """Remove an offered package line."""
        return self._remove(user_id, CartCategory.OFFERS, menu_item_id)

    def _add(
        self,
        user_id: UUID,
        category: CartCategory,
        menu_item_id: UUID,
        quantity: int,
    ) -> Result[QuantityCart]:
        if quantity <= 0:
            return Failure(ErrorKind.VALIDATION, INVALID_CART_DATA)
        try:
            rejection = self._check_item(category, menu_item_id, quantity)
            if rejection is not None:
                return rejection
            cart = self.repository.get_cart(user_id, category) or QuantityCart(
                id=uuid4(), user_id=user_id, category=category
            )
            updated = replace(
                cart, lines=_upsert_line(cart.lines, menu_item_id, quantity)
            )
            self.repository.save_cart(updated)
        except Exception:
            _logger.exception(
                "Failed to add item to cart",
                extra={"user_id": str(user_id), "category": str(category)},
            )
            return system_failure()
        return Ok(updated, ITEM_ADDED)

    def _check_item(
        self, category: CartCategory, menu_item_id: UUID, quantity: int
    ) -> Failure | None:
        if category is CartCategory.MAIN_MENU:
            item = self.catalog_repository.get_main_meal(menu_item_id)
        else:
            item = self.catalog_repository.get_offered_meal(menu_item_id)
        if item is None or not item.visible:
            return Failure(ErrorKind.NOT_FOUND, MEAL_NOT_AVAILABLE)
        if (
            category is CartCategory.MAIN_MENU
            and not self.catalog_repository.has_plan_duration_option(quantity)
        ):
            return Failure(ErrorKind.BUSINESS_RULE, QUANTITY_NOT_AVAILABLE)
        return None

    def _remove(
        self, user_id: UUID, category: CartCategory, menu_item_id: UUID
    ) -> Result[QuantityCart]:
        try:
            cart = self.repository.get_cart(user_id, category)
            if cart is None:
                return Failure(ErrorKind.NOT_FOUND, CART_NOT_FOUND)
            remaining = [
                line for line in cart.lines if line.menu_item_id != menu_item_id
            ]
            if len(remaining) == len(cart.lines):
                return Failure(ErrorKind.NOT_FOUND, MENU_NOT_IN_CART)
            updated = replace(cart, lines=remaining)
            self.repository.save_cart(updated)
        except Exception:
            _logger.exception(
                "Failed to remove item from cart",
                extra={"user_id": str(user_id), "category": str(category)},
            )
            return system_failure()
        return Ok(updated, MEAL_REMOVED)


def _upsert_line(
    lines: list[CartLine], menu_item_id: UUID, quantity: int
) -> list[CartLine]:
    updated = []
    found = False
    for line in lines:
        if line.menu_item_id == menu_item_id:
            updated.append(replace(line, quantity=quantity))
            found = True
        else:
            updated.append(line)
    if not found:
        updated.append(CartLine(menu_item_id=menu_item_id, quantity=quantity))
    return updated
