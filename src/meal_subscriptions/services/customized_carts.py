"""Customized meal cart operations."""

import logging
from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from meal_subscriptions.domain.carts import (
    WEEK_DAYS,
    CustomizedCart,
    CustomizedCartDay,
    CustomizedCartMeal,
)
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)
from meal_subscriptions.services.apportionment import (
    CustomizedCartRepository,
    MacroApportionmentService,
)
from meal_subscriptions.services.carts import CART_NOT_FOUND, ITEM_ADDED, MEAL_REMOVED
from meal_subscriptions.services.catalog import CatalogRepository
from meal_subscriptions.services.customized_meals import (
    PROFILE_NOT_FOUND,
    CustomizedMealProfileRepository,
)

_logger = logging.getLogger(__name__)

INVALID_DATA = Message(en="Invalid data provided.", ar="البيانات المقدمة غير صالحة")
MEAL_NOT_AVAILABLE = Message(
    en="This meal isn't available. So you can't add it to the cart",
    ar="هذه الوجبة غير متوفرة، لذا لا يمكنك إضافتها إلى السلة",
)
DAY_IS_FULL = Message(
    en="You can only select {count} meals for day {day}.",
    ar="يمكنك اختيار {count} وجبة فقط لليوم {day}",
)
TOO_MANY_DAYS = Message(
    en="You can only select meals for the first {days} days.",
    ar="يمكنك اختيار وجبات فقط للأيام الأولى {days}",
)
MEAL_NOT_IN_CART = Message(
    en="Meal not found in the cart.", ar="الوجبة غير موجودة في السلة"
)
PRICE_NOT_UPDATED = Message(
    en="Cart updated, but its price could not be recalculated.",
    ar="تم تحديث السلة، ولكن تعذر إعادة حساب سعرها",
)


@dataclass
class CustomizedCartService:
    """Adds and removes day meals, repricing the cart after each change."""

    repository: CustomizedCartRepository
    catalog_repository: CatalogRepository
    profile_repository: CustomizedMealProfileRepository
    apportionment_service: MacroApportionmentService

    def add_meal(
        self, user_id: UUID, menu_item_id: UUID, day: str
    ) -> Result[CustomizedCart]:
        """Add a meal to a plan day within the user's daily and day limits."""
        if day not in WEEK_DAYS:
            return Failure(ErrorKind.VALIDATION, INVALID_DATA)
        try:
            item = self.catalog_repository.get_customized_meal(menu_item_id)
            if item is None or not item.visible:
                return Failure(ErrorKind.NOT_FOUND, MEAL_NOT_AVAILABLE)
            profile = self.profile_repository.get_profile_by_user(user_id)
            if profile is None:
                return Failure(ErrorKind.NOT_FOUND, PROFILE_NOT_FOUND)
            cart = self.repository.get_customized_cart(user_id) or CustomizedCart(
                id=uuid4(), user_id=user_id
            )
            meal = CustomizedCartMeal(id=uuid4(), menu_item_id=menu_item_id)
            existing = cart.find_day(day)
            if existing is not None:
                if len(existing.meals) >= profile.meal_per_day:
                    return Failure(
                        ErrorKind.BUSINESS_RULE,
                        DAY_IS_FULL.format(count=profile.meal_per_day, day=day),
                    )
                days = [
                    replace(entry, meals=[*entry.meals, meal])
                    if entry.day == day
                    else entry
                    for entry in cart.days
                ]
            else:
                if WEEK_DAYS.index(day) >= profile.meal_duration_repeat:
                    return Failure(
                        ErrorKind.BUSINESS_RULE,
                        TOO_MANY_DAYS.format(days=profile.meal_duration_repeat),
                    )
                days = [*cart.days, CustomizedCartDay(day=day, meals=[meal])]
            updated = replace(cart, days=days)
            self.repository.save_customized_cart(updated)
            return self._reprice(user_id, updated, ITEM_ADDED)
        except Exception:
            _logger.exception(
                "Failed to add customized meal", extra={"user_id": str(user_id)}
            )
            return system_failure()

    def remove_meal(self, user_id: UUID, line_id: UUID) -> Result[CustomizedCart]:
        """Remove one meal line; a day left without meals is dropped."""
        try:
            cart = self.repository.get_customized_cart(user_id)
            if cart is None:
                return Failure(ErrorKind.NOT_FOUND, CART_NOT_FOUND)
            if not any(meal.id == line_id for day in cart.days for meal in day.meals):
                return Failure(ErrorKind.NOT_FOUND, MEAL_NOT_IN_CART)
            days = []
            for day in cart.days:
                meals = [meal for meal in day.meals if meal.id != line_id]
                if meals:
                    days.append(replace(day, meals=meals))
            updated = replace(cart, days=days)
            self.repository.save_customized_cart(updated)
            return self._reprice(user_id, updated, MEAL_REMOVED)
        except Exception:
            _logger.exception(
                "Failed to remove customized meal", extra={"user_id": str(user_id)}
            )
            return system_failure()

    def _reprice(
        self, user_id: UUID, cart: CustomizedCart, message: Message
    ) -> Result[CustomizedCart]:
        result = self.apportionment_service.apportion(user_id)
        if isinstance(result, Ok):
            return Ok(result.data.cart, message)
        _logger.warning(
            "Customized cart saved without repricing",
            extra={"user_id": str(user_id), "reason": result.message.en},
        )
        unpriced = replace(
            cart,
            days=[replace(day, price_for_specific_day=0.0) for day in cart.days],
        )
        self.repository.save_customized_cart(unpriced)
        return Ok(unpriced, PRICE_NOT_UPDATED)
