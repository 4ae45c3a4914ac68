"""Macro apportionment and pricing for customized meal carts.

Each day's meals share the user's daily protein, fat and carb targets in
proportion to their own nutrition facts. Meat-derived fat is computed first;
any remaining fat shortfall is covered by added oil, priced by ``prf`` and
split by each meal's ``fadd`` share.
"""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.domain.carts import (
    WEEK_DAYS,
    CustomizedCart,
    CustomizedCartDay,
)
from meal_subscriptions.domain.catalog import CustomizedMealItem
from meal_subscriptions.domain.profiles import CustomizedMealProfile
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)
from meal_subscriptions.services.catalog import CatalogRepository
from meal_subscriptions.services.customized_meals import (
    PROFILE_NOT_FOUND,
    CustomizedMealProfileRepository,
)

_logger = logging.getLogger(__name__)

NO_MEAL_DATA = Message(
    en="No meal data found for the current day.",
    ar="لا توجد بيانات عن وجبة لليوم الحالي",
)
MEAL_NOT_AVAILABLE = Message(
    en="Meal not available. Cannot calculate the price.",
    ar="الوجبة غير متوفرة. لا يمكن حساب السعر",
)
CALCULATION_SUCCESSFUL = Message(en="Calculation successful.", ar="تم الحساب بنجاح")
USER_CART_NOT_FOUND = Message(
    en="User cart not found.", ar="سلة المستخدم غير موجودة"
)
FILL_FIRST_DAYS = Message(
    en="You need to add meals for the first {days} days first.",
    ar="يجب عليك إضافة وجبات للأيام الأولى {days} أولاً",
)
MEAL_DURATION_NOT_SET = Message(
    en="Your meal duration has not been set by the admin yet.",
    ar="لم يتم تحديد مدة وجباتك من قبل الإدارة بعد",
)
MEALS_POPULATED = Message(
    en="Meals populated for remaining days.",
    ar="تم تعبئة الوجبات للأيام المتبقية",
)
MACROS_NOT_COVERED = Message(
    en="The meals chosen for {day} cannot cover your daily macros.",
    ar="الوجبات المختارة لـ {day} لا يمكنها تغطية احتياجاتك اليومية",
)


class CustomizedCartRepository(Protocol):
    """Persistence interface for customized meal carts."""

    def get_customized_cart(self, user_id: UUID) -> CustomizedCart | None:
        """Return the user's customized cart, if present."""

    def save_customized_cart(self, cart: CustomizedCart) -> None:
        """Create or replace the user's customized cart."""

    def clear_customized_cart(self, user_id: UUID) -> None:
        """Remove every day from the user's customized cart."""


@dataclass(frozen=True)
class DailyTargets:
    """Macro grams a user should receive per day."""

    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class DayPricing:
    """Price breakdown of one apportioned day."""

    day: str
    fat_price: float
    protein_price: float
    carbs_price: float
    total_price: float


@dataclass(frozen=True)
class ApportionmentReport:
    """Repriced cart and the per-day breakdown."""

    cart: CustomizedCart
    days: list[DayPricing]


class ApportionmentError(Exception):
    """Raised when a day cannot be priced."""

    def __init__(self, kind: ErrorKind, message: Message) -> None:
        super().__init__(message.en)
        self.kind = kind
        self.message = message


def apportion_day(
    day: CustomizedCartDay,
    menu_items: dict[UUID, CustomizedMealItem],
    targets: DailyTargets,
) -> tuple[CustomizedCartDay, DayPricing]:
    """Derive kitchen quantities and the day price for a day's meals."""
    if not day.meals:
        raise ApportionmentError(ErrorKind.BUSINESS_RULE, NO_MEAL_DATA)
    items: list[CustomizedMealItem] = []
    for meal in day.meals:
        item = menu_items.get(meal.menu_item_id)
        if item is None or not item.visible:
            raise ApportionmentError(ErrorKind.NOT_FOUND, MEAL_NOT_AVAILABLE)
        items.append(item)

    total_protein = sum(item.protein for item in items)
    total_fadd = sum(item.fadd for item in items)
    total_carbs = sum(item.carbs for item in items)
    if (total_protein == 0 and targets.protein > 0) or (
        total_carbs == 0 and targets.carbs > 0
    ):
        raise ApportionmentError(
            ErrorKind.BUSINESS_RULE, MACROS_NOT_COVERED.format(day=day.day)
        )

    meat_fat = [
        item.fmf * _share(item.protein, total_protein) * targets.protein
        for item in items
    ]
    fat_shortfall = targets.fat - sum(meat_fat)
    if fat_shortfall > 0 and total_fadd == 0:
        raise ApportionmentError(
            ErrorKind.BUSINESS_RULE, MACROS_NOT_COVERED.format(day=day.day)
        )

    fat_price = 0.0
    carbs_price = 0.0
    protein_price = 0.0
    meals = []
    for meal, item, quantity_of_oil in zip(day.meals, items, meat_fat, strict=True):
        protein_share = _share(item.protein, total_protein)
        carbs_share = _share(item.carbs, total_carbs)
        fadd_share = _share(item.fadd, total_fadd)
        extra_oil = 0.0
        if fat_shortfall > 0:
            fat_price += item.prf * fadd_share * fat_shortfall
            extra_oil = item.of * fadd_share * fat_shortfall
        carbs_price += item.prc * carbs_share * targets.carbs
        protein_price += item.prp * protein_share * targets.protein
        meals.append(
            replace(
                meal,
                quantity_of_oil=quantity_of_oil,
                extra_oil=extra_oil,
                quantity_of_starch=item.sf * carbs_share * targets.carbs,
                quantity_of_meat=item.mf * protein_share * targets.protein,
            )
        )

    total_price = fat_price + carbs_price + protein_price
    pricing = DayPricing(
        day=day.day,
        fat_price=fat_price,
        protein_price=protein_price,
        carbs_price=carbs_price,
        total_price=total_price,
    )
    return replace(day, meals=meals, price_for_specific_day=total_price), pricing


@dataclass
class MacroApportionmentService:
    """Reprices customized carts against the user's macro targets."""

    cart_repository: CustomizedCartRepository
    catalog_repository: CatalogRepository
    profile_repository: CustomizedMealProfileRepository

    def apportion(self, user_id: UUID) -> Result[ApportionmentReport]:
        """Recalculate every day of the user's cart and persist the result."""
        try:
            profile = self.profile_repository.get_profile_by_user(user_id)
            if profile is None:
                return Failure(ErrorKind.NOT_FOUND, PROFILE_NOT_FOUND)
            cart = self.cart_repository.get_customized_cart(user_id)
            if cart is None:
                return Failure(ErrorKind.NOT_FOUND, USER_CART_NOT_FOUND)
            report = self._reprice(cart, profile)
        except ApportionmentError as exc:
            _logger.info(
                "Customized cart could not be priced",
                extra={"user_id": str(user_id), "reason": exc.message.en},
            )
            return Failure(exc.kind, exc.message)
        except Exception:
            _logger.exception(
                "Failed to price customized cart", extra={"user_id": str(user_id)}
            )
            return system_failure()
        return Ok(report, CALCULATION_SUCCESSFUL)

    def populate_remaining_days(self, user_id: UUID) -> Result[ApportionmentReport]:
        """Repeat the chosen days cyclically up to seven days and reprice."""
        try:
            cart = self.cart_repository.get_customized_cart(user_id)
            if cart is None:
                return Failure(ErrorKind.NOT_FOUND, USER_CART_NOT_FOUND)
            profile = self.profile_repository.get_profile_by_user(user_id)
            if profile is None:
                return Failure(ErrorKind.NOT_FOUND, PROFILE_NOT_FOUND)
            repeat = profile.meal_duration_repeat
            if repeat <= 0:
                return Failure(ErrorKind.BUSINESS_RULE, MEAL_DURATION_NOT_SET)
            first_days = [cart.find_day(label) for label in WEEK_DAYS[:repeat]]
            chosen = [day for day in first_days if day is not None]
            if len(chosen) < len(first_days):
                return Failure(
                    ErrorKind.BUSINESS_RULE, FILL_FIRST_DAYS.format(days=repeat)
                )
            populated = replace(cart, days=_repeat_days(cart, chosen))
            report = self._reprice(populated, profile)
        except ApportionmentError as exc:
            return Failure(exc.kind, exc.message)
        except Exception:
            _logger.exception(
                "Failed to populate customized cart", extra={"user_id": str(user_id)}
            )
            return system_failure()
        return Ok(report, MEALS_POPULATED)

    def _reprice(
        self, cart: CustomizedCart, profile: CustomizedMealProfile
    ) -> ApportionmentReport:
        menu_ids = list(
            {meal.menu_item_id for day in cart.days for meal in day.meals}
        )
        menu_items = {
            item.id: item
            for item in self.catalog_repository.list_customized_meals(menu_ids)
        }
        targets = DailyTargets(
            protein=profile.protein, fat=profile.fat, carbs=profile.carbs
        )
        days = []
        pricing = []
        for day in cart.days:
            priced_day, day_pricing = apportion_day(day, menu_items, targets)
            days.append(priced_day)
            pricing.append(day_pricing)
        repriced = replace(cart, days=days)
        self.cart_repository.save_customized_cart(repriced)
        return ApportionmentReport(cart=repriced, days=pricing)


def _repeat_days(
    cart: CustomizedCart, chosen: list[CustomizedCartDay]
) -> list[CustomizedCartDay]:
    repeat = len(chosen)
    days = list(cart.days)
    for number in range(repeat + 1, len(WEEK_DAYS) + 1):
        if len(days) >= len(WEEK_DAYS):
            break
        label = f"day{number}"
        if cart.find_day(label) is not None:
            continue
        source = chosen[(number - 1) % repeat]
        days.append(
            CustomizedCartDay(
                day=label,
                meals=[replace(meal, id=uuid4()) for meal in source.meals],
            )
        )
    return days


def _share(part: float, total: float) -> float:
    if total == 0:
        return 0.0
    return part / total
