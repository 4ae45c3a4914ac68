from dataclasses import replace
from uuid import uuid4

import pytest

from meal_subscriptions.domain.results import ErrorKind, Failure, Ok
from meal_subscriptions.services.carts import CART_NOT_FOUND, ITEM_ADDED, MEAL_REMOVED
from meal_subscriptions.services.customized_carts import (
    DAY_IS_FULL,
    INVALID_DATA,
    MEAL_NOT_AVAILABLE,
    MEAL_NOT_IN_CART,
    PRICE_NOT_UPDATED,
    TOO_MANY_DAYS,
    CustomizedCartService,
)
from meal_subscriptions.services.customized_meals import PROFILE_NOT_FOUND
from tests.conftest import Repositories


@pytest.fixture
def service(container) -> CustomizedCartService:  # type: ignore[no-untyped-def]
    return container.customized_cart_service


def test_add_meal_prices_the_day(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    meal = repositories.catalog.add_customized_meal()

    result = service.add_meal(user_id, meal.id, "day1")

    assert isinstance(result, Ok)
    assert result.message == ITEM_ADDED
    day = result.data.find_day("day1")
    assert day is not None
    assert day.price_for_specific_day > 0
    assert day.meals[0].quantity_of_meat > 0


def test_add_meal_enforces_meals_per_day(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_per_day=1)
    meal = repositories.catalog.add_customized_meal()
    service.add_meal(user_id, meal.id, "day1")

    result = service.add_meal(user_id, meal.id, "day1")

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.BUSINESS_RULE
    assert result.message == DAY_IS_FULL.format(count=1, day="day1")


def test_add_meal_enforces_day_limit(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=1)
    meal = repositories.catalog.add_customized_meal()
    service.add_meal(user_id, meal.id, "day1")

    result = service.add_meal(user_id, meal.id, "day2")

    assert isinstance(result, Failure)
    assert result.message == TOO_MANY_DAYS.format(days=1)


def test_add_meal_only_accepts_leading_days(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=2)
    meal = repositories.catalog.add_customized_meal()
    service.add_meal(user_id, meal.id, "day1")

    skipped = service.add_meal(user_id, meal.id, "day3")
    second = service.add_meal(user_id, meal.id, "day2")

    assert isinstance(skipped, Failure)
    assert skipped.kind is ErrorKind.BUSINESS_RULE
    assert skipped.message == TOO_MANY_DAYS.format(days=2)
    assert isinstance(second, Ok)
    assert [entry.day for entry in second.data.days] == ["day1", "day2"]


def test_add_meal_rejects_bad_input(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    meal = repositories.catalog.add_customized_meal()
    hidden = repositories.catalog.add_customized_meal(visible=False)

    bad_day = service.add_meal(user_id, meal.id, "day9")
    no_profile = service.add_meal(user_id, meal.id, "day1")
    repositories.profiles.add_profile(user_id)
    not_visible = service.add_meal(user_id, hidden.id, "day1")

    assert isinstance(bad_day, Failure)
    assert bad_day.message == INVALID_DATA
    assert isinstance(no_profile, Failure)
    assert no_profile.message == PROFILE_NOT_FOUND
    assert isinstance(not_visible, Failure)
    assert not_visible.message == MEAL_NOT_AVAILABLE


def test_remove_meal_drops_empty_day(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    meal = repositories.catalog.add_customized_meal()
    added = service.add_meal(user_id, meal.id, "day1")
    assert isinstance(added, Ok)
    line_id = added.data.days[0].meals[0].id

    removed = service.remove_meal(user_id, line_id)
    missing = service.remove_meal(user_id, line_id)

    assert isinstance(removed, Ok)
    assert removed.message == MEAL_REMOVED
    assert removed.data.days == []
    assert isinstance(missing, Failure)
    assert missing.message == MEAL_NOT_IN_CART


def test_remove_meal_without_cart(service: CustomizedCartService) -> None:
    result = service.remove_meal(uuid4(), uuid4())

    assert isinstance(result, Failure)
    assert result.message == CART_NOT_FOUND


def test_remove_meal_clears_price_when_day_cannot_be_repriced(
    repositories: Repositories, service: CustomizedCartService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    kept = repositories.catalog.add_customized_meal()
    dropped = repositories.catalog.add_customized_meal()
    service.add_meal(user_id, kept.id, "day1")
    added = service.add_meal(user_id, dropped.id, "day1")
    assert isinstance(added, Ok)
    assert added.data.days[0].price_for_specific_day > 0
    line_id = added.data.days[0].meals[1].id
    repositories.catalog.customized_meals[kept.id] = replace(kept, visible=False)

    result = service.remove_meal(user_id, line_id)

    assert isinstance(result, Ok)
    assert result.message == PRICE_NOT_UPDATED
    assert [meal.menu_item_id for meal in result.data.days[0].meals] == [kept.id]
    assert result.data.days[0].price_for_specific_day == 0
    stored = repositories.customized_carts.carts[user_id]
    assert stored.days[0].price_for_specific_day == 0
