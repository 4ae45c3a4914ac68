"""Tests for macro apportionment of customized carts."""

from uuid import UUID, uuid4

import pytest

from meal_subscriptions.domain.carts import (
    CustomizedCart,
    CustomizedCartDay,
    CustomizedCartMeal,
)
from meal_subscriptions.domain.catalog import CustomizedMealItem
from meal_subscriptions.domain.results import ErrorKind, Failure, Ok
from meal_subscriptions.services.apportionment import (
    CALCULATION_SUCCESSFUL,
    FILL_FIRST_DAYS,
    MACROS_NOT_COVERED,
    MEAL_DURATION_NOT_SET,
    MEAL_NOT_AVAILABLE,
    MEALS_POPULATED,
    NO_MEAL_DATA,
    USER_CART_NOT_FOUND,
    ApportionmentError,
    DailyTargets,
    MacroApportionmentService,
    apportion_day,
)
from meal_subscriptions.services.customized_meals import PROFILE_NOT_FOUND
from tests.conftest import Repositories


def _day(label: str, *items: CustomizedMealItem) -> CustomizedCartDay:
    return CustomizedCartDay(
        day=label,
        meals=[CustomizedCartMeal(id=uuid4(), menu_item_id=item.id) for item in items],
    )


def _store_cart(
    repositories: Repositories, user_id: UUID, *days: CustomizedCartDay
) -> CustomizedCart:
    cart = CustomizedCart(id=uuid4(), user_id=user_id, days=list(days))
    repositories.customized_carts.carts[user_id] = cart
    return cart


def test_meat_fat_follows_protein_share(repositories: Repositories) -> None:
    first = repositories.catalog.add_customized_meal(protein=10.0, fmf=0.5)
    second = repositories.catalog.add_customized_meal(protein=20.0, fmf=0.5)
    day = _day("day1", first, second)
    items = {first.id: first, second.id: second}

    priced, _ = apportion_day(
        day, items, DailyTargets(protein=60.0, fat=50.0, carbs=40.0)
    )

    assert [meal.quantity_of_oil for meal in priced.meals] == [
        pytest.approx(10.0),
        pytest.approx(20.0),
    ]


def test_day_pricing_breakdown(repositories: Repositories) -> None:
    first = repositories.catalog.add_customized_meal(protein=10.0)
    second = repositories.catalog.add_customized_meal(protein=20.0)
    day = _day("day1", first, second)
    items = {first.id: first, second.id: second}

    priced, pricing = apportion_day(
        day, items, DailyTargets(protein=60.0, fat=50.0, carbs=40.0)
    )

    # 30g of fat comes from meat, leaving a 20g shortfall covered by oil.
    assert pricing.fat_price == pytest.approx(2.0)
    assert pricing.carbs_price == pytest.approx(8.0)
    assert pricing.protein_price == pytest.approx(30.0)
    assert pricing.total_price == pytest.approx(40.0)
    assert priced.price_for_specific_day == pytest.approx(40.0)
    assert [meal.extra_oil for meal in priced.meals] == [
        pytest.approx(10.0),
        pytest.approx(10.0),
    ]
    assert [meal.quantity_of_starch for meal in priced.meals] == [
        pytest.approx(60.0),
        pytest.approx(60.0),
    ]
    assert [meal.quantity_of_meat for meal in priced.meals] == [
        pytest.approx(80.0),
        pytest.approx(160.0),
    ]


def test_no_extra_oil_when_meat_covers_fat(repositories: Repositories) -> None:
    item = repositories.catalog.add_customized_meal(fmf=1.0)
    day = _day("day1", item)

    priced, pricing = apportion_day(
        day, {item.id: item}, DailyTargets(protein=60.0, fat=30.0, carbs=0.0)
    )

    assert pricing.fat_price == 0
    assert priced.meals[0].extra_oil == 0
    assert priced.meals[0].quantity_of_oil == pytest.approx(60.0)


def test_doubling_targets_doubles_quantities(repositories: Repositories) -> None:
    first = repositories.catalog.add_customized_meal(protein=12.0, carbs=8.0)
    second = repositories.catalog.add_customized_meal(protein=4.0, carbs=30.0)
    day = _day("day1", first, second)
    items = {first.id: first, second.id: second}

    single, single_pricing = apportion_day(
        day, items, DailyTargets(protein=50.0, fat=40.0, carbs=30.0)
    )
    double, double_pricing = apportion_day(
        day, items, DailyTargets(protein=100.0, fat=80.0, carbs=60.0)
    )

    for base, scaled in zip(single.meals, double.meals, strict=True):
        assert scaled.quantity_of_meat == pytest.approx(2 * base.quantity_of_meat)
        assert scaled.quantity_of_starch == pytest.approx(2 * base.quantity_of_starch)
        assert scaled.quantity_of_oil == pytest.approx(2 * base.quantity_of_oil)
        assert scaled.extra_oil == pytest.approx(2 * base.extra_oil)
    assert double_pricing.total_price == pytest.approx(2 * single_pricing.total_price)


def test_fat_shortfall_without_added_fat_is_rejected(
    repositories: Repositories,
) -> None:
    item = repositories.catalog.add_customized_meal(fadd=0.0, fmf=0.0, prf=1.0)

    with pytest.raises(ApportionmentError) as exc_info:
        apportion_day(
            _day("day1", item),
            {item.id: item},
            DailyTargets(protein=60.0, fat=50.0, carbs=40.0),
        )

    assert exc_info.value.kind is ErrorKind.BUSINESS_RULE
    assert exc_info.value.message == MACROS_NOT_COVERED.format(day="day1")


def test_meals_without_protein_or_carbs_are_rejected(
    repositories: Repositories,
) -> None:
    no_protein = repositories.catalog.add_customized_meal(protein=0.0)
    no_carbs = repositories.catalog.add_customized_meal(carbs=0.0)
    targets = DailyTargets(protein=60.0, fat=50.0, carbs=40.0)

    for item in (no_protein, no_carbs):
        with pytest.raises(ApportionmentError) as exc_info:
            apportion_day(_day("day2", item), {item.id: item}, targets)
        assert exc_info.value.kind is ErrorKind.BUSINESS_RULE


def test_zero_totals_allowed_when_target_is_zero(
    repositories: Repositories,
) -> None:
    item = repositories.catalog.add_customized_meal(carbs=0.0)

    priced, pricing = apportion_day(
        _day("day1", item),
        {item.id: item},
        DailyTargets(protein=60.0, fat=50.0, carbs=0.0),
    )

    assert pricing.carbs_price == 0
    assert priced.meals[0].quantity_of_starch == 0


def test_empty_day_is_rejected() -> None:
    with pytest.raises(ApportionmentError) as exc_info:
        apportion_day(
            CustomizedCartDay(day="day1"),
            {},
            DailyTargets(protein=1.0, fat=1.0, carbs=1.0),
        )

    assert exc_info.value.message == NO_MEAL_DATA


def test_apportion_persists_repriced_cart(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    first = repositories.catalog.add_customized_meal(protein=10.0)
    second = repositories.catalog.add_customized_meal(protein=20.0)
    _store_cart(repositories, user_id, _day("day1", first, second))

    result = apportionment_service.apportion(user_id)

    assert isinstance(result, Ok)
    assert result.message == CALCULATION_SUCCESSFUL
    assert [entry.day for entry in result.data.days] == ["day1"]
    stored = repositories.customized_carts.carts[user_id]
    assert stored.days[0].price_for_specific_day == pytest.approx(40.0)


def test_apportion_rejects_hidden_meal(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    hidden = repositories.catalog.add_customized_meal(visible=False)
    cart = _store_cart(repositories, user_id, _day("day1", hidden))

    result = apportionment_service.apportion(user_id)

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.message == MEAL_NOT_AVAILABLE
    assert repositories.customized_carts.carts[user_id] == cart


def test_apportion_requires_profile_and_cart(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()

    without_profile = apportionment_service.apportion(user_id)
    repositories.profiles.add_profile(user_id)
    without_cart = apportionment_service.apportion(user_id)

    assert isinstance(without_profile, Failure)
    assert without_profile.message == PROFILE_NOT_FOUND
    assert isinstance(without_cart, Failure)
    assert without_cart.message == USER_CART_NOT_FOUND


def test_populate_repeats_chosen_days_cyclically(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=2)
    breakfast = repositories.catalog.add_customized_meal(name="Omelette")
    dinner = repositories.catalog.add_customized_meal(name="Salmon")
    _store_cart(
        repositories, user_id, _day("day1", breakfast), _day("day2", dinner)
    )

    result = apportionment_service.populate_remaining_days(user_id)

    assert isinstance(result, Ok)
    assert result.message == MEALS_POPULATED
    days = result.data.cart.days
    assert [entry.day for entry in days] == [f"day{n}" for n in range(1, 8)]
    assert [entry.meals[0].menu_item_id for entry in days] == [
        breakfast.id,
        dinner.id,
        breakfast.id,
        dinner.id,
        breakfast.id,
        dinner.id,
        breakfast.id,
    ]
    line_ids = [meal.id for entry in days for meal in entry.meals]
    assert len(set(line_ids)) == len(line_ids)
    assert all(entry.price_for_specific_day > 0 for entry in days)


def test_populate_requires_first_days(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=3)
    meal = repositories.catalog.add_customized_meal()
    _store_cart(repositories, user_id, _day("day1", meal))

    result = apportionment_service.populate_remaining_days(user_id)

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.BUSINESS_RULE
    assert result.message == FILL_FIRST_DAYS.format(days=3)


def test_populate_requires_meal_duration(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=0)
    _store_cart(repositories, user_id)

    result = apportionment_service.populate_remaining_days(user_id)

    assert isinstance(result, Failure)
    assert result.message == MEAL_DURATION_NOT_SET


def test_populate_requires_leading_day_labels(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id, meal_duration_repeat=2)
    first = repositories.catalog.add_customized_meal()
    second = repositories.catalog.add_customized_meal()
    cart = _store_cart(
        repositories, user_id, _day("day1", first), _day("day3", second)
    )

    result = apportionment_service.populate_remaining_days(user_id)

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.BUSINESS_RULE
    assert result.message == FILL_FIRST_DAYS.format(days=2)
    assert repositories.customized_carts.carts[user_id] == cart


def test_apportion_reports_uncovered_macros(
    repositories: Repositories, apportionment_service: MacroApportionmentService
) -> None:
    user_id = uuid4()
    repositories.profiles.add_profile(user_id)
    dry = repositories.catalog.add_customized_meal(fadd=0.0, fmf=0.0)
    cart = _store_cart(repositories, user_id, _day("day1", dry))

    result = apportionment_service.apportion(user_id)

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.BUSINESS_RULE
    assert result.message == MACROS_NOT_COVERED.format(day="day1")
    assert repositories.customized_carts.carts[user_id] == cart
