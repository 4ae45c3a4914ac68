from uuid import UUID, uuid4

import pytest

from meal_subscriptions.domain.carts import (
    CartCategory,
    CartLine,
    CustomizedCart,
    CustomizedCartDay,
    CustomizedCartMeal,
    QuantityCart,
)
from meal_subscriptions.domain.discounts import DiscountCategory
from meal_subscriptions.domain.results import ErrorKind, Failure, Ok
from meal_subscriptions.services.cart_totals import CartAggregator, snapshot
from tests.conftest import Repositories


def _store_lines(
    repositories: Repositories,
    user_id: UUID,
    category: CartCategory,
    *lines: CartLine,
) -> None:
    repositories.carts.save_cart(
        QuantityCart(id=uuid4(), user_id=user_id, category=category, lines=list(lines))
    )


def test_main_cart_discount_applies_to_subtotal(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    item = repositories.catalog.add_main_meal(price=100)
    _store_lines(repositories, user_id, CartCategory.MAIN_MENU, CartLine(item.id, 2))
    repositories.discounts.add_range(DiscountCategory.MAIN_MENU, 150, 300, 10)

    result = cart_aggregator.aggregate(user_id)

    assert isinstance(result, Ok)
    main = result.data.main_meal_cart
    assert main is not None
    assert main.subtotal == 200
    assert main.discount == pytest.approx(20.0)
    assert main.discount_percentage == 10
    assert main.subtotal_after_discount == pytest.approx(180.0)
    assert result.data.grand_total == pytest.approx(180.0)
    assert result.data.discount == 0
    assert result.data.grand_total_after_discount == pytest.approx(180.0)


def test_grand_total_discount_uses_discounted_subtotals(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    main = repositories.catalog.add_main_meal(price=100)
    offer = repositories.catalog.add_offered_meal(price=50)
    _store_lines(repositories, user_id, CartCategory.MAIN_MENU, CartLine(main.id, 2))
    _store_lines(repositories, user_id, CartCategory.OFFERS, CartLine(offer.id, 4))
    repositories.discounts.add_range(DiscountCategory.MAIN_MENU, 150, 300, 10)
    repositories.discounts.add_range(DiscountCategory.OFFERS, 200, 200, 50)
    repositories.discounts.add_range(DiscountCategory.TOTAL_ORDER, 250, 500, 20)

    result = cart_aggregator.aggregate(user_id)

    assert isinstance(result, Ok)
    aggregate = result.data
    assert aggregate.offered_meal_cart is not None
    assert aggregate.offered_meal_cart.subtotal_after_discount == pytest.approx(100.0)
    assert aggregate.grand_total == pytest.approx(280.0)
    assert aggregate.discount_percentage_on_grand_total == 20
    assert aggregate.discount == pytest.approx(56.0)
    assert aggregate.grand_total_after_discount == pytest.approx(224.0)


def test_hidden_items_are_excluded(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    visible = repositories.catalog.add_main_meal(price=30)
    hidden = repositories.catalog.add_main_meal(price=1000, visible=False)
    _store_lines(
        repositories,
        user_id,
        CartCategory.MAIN_MENU,
        CartLine(visible.id, 1),
        CartLine(hidden.id, 1),
    )

    result = cart_aggregator.aggregate(user_id)

    assert isinstance(result, Ok)
    main = result.data.main_meal_cart
    assert main is not None
    assert [line.menu_item_id for line in main.lines] == [visible.id]
    assert main.subtotal == 30


def test_customized_cart_sums_day_prices(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    meal = repositories.catalog.add_customized_meal()
    repositories.customized_carts.save_customized_cart(
        CustomizedCart(
            id=uuid4(),
            user_id=user_id,
            days=[
                CustomizedCartDay(
                    day=label,
                    meals=[CustomizedCartMeal(id=uuid4(), menu_item_id=meal.id)],
                    price_for_specific_day=40.0,
                )
                for label in ("day1", "day2")
            ],
        )
    )
    repositories.discounts.add_range(DiscountCategory.CUSTOMIZE_ORDER, 50, 100, 25)

    result = cart_aggregator.aggregate(user_id)

    assert isinstance(result, Ok)
    customized = result.data.customized_meal_cart
    assert customized is not None
    assert [day.day for day in customized.days] == ["day1", "day2"]
    assert customized.subtotal == pytest.approx(80.0)
    assert customized.discount == pytest.approx(20.0)
    assert result.data.grand_total == pytest.approx(60.0)


def test_empty_carts_aggregate_to_zero(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    _store_lines(repositories, user_id, CartCategory.OFFERS)

    result = cart_aggregator.aggregate(user_id)

    assert isinstance(result, Ok)
    assert result.data.is_empty
    assert result.data.grand_total == 0
    assert result.data.grand_total_after_discount == 0


def test_aggregation_does_not_modify_carts(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    item = repositories.catalog.add_main_meal(price=100)
    _store_lines(repositories, user_id, CartCategory.MAIN_MENU, CartLine(item.id, 2))
    before = dict(repositories.carts.carts)

    first = cart_aggregator.aggregate(user_id)
    second = cart_aggregator.aggregate(user_id)

    assert first == second
    assert repositories.carts.carts == before
    assert repositories.customized_carts.saves == 0


def test_aggregate_reports_repository_errors(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    def broken(user_id: UUID, category: CartCategory) -> QuantityCart | None:
        raise RuntimeError("database unavailable")

    repositories.carts.get_cart = broken  # type: ignore[method-assign]

    result = cart_aggregator.aggregate(uuid4())

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.SYSTEM


def test_snapshot_is_json_ready(
    repositories: Repositories, cart_aggregator: CartAggregator
) -> None:
    user_id = uuid4()
    item = repositories.catalog.add_offered_meal(price=50)
    _store_lines(repositories, user_id, CartCategory.OFFERS, CartLine(item.id, 1))

    aggregate = cart_aggregator.compute(user_id)
    data = snapshot(aggregate)

    offered = data["offered_meal_cart"]
    assert isinstance(offered, dict)
    assert offered["lines"][0]["menu_item_id"] == str(item.id)
    assert data["main_meal_cart"] is None
