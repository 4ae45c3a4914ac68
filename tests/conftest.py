"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from uuid import UUID, uuid4

import pytest

from meal_subscriptions.config import Settings
from meal_subscriptions.containers import AppContainer
from meal_subscriptions.domain.calculator import CalculatorSettings
from meal_subscriptions.domain.carts import CartCategory, CustomizedCart, QuantityCart
from meal_subscriptions.domain.catalog import (
    CustomizedMealItem,
    MainMealItem,
    OfferedMealItem,
)
from meal_subscriptions.domain.discounts import (
    DiscountCategory,
    DiscountRange,
    DiscountRule,
)
from meal_subscriptions.domain.notifications import Notification
from meal_subscriptions.domain.orders import (
    CustomerAccount,
    DeliveryStatus,
    Order,
    OrderQuery,
    OrderStatus,
    StatusField,
)
from meal_subscriptions.domain.profiles import (
    CustomizedMealConfig,
    CustomizedMealProfile,
    DietCategory,
)
from meal_subscriptions.services.apportionment import (
    CustomizedCartRepository,
    MacroApportionmentService,
)
from meal_subscriptions.services.calculator import (
    CalculatorService,
    CalculatorSettingsRepository,
)
from meal_subscriptions.services.cart_totals import CartAggregator
from meal_subscriptions.services.carts import CartRepository, CartService
from meal_subscriptions.services.catalog import CatalogRepository
from meal_subscriptions.services.customized_carts import CustomizedCartService
from meal_subscriptions.services.customized_meals import (
    CustomizedMealProfileRepository,
    CustomizedMealProfileService,
)
from meal_subscriptions.services.discounts import DiscountRepository, DiscountService
from meal_subscriptions.services.notifications import (
    NotificationRepository,
    NotificationService,
)
from meal_subscriptions.services.orders import (
    AccountRepository,
    OrderRepository,
    OrderService,
)


@dataclass
class InMemoryDiscountRepository(DiscountRepository):
    """In-memory discount repository for tests."""

    rules: dict[UUID, DiscountRule] = field(default_factory=dict)

    def get_by_category(self, category: DiscountCategory) -> DiscountRule | None:
        for rule in self.rules.values():
            if rule.category is category:
                return rule
        return None

    def get_by_id(self, discount_id: UUID) -> DiscountRule | None:
        return self.rules.get(discount_id)

    def list_rules(self, category: DiscountCategory | None) -> list[DiscountRule]:
        return [
            rule
            for rule in self.rules.values()
            if category is None or rule.category is category
        ]

    def create_rule(self, rule: DiscountRule) -> DiscountRule:
        self.rules[rule.id] = rule
        return rule

    def save_ranges(self, discount_id: UUID, ranges: list[DiscountRange]) -> None:
        self.rules[discount_id] = replace(self.rules[discount_id], ranges=ranges)

    def add_range(
        self,
        category: DiscountCategory,
        minimum: float,
        maximum: float,
        percentage: float,
        is_active: bool = True,
    ) -> DiscountRange:
        entry = DiscountRange(
            id=uuid4(),
            min=minimum,
            max=maximum,
            percentage=percentage,
            is_active=is_active,
        )
        rule = self.get_by_category(category)
        if rule is None:
            self.create_rule(
                DiscountRule(id=uuid4(), category=category, ranges=[entry])
            )
        else:
            self.save_ranges(rule.id, [*rule.ranges, entry])
        return entry


@dataclass
class InMemoryCartRepository(CartRepository):
    """In-memory main and offered cart repository for tests."""

    carts: dict[tuple[UUID, CartCategory], QuantityCart] = field(default_factory=dict)
    cleared: list[tuple[UUID, CartCategory]] = field(default_factory=list)

    def get_cart(self, user_id: UUID, category: CartCategory) -> QuantityCart | None:
        return self.carts.get((user_id, category))

    def save_cart(self, cart: QuantityCart) -> None:
        self.carts[(cart.user_id, cart.category)] = cart

    def clear_cart(self, user_id: UUID, category: CartCategory) -> None:
        self.cleared.append((user_id, category))
        cart = self.carts.get((user_id, category))
        if cart is not None:
            self.carts[(user_id, category)] = replace(cart, lines=[])


@dataclass
class InMemoryCustomizedCartRepository(CustomizedCartRepository):
    """In-memory customized cart repository for tests."""

    carts: dict[UUID, CustomizedCart] = field(default_factory=dict)
    saves: int = 0

    def get_customized_cart(self, user_id: UUID) -> CustomizedCart | None:
        return self.carts.get(user_id)

    def save_customized_cart(self, cart: CustomizedCart) -> None:
        self.saves += 1
        self.carts[cart.user_id] = cart

    def clear_customized_cart(self, user_id: UUID) -> None:
        cart = self.carts.get(user_id)
        if cart is not None:
            self.carts[user_id] = replace(cart, days=[])


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory menu catalog for tests."""

    main_meals: dict[UUID, MainMealItem] = field(default_factory=dict)
    offered_meals: dict[UUID, OfferedMealItem] = field(default_factory=dict)
    customized_meals: dict[UUID, CustomizedMealItem] = field(default_factory=dict)
    meals_per_day_options: set[int] = field(default_factory=set)
    plan_duration_options: set[int] = field(default_factory=set)

    def get_main_meal(self, menu_item_id: UUID) -> MainMealItem | None:
        return self.main_meals.get(menu_item_id)

    def get_offered_meal(self, menu_item_id: UUID) -> OfferedMealItem | None:
        return self.offered_meals.get(menu_item_id)

    def get_customized_meal(self, menu_item_id: UUID) -> CustomizedMealItem | None:
        return self.customized_meals.get(menu_item_id)

    def list_main_meals(self, menu_item_ids: list[UUID]) -> list[MainMealItem]:
        return [
            self.main_meals[item_id]
            for item_id in menu_item_ids
            if item_id in self.main_meals
        ]

    def list_offered_meals(self, menu_item_ids: list[UUID]) -> list[OfferedMealItem]:
        return [
            self.offered_meals[item_id]
            for item_id in menu_item_ids
            if item_id in self.offered_meals
        ]

    def list_customized_meals(
        self, menu_item_ids: list[UUID]
    ) -> list[CustomizedMealItem]:
        return [
            self.customized_meals[item_id]
            for item_id in menu_item_ids
            if item_id in self.customized_meals
        ]

    def has_meals_per_day_option(self, meals_count: int) -> bool:
        return meals_count in self.meals_per_day_options

    def has_plan_duration_option(self, days_number: int) -> bool:
        return days_number in self.plan_duration_options

    def add_main_meal(self, price: float, visible: bool = True) -> MainMealItem:
        item = MainMealItem(
            id=uuid4(), name="Grilled chicken", regular_price=price, visible=visible
        )
        self.main_meals[item.id] = item
        return item

    def add_offered_meal(self, price: float, visible: bool = True) -> OfferedMealItem:
        item = OfferedMealItem(
            id=uuid4(), name="Family box", price=price, visible=visible
        )
        self.offered_meals[item.id] = item
        return item

    def add_customized_meal(self, **overrides: object) -> CustomizedMealItem:
        values: dict[str, object] = {
            "id": uuid4(),
            "name": "Beef bowl",
            "diet": "keto diet",
            "protein": 10.0,
            "fadd": 5.0,
            "carbs": 20.0,
            "prp": 0.5,
            "prc": 0.2,
            "prf": 0.1,
            "mf": 4.0,
            "sf": 3.0,
            "of": 1.0,
            "fmf": 0.5,
            "visible": True,
        }
        values.update(overrides)
        item = CustomizedMealItem(**values)  # type: ignore[arg-type]
        self.customized_meals[item.id] = item
        return item


@dataclass
class InMemoryAccountRepository(AccountRepository):
    """In-memory account repository for tests."""

    accounts: dict[UUID, CustomerAccount] = field(default_factory=dict)

    def get_account(self, user_id: UUID) -> CustomerAccount | None:
        return self.accounts.get(user_id)

    def add_account(self, **overrides: object) -> CustomerAccount:
        values: dict[str, object] = {
            "id": uuid4(),
            "phone": "+201000000000",
            "profile_verified": True,
        }
        values.update(overrides)
        account = CustomerAccount(**values)  # type: ignore[arg-type]
        self.accounts[account.id] = account
        return account


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository for tests."""

    orders: dict[UUID, Order] = field(default_factory=dict)
    fail_on_create: bool = False

    def create_order(self, order: Order) -> Order:
        if self.fail_on_create:
            raise RuntimeError("Failed to create order")
        self.orders[order.id] = order
        return order

    def get_order(self, order_id: UUID) -> Order | None:
        return self.orders.get(order_id)

    def update_status(
        self,
        order_id: UUID,
        field: StatusField,
        value: OrderStatus | DeliveryStatus | bool,
    ) -> None:
        self.orders[order_id] = replace(self.orders[order_id], **{field.value: value})

    def list_orders(
        self, user_id: UUID | None, query: OrderQuery, offset: int, limit: int
    ) -> list[Order]:
        return self._matching(user_id, query)[offset : offset + limit]

    def count_orders(self, user_id: UUID | None, query: OrderQuery) -> int:
        return len(self._matching(user_id, query))

    def _matching(self, user_id: UUID | None, query: OrderQuery) -> list[Order]:
        orders = [
            order
            for order in self.orders.values()
            if (user_id is None or order.user_id == user_id)
            and (query.start is None or order.created_at >= query.start)
            and (query.end is None or order.created_at <= query.end)
        ]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)


@dataclass
class InMemoryProfileRepository(CustomizedMealProfileRepository):
    """In-memory profile and config repository for tests."""

    profiles: dict[UUID, CustomizedMealProfile] = field(default_factory=dict)
    configs: dict[DietCategory, CustomizedMealConfig] = field(default_factory=dict)

    def get_profile_by_user(self, user_id: UUID) -> CustomizedMealProfile | None:
        for profile in self.profiles.values():
            if profile.user_id == user_id:
                return profile
        return None

    def get_profile(self, profile_id: UUID) -> CustomizedMealProfile | None:
        return self.profiles.get(profile_id)

    def create_profile(self, profile: CustomizedMealProfile) -> CustomizedMealProfile:
        self.profiles[profile.id] = profile
        return profile

    def update_meal_duration_repeat(self, profile_id: UUID, value: int) -> None:
        self.profiles[profile_id] = replace(
            self.profiles[profile_id], meal_duration_repeat=value
        )

    def delete_profile(self, profile_id: UUID) -> None:
        self.profiles.pop(profile_id, None)

    def list_profiles(self, offset: int, limit: int) -> list[CustomizedMealProfile]:
        return list(self.profiles.values())[offset : offset + limit]

    def count_profiles(self) -> int:
        return len(self.profiles)

    def get_config(self, category: DietCategory) -> CustomizedMealConfig | None:
        return self.configs.get(category)

    def create_config(self, config: CustomizedMealConfig) -> CustomizedMealConfig:
        self.configs[config.category] = config
        return config

    def update_config(self, config: CustomizedMealConfig) -> None:
        self.configs[config.category] = config

    def add_profile(self, user_id: UUID, **overrides: object) -> CustomizedMealProfile:
        values: dict[str, object] = {
            "id": uuid4(),
            "user_id": user_id,
            "protein": 60.0,
            "fat": 50.0,
            "carbs": 40.0,
            "category": DietCategory.KETO,
            "calories": 850.0,
            "meal_per_day": 2,
            "meal_duration_repeat": 2,
        }
        values.update(overrides)
        profile = CustomizedMealProfile(**values)  # type: ignore[arg-type]
        self.profiles[profile.id] = profile
        return profile


@dataclass
class InMemoryCalculatorRepository(CalculatorSettingsRepository):
    """In-memory calculator settings for tests."""

    settings: CalculatorSettings | None = None

    def get_settings(self) -> CalculatorSettings | None:
        return self.settings

    def create_settings(self, settings: CalculatorSettings) -> None:
        self.settings = settings

    def update_settings(self, settings: CalculatorSettings) -> None:
        self.settings = settings


@dataclass
class InMemoryNotificationRepository(NotificationRepository):
    """In-memory notification repository for tests."""

    notifications: list[Notification] = field(default_factory=list)
    fail_on_create: bool = False

    def create_notification(self, notification: Notification) -> Notification:
        if self.fail_on_create:
            raise RuntimeError("Failed to create notification")
        self.notifications.append(notification)
        return notification

    def list_notifications(
        self, user_id: UUID, include_admin: bool, limit: int
    ) -> list[Notification]:
        visible = self._visible(user_id, include_admin)
        return sorted(visible, key=lambda entry: entry.created_at, reverse=True)[
            :limit
        ]

    def count_unread(self, user_id: UUID, include_admin: bool) -> int:
        return sum(
            1
            for entry in self._visible(user_id, include_admin)
            if not entry.mark_as_read
        )

    def mark_as_read(
        self, notification_id: UUID, user_id: UUID, include_admin: bool
    ) -> bool:
        visible = {entry.id for entry in self._visible(user_id, include_admin)}
        for index, entry in enumerate(self.notifications):
            if entry.id == notification_id and entry.id in visible:
                self.notifications[index] = replace(entry, mark_as_read=True)
                return True
        return False

    def mark_all_as_read(self, user_id: UUID, include_admin: bool) -> None:
        visible = {entry.id for entry in self._visible(user_id, include_admin)}
        self.notifications = [
            replace(entry, mark_as_read=True) if entry.id in visible else entry
            for entry in self.notifications
        ]

    def for_user(self, user_id: UUID | None) -> list[Notification]:
        return [entry for entry in self.notifications if entry.user_id == user_id]

    def _visible(self, user_id: UUID, include_admin: bool) -> list[Notification]:
        return [
            entry
            for entry in self.notifications
            if entry.user_id == user_id or (include_admin and entry.user_id is None)
        ]


@dataclass
class RecordingPushClient:
    """Push client that records published events."""

    events: list[tuple[str, str, dict[str, object]]] = field(default_factory=list)
    fail: bool = False

    async def publish(self, room: str, event: str, payload: dict[str, object]) -> None:
        if self.fail:
            raise RuntimeError("push gateway unavailable")
        self.events.append((room, event, payload))


@dataclass
class Repositories:
    """Every in-memory repository behind a test container."""

    discounts: InMemoryDiscountRepository = field(
        default_factory=InMemoryDiscountRepository
    )
    carts: InMemoryCartRepository = field(default_factory=InMemoryCartRepository)
    customized_carts: InMemoryCustomizedCartRepository = field(
        default_factory=InMemoryCustomizedCartRepository
    )
    catalog: InMemoryCatalogRepository = field(
        default_factory=InMemoryCatalogRepository
    )
    accounts: InMemoryAccountRepository = field(
        default_factory=InMemoryAccountRepository
    )
    orders: InMemoryOrderRepository = field(default_factory=InMemoryOrderRepository)
    profiles: InMemoryProfileRepository = field(
        default_factory=InMemoryProfileRepository
    )
    calculator: InMemoryCalculatorRepository = field(
        default_factory=InMemoryCalculatorRepository
    )
    notifications: InMemoryNotificationRepository = field(
        default_factory=InMemoryNotificationRepository
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
    )


@pytest.fixture
def repositories() -> Repositories:
    return Repositories()


@pytest.fixture
def push_client() -> RecordingPushClient:
    return RecordingPushClient()


@pytest.fixture
def notification_service(
    repositories: Repositories, push_client: RecordingPushClient
) -> NotificationService:
    return NotificationService(
        repository=repositories.notifications, push_client=push_client
    )


@pytest.fixture
def discount_service(repositories: Repositories) -> DiscountService:
    return DiscountService(repositories.discounts)


@pytest.fixture
def apportionment_service(repositories: Repositories) -> MacroApportionmentService:
    return MacroApportionmentService(
        cart_repository=repositories.customized_carts,
        catalog_repository=repositories.catalog,
        profile_repository=repositories.profiles,
    )


@pytest.fixture
def cart_aggregator(
    repositories: Repositories, discount_service: DiscountService
) -> CartAggregator:
    return CartAggregator(
        cart_repository=repositories.carts,
        customized_cart_repository=repositories.customized_carts,
        catalog_repository=repositories.catalog,
        discount_service=discount_service,
    )


@pytest.fixture
def order_service(
    repositories: Repositories,
    cart_aggregator: CartAggregator,
    notification_service: NotificationService,
) -> OrderService:
    return OrderService(
        order_repository=repositories.orders,
        account_repository=repositories.accounts,
        catalog_repository=repositories.catalog,
        cart_repository=repositories.carts,
        customized_cart_repository=repositories.customized_carts,
        cart_aggregator=cart_aggregator,
        notification_service=notification_service,
    )


@pytest.fixture
def profile_service(
    repositories: Repositories, notification_service: NotificationService
) -> CustomizedMealProfileService:
    return CustomizedMealProfileService(
        repository=repositories.profiles, notification_service=notification_service
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    repositories: Repositories,
    discount_service: DiscountService,
    apportionment_service: MacroApportionmentService,
    cart_aggregator: CartAggregator,
    order_service: OrderService,
    profile_service: CustomizedMealProfileService,
    notification_service: NotificationService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        discount_service=discount_service,
        cart_service=CartService(repositories.carts, repositories.catalog),
        customized_cart_service=CustomizedCartService(
            repository=repositories.customized_carts,
            catalog_repository=repositories.catalog,
            profile_repository=repositories.profiles,
            apportionment_service=apportionment_service,
        ),
        apportionment_service=apportionment_service,
        cart_aggregator=cart_aggregator,
        order_service=order_service,
        profile_service=profile_service,
        calculator_service=CalculatorService(repositories.calculator),
        notification_service=notification_service,
        close_resources=close_resources,
    )
