"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_subscriptions.adapters.push_client import HttpxPushClient
from meal_subscriptions.adapters.supabase_calculator_repository import (
    SupabaseCalculatorRepository,
)
from meal_subscriptions.adapters.supabase_cart_repository import (
    SupabaseCartRepository,
    SupabaseCustomizedCartRepository,
)
from meal_subscriptions.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from meal_subscriptions.adapters.supabase_discount_repository import (
    SupabaseDiscountRepository,
)
from meal_subscriptions.adapters.supabase_notification_repository import (
    SupabaseNotificationRepository,
)
from meal_subscriptions.adapters.supabase_order_repository import (
    SupabaseAccountRepository,
    SupabaseOrderRepository,
)
from meal_subscriptions.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from meal_subscriptions.config import Settings
from meal_subscriptions.services.apportionment import MacroApportionmentService
from meal_subscriptions.services.calculator import CalculatorService
from meal_subscriptions.services.cart_totals import CartAggregator
from meal_subscriptions.services.carts import CartService
from meal_subscriptions.services.customized_carts import CustomizedCartService
from meal_subscriptions.services.customized_meals import CustomizedMealProfileService
from meal_subscriptions.services.discounts import DiscountService
from meal_subscriptions.services.notifications import NotificationService
from meal_subscriptions.services.orders import OrderService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    discount_service: DiscountService
    cart_service: CartService
    customized_cart_service: CustomizedCartService
    apportionment_service: MacroApportionmentService
    cart_aggregator: CartAggregator
    order_service: OrderService
    profile_service: CustomizedMealProfileService
    calculator_service: CalculatorService
    notification_service: NotificationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    discount_repository = SupabaseDiscountRepository(supabase_client)
    cart_repository = SupabaseCartRepository(supabase_client)
    customized_cart_repository = SupabaseCustomizedCartRepository(supabase_client)
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    push_client = (
        HttpxPushClient.create(resolved_settings.push_gateway_url)
        if resolved_settings.push_gateway_url
        else None
    )
    notification_service = NotificationService(
        repository=SupabaseNotificationRepository(supabase_client),
        push_client=push_client,
        limit=resolved_settings.notifications_limit,
    )
    discount_service = DiscountService(discount_repository)
    apportionment_service = MacroApportionmentService(
        cart_repository=customized_cart_repository,
        catalog_repository=catalog_repository,
        profile_repository=profile_repository,
    )
    cart_aggregator = CartAggregator(
        cart_repository=cart_repository,
        customized_cart_repository=customized_cart_repository,
        catalog_repository=catalog_repository,
        discount_service=discount_service,
    )
    order_service = OrderService(
        order_repository=SupabaseOrderRepository(supabase_client),
        account_repository=SupabaseAccountRepository(supabase_client),
        catalog_repository=catalog_repository,
        cart_repository=cart_repository,
        customized_cart_repository=customized_cart_repository,
        cart_aggregator=cart_aggregator,
        notification_service=notification_service,
    )

    async def close_resources() -> None:
        if push_client is not None:
            await push_client.close()

    return AppContainer(
        settings=resolved_settings,
        discount_service=discount_service,
        cart_service=CartService(cart_repository, catalog_repository),
        customized_cart_service=CustomizedCartService(
            repository=customized_cart_repository,
            catalog_repository=catalog_repository,
            profile_repository=profile_repository,
            apportionment_service=apportionment_service,
        ),
        apportionment_service=apportionment_service,
        cart_aggregator=cart_aggregator,
        order_service=order_service,
        profile_service=CustomizedMealProfileService(
            repository=profile_repository,
            notification_service=notification_service,
        ),
        calculator_service=CalculatorService(
            SupabaseCalculatorRepository(supabase_client)
        ),
        notification_service=notification_service,
        close_resources=close_resources,
    )
