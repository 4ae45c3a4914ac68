"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_subscriptions.api.admin import router as admin_router
from meal_subscriptions.api.responses import current_user_id, page_request, respond
from meal_subscriptions.api.schemas import (
    CartLineRequest,
    CustomizedLineRequest,
    IntakeRequest,
    KetoCalculatorRequest,
    MacroCalculatorRequest,
    OrderRequest,
)
from meal_subscriptions.app_logging import configure_logging
from meal_subscriptions.containers import AppContainer
from meal_subscriptions.domain.discounts import DiscountCategory
from meal_subscriptions.domain.orders import OrderQuery
from meal_subscriptions.domain.results import ErrorKind, Failure, Ok
from meal_subscriptions.services.orders import ORDER_NOT_FOUND


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting meal subscriptions API",
            extra={"environment": container.settings.environment},
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/discounts/{category}/quote")
    async def quote_discount(
        category: DiscountCategory, subtotal: float, request: Request
    ) -> JSONResponse:
        """Return the discount a category grants on a subtotal."""
        state_container: AppContainer = request.app.state.container
        return respond(state_container.discount_service.resolve(category, subtotal))

    @app.get("/carts")
    async def get_carts(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        """Return every cart with discounts and the grand total."""
        state_container: AppContainer = request.app.state.container
        return respond(state_container.cart_aggregator.aggregate(user_id))

    @app.post("/carts/main-meals")
    async def add_main_meal(
        body: CartLineRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.cart_service.add_main_meal(
                user_id, body.menu_item_id, body.quantity
            )
        )

    @app.delete("/carts/main-meals/{menu_item_id}")
    async def remove_main_meal(
        menu_item_id: UUID,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.cart_service.remove_main_meal(user_id, menu_item_id)
        )

    @app.post("/carts/offers")
    async def add_offered_meal(
        body: CartLineRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.cart_service.add_offered_meal(
                user_id, body.menu_item_id, body.quantity
            )
        )

    @app.delete("/carts/offers/{menu_item_id}")
    async def remove_offered_meal(
        menu_item_id: UUID,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.cart_service.remove_offered_meal(user_id, menu_item_id)
        )

    @app.post("/carts/customized")
    async def add_customized_meal(
        body: CustomizedLineRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        """Add a customized meal to a plan day and reprice the cart."""
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.customized_cart_service.add_meal(
                user_id, body.menu_item_id, body.day
            )
        )

    @app.delete("/carts/customized/{line_id}")
    async def remove_customized_meal(
        line_id: UUID,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.customized_cart_service.remove_meal(user_id, line_id)
        )

    @app.post("/carts/customized/apportion")
    async def apportion_customized_cart(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        """Recalculate quantities and day prices of the customized cart."""
        state_container: AppContainer = request.app.state.container
        return respond(state_container.apportionment_service.apportion(user_id))

    @app.post("/carts/customized/populate")
    async def populate_customized_cart(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        """Repeat the chosen days across the rest of the week."""
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.apportionment_service.populate_remaining_days(user_id)
        )

    @app.post("/orders")
    async def place_order(
        body: OrderRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        """Check out every cart into a pending order."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.order_service.place_order(
            user_id, body.to_input()
        )
        return respond(result, status.HTTP_201_CREATED)

    @app.get("/orders")
    async def list_orders(  # noqa: PLR0913
        request: Request,
        page_no: int = 1,
        per_page: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        """Return the caller's orders, newest first."""
        state_container: AppContainer = request.app.state.container
        page = page_request(
            page_no, per_page, state_container.settings.orders_page_size
        )
        return respond(
            state_container.order_service.list_user_orders(
                user_id, page, OrderQuery(start=start, end=end)
            )
        )

    @app.get("/orders/{order_id}")
    async def get_order(
        order_id: UUID,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        result = state_container.order_service.get_order(order_id)
        if isinstance(result, Ok) and result.data.user_id != user_id:
            return respond(Failure(ErrorKind.NOT_FOUND, ORDER_NOT_FOUND))
        return respond(result)

    @app.post("/customized-meals/intake")
    async def submit_intake(
        body: IntakeRequest,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        """Store the caller's daily macro targets."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.profile_service.submit_intake(
            user_id, body.to_input()
        )
        return respond(result, status.HTTP_201_CREATED)

    @app.get("/customized-meals/profile")
    async def get_profile(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(state_container.profile_service.get_profile(user_id))

    @app.post("/calculator/keto")
    async def keto_calculator(
        body: KetoCalculatorRequest, request: Request
    ) -> JSONResponse:
        """Return keto macro targets for the submitted body metrics."""
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.calculator_service.compute_keto_macros(
                body.to_metrics(), body.goal
            )
        )

    @app.post("/calculator/macros")
    async def macro_calculator(
        body: MacroCalculatorRequest, request: Request
    ) -> JSONResponse:
        """Return macro targets for a goal and body type."""
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.calculator_service.compute_macros(
                body.to_metrics(), body.goal, body.body_type
            )
        )

    @app.get("/notifications")
    async def list_notifications(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(state_container.notification_service.list_for_user(user_id))

    @app.patch("/notifications/read")
    async def mark_all_notifications_read(
        request: Request, user_id: UUID = Depends(current_user_id)
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(state_container.notification_service.mark_all_as_read(user_id))

    @app.patch("/notifications/{notification_id}/read")
    async def mark_notification_read(
        notification_id: UUID,
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return respond(
            state_container.notification_service.mark_as_read(notification_id, user_id)
        )

    return app
