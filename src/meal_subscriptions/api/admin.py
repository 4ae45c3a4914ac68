"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse  # noqa: TC002

from meal_subscriptions.api.responses import current_user_id, page_request, respond
from meal_subscriptions.api.schemas import (  # noqa: TC001
    CalculatorSettingsRequest,
    CustomizedMealConfigRequest,
    DiscountRequest,
    MealDurationRequest,
    RangeRequest,
    StatusUpdateRequest,
)
from meal_subscriptions.domain.discounts import DiscountCategory  # noqa: TC001
from meal_subscriptions.domain.orders import OrderQuery
from meal_subscriptions.domain.profiles import DietCategory  # noqa: TC001

if TYPE_CHECKING:
    from meal_subscriptions.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/discounts", dependencies=[Depends(require_admin)])
async def list_discounts(
    request: Request, category: DiscountCategory | None = None
) -> JSONResponse:
    """Return discount rules, optionally for one category."""
    container: AppContainer = request.app.state.container
    return respond(container.discount_service.list_rules(category))


@router.get("/discounts/{discount_id}", dependencies=[Depends(require_admin)])
async def get_discount(discount_id: UUID, request: Request) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.discount_service.get_rule(discount_id))


@router.post("/discounts", dependencies=[Depends(require_admin)])
async def create_discount_ranges(
    body: DiscountRequest, request: Request
) -> JSONResponse:
    """Add ranges to a category, creating its rule when missing."""
    container: AppContainer = request.app.state.container
    result = container.discount_service.create_ranges(
        body.category, [entry.to_input() for entry in body.ranges]
    )
    return respond(result, status.HTTP_201_CREATED)


@router.put(
    "/discounts/{discount_id}/ranges/{range_id}",
    dependencies=[Depends(require_admin)],
)
async def update_discount_range(
    discount_id: UUID, range_id: UUID, body: RangeRequest, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(
        container.discount_service.update_range(
            discount_id, range_id, body.to_input()
        )
    )


@router.delete(
    "/discounts/{discount_id}/ranges/{range_id}",
    dependencies=[Depends(require_admin)],
)
async def delete_discount_range(
    discount_id: UUID, range_id: UUID, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.discount_service.delete_range(discount_id, range_id))


@router.get("/orders", dependencies=[Depends(require_admin)])
async def list_orders(
    request: Request,
    page_no: int = 1,
    per_page: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> JSONResponse:
    """Return every order, newest first."""
    container: AppContainer = request.app.state.container
    page = page_request(page_no, per_page, container.settings.orders_page_size)
    return respond(
        container.order_service.list_orders(page, OrderQuery(start=start, end=end))
    )


@router.get("/orders/{order_id}", dependencies=[Depends(require_admin)])
async def get_order(order_id: UUID, request: Request) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.order_service.get_order(order_id))


@router.patch("/orders/{order_id}/status", dependencies=[Depends(require_admin)])
async def transition_order_status(
    order_id: UUID, body: StatusUpdateRequest, request: Request
) -> JSONResponse:
    """Apply one order, delivery or payment status change."""
    container: AppContainer = request.app.state.container
    result = await container.order_service.transition_status(
        order_id, body.field, body.value
    )
    return respond(result)


@router.get(
    "/customized-meals/configs/{category}", dependencies=[Depends(require_admin)]
)
async def get_customized_meal_config(
    category: DietCategory, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.profile_service.get_config(category))


@router.post(
    "/customized-meals/configs/{category}", dependencies=[Depends(require_admin)]
)
async def create_customized_meal_config(
    category: DietCategory, body: CustomizedMealConfigRequest, request: Request
) -> JSONResponse:
    """Create the intake bounds of a diet category."""
    container: AppContainer = request.app.state.container
    result = container.profile_service.create_config(category, body.to_input())
    return respond(result, status.HTTP_201_CREATED)


@router.put(
    "/customized-meals/configs/{category}", dependencies=[Depends(require_admin)]
)
async def update_customized_meal_config(
    category: DietCategory, body: CustomizedMealConfigRequest, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(
        container.profile_service.update_config(category, body.to_input())
    )


@router.get("/customized-meals/profiles", dependencies=[Depends(require_admin)])
async def list_customized_meal_profiles(
    request: Request, page_no: int = 1, per_page: int | None = None
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    page = page_request(page_no, per_page, container.settings.orders_page_size)
    return respond(container.profile_service.list_profiles(page))


@router.patch(
    "/customized-meals/profiles/{profile_id}/meal-duration",
    dependencies=[Depends(require_admin)],
)
async def set_meal_duration_repeat(
    profile_id: UUID, body: MealDurationRequest, request: Request
) -> JSONResponse:
    """Set how many distinct days the customer plans."""
    container: AppContainer = request.app.state.container
    result = await container.profile_service.set_meal_duration_repeat(
        profile_id, body.value
    )
    return respond(result)


@router.delete(
    "/customized-meals/profiles/{profile_id}", dependencies=[Depends(require_admin)]
)
async def delete_customized_meal_profile(
    profile_id: UUID, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(await container.profile_service.delete_profile(profile_id))


@router.get("/calculator/settings", dependencies=[Depends(require_admin)])
async def get_calculator_settings(request: Request) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.calculator_service.get_settings())


@router.post("/calculator/settings", dependencies=[Depends(require_admin)])
async def create_calculator_settings(
    body: CalculatorSettingsRequest, request: Request
) -> JSONResponse:
    """Create the calculator coefficients record."""
    container: AppContainer = request.app.state.container
    result = container.calculator_service.create_settings(body.to_settings())
    return respond(result, status.HTTP_201_CREATED)


@router.put("/calculator/settings", dependencies=[Depends(require_admin)])
async def update_calculator_settings(
    body: CalculatorSettingsRequest, request: Request
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(container.calculator_service.update_settings(body.to_settings()))


@router.get("/notifications", dependencies=[Depends(require_admin)])
async def list_admin_notifications(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> JSONResponse:
    """Return the admin's own and broadcast admin notifications."""
    container: AppContainer = request.app.state.container
    return respond(
        container.notification_service.list_for_user(user_id, is_admin=True)
    )


@router.patch("/notifications/read", dependencies=[Depends(require_admin)])
async def mark_admin_notifications_read(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> JSONResponse:
    container: AppContainer = request.app.state.container
    return respond(
        container.notification_service.mark_all_as_read(user_id, is_admin=True)
    )
