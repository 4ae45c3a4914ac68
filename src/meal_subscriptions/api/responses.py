"""Translation of service results into HTTP responses."""

from uuid import UUID

from fastapi import Header, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from meal_subscriptions.domain.pagination import PageRequest
from meal_subscriptions.domain.results import ErrorKind, Failure, Result

_FAILURE_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BUSINESS_RULE: status.HTTP_409_CONFLICT,
    ErrorKind.SYSTEM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def respond(
    result: Result[object], success_status: int = status.HTTP_200_OK
) -> JSONResponse:
    """Render a result with the uniform ``{status, message, data}`` body."""
    if isinstance(result, Failure):
        code = _FAILURE_STATUS[result.kind]
    else:
        code = success_status
    return JSONResponse(status_code=code, content=jsonable_encoder(result.to_payload()))


async def current_user_id(x_user_id: UUID = Header()) -> UUID:
    """Return the authenticated caller passed by the gateway."""
    return x_user_id


def page_request(page_no: int, per_page: int | None, default_size: int) -> PageRequest:
    """Clamp pagination query parameters."""
    size = per_page if per_page and per_page > 0 else default_size
    return PageRequest(page_no=max(page_no, 1), per_page=size)
