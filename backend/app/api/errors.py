import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from membership_core.errors import (
    AlreadyMemberError,
    DisplayNameConflictError,
    GroupAtCapacityError,
    GroupTooLargeError,
    InvalidDisplayNameError,
    InvalidExpirationError,
    LinkExpiredError,
    MembershipError,
    NotFoundError,
    NotGroupMemberError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    LinkExpiredError: status.HTTP_400_BAD_REQUEST,
    GroupAtCapacityError: status.HTTP_409_CONFLICT,
    GroupTooLargeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DisplayNameConflictError: status.HTTP_409_CONFLICT,
    InvalidExpirationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyMemberError: status.HTTP_409_CONFLICT,
    NotGroupMemberError: status.HTTP_403_FORBIDDEN,
    InvalidDisplayNameError: status.HTTP_400_BAD_REQUEST,
}


def status_for(error: MembershipError) -> int:
    return STATUS_BY_ERROR.get(type(error), status.HTTP_400_BAD_REQUEST)


async def membership_error_handler(request: Request, exc: MembershipError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MembershipError, membership_error_handler)
