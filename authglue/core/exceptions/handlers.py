from fastapi import Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from authglue.core.config import request_logger
from authglue.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    OAuthException,
)


async def general_exception_handler(request: Request, exc: AppException):
    """
    Handles otherwise unhandled application exceptions.

    Args:
        request: The request object.
        exc (AppException): The exception instance.

    Returns:
        PlainTextResponse: A generic message with the exception's status code.
    """
    request_logger.error(f"GeneralException: {exc}")
    return PlainTextResponse(
        status_code=exc.status_code,
        content="An unexpected error occurred.",
    )


async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    """
    Handles forbidden requests, CSRF state mismatches on the OAuth
    callback included.

    Returns:
        PlainTextResponse: 403 with the exception message.
    """
    request_logger.warning(f"{type(exc).__name__}: {request.url.path}")
    return PlainTextResponse(status_code=exc.status_code, content=exc.message)


async def oauth_exception_handler(request: Request, exc: OAuthException):
    """
    Handles OAuth exchange and profile failures.

    The full exception, including its details, is logged server-side. Only
    the generic message reaches the client.

    Returns:
        PlainTextResponse: 500 with a generic user-facing message.
    """
    request_logger.error(
        f"{type(exc).__name__}: provider={exc.provider} "
        f"message={exc.message} details={exc.details}"
    )
    return PlainTextResponse(status_code=exc.status_code, content=exc.message)


async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
):
    """
    Handles authentication exceptions by returning a JSON response.

    Returns:
        JSONResponse: A response containing the error message and status code 401.
    """
    request_logger.warning(f"AuthenticationException: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Cookie"},
    )


async def not_found_exception_handler(request: Request, exc: NotFoundException):
    request_logger.info(f"NotFoundException: {exc}")
    return PlainTextResponse(status_code=exc.status_code, content=exc.message)


async def bad_request_exception_handler(request: Request, exc: BadRequestException):
    request_logger.info(f"BadRequestException: {exc}")
    return PlainTextResponse(status_code=exc.status_code, content=exc.message)


exception_schema = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "description": "Internal Server Error",
        "content": {
            "text/plain": {
                "example": "Authentication failed during token exchange.",
            }
        },
    },
}


__all__ = [
    "general_exception_handler",
    "forbidden_exception_handler",
    "oauth_exception_handler",
    "authentication_exception_handler",
    "not_found_exception_handler",
    "bad_request_exception_handler",
    "exception_schema",
]
