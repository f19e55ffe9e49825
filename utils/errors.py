"""
Application errors raised by services and rendered by the API layer.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(AppError):
    """Referenced event, member or record does not exist or is deleted."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidInputError(AppError):
    """Unsupported event type or status combination."""

    status_code = status.HTTP_400_BAD_REQUEST


class StoreError(AppError):
    """Backing store failed (connectivity, timeout). Safe to retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
