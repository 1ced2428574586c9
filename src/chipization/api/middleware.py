"""RFC 9457 problem-details responses for every error path of the API."""

from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.errors import (
    ChipizationError,
    ConflictError,
    NotFoundError,
    ValidationFailure,
)
from ..utils.logging_config import get_logger, log_exception

logger = get_logger("api")

DEFAULT_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
}


class ProblemDetailsException(HTTPException):
    """Enhanced HTTPException that includes RFC 9457 Problem Details."""

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        headers: Optional[dict] = None,
        **extra_fields,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.title = title
        self.type_uri = type_uri or f"https://httpstatuses.com/{status_code}"
        self.instance = instance
        self.extra_fields = extra_fields


def problem_response(
    status_code: int,
    title: Optional[str] = None,
    detail: Optional[str] = None,
    type_uri: Optional[str] = None,
    instance: Optional[str] = None,
    headers: Optional[dict] = None,
    **extra_fields,
) -> JSONResponse:
    """Create a JSON response in RFC 9457 Problem Details format."""
    problem = {
        "type": type_uri or f"https://httpstatuses.com/{status_code}",
        "title": title or DEFAULT_TITLES.get(status_code, "HTTP Error"),
        "status": status_code,
    }
    if detail:
        problem["detail"] = detail
    if instance:
        problem["instance"] = instance
    problem.update(extra_fields)

    return JSONResponse(
        status_code=status_code,
        content=problem,
        media_type="application/problem+json",
        headers=headers,
    )


def status_for(exc: ChipizationError) -> int:
    for error_cls, code in ERROR_STATUS.items():
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_400_BAD_REQUEST


def _plain_context(context: dict) -> dict:
    return {
        key: value if isinstance(value, (int, float, str, bool, list, type(None))) else str(value)
        for key, value in context.items()
    }


async def chipization_error_handler(request: Request, exc: ChipizationError) -> JSONResponse:
    return problem_response(
        status_code=status_for(exc),
        title=exc.title,
        detail=exc.message,
        instance=request.url.path,
        context=_plain_context(exc.context),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning(f"Rejected malformed request {request.method} {request.url.path}: {errors}")
    return problem_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        title="Validation Error",
        detail="Request validation failed",
        instance=request.url.path,
        errors=errors,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, ProblemDetailsException):
        return problem_response(
            status_code=exc.status_code,
            title=exc.title,
            detail=exc.detail,
            type_uri=exc.type_uri,
            instance=exc.instance or request.url.path,
            headers=exc.headers,
            **exc.extra_fields,
        )
    return problem_response(
        status_code=exc.status_code,
        detail=exc.detail if isinstance(exc.detail, str) else None,
        instance=request.url.path,
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the problem-details handlers on ``app``."""
    app.add_exception_handler(ChipizationError, chipization_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


class ProblemDetailsMiddleware(BaseHTTPMiddleware):
    """Last-resort conversion of unhandled exceptions into a 500 problem response."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except ChipizationError as exc:
            return await chipization_error_handler(request, exc)
        except Exception as exc:
            log_exception("api", exc, {"method": request.method, "path": request.url.path})
            return problem_response(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected error occurred",
                instance=request.url.path,
            )
