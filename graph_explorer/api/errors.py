"""
Centralized exception handling for API endpoints.

Provides handlers for validation errors and service exceptions,
ensuring consistent error responses across all endpoints using
the unified APIError schema.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from graph_explorer.models.errors import (
    APIError,
    ErrorCode,
    connection_throttled_error,
    graph_store_unavailable_error,
    internal_error,
    node_not_found_error,
    validation_error,
)
from graph_explorer.services.graph_store import (
    ConnectionThrottledError,
    GraphStoreError,
)

logger = logging.getLogger(__name__)


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Return 422 with structured validation error details using APIError schema.

    Args:
        request: The incoming HTTP request
        exc: The validation exception (must be RequestValidationError)

    Returns:
        JSONResponse with validation error details
    """
    if not isinstance(exc, RequestValidationError):
        raise exc

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        api_error = validation_error(field=field, reason=first_error["msg"])
        return JSONResponse(status_code=422, content=api_error.to_dict())

    api_error = APIError(
        code=ErrorCode.VALIDATION_ERROR,
        message="Validation failed",
        hint="Check the request format and try again",
    )
    return JSONResponse(status_code=422, content=api_error.to_dict())


def handle_endpoint_error(e: Exception, context: str) -> HTTPException:
    """
    Convert exceptions to safe HTTP responses with structured error details.

    Logs full error details server-side but returns safe messages to clients
    using the APIError schema to prevent information leakage.

    Args:
        e: The exception that occurred
        context: Description of the endpoint context for logging

    Returns:
        HTTPException with appropriate status code and APIError-formatted detail
    """
    if isinstance(e, HTTPException):
        return e

    api_error: APIError

    if isinstance(e, ConnectionThrottledError):
        logger.warning(f"{context}: Throttled - {e}")
        api_error = connection_throttled_error(e.retry_after)
        return HTTPException(status_code=429, detail=api_error.to_dict())

    if isinstance(e, GraphStoreError):
        logger.warning(f"{context}: Graph store unavailable - {e}")
        api_error = graph_store_unavailable_error(detail=str(e))
        return HTTPException(status_code=503, detail=api_error.to_dict())

    if isinstance(e, LookupError):
        logger.warning(f"{context}: Not found - {e}")
        api_error = node_not_found_error(detail=str(e))
        return HTTPException(status_code=404, detail=api_error.to_dict())

    if isinstance(e, ValueError):
        logger.warning(f"{context}: Value error - {e}")
        if "not found" in str(e).lower():
            api_error = APIError(
                code=ErrorCode.RESOURCE_NOT_FOUND,
                message=str(e),
                hint="Verify the resource ID and try again",
            )
            return HTTPException(status_code=404, detail=api_error.to_dict())

        api_error = APIError(
            code=ErrorCode.VALIDATION_ERROR,
            message=str(e),
            hint="Check the input parameters and try again",
        )
        return HTTPException(status_code=400, detail=api_error.to_dict())

    logger.error(f"{context}: {type(e).__name__}: {e}", exc_info=True)
    api_error = internal_error(detail=type(e).__name__)
    return HTTPException(status_code=500, detail=api_error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
