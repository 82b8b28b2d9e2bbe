"""
Unified error schema for the Graph Explorer API.

Provides consistent error codes, messages, and hints for all API responses.
All errors include retryability information and optional debugging details.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Graph errors (GRAPH_*)
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    GRAPH_STORE_UNAVAILABLE = "GRAPH_STORE_UNAVAILABLE"
    CONNECTION_THROTTLED = "CONNECTION_THROTTLED"

    # Validation errors (VALIDATION_*)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Resource errors
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class APIError:
    """
    Structured error response for API endpoints.

    Attributes:
        code: Standardized error code from ErrorCode enum
        message: Human-readable error message
        detail: Optional technical details for debugging
        hint: Optional suggestion for resolving the error
        retryable: Whether the client should retry the request
    """

    code: ErrorCode
    message: str
    detail: str | None = None
    hint: str | None = None
    retryable: bool = False

    def to_dict(self) -> dict[str, dict[str, str | bool]]:
        """
        Convert error to dictionary format for JSON responses.

        Returns:
            Dictionary with 'error' key containing error details
        """
        error_dict: dict[str, str | bool] = {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
        }

        if self.detail is not None:
            error_dict["detail"] = self.detail

        if self.hint is not None:
            error_dict["hint"] = self.hint

        return {"error": error_dict}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Predefined Error Factories
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def node_not_found_error(detail: str | None = None) -> APIError:
    """Create error for a node missing from the current graph."""
    return APIError(
        code=ErrorCode.NODE_NOT_FOUND,
        message="Node not found in the current graph",
        detail=detail,
        hint="Reload the graph or pick a node that is on screen",
        retryable=False,
    )


def graph_store_unavailable_error(detail: str | None = None) -> APIError:
    """Create error for an unreachable graph store."""
    return APIError(
        code=ErrorCode.GRAPH_STORE_UNAVAILABLE,
        message="Graph store is unavailable",
        detail=detail,
        hint="Check that the database is running, then try again",
        retryable=True,
    )


def connection_throttled_error(retry_after: float) -> APIError:
    """Create error for a throttled connection attempt."""
    return APIError(
        code=ErrorCode.CONNECTION_THROTTLED,
        message="Connection attempts are being throttled",
        detail=f"Retry after {retry_after:.1f}s",
        hint="Wait a few seconds before retrying",
        retryable=True,
    )


def validation_error(field: str, reason: str) -> APIError:
    """Create error for request validation failure."""
    return APIError(
        code=ErrorCode.VALIDATION_ERROR,
        message=f"Invalid value for '{field}'",
        detail=reason,
        hint="Check the request format and try again",
        retryable=False,
    )


def internal_error(detail: str | None = None) -> APIError:
    """Create error for unexpected internal failures."""
    return APIError(
        code=ErrorCode.INTERNAL_ERROR,
        message="An internal error occurred",
        detail=detail,
        hint="Try again later or contact support if the problem persists",
        retryable=True,
    )
