"""
Request models for API endpoints.

Defines Pydantic models for validating incoming HTTP requests: free-text
queries, type filters, layout canvases and client-supplied fragments.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Maximum length for free-text queries
MAX_QUERY_LENGTH = 1000

# Control character pattern (C0 and C1 control chars, keeping \t \n \r)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


class QueryRequest(BaseModel):
    """Request body for asking a free-text question about the graph."""

    query: str = Field(..., min_length=1, max_length=MAX_QUERY_LENGTH)

    @field_validator("query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        """Remove control characters and reject blank queries."""
        cleaned = CONTROL_CHAR_PATTERN.sub("", value).strip()
        if not cleaned:
            raise ValueError("Query must not be blank")
        return cleaned


class FilterRequest(BaseModel):
    """Node types to keep; an empty list shows the whole baseline."""

    types: list[str] = Field(default_factory=list)


class LayoutRequest(BaseModel):
    """Canvas size for a tree layout; defaults come from settings."""

    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)


class MergeRequest(BaseModel):
    """
    Graph fragment supplied by a client.

    Entries are kept loose here; malformed nodes and links are skipped
    individually when the fragment is decoded.
    """

    nodes: list[Any] = Field(default_factory=list)
    links: list[Any] = Field(default_factory=list)
