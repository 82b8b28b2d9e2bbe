"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from graph_explorer.api.deps import get_graph_connection
from graph_explorer.models.api import HealthResponse
from graph_explorer.services.graph_store import Neo4jConnection

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    connection: Neo4jConnection = Depends(get_graph_connection),
) -> HealthResponse:
    """
    Health check endpoint for monitoring and orchestration.

    Reports whether the graph store is connected without attempting a
    connection, so polling never trips the connection throttle.
    """
    return HealthResponse(
        status="ok",
        graph_store_connected=connection.is_connected,
        graph_store_uri=connection.uri,
    )
