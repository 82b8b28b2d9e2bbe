"""
Dependency injection providers for API endpoints.

Provides FastAPI dependencies that inject service instances into route
handlers, enabling loose coupling and testability.
"""

from __future__ import annotations

from fastapi import HTTPException

from graph_explorer.services import ExplorerService, Neo4jConnection, get_services

MAX_NODE_ID_LENGTH = 256


def get_explorer_service() -> ExplorerService:
    """
    Dependency provider for ExplorerService.

    Returns:
        ExplorerService instance from the global container
    """
    return get_services().explorer


def get_graph_connection() -> Neo4jConnection:
    """
    Dependency provider for the graph store connection manager.

    Returns:
        Neo4jConnection instance from the global container
    """
    return get_services().connection


def validate_node_id(value: str, field_name: str = "node ID") -> str:
    """
    Validate a node id path or query parameter.

    Node ids are opaque, so only emptiness and length are checked.

    Raises:
        HTTPException: If the value is blank or too long
    """
    if not value.strip() or len(value) > MAX_NODE_ID_LENGTH:
        raise HTTPException(status_code=400, detail=f"Invalid {field_name}")
    return value


class ValidatedNodeId:
    """
    Dependency class for validated node ID path parameters.

    Usage:
        @router.post("/nodes/{node_id}/expand")
        async def endpoint(node_id: str = Depends(ValidatedNodeId())):
            ...
    """

    def __call__(self, node_id: str) -> str:
        """Validate and return the node ID."""
        return validate_node_id(node_id)
