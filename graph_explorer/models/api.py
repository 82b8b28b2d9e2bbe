"""
Pydantic models for Graph Explorer API responses.

These models define the response schemas for graph snapshots, loads,
expansions, queries and health checks.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from graph_explorer.graph.models import GraphView, LayoutMap, Link, Node
from graph_explorer.graph.state import ExplorerState


class GraphSnapshot(BaseModel):
    """The current graph plus its layout positions."""

    nodes: list[Node]
    links: list[Link]
    positions: LayoutMap = Field(default_factory=dict)
    node_count: int
    link_count: int
    last_query: str | None = None

    @classmethod
    def from_view(
        cls, view: GraphView, state: ExplorerState | None = None
    ) -> GraphSnapshot:
        positions: LayoutMap = {}
        last_query = None
        if state is not None:
            ids = view.node_ids()
            positions = {k: v for k, v in state.positions.items() if k in ids}
            last_query = state.last_query
        return cls(
            nodes=view.nodes,
            links=view.links,
            positions=positions,
            node_count=len(view.nodes),
            link_count=len(view.links),
            last_query=last_query,
        )


class NodeTypesResponse(BaseModel):
    types: list[str]


class DescendantsResponse(BaseModel):
    node_id: str
    descendants: list[str]


class HealthResponse(BaseModel):
    """Response for /api/health endpoint."""

    status: str
    graph_store_connected: bool
    graph_store_uri: str | None = None
