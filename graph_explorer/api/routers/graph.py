"""
Graph Explorer API endpoints.

Provides endpoints for the interactive graph session:
- Snapshot, node types and initial load (store or sample data)
- Node expansion and collapse
- Neighborhood, shortest path and descendant views
- Type filters, reset and client-supplied merges
- Tree layout and free-text questions
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from graph_explorer.api.deps import (
    ValidatedNodeId,
    get_explorer_service,
    validate_node_id,
)
from graph_explorer.api.errors import handle_endpoint_error
from graph_explorer.graph.models import GraphView
from graph_explorer.models.api import (
    DescendantsResponse,
    GraphSnapshot,
    NodeTypesResponse,
)
from graph_explorer.models.requests import (
    FilterRequest,
    LayoutRequest,
    MergeRequest,
    QueryRequest,
)
from graph_explorer.services.explorer_service import (
    ExpandOutcome,
    ExplorerService,
    LoadOutcome,
    QueryOutcome,
)

router = APIRouter(prefix="/api/graph", tags=["graph"])


def _snapshot(explorer: ExplorerService, view: GraphView | None = None) -> GraphSnapshot:
    return GraphSnapshot.from_view(view or explorer.current, explorer.state)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SESSION GRAPH
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@router.get("", response_model=GraphSnapshot)
async def get_graph(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Return the graph currently displayed."""
    return _snapshot(explorer)


@router.get("/types", response_model=NodeTypesResponse)
async def get_node_types(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> NodeTypesResponse:
    """List the distinct node types of the baseline graph."""
    return NodeTypesResponse(types=explorer.node_types())


@router.post("/load", response_model=LoadOutcome)
async def load_graph(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> LoadOutcome:
    """
    Load the initial graph from the graph store.

    Falls back to the sample dataset when the store is unreachable,
    throttled or empty; ``source`` in the response says which was used.
    """
    try:
        return await explorer.load_overview()
    except Exception as e:
        raise handle_endpoint_error(e, "load_graph")


@router.post("/sample", response_model=GraphSnapshot)
async def load_sample(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Replace the session graph with the sample dataset."""
    return _snapshot(explorer, explorer.load_sample())


@router.post("/reset", response_model=GraphSnapshot)
async def reset_graph(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Show the baseline graph again, undoing filters, collapses and queries."""
    return _snapshot(explorer, explorer.reset())


@router.post("/clear", response_model=GraphSnapshot)
async def clear_graph(
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    return _snapshot(explorer, explorer.clear())


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# NODE OPERATIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@router.post("/nodes/{node_id}/expand", response_model=ExpandOutcome)
async def expand_node(
    node_id: str = Depends(ValidatedNodeId()),
    explorer: ExplorerService = Depends(get_explorer_service),
) -> ExpandOutcome:
    """
    Fetch a node's neighbors from the graph store and merge them in.

    Args:
        node_id: Id of a node in the current graph
        explorer: Injected explorer service

    Returns:
        ExpandOutcome with the ids of newly added nodes and the merged graph
    """
    try:
        return await explorer.expand(node_id)
    except Exception as e:
        raise handle_endpoint_error(e, f"expand_node node={node_id}")


@router.post("/nodes/{node_id}/collapse", response_model=GraphSnapshot)
async def collapse_node(
    node_id: str = Depends(ValidatedNodeId()),
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Hide every descendant of a node."""
    try:
        return _snapshot(explorer, explorer.collapse(node_id))
    except Exception as e:
        raise handle_endpoint_error(e, f"collapse_node node={node_id}")


@router.get("/nodes/{node_id}/neighborhood", response_model=GraphSnapshot)
async def get_neighborhood(
    node_id: str = Depends(ValidatedNodeId()),
    radius: int = Query(default=1, ge=0, le=10),
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Nodes within ``radius`` hops of a node; the session graph is unchanged."""
    view = explorer.neighborhood(node_id, radius)
    if not view.nodes:
        raise handle_endpoint_error(
            LookupError(f"Node not found: {node_id}"), "get_neighborhood"
        )
    return _snapshot(explorer, view)


@router.get("/nodes/{node_id}/descendants", response_model=DescendantsResponse)
async def get_descendants(
    node_id: str = Depends(ValidatedNodeId()),
    explorer: ExplorerService = Depends(get_explorer_service),
) -> DescendantsResponse:
    """Ids reachable from a node along source-to-target links."""
    if not explorer.current.has_node(node_id):
        raise handle_endpoint_error(
            LookupError(f"Node not found: {node_id}"), "get_descendants"
        )
    return DescendantsResponse(node_id=node_id, descendants=explorer.descendants(node_id))


@router.get("/path", response_model=GraphSnapshot)
async def get_shortest_path(
    source: str = Query(...),
    target: str = Query(...),
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """
    Shortest path between two nodes, ignoring link direction.

    When no path exists the response holds just the endpoints and no links.
    """
    validate_node_id(source, "source node ID")
    validate_node_id(target, "target node ID")
    return _snapshot(explorer, explorer.shortest_path(source, target))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FILTERS, MERGES AND LAYOUT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@router.post("/filter", response_model=GraphSnapshot)
async def filter_graph(
    request: FilterRequest,
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Keep only nodes of the selected types (applied to the baseline)."""
    return _snapshot(explorer, explorer.filter_by_types(request.types))


@router.post("/merge", response_model=GraphSnapshot)
async def merge_fragment(
    request: MergeRequest,
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """
    Merge a client-supplied fragment into the session graph.

    Malformed entries and links to unknown nodes are skipped.
    """
    fragment = GraphView.from_payload(request.model_dump())
    return _snapshot(explorer, explorer.merge_fragment(fragment))


@router.post("/layout", response_model=GraphSnapshot)
async def layout_graph(
    request: LayoutRequest,
    explorer: ExplorerService = Depends(get_explorer_service),
) -> GraphSnapshot:
    """Compute tree-layout positions for the current graph."""
    explorer.apply_layout(request.width, request.height)
    return _snapshot(explorer)


@router.post("/query", response_model=QueryOutcome)
async def query_graph(
    request: QueryRequest,
    explorer: ExplorerService = Depends(get_explorer_service),
) -> QueryOutcome:
    """
    Answer a free-text question and show the matching view.

    The question-answering service is consulted when reachable; the view
    always comes from local query resolution.
    """
    try:
        return await explorer.ask(request.query)
    except Exception as e:
        raise handle_endpoint_error(e, "query_graph")
