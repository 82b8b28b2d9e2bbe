"""
Subgraph view operations.

Pure functions deriving a smaller GraphView from a larger one. Traversal
uses networkx graphs built from the view's links in insertion order, so
adjacency order (and therefore tie-breaking) follows link order.

Direction handling differs by operation:
- neighborhood, by_relationship and shortest_path treat links as undirected
- descendants and collapse read links as parent (source) to child (target)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx  # type: ignore[import-untyped]

from graph_explorer.graph.models import GraphView, Link

logger = logging.getLogger(__name__)


def _undirected(graph: GraphView) -> nx.Graph:
    """Undirected adjacency over nodes present in the view."""
    g = nx.Graph()
    ids = graph.node_ids()
    for node in graph.nodes:
        g.add_node(node.id)
    for link in graph.links:
        if link.source in ids and link.target in ids:
            g.add_edge(link.source, link.target)
    return g


def _directed(graph: GraphView) -> nx.DiGraph:
    """Parent-to-child adjacency over nodes present in the view."""
    g = nx.DiGraph()
    ids = graph.node_ids()
    for node in graph.nodes:
        g.add_node(node.id)
    for link in graph.links:
        if link.source in ids and link.target in ids:
            g.add_edge(link.source, link.target)
    return g


def induced_view(graph: GraphView, node_ids: Iterable[str]) -> GraphView:
    """
    Restrict a view to the given nodes and the links among them.

    Node and link order follow the source view.
    """
    keep = set(node_ids)
    return GraphView(
        nodes=[node for node in graph.nodes if node.id in keep],
        links=[
            link
            for link in graph.links
            if link.source in keep and link.target in keep
        ],
    )


def neighborhood(graph: GraphView, center_id: str, radius: int = 1) -> GraphView:
    """
    Nodes within ``radius`` undirected hops of a center node.

    Every link between two included nodes is kept, including cross-links
    between nodes at the same distance.

    Args:
        graph: Source view
        center_id: Id of the center node
        radius: Maximum hop count; 0 returns only the center

    Returns:
        The neighborhood view, or an empty view if the center is unknown
    """
    if not graph.has_node(center_id):
        logger.debug(f"Neighborhood center not found: {center_id}")
        return GraphView.empty()

    distances = nx.single_source_shortest_path_length(
        _undirected(graph), center_id, cutoff=max(radius, 0)
    )
    return induced_view(graph, distances)


def by_relationship(
    graph: GraphView, label: str, entity_id: str | None = None
) -> GraphView:
    """
    Links with a given label, optionally restricted to one entity.

    Args:
        graph: Source view
        label: Relationship label to keep
        entity_id: When set, only links touching this node are kept

    Returns:
        View with the matching links and the nodes they touch
    """
    ids = graph.node_ids()
    links: list[Link] = [
        link
        for link in graph.links
        if link.label == label
        and (entity_id is None or link.touches(entity_id))
        and link.source in ids
        and link.target in ids
    ]
    touched = {link.source for link in links} | {link.target for link in links}
    return GraphView(
        nodes=[node for node in graph.nodes if node.id in touched],
        links=links,
    )


def shortest_path(graph: GraphView, source_id: str, target_id: str) -> GraphView:
    """
    First-found shortest path between two nodes, ignoring direction.

    Breadth-first search visits each node's neighbors in the order their
    links appear in the view, which makes the chosen path deterministic
    when several shortest paths exist.

    Args:
        graph: Source view
        source_id: Start node id
        target_id: End node id

    Returns:
        View with the path's nodes in path order and, for each hop, the
        first link in view order joining the pair. When no path exists,
        only the endpoint nodes that exist are returned, with no links.
    """
    endpoints_only = GraphView(
        nodes=[
            node
            for node_id in dict.fromkeys((source_id, target_id))
            if (node := graph.get_node(node_id)) is not None
        ]
    )
    if not graph.has_node(source_id) or not graph.has_node(target_id):
        return endpoints_only

    paths = nx.single_source_shortest_path(_undirected(graph), source_id)
    path = paths.get(target_id)
    if path is None:
        logger.debug(f"No path between {source_id} and {target_id}")
        return endpoints_only

    links: list[Link] = []
    for a, b in zip(path, path[1:]):
        hop = next(
            link
            for link in graph.links
            if (link.source, link.target) in ((a, b), (b, a))
        )
        links.append(hop)

    nodes = [graph.get_node(node_id) for node_id in path]
    return GraphView(nodes=[node for node in nodes if node is not None], links=links)


def descendants(graph: GraphView, root_id: str) -> list[str]:
    """
    Ids of every node reachable from root along source-to-target links.

    Cycles are tolerated; each node is reported once and the root itself
    is never included.

    Returns:
        Descendant ids in depth-first discovery order
    """
    if not graph.has_node(root_id):
        return []
    order = nx.dfs_preorder_nodes(_directed(graph), root_id)
    return [node_id for node_id in order if node_id != root_id]


def collapse(graph: GraphView, root_id: str) -> GraphView:
    """
    Remove a node's descendants and every link touching them.

    The root node and the rest of the graph are kept.
    """
    removed = set(descendants(graph, root_id))
    if not removed:
        return graph
    logger.info(f"Collapsing {len(removed)} descendants of {root_id}")
    return GraphView(
        nodes=[node for node in graph.nodes if node.id not in removed],
        links=[
            link
            for link in graph.links
            if link.source not in removed and link.target not in removed
        ],
    )


def filter_by_types(graph: GraphView, types: Iterable[str]) -> GraphView:
    """
    Keep nodes of the selected types and the links among them.

    An empty selection keeps the graph unchanged.
    """
    selected = set(types)
    if not selected:
        return graph
    return induced_view(graph, (node.id for node in graph.nodes if node.type in selected))


def node_types(graph: GraphView) -> list[str]:
    """Distinct node types in first-seen order."""
    return list(dict.fromkeys(node.type for node in graph.nodes))
