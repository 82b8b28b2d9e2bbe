"""
Graph merge engine.

Folds an incoming fragment (for example the result of expanding a node)
into the current GraphView. Merging is idempotent and commutative
with respect to identity keys, so overlapping expansions can be applied
in any order without producing duplicates.
"""

from __future__ import annotations

import logging

from graph_explorer.graph.models import GraphView, Link, Node

logger = logging.getLogger(__name__)


def merge_graphs(current: GraphView | None, incoming: GraphView) -> GraphView:
    """
    Merge an incoming fragment into the current graph.

    Rules:
        - Nodes are unioned by id; the first-seen node wins, so existing
          nodes are never overwritten by incoming ones.
        - An incoming link is rejected when either endpoint is missing
          from the merged node set.
        - An incoming link is rejected when its edge key is already present,
          in either direction, among current links or links accepted earlier
          in the same merge.

    Args:
        current: Graph currently on screen (None or empty for a fresh load)
        incoming: Fragment to fold in

    Returns:
        New GraphView: current entries first, then accepted incoming entries.
        With no current graph the result is the incoming fragment, cleaned
        by the same per-entry checks.
    """
    base = current if current is not None else GraphView.empty()

    nodes: list[Node] = list(base.nodes)
    seen_nodes = base.node_ids()
    added_nodes = 0
    for node in incoming.nodes:
        if node.id in seen_nodes:
            continue
        seen_nodes.add(node.id)
        nodes.append(node)
        added_nodes += 1

    links: list[Link] = list(base.links)
    seen_links = base.link_keys()
    added_links = 0
    for link in incoming.links:
        if link.source not in seen_nodes or link.target not in seen_nodes:
            logger.warning(
                f"Rejecting link {link.source} -> {link.target} ({link.label}): "
                f"endpoint not in graph"
            )
            continue
        if link.key in seen_links:
            continue
        seen_links.add(link.key)
        links.append(link)
        added_links += 1

    logger.debug(
        f"Merged fragment: +{added_nodes} nodes, +{added_links} links "
        f"(total {len(nodes)} nodes, {len(links)} links)"
    )
    return GraphView(nodes=nodes, links=links)


def sanitize_view(view: GraphView) -> GraphView:
    """
    Drop duplicate nodes, duplicate links and dangling links from a view.

    Equivalent to merging the view into an empty graph.
    """
    return merge_graphs(None, view)
