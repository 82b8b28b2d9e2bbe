"""
Query intent resolver.

Maps a free-text question onto one of the view operations using keyword
rules and label matching. Pure: no network access, no state.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, Field

from graph_explorer.graph.models import DEFAULT_LINK_LABEL, GraphView, Node
from graph_explorer.graph.views import by_relationship, neighborhood, shortest_path

logger = logging.getLogger(__name__)

DEFAULT_CENTER_ID = "content_guidelines"

SHOW_ALL_PHRASES = ("all connections", "show all")
RELATED_PHRASES = ("related to",)
CONNECT_PHRASES = ("connect", "connection")


class QueryIntent(str, Enum):
    """Which view operation a query was resolved to."""

    SHOW_ALL = "show_all"
    RELATED = "related"
    PATH = "path"
    NEIGHBORHOOD = "neighborhood"
    DEFAULT = "default"


class QueryResolution(BaseModel):
    """Outcome of resolving a query against a graph."""

    intent: QueryIntent
    matched_ids: list[str] = Field(default_factory=list)
    view: GraphView


def _matches(node: Node, text: str) -> bool:
    if node.label and node.label.lower() in text:
        return True
    return any(synonym and synonym.lower() in text for synonym in node.synonyms)


def match_nodes(query: str, graph: GraphView) -> list[str]:
    """
    Ids of nodes whose label or a synonym occurs in the query.

    Matching is case-insensitive substring containment; each node is
    reported at most once, in graph order.
    """
    text = query.lower()
    return [node.id for node in graph.nodes if _matches(node, text)]


def _contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)


def resolve_intent(
    query: str, graph: GraphView, default_center_id: str = DEFAULT_CENTER_ID
) -> QueryResolution:
    """
    Resolve a query to a view of the graph.

    Rules, first match wins:
        1. "all connections" / "show all" with a match: neighborhood of
           the first match
        2. "related to" with a match: RELATED_TO links of the first match
        3. "connect" / "connection": shortest path between the first two
           matches, or the neighborhood of a single match
        4. Otherwise the neighborhood of the first match, or of the
           default center when nothing matched

    Args:
        query: Free-text question
        graph: Graph to resolve against
        default_center_id: Center used when no node matches

    Returns:
        QueryResolution with the chosen intent, matches and view
    """
    text = query.lower()
    matches = match_nodes(query, graph)
    logger.debug(f"Query matched {len(matches)} nodes: {matches[:5]}")

    if matches and _contains_any(text, SHOW_ALL_PHRASES):
        return QueryResolution(
            intent=QueryIntent.SHOW_ALL,
            matched_ids=matches,
            view=neighborhood(graph, matches[0], 1),
        )

    if matches and _contains_any(text, RELATED_PHRASES):
        return QueryResolution(
            intent=QueryIntent.RELATED,
            matched_ids=matches,
            view=by_relationship(graph, DEFAULT_LINK_LABEL, matches[0]),
        )

    if matches and _contains_any(text, CONNECT_PHRASES):
        if len(matches) >= 2:
            return QueryResolution(
                intent=QueryIntent.PATH,
                matched_ids=matches,
                view=shortest_path(graph, matches[0], matches[1]),
            )
        return QueryResolution(
            intent=QueryIntent.NEIGHBORHOOD,
            matched_ids=matches,
            view=neighborhood(graph, matches[0], 1),
        )

    if matches:
        return QueryResolution(
            intent=QueryIntent.NEIGHBORHOOD,
            matched_ids=matches,
            view=neighborhood(graph, matches[0], 1),
        )

    return QueryResolution(
        intent=QueryIntent.DEFAULT,
        view=neighborhood(graph, default_center_id, 1),
    )
