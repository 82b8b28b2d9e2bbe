"""
Canonical graph model for the explorer.

Defines the value types every other graph module works with:
- Node: a graph entity with a stable id, display label, type and properties
- Link: a labeled connection between two node ids
- GraphView: an immutable snapshot of nodes and links
- Position: layout coordinates kept apart from the semantic Node record

Identity rules live here too. A node is identified by its id alone; a
link is identified by its label plus its unordered endpoint pair, so the
same relationship stored in either direction dedups to one key.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_LINK_LABEL = "RELATED_TO"
KEY_SEPARATOR = "::"

_COLONS = re.compile(r":+")
_WHITESPACE = re.compile(r"\s+")


def node_key(node_id: str) -> str:
    """Identity key for a node (its id)."""
    return node_id


def edge_key(source: str, target: str, label: str) -> str:
    """
    Direction-agnostic identity key for a link.

    Args:
        source: Source node id
        target: Target node id
        label: Relationship label

    Returns:
        ``label::min(source, target)::max(source, target)``
    """
    low, high = sorted((source, target))
    return KEY_SEPARATOR.join((label, low, high))


def sanitize_link_label(label: str | None) -> str:
    """Relationship label safe for use inside an edge key."""
    if not label:
        return DEFAULT_LINK_LABEL
    cleaned = _WHITESPACE.sub(" ", _COLONS.sub("_", label)).strip().strip("_")
    return cleaned or DEFAULT_LINK_LABEL


def _reject_separator(node_id: str) -> str:
    if KEY_SEPARATOR in node_id:
        raise ValueError(f"node id must not contain {KEY_SEPARATOR!r}")
    return node_id


def endpoint_id(value: Any) -> str | None:
    """
    Reduce a link endpoint to a bare node id.

    Endpoints may arrive as plain ids, as embedded Node objects, or as
    node-shaped mappings carrying an ``id`` key.

    Returns:
        The endpoint id, or None if no id can be found
    """
    if isinstance(value, Node):
        return value.id
    if isinstance(value, dict):
        value = value.get("id")
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value)
        return text or None
    return None


class Node(BaseModel):
    """
    A graph entity.

    Attributes:
        id: Opaque identifier, unique within a GraphView
        label: Display label (never empty after normalization)
        type: Semantic type used for coloring and layout roots
        color: Display color derived from the type
        description: Optional free-text description
        synonyms: Alternative names matched by the query resolver
        properties: Arbitrary source properties
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str
    type: str = "Unknown"
    color: str | None = None
    description: str | None = None
    synonyms: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Store identifiers are often integers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        return _reject_separator(value)

    @property
    def key(self) -> str:
        return node_key(self.id)

    @property
    def is_category(self) -> bool:
        """True when the node is flagged as a category through its properties."""
        return self.properties.get("category") is True


class Link(BaseModel):
    """
    A labeled connection between two nodes.

    Direction is recorded (source to target) but ignored for identity;
    layout and collapse read it as parent to child.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    label: str = DEFAULT_LINK_LABEL

    @field_validator("source", "target", mode="before")
    @classmethod
    def _collapse_endpoint(cls, value: Any) -> Any:
        resolved = endpoint_id(value)
        if resolved is None:
            raise ValueError("link endpoint has no node id")
        return _reject_separator(resolved)

    @field_validator("label", mode="before")
    @classmethod
    def _sanitize_label(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return sanitize_link_label(value)
        return value

    @property
    def key(self) -> str:
        return edge_key(self.source, self.target, self.label)

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source, self.target)


class GraphView(BaseModel):
    """
    Immutable snapshot of a graph: ordered nodes and links.

    Views are never edited in place. Every operation returns a new
    GraphView, so a view handed to a caller stays valid.
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[Node] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> GraphView:
        return cls()

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> GraphView:
        """
        Build a view from loosely-shaped JSON, skipping bad entries.

        Nodes without a usable id and links whose endpoints cannot be
        resolved (including ids containing the key separator) are skipped
        individually with a warning instead of failing the whole payload.

        Args:
            data: Mapping with optional ``nodes`` and ``links`` lists

        Returns:
            GraphView with every well-formed entry, in input order
        """
        nodes: list[Node] = []
        for raw in data.get("nodes") or []:
            try:
                if isinstance(raw, dict) and not raw.get("label"):
                    raw = {**raw, "label": str(raw.get("id", ""))}
                nodes.append(Node.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed node entry: {e.error_count()} errors")

        links: list[Link] = []
        for raw in data.get("links") or []:
            try:
                links.append(Link.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed link entry: {e.error_count()} errors")

        return cls(nodes=nodes, links=links)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.links

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def link_keys(self) -> set[str]:
        return {link.key for link in self.links}

    def dangling_links(self) -> list[Link]:
        """Links whose source or target is missing from the node list."""
        ids = self.node_ids()
        return [
            link
            for link in self.links
            if link.source not in ids or link.target not in ids
        ]


class Position(BaseModel):
    """
    Layout coordinates for one node.

    ``x``/``y`` are simulated positions; ``fx``/``fy`` are pinned
    positions that a renderer must honor.
    """

    model_config = ConfigDict(frozen=True)

    x: float | None = None
    y: float | None = None
    fx: float | None = None
    fy: float | None = None

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


# Layout output: node id -> coordinates
LayoutMap = dict[str, Position]
