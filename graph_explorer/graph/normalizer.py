"""
Result normalizer: graph-store records to a canonical GraphView.

Each record is a mapping of field name to value. Values are decoded and
classified (see graph_explorer.graph.records), then:

- Nodes are added once per identity, first occurrence wins
- Relationships become links once their endpoints are resolved
- Paths contribute every segment's nodes and relationship
- Scalars and unknown values are ignored

Malformed records are skipped one at a time. If the pass as a whole
breaks, the result is an empty GraphView rather than an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from graph_explorer.graph.models import GraphView, Link, Node
from graph_explorer.graph.normalization import (
    DEFAULT_CATEGORICAL_LABELS,
    color_for_type,
    derive_node_label,
    derive_node_type,
    strip_separators,
)
from graph_explorer.graph.records import (
    PathSegment,
    RawNode,
    RawPath,
    RawRelationship,
    ValueKind,
    classify,
    decode_value,
)

logger = logging.getLogger(__name__)

# Record fields conventionally holding a relationship's endpoints
SOURCE_FIELD = "n"
TARGET_FIELD = "m"


def to_node(
    raw: RawNode, categorical_labels: Iterable[str] = DEFAULT_CATEGORICAL_LABELS
) -> Node:
    """
    Convert a raw store node into a canonical Node.

    The node id is the store identity. Type, label and color are derived
    from properties and labels.
    """
    node_type = derive_node_type(raw.properties, raw.labels, categorical_labels)
    description = raw.properties.get("description")
    synonyms = raw.properties.get("synonyms")

    return Node(
        id=raw.identity,
        label=derive_node_label(raw.identity, raw.properties, raw.labels),
        type=node_type,
        color=color_for_type(node_type),
        description=strip_separators(description) if isinstance(description, str) else None,
        synonyms=[str(s) for s in synonyms] if isinstance(synonyms, list) else [],
        properties=dict(raw.properties),
    )


class _Accumulator:
    """Ordered, de-duplicated collection of nodes and links for one pass."""

    def __init__(self, categorical_labels: Iterable[str]) -> None:
        self._categorical = frozenset(categorical_labels)
        self.nodes: dict[str, Node] = {}
        self.links: dict[str, Link] = {}

    def add_node(self, raw: RawNode) -> None:
        if raw.identity not in self.nodes:
            self.nodes[raw.identity] = to_node(raw, self._categorical)

    def add_link(self, source: str, target: str, label: str | None) -> None:
        link = Link(source=source, target=target, label=label)
        self.links.setdefault(link.key, link)


def _resolve_endpoints(
    rel: RawRelationship, record_nodes: dict[str, RawNode]
) -> tuple[str, str] | None:
    """
    Find a relationship's endpoint ids among the record's node fields.

    Prefers the relationship's own start/end identities, then the
    conventional ``n``/``m`` fields, then the first two node fields.
    """
    identities = {raw.identity for raw in record_nodes.values()}
    if rel.start and rel.end and rel.start in identities and rel.end in identities:
        return rel.start, rel.end

    if SOURCE_FIELD in record_nodes and TARGET_FIELD in record_nodes:
        return record_nodes[SOURCE_FIELD].identity, record_nodes[TARGET_FIELD].identity

    ordered = list(record_nodes.values())
    if len(ordered) >= 2:
        return ordered[0].identity, ordered[1].identity
    return None


def _segment_direction(segment: PathSegment) -> tuple[str, str]:
    """Stored direction of a path hop, falling back to traversal order."""
    rel = segment.relationship
    hop = {segment.start.identity, segment.end.identity}
    if rel.start and rel.end and {rel.start, rel.end} == hop:
        return rel.start, rel.end
    return segment.start.identity, segment.end.identity


def _normalize_record(record: Mapping[str, Any], acc: _Accumulator) -> None:
    decoded = {field: decode_value(value) for field, value in record.items()}

    record_nodes: dict[str, RawNode] = {}
    relationships: list[RawRelationship] = []
    paths: list[RawPath] = []

    for field, value in decoded.items():
        kind = classify(value)
        if kind is ValueKind.NODE:
            record_nodes[field] = value
        elif kind is ValueKind.RELATIONSHIP:
            relationships.append(value)
        elif kind is ValueKind.PATH:
            paths.append(value)
        elif kind is ValueKind.UNKNOWN:
            logger.debug(f"Ignoring field '{field}' of type {type(value).__name__}")

    for raw in record_nodes.values():
        acc.add_node(raw)

    for rel in relationships:
        endpoints = _resolve_endpoints(rel, record_nodes)
        if endpoints is None:
            logger.warning(
                f"Dropping relationship {rel.identity}: endpoints not present in record"
            )
            continue
        acc.add_link(endpoints[0], endpoints[1], rel.type)

    for path in paths:
        for segment in path.segments:
            acc.add_node(segment.start)
            acc.add_node(segment.end)
            source, target = _segment_direction(segment)
            acc.add_link(source, target, segment.relationship.type)


def normalize_records(
    records: Iterable[Mapping[str, Any]],
    categorical_labels: Iterable[str] = DEFAULT_CATEGORICAL_LABELS,
) -> GraphView:
    """
    Normalize a batch of query-result records into a GraphView.

    Args:
        records: Query results, each a mapping of field name to value
        categorical_labels: Store labels that take priority as node type

    Returns:
        GraphView with unique nodes and unique links (by edge key), where
        every link references a node in the view. Empty on total failure.
    """
    try:
        acc = _Accumulator(categorical_labels)
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                logger.warning(f"Skipping record {index}: not a mapping")
                continue
            try:
                _normalize_record(record, acc)
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed record {index}: {e}")

        links = []
        for link in acc.links.values():
            if link.source in acc.nodes and link.target in acc.nodes:
                links.append(link)
            else:
                logger.warning(
                    f"Dropping link {link.key}: endpoint missing from normalized nodes"
                )

        view = GraphView(nodes=list(acc.nodes.values()), links=links)
        logger.debug(
            f"Normalized records into {len(view.nodes)} nodes, {len(view.links)} links"
        )
        return view
    except Exception as e:
        logger.error(f"Failed to normalize query results: {e}", exc_info=True)
        return GraphView.empty()
