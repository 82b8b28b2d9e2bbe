"""
Graph module for normalizing, merging and viewing explorer graphs.

This module provides the canonical graph model, the query-result
normalizer, the merge engine, subgraph views, tree layout and the
query intent resolver.
"""

from graph_explorer.graph.intent import QueryIntent, QueryResolution, resolve_intent
from graph_explorer.graph.layout import compute_tree_layout, position_expansion
from graph_explorer.graph.merge import merge_graphs, sanitize_view
from graph_explorer.graph.models import (
    GraphView,
    LayoutMap,
    Link,
    Node,
    Position,
    edge_key,
    node_key,
)
from graph_explorer.graph.normalizer import normalize_records
from graph_explorer.graph.records import (
    PathSegment,
    RawNode,
    RawPath,
    RawRelationship,
    ValueKind,
    classify,
)
from graph_explorer.graph.sample_data import SAMPLE_CENTER_ID, sample_graph
from graph_explorer.graph.state import ExplorerState
from graph_explorer.graph.views import (
    by_relationship,
    collapse,
    descendants,
    filter_by_types,
    neighborhood,
    node_types,
    shortest_path,
)

__all__ = [
    # Models
    "Node",
    "Link",
    "GraphView",
    "Position",
    "LayoutMap",
    "node_key",
    "edge_key",
    # Raw records
    "RawNode",
    "RawRelationship",
    "RawPath",
    "PathSegment",
    "ValueKind",
    "classify",
    "normalize_records",
    # Merge
    "merge_graphs",
    "sanitize_view",
    # Views
    "neighborhood",
    "by_relationship",
    "shortest_path",
    "descendants",
    "collapse",
    "filter_by_types",
    "node_types",
    # Layout
    "compute_tree_layout",
    "position_expansion",
    # Query resolution
    "QueryIntent",
    "QueryResolution",
    "resolve_intent",
    # Session
    "ExplorerState",
    "SAMPLE_CENTER_ID",
    "sample_graph",
]
