"""
Tests for the graph merge engine.

Covers first-seen-wins node union, direction-agnostic link dedup,
dangling-link rejection and idempotency.
"""

from __future__ import annotations

from conftest import make_node

from graph_explorer.graph.merge import merge_graphs, sanitize_view
from graph_explorer.graph.models import GraphView, Link


def as_sets(view: GraphView) -> tuple[set[str], set[str]]:
    return {n.id for n in view.nodes}, {l.key for l in view.links}


class TestMergeGraphs:
    def test_empty_current_returns_incoming(self, triangle_graph: GraphView) -> None:
        assert merge_graphs(None, triangle_graph) == triangle_graph
        assert merge_graphs(GraphView.empty(), triangle_graph) == triangle_graph

    def test_new_nodes_and_links_appended(self, triangle_graph: GraphView) -> None:
        fragment = GraphView(
            nodes=[make_node("C"), make_node("D")],
            links=[Link(source="C", target="D")],
        )
        merged = merge_graphs(triangle_graph, fragment)
        assert [n.id for n in merged.nodes] == ["A", "B", "C", "D"]
        assert merged.links[-1] == Link(source="C", target="D")
        assert len(merged.links) == 4

    def test_existing_node_not_overwritten(self, triangle_graph: GraphView) -> None:
        fragment = GraphView(nodes=[make_node("A", label="Replacement")])
        merged = merge_graphs(triangle_graph, fragment)
        assert merged.get_node("A").label == "A"

    def test_reverse_direction_is_duplicate(self) -> None:
        current = GraphView(
            nodes=[make_node("A"), make_node("B")],
            links=[Link(source="B", target="A", label="X")],
        )
        fragment = GraphView(links=[Link(source="A", target="B", label="X")])
        merged = merge_graphs(current, fragment)
        assert len(merged.links) == 1

    def test_different_labels_both_kept(self) -> None:
        current = GraphView(
            nodes=[make_node("A"), make_node("B")],
            links=[Link(source="A", target="B", label="X")],
        )
        fragment = GraphView(links=[Link(source="A", target="B", label="Y")])
        assert len(merge_graphs(current, fragment).links) == 2

    def test_payload_labels_with_separators_stay_distinct(self) -> None:
        """Labels from client payloads are cleaned before keys are compared."""
        current = GraphView.from_payload(
            {
                "nodes": [{"id": "p"}, {"id": "q"}],
                "links": [{"source": "p", "target": "q", "label": "R::p"}],
            }
        )
        fragment = GraphView.from_payload(
            {
                "links": [
                    {"source": "q", "target": "p", "label": "R::p"},
                    {"source": "p", "target": "q", "label": "R"},
                ]
            }
        )
        merged = merge_graphs(current, fragment)
        assert [l.label for l in merged.links] == ["R_p", "R"]
        assert all(l.key.count("::") == 2 for l in merged.links)

    def test_dangling_link_rejected(self, triangle_graph: GraphView) -> None:
        fragment = GraphView(links=[Link(source="A", target="Nowhere")])
        merged = merge_graphs(triangle_graph, fragment)
        assert merged.dangling_links() == []
        assert len(merged.links) == 3

    def test_duplicates_within_fragment(self) -> None:
        fragment = GraphView(
            nodes=[make_node("A"), make_node("B"), make_node("A")],
            links=[
                Link(source="A", target="B"),
                Link(source="B", target="A"),
            ],
        )
        merged = merge_graphs(GraphView(nodes=[make_node("Z")]), fragment)
        assert [n.id for n in merged.nodes] == ["Z", "A", "B"]
        assert len(merged.links) == 1

    def test_link_to_node_added_in_same_merge(self) -> None:
        current = GraphView(nodes=[make_node("A")])
        fragment = GraphView(
            nodes=[make_node("B")], links=[Link(source="A", target="B")]
        )
        assert len(merge_graphs(current, fragment).links) == 1

    def test_idempotent(self, triangle_graph: GraphView) -> None:
        fragment = GraphView(
            nodes=[make_node("C"), make_node("D"), make_node("E")],
            links=[
                Link(source="D", target="C"),
                Link(source="D", target="E", label="NEXT"),
                Link(source="A", target="B"),
            ],
        )
        once = merge_graphs(triangle_graph, fragment)
        twice = merge_graphs(once, fragment)
        assert as_sets(once) == as_sets(twice)
        assert once == twice

    def test_merge_order_commutes_on_keys(self, triangle_graph: GraphView) -> None:
        f1 = GraphView(nodes=[make_node("D")], links=[Link(source="A", target="D")])
        f2 = GraphView(nodes=[make_node("E")], links=[Link(source="E", target="B")])
        left = merge_graphs(merge_graphs(triangle_graph, f1), f2)
        right = merge_graphs(merge_graphs(triangle_graph, f2), f1)
        assert as_sets(left) == as_sets(right)


class TestSanitizeView:
    def test_removes_dangling_and_duplicate_links(self) -> None:
        view = GraphView(
            nodes=[make_node("A"), make_node("B")],
            links=[
                Link(source="A", target="B"),
                Link(source="B", target="A"),
                Link(source="A", target="C"),
            ],
        )
        clean = sanitize_view(view)
        assert len(clean.links) == 1
        assert clean.dangling_links() == []
