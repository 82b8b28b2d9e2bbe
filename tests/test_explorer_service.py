"""
Tests for ExplorerService session orchestration.

Uses a fake graph store driver and an httpx mock transport for the
question-answering service.

Covers:
- Initial sample session and load fallbacks
- Expansion merge and child placement
- Collapse, type filters and reset
- Questions answered by the service or locally
- Tree layout
"""

from __future__ import annotations

import httpx
import pytest
from conftest import FakeClock, FakeDriver, driver_factory_for, make_node, raw_hop, raw_node

from graph_explorer.core.config import Settings
from graph_explorer.graph.intent import QueryIntent
from graph_explorer.graph.models import GraphView, Link
from graph_explorer.graph.sample_data import SAMPLE_CENTER_ID, sample_graph
from graph_explorer.models.api import GraphSnapshot
from graph_explorer.services.explorer_service import ExplorerService, GraphSource
from graph_explorer.services.graph_store import GraphStore, GraphStoreError, Neo4jConnection
from graph_explorer.services.qa_client import QAClient

URI = "bolt://store.test:7687"


def make_service(
    driver: FakeDriver | None = None, qa_client: QAClient | None = None
) -> ExplorerService:
    settings = Settings()
    store = None
    if driver is not None:
        connection = Neo4jConnection(
            [URI],
            "neo4j",
            "secret",
            driver_factory=driver_factory_for({URI: driver}),
            clock=FakeClock(),
        )
        store = GraphStore(connection, settings)
    return ExplorerService(store, qa_client, settings)


def qa_returning(response: httpx.Response) -> QAClient:
    return QAClient(
        "http://qa.test/query", transport=httpx.MockTransport(lambda request: response)
    )


@pytest.fixture
def tree_driver() -> FakeDriver:
    """Store whose overview is a Category root with one child."""
    root = raw_node("r", "Root", labels=("Category",))
    child = raw_node("c1", "Child")
    return FakeDriver(responses=[[raw_hop(root, child, "rel-1", "HAS_CHILD")]])


class TestLoading:
    def test_new_session_shows_sample(self) -> None:
        service = make_service()
        assert service.current == sample_graph()
        assert service.state.original == service.current
        assert not service.store_connected

    @pytest.mark.asyncio
    async def test_load_from_store(self, tree_driver: FakeDriver) -> None:
        service = make_service(tree_driver)
        outcome = await service.load_overview()

        assert outcome.source is GraphSource.STORE
        assert [n.id for n in service.current.nodes] == ["r", "c1"]
        assert service.current.nodes[0].type == "Category"
        assert outcome.view == service.current
        assert service.store_connected

    @pytest.mark.asyncio
    async def test_unreachable_store_falls_back_to_sample(self) -> None:
        service = make_service(FakeDriver(fail_connect=True))
        outcome = await service.load_overview()

        assert outcome.source is GraphSource.SAMPLE
        assert "Failed to connect" in outcome.detail
        assert service.current == sample_graph()

    @pytest.mark.asyncio
    async def test_empty_store_falls_back_to_sample(self) -> None:
        service = make_service(FakeDriver())
        outcome = await service.load_overview()
        assert outcome.source is GraphSource.SAMPLE
        assert outcome.detail == "Graph store returned no data"

    @pytest.mark.asyncio
    async def test_no_store_configured(self) -> None:
        outcome = await make_service().load_overview()
        assert outcome.source is GraphSource.SAMPLE

    def test_clear_and_load_sample(self) -> None:
        service = make_service()
        assert service.clear().is_empty
        assert service.state.original.is_empty
        assert service.load_sample() == sample_graph()


class TestExpandAndCollapse:
    @pytest.mark.asyncio
    async def test_expand_merges_fragment(self) -> None:
        media = raw_node("media", "Media")
        broadcaster = raw_node("b1", "Broadcaster")
        driver = FakeDriver(responses=[[raw_hop(media, broadcaster, "rel-9", "REGULATES")]])
        service = make_service(driver)

        outcome = await service.expand("media")

        assert outcome.added_nodes == ["b1"]
        assert outcome.added_links == 1
        assert service.current.get_node("media").label == "Media"
        assert service.current.get_node("media").type == "Entity"
        assert service.state.original == service.current
        assert service.current.dangling_links() == []

    @pytest.mark.asyncio
    async def test_expand_twice_is_stable(self) -> None:
        media = raw_node("media", "Media")
        broadcaster = raw_node("b1", "Broadcaster")
        record = raw_hop(media, broadcaster, "rel-9", "REGULATES")
        service = make_service(FakeDriver(responses=[[record], [record]]))

        await service.expand("media")
        first = service.current
        outcome = await service.expand("media")

        assert outcome.added_nodes == []
        assert outcome.added_links == 0
        assert service.current == first

    @pytest.mark.asyncio
    async def test_expanded_children_placed_below_parent(
        self, tree_driver: FakeDriver
    ) -> None:
        grandchild = raw_node("g1", "Grandchild")
        tree_driver.responses.append(
            [raw_hop(raw_node("c1", "Child"), grandchild, "rel-2", "HAS_CHILD")]
        )
        service = make_service(tree_driver)
        await service.load_overview()
        service.apply_layout()

        await service.expand("c1")

        parent = service.state.positions["c1"]
        child = service.state.positions["g1"]
        assert (child.fx, child.fy) == (parent.fx, parent.fy + 300)

    @pytest.mark.asyncio
    async def test_expand_unknown_node(self) -> None:
        with pytest.raises(LookupError):
            await make_service(FakeDriver()).expand("nope")

    @pytest.mark.asyncio
    async def test_expand_without_store(self) -> None:
        with pytest.raises(GraphStoreError):
            await make_service().expand("media")

    def test_collapse_hides_descendants(self) -> None:
        service = make_service()
        view = service.collapse(SAMPLE_CENTER_ID)

        # Nodes linking into the center are not its descendants
        assert view.node_ids() == {
            SAMPLE_CENTER_ID,
            "media",
            "mpa",
            "miller_v_california",
            "telecom_act_1996",
            "riaa",
        }
        assert view.dangling_links() == []
        assert service.state.original == sample_graph()

    def test_collapse_unknown_node(self) -> None:
        with pytest.raises(LookupError):
            make_service().collapse("nope")

    def test_merge_fragment(self) -> None:
        service = make_service()
        fragment = GraphView(
            nodes=[make_node("extra")],
            links=[Link(source="extra", target="media", label="MENTIONS")],
        )
        view = service.merge_fragment(fragment)
        assert view.has_node("extra")
        assert len(view.links) == len(sample_graph().links) + 1


class TestFiltersAndReset:
    def test_filter_then_reset(self) -> None:
        service = make_service()
        view = service.filter_by_types(["Regulation"])

        assert {n.id for n in view.nodes} == {"usc_1464", "fcc_regulations"}
        assert view.links == []
        assert service.reset() == sample_graph()

    @pytest.mark.asyncio
    async def test_reset_restores_hidden_positions(self, tree_driver: FakeDriver) -> None:
        service = make_service(tree_driver)
        await service.load_overview()
        service.apply_layout(800, 600)
        child_before = service.state.positions["c1"]

        view = service.filter_by_types(["Category"])
        service.apply_layout(800, 600)
        assert view.node_ids() == {"r"}
        assert GraphSnapshot.from_view(view, service.state).positions.keys() == {"r"}

        service.reset()
        assert service.state.positions["c1"] == child_before

    def test_filters_start_from_baseline(self) -> None:
        service = make_service()
        service.filter_by_types(["Regulation"])
        view = service.filter_by_types(["Standard"])
        assert SAMPLE_CENTER_ID in view.node_ids()

    def test_node_types(self) -> None:
        types = make_service().node_types()
        assert types[0] == "Standard"
        assert "Legal Case" in types

    def test_view_helpers_use_current_graph(self) -> None:
        service = make_service()
        assert service.descendants("usc_1464") == []
        assert service.descendants("media")[0] == SAMPLE_CENTER_ID
        assert service.neighborhood("media", 0).node_ids() == {"media"}
        path = service.shortest_path("media", "labeling")
        assert [n.id for n in path.nodes] == ["media", SAMPLE_CENTER_ID, "labeling"]


class TestAsk:
    @pytest.mark.asyncio
    async def test_local_resolution_without_service(self) -> None:
        service = make_service()
        outcome = await service.ask("show all connections to Media")

        assert outcome.source == "local"
        assert outcome.intent is QueryIntent.SHOW_ALL
        assert outcome.answer is None
        assert service.current == outcome.view
        assert service.state.last_query == "show all connections to Media"
        assert service.state.original == sample_graph()

    @pytest.mark.asyncio
    async def test_service_answer_with_local_view(self) -> None:
        qa = qa_returning(
            httpx.Response(200, json={"answer": "Labels warn listeners.", "confidence": 0.7})
        )
        outcome = await make_service(qa_client=qa).ask("what is Labeling?")

        assert outcome.source == "service"
        assert outcome.answer == "Labels warn listeners."
        assert outcome.confidence == pytest.approx(0.7)
        assert outcome.matched_ids == ["labeling"]
        assert "labeling" in outcome.view.node_ids()

    @pytest.mark.asyncio
    async def test_service_failure_answers_locally(self) -> None:
        qa = qa_returning(httpx.Response(503))
        outcome = await make_service(qa_client=qa).ask("what is Labeling?")

        assert outcome.source == "local"
        assert "503" in outcome.error
        assert outcome.intent is QueryIntent.NEIGHBORHOOD

    @pytest.mark.asyncio
    async def test_empty_session_uses_sample_for_resolution(self) -> None:
        service = make_service()
        service.clear()
        outcome = await service.ask("Media")
        assert outcome.matched_ids == ["media"]

    @pytest.mark.asyncio
    async def test_blank_query_rejected(self) -> None:
        with pytest.raises(ValueError):
            await make_service().ask("   ")


class TestLayout:
    @pytest.mark.asyncio
    async def test_apply_layout_pins_tree(self, tree_driver: FakeDriver) -> None:
        service = make_service(tree_driver)
        await service.load_overview()

        state = service.apply_layout(800, 600)

        assert (state.positions["r"].fx, state.positions["r"].fy) == (400.0, 300.0)
        assert (state.positions["c1"].fx, state.positions["c1"].fy) == (400.0, 500.0)

    def test_sample_graph_has_no_roots(self) -> None:
        service = make_service()
        assert service.apply_layout().positions == {}
