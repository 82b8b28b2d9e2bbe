"""
Pytest configuration and fixtures for backend tests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from graph_explorer.graph.models import GraphView, Link, Node
from graph_explorer.graph.records import PathSegment, RawNode, RawPath, RawRelationship

# Configure pytest-asyncio to use function-scoped event loops
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(scope="session", autouse=True)
def initialize_services():
    """Initialize services for all tests.

    Uses the services_lifespan context manager so the global container
    exists for any test that reaches it. Startup does not connect to the
    graph store, so no database is needed.
    """
    from graph_explorer.services import services_lifespan

    mock_app = MagicMock()
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    cm = services_lifespan(mock_app)
    loop.run_until_complete(cm.__aenter__())

    yield

    loop.run_until_complete(cm.__aexit__(None, None, None))
    loop.close()


# =============================================================================
# Graph Fixtures
# =============================================================================


def make_node(node_id: str, node_type: str = "Concept", **kwargs: Any) -> Node:
    """Build a node whose label defaults to its id."""
    return Node(id=node_id, label=kwargs.pop("label", node_id), type=node_type, **kwargs)


@pytest.fixture
def triangle_graph() -> GraphView:
    """Three nodes with links A-B, B-C, A-C."""
    return GraphView(
        nodes=[make_node("A"), make_node("B"), make_node("C")],
        links=[
            Link(source="A", target="B"),
            Link(source="B", target="C"),
            Link(source="A", target="C"),
        ],
    )


@pytest.fixture
def diamond_graph() -> GraphView:
    """Four nodes with links A-B, B-D, A-C, C-D (two shortest A-D paths)."""
    return GraphView(
        nodes=[make_node(n) for n in ("A", "B", "C", "D")],
        links=[
            Link(source="A", target="B"),
            Link(source="B", target="D"),
            Link(source="A", target="C"),
            Link(source="C", target="D"),
        ],
    )


@pytest.fixture
def tree_graph() -> GraphView:
    """Directed tree Root -> {C1, C2}, C1 -> G1, plus an unrelated node."""
    return GraphView(
        nodes=[
            make_node("Root", "Category"),
            make_node("C1"),
            make_node("C2"),
            make_node("G1"),
            make_node("Other"),
        ],
        links=[
            Link(source="Root", target="C1", label="HAS_CHILD"),
            Link(source="Root", target="C2", label="HAS_CHILD"),
            Link(source="C1", target="G1", label="HAS_CHILD"),
        ],
    )


# =============================================================================
# Fake Neo4j Driver
# =============================================================================


class FakeResult:
    """Async-iterable stand-in for a driver result."""

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self._records = records

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record


class FakeSession:
    def __init__(self, driver: FakeDriver) -> None:
        self._driver = driver

    async def __aenter__(self) -> FakeSession:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def run(self, query: str, parameters: dict[str, Any] | None = None) -> FakeResult:
        self._driver.queries.append((query, parameters or {}))
        if self._driver.query_error is not None:
            raise self._driver.query_error
        records = self._driver.responses.pop(0) if self._driver.responses else []
        return FakeResult(records)


class FakeDriver:
    """
    In-process driver returning canned responses in call order.

    Each call to session.run() pops the next response; once they run out
    every query returns no records.
    """

    def __init__(
        self,
        responses: list[list[dict[str, Any]]] | None = None,
        fail_connect: bool = False,
    ) -> None:
        self.responses = list(responses or [])
        self.fail_connect = fail_connect
        self.query_error: Exception | None = None
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def verify_connectivity(self) -> None:
        if self.fail_connect:
            raise ServiceUnavailable("Unable to connect")

    def session(self) -> FakeSession:
        return FakeSession(self)

    async def close(self) -> None:
        self.closed = True


def driver_factory_for(
    drivers: dict[str, FakeDriver],
) -> Callable[[str, tuple[str, str], float], FakeDriver]:
    """Driver factory handing out a prepared fake driver per URI."""

    def factory(uri: str, auth: tuple[str, str], timeout: float) -> FakeDriver:
        return drivers[uri]

    return factory


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Raw Store Records
# =============================================================================


def raw_node(identity: str, name: str, labels: tuple[str, ...] = ("Thing",)) -> RawNode:
    return RawNode(identity=identity, labels=list(labels), properties={"name": name})


def raw_hop(a: RawNode, b: RawNode, rel_id: str, rel_type: str = "LINKS") -> dict[str, Any]:
    """One record of an expansion query: n, r, m and the one-hop path."""
    rel = RawRelationship(identity=rel_id, type=rel_type, start=a.identity, end=b.identity)
    return {
        "n": a,
        "r": rel,
        "m": b,
        "path": RawPath(segments=[PathSegment(start=a, relationship=rel, end=b)]),
    }
