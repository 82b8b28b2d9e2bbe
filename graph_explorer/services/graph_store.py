"""
Graph store access over the Neo4j driver.

Provides:
- Neo4jConnection: connection manager with URI fallback and a throttle on
  connection attempts
- GraphStore: the explorer's queries (initial overview, node expansion)
  returning normalized GraphViews
- to_graph_value: conversion of driver objects into tagged raw values
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import DriverError, Neo4jError
from neo4j.graph import Node as DriverNode
from neo4j.graph import Path as DriverPath
from neo4j.graph import Relationship as DriverRelationship

from graph_explorer.core.config import Settings, get_settings
from graph_explorer.graph.models import GraphView, Link
from graph_explorer.graph.normalizer import normalize_records
from graph_explorer.graph.records import (
    PathSegment,
    RawNode,
    RawPath,
    RawRelationship,
    ResultRecord,
)

logger = logging.getLogger(__name__)

STAR_LINK_LABEL = "CONNECTED_TO"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Queries
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

MOST_CONNECTED_QUERY = """
MATCH (n)-[r]-()
WITH n, count(r) AS rel_count
ORDER BY rel_count DESC
LIMIT 1
MATCH path = (n)-[r]-(m)
RETURN DISTINCT n, r, m, path
LIMIT $limit
"""

ANY_NODES_QUERY = "MATCH (n) RETURN n LIMIT $limit"

RELATIONSHIPS_AMONG_QUERY = """
MATCH (n)-[r]->(m)
WHERE elementId(n) IN $ids
RETURN n, r, m
"""

EXPAND_QUERY = """
MATCH path = (n)-[r]-(m)
WHERE elementId(n) = $node_id OR n.id = $node_id
RETURN DISTINCT n, r, m, path
LIMIT $limit
"""

EXPAND_FALLBACK_QUERY = """
MATCH (n)
WHERE elementId(n) = $node_id OR n.id = $node_id
WITH n
MATCH (n)-[r]-(m)
RETURN n, r, m
LIMIT $limit
"""


class GraphStoreError(Exception):
    """Raised when the graph store cannot be reached or a query fails."""


class ConnectionThrottledError(GraphStoreError):
    """Raised when a connection attempt falls inside the throttle window."""

    def __init__(self, retry_after: float) -> None:
        self.retry_after = retry_after
        super().__init__(
            f"Connection attempt throttled; retry in {retry_after:.1f}s"
        )


def _raw_node(node: DriverNode) -> RawNode:
    # Driver labels are an unordered set
    return RawNode(
        identity=node.element_id,
        labels=sorted(node.labels),
        properties=dict(node),
    )


def _raw_relationship(rel: DriverRelationship) -> RawRelationship:
    return RawRelationship(
        identity=rel.element_id,
        type=rel.type,
        start=rel.start_node.element_id if rel.start_node is not None else None,
        end=rel.end_node.element_id if rel.end_node is not None else None,
        properties=dict(rel),
    )


def to_graph_value(value: Any) -> Any:
    """
    Convert a Neo4j driver value into a tagged raw value.

    Nodes, relationships and paths become RawNode, RawRelationship and
    RawPath. Any other value is returned unchanged.
    """
    if isinstance(value, DriverNode):
        return _raw_node(value)
    if isinstance(value, DriverRelationship):
        return _raw_relationship(value)
    if isinstance(value, DriverPath):
        nodes = list(value.nodes)
        return RawPath(
            segments=[
                PathSegment(
                    start=_raw_node(start),
                    relationship=_raw_relationship(rel),
                    end=_raw_node(end),
                )
                for start, rel, end in zip(nodes, value.relationships, nodes[1:])
            ]
        )
    return value


DriverFactory = Callable[[str, tuple[str, str], float], AsyncDriver]


def _default_driver_factory(
    uri: str, auth: tuple[str, str], connection_timeout: float
) -> AsyncDriver:
    return AsyncGraphDatabase.driver(
        uri, auth=auth, connection_timeout=connection_timeout
    )


class Neo4jConnection:
    """
    Connection manager for the graph store.

    Tries each candidate URI in order and keeps the first driver that
    verifies connectivity. Connection attempts closer together than
    ``min_interval`` seconds fail fast with ConnectionThrottledError.

    Usage:
        connection = Neo4jConnection(["bolt://localhost:7687"], "neo4j", "secret")
        records = await connection.query("MATCH (n) RETURN n LIMIT $limit", limit=5)
        await connection.close()
    """

    def __init__(
        self,
        uris: Sequence[str],
        user: str,
        password: str,
        *,
        connection_timeout: float = 5.0,
        min_interval: float = 5.0,
        driver_factory: DriverFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not uris:
            raise ValueError("At least one graph store URI is required")
        self._uris = list(uris)
        self._auth = (user, password)
        self._connection_timeout = connection_timeout
        self._min_interval = min_interval
        self._driver_factory = driver_factory or _default_driver_factory
        self._clock = clock
        self._driver: AsyncDriver | None = None
        self._uri: str | None = None
        self._last_attempt: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Neo4jConnection:
        settings = settings or get_settings()
        return cls(
            settings.neo4j_uris,
            settings.neo4j_user,
            settings.neo4j_password,
            connection_timeout=settings.neo4j_connection_timeout,
            min_interval=settings.connect_min_interval,
        )

    @property
    def is_connected(self) -> bool:
        return self._driver is not None

    @property
    def uri(self) -> str | None:
        """URI of the active connection, if any."""
        return self._uri

    async def connect(self) -> AsyncDriver:
        """
        Return a connected driver, connecting first if needed.

        Returns:
            The active AsyncDriver

        Raises:
            ConnectionThrottledError: If the previous attempt was too recent
            GraphStoreError: If no candidate URI accepts the connection
        """
        if self._driver is not None:
            return self._driver

        now = self._clock()
        if self._last_attempt is not None:
            elapsed = now - self._last_attempt
            if elapsed < self._min_interval:
                retry_after = self._min_interval - elapsed
                logger.warning(
                    f"Graph store connection throttled ({retry_after:.1f}s remaining)"
                )
                raise ConnectionThrottledError(retry_after)
        self._last_attempt = now

        total = len(self._uris)
        for index, uri in enumerate(self._uris, start=1):
            logger.info(f"Trying graph store connection {index}/{total}: {uri}")
            driver: AsyncDriver | None = None
            try:
                driver = self._driver_factory(
                    uri, self._auth, self._connection_timeout
                )
                await driver.verify_connectivity()
            except (DriverError, Neo4jError, OSError, ValueError) as e:
                logger.warning(f"Graph store connection {index}/{total} failed: {e}")
                if driver is not None:
                    await driver.close()
                continue

            self._driver = driver
            self._uri = uri
            logger.info(f"Connected to graph store at {uri}")
            return driver

        raise GraphStoreError(
            f"Failed to connect to graph store with all {total} URIs: "
            f"{', '.join(self._uris)}"
        )

    async def query(self, cypher: str, **params: Any) -> list[ResultRecord]:
        """
        Run a read query and return its records with decoded graph values.

        Args:
            cypher: Cypher query text
            **params: Query parameters

        Returns:
            One dict per record, mapping field names to values

        Raises:
            GraphStoreError: If connecting or running the query fails
        """
        driver = await self.connect()
        try:
            async with driver.session() as session:
                result = await session.run(cypher, params)
                return [
                    {key: to_graph_value(value) for key, value in record.items()}
                    async for record in result
                ]
        except (DriverError, Neo4jError) as e:
            logger.error(f"Graph store query failed: {e}")
            raise GraphStoreError(f"Query failed: {e}") from e

    async def close(self) -> None:
        """Close the driver if open."""
        if self._driver is not None:
            await self._driver.close()
            logger.info("Graph store connection closed")
        self._driver = None
        self._uri = None


class GraphStore:
    """
    Explorer queries against the graph store.

    Every method returns a normalized GraphView. Connection problems are
    raised as GraphStoreError for the caller to turn into a fallback.
    """

    def __init__(
        self, connection: Neo4jConnection, settings: Settings | None = None
    ) -> None:
        self.connection = connection
        self._settings = settings or get_settings()

    async def fetch_overview(self) -> GraphView:
        """
        Fetch an initial graph to explore.

        Tries, in order:
            1. The one-hop neighborhood of the most connected node
            2. Any nodes and the relationships leaving them
            3. Those nodes joined to the first one in a star
        An empty view means the store holds no nodes.
        """
        records = await self.connection.query(
            MOST_CONNECTED_QUERY, limit=self._settings.expand_limit
        )
        if records and records[0].get("r") is not None:
            logger.info(f"Overview from most connected node: {len(records)} records")
            return normalize_records(records)

        logger.info("No relationships found, looking for any nodes")
        node_records = await self.connection.query(
            ANY_NODES_QUERY, limit=self._settings.overview_node_limit
        )
        nodes_view = normalize_records(node_records)
        if not nodes_view.nodes:
            return GraphView.empty()

        try:
            rel_records = await self.connection.query(
                RELATIONSHIPS_AMONG_QUERY, ids=[node.id for node in nodes_view.nodes]
            )
        except GraphStoreError as e:
            logger.warning(f"Relationship lookup failed, using star layout: {e}")
            rel_records = []

        if rel_records:
            view = normalize_records(rel_records)
            if view.links:
                return view

        return self._star(nodes_view)

    def _star(self, view: GraphView) -> GraphView:
        """Join nodes to the first node so an unconnected set stays visible."""
        nodes = view.nodes
        center = nodes[0]
        links = [
            Link(source=center.id, target=node.id, label=STAR_LINK_LABEL)
            for node in nodes[1 : self._settings.overview_star_limit]
        ]
        logger.info(f"Built star graph around {center.id} with {len(links)} links")
        return GraphView(nodes=list(nodes), links=links)

    async def expand_node(self, node_id: str) -> GraphView:
        """
        Fetch the one-hop neighborhood of a node.

        Args:
            node_id: Store element id or ``id`` property of the node

        Returns:
            GraphView fragment ready to merge into the current graph
        """
        limit = self._settings.expand_limit
        records = await self.connection.query(EXPAND_QUERY, node_id=node_id, limit=limit)
        if not records:
            logger.info(f"No connections found for node {node_id}, trying fallback query")
            records = await self.connection.query(
                EXPAND_FALLBACK_QUERY, node_id=node_id, limit=limit
            )

        fragment = normalize_records(records)
        logger.info(
            f"Expanded node {node_id}: {len(fragment.nodes)} nodes, "
            f"{len(fragment.links)} links"
        )
        return fragment
