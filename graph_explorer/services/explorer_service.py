"""
Explorer Service: orchestrates one interactive graph session.

Owns the current/original graph pair and routes user actions to the
graph store, the question-answering service and the pure graph
operations:
- Initial load from the store, with the sample dataset as fallback
- Node expansion (merge) and collapse
- Type filters and reset to the baseline
- Free-text questions resolved to a view
- Tree layout

State changes are whole-value replacements of an ExplorerState. Nothing
is locked; overlapping expansions are safe because merging is idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from graph_explorer.core.config import Settings, get_settings
from graph_explorer.graph.intent import QueryIntent, resolve_intent
from graph_explorer.graph.layout import compute_tree_layout, position_expansion
from graph_explorer.graph.models import GraphView
from graph_explorer.graph.sample_data import sample_graph
from graph_explorer.graph.state import ExplorerState
from graph_explorer.graph.views import (
    collapse,
    descendants,
    filter_by_types,
    neighborhood,
    node_types,
    shortest_path,
)
from graph_explorer.services.graph_store import GraphStore, GraphStoreError
from graph_explorer.services.qa_client import QAClient, QAServiceError

logger = logging.getLogger(__name__)


class GraphSource(str, Enum):
    """Where a loaded graph came from."""

    STORE = "store"
    SAMPLE = "sample"


class LoadOutcome(BaseModel):
    source: GraphSource
    view: GraphView
    detail: str | None = None


class ExpandOutcome(BaseModel):
    """Result of expanding a node into the current graph."""

    node_id: str
    added_nodes: list[str] = Field(default_factory=list)
    added_links: int = 0
    view: GraphView


class QueryOutcome(BaseModel):
    """
    Result of a free-text question.

    ``answer``, ``reasoning``, ``evidence`` and ``confidence`` come from the
    question-answering service when it responded; ``source`` tells which.
    The view is always resolved locally.
    """

    query: str
    source: str
    intent: QueryIntent
    matched_ids: list[str] = Field(default_factory=list)
    answer: str | None = None
    reasoning: str | None = None
    evidence: list[Any] = Field(default_factory=list)
    confidence: float | None = None
    error: str | None = None
    view: GraphView


class ExplorerService:
    """
    Session orchestration for the graph explorer.

    The store and QA client are optional so the explorer keeps working on
    the sample dataset without either backend.
    """

    def __init__(
        self,
        store: GraphStore | None = None,
        qa_client: QAClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._qa = qa_client
        self._settings = settings or get_settings()
        self._state = ExplorerState().loaded(sample_graph())

    @property
    def state(self) -> ExplorerState:
        return self._state

    @property
    def current(self) -> GraphView:
        return self._state.current

    @property
    def store_connected(self) -> bool:
        return self._store is not None and self._store.connection.is_connected

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Loading
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def load_overview(self) -> LoadOutcome:
        """
        Load the initial graph from the store.

        Connection failures, throttling and empty results all fall back to
        the sample dataset; the outcome reports which source was used.
        """
        outcome: LoadOutcome
        if self._store is None:
            outcome = LoadOutcome(
                source=GraphSource.SAMPLE,
                view=sample_graph(),
                detail="No graph store configured",
            )
        else:
            try:
                view = await self._store.fetch_overview()
            except GraphStoreError as e:
                logger.warning(f"Graph store unavailable, using sample data: {e}")
                outcome = LoadOutcome(
                    source=GraphSource.SAMPLE, view=sample_graph(), detail=str(e)
                )
            else:
                if view.nodes:
                    outcome = LoadOutcome(source=GraphSource.STORE, view=view)
                else:
                    logger.info("Graph store returned no data, using sample data")
                    outcome = LoadOutcome(
                        source=GraphSource.SAMPLE,
                        view=sample_graph(),
                        detail="Graph store returned no data",
                    )

        self._state = self._state.loaded(outcome.view)
        logger.info(
            f"Loaded graph from {outcome.source.value}: "
            f"{len(self.current.nodes)} nodes, {len(self.current.links)} links"
        )
        return outcome.model_copy(update={"view": self.current})

    def load_sample(self) -> GraphView:
        self._state = self._state.loaded(sample_graph())
        return self.current

    def clear(self) -> GraphView:
        self._state = self._state.cleared()
        return self.current

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Expand / collapse / merge
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def expand(self, node_id: str) -> ExpandOutcome:
        """
        Fetch a node's neighbors from the store and merge them in.

        Args:
            node_id: Id of a node in the current graph

        Raises:
            LookupError: If the node is not in the current graph
            GraphStoreError: If the store cannot be queried
        """
        if not self.current.has_node(node_id):
            raise LookupError(f"Node not found: {node_id}")
        if self._store is None:
            raise GraphStoreError("No graph store configured")

        fragment = await self._store.expand_node(node_id)

        # Another expansion may have landed during the await
        before = self._state
        after = before.merged(fragment)
        known = before.current.node_ids()
        added = [node.id for node in after.current.nodes if node.id not in known]
        positions = position_expansion(node_id, added, after.positions)
        self._state = after.with_positions(positions)

        added_links = len(after.current.links) - len(before.current.links)
        logger.info(
            f"Expanded {node_id}: +{len(added)} nodes, +{added_links} links"
        )
        return ExpandOutcome(
            node_id=node_id,
            added_nodes=added,
            added_links=added_links,
            view=self.current,
        )

    def merge_fragment(self, fragment: GraphView) -> GraphView:
        """Merge a client-supplied fragment into the current graph."""
        self._state = self._state.merged(fragment)
        return self.current

    def collapse(self, node_id: str) -> GraphView:
        """
        Hide every descendant of a node.

        Raises:
            LookupError: If the node is not in the current graph
        """
        if not self.current.has_node(node_id):
            raise LookupError(f"Node not found: {node_id}")
        self._state = self._state.with_view(collapse(self.current, node_id))
        return self.current

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Filters and views
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def filter_by_types(self, types: Iterable[str]) -> GraphView:
        """Show only the selected node types, starting from the baseline."""
        view = filter_by_types(self._state.original, types)
        self._state = self._state.with_view(view)
        return self.current

    def node_types(self) -> list[str]:
        return node_types(self._state.original)

    def reset(self) -> GraphView:
        self._state = self._state.reset()
        return self.current

    def neighborhood(self, node_id: str, radius: int = 1) -> GraphView:
        return neighborhood(self.current, node_id, radius)

    def shortest_path(self, source_id: str, target_id: str) -> GraphView:
        return shortest_path(self.current, source_id, target_id)

    def descendants(self, node_id: str) -> list[str]:
        return descendants(self.current, node_id)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Questions
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def ask(self, query: str) -> QueryOutcome:
        """
        Answer a free-text question.

        The question-answering service is asked first when configured; any
        QAServiceError is logged and the question is answered locally.
        Either way the displayed view comes from the local intent
        resolver, run over the baseline graph (or the sample dataset when
        the session is empty).

        Raises:
            ValueError: If the query is empty
        """
        question = query.strip()
        if not question:
            raise ValueError("Query must not be empty")

        answer = None
        error: str | None = None
        if self._qa is not None:
            try:
                answer = await self._qa.ask(question)
            except QAServiceError as e:
                logger.warning(f"QA service failed, answering locally: {e}")
                error = str(e)

        graph = self._state.original if self._state.original.nodes else sample_graph()
        resolution = resolve_intent(
            question, graph, default_center_id=self._settings.default_center_id
        )
        self._state = self._state.with_view(resolution.view).with_query(question)

        return QueryOutcome(
            query=question,
            source="service" if answer is not None else "local",
            intent=resolution.intent,
            matched_ids=resolution.matched_ids,
            answer=answer.answer if answer else None,
            reasoning=answer.reasoning if answer else None,
            evidence=answer.evidence if answer else [],
            confidence=answer.confidence if answer else None,
            error=error,
            view=self.current,
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Layout
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def apply_layout(
        self, width: float | None = None, height: float | None = None
    ) -> ExplorerState:
        """Compute tree-layout positions for the current graph."""
        settings = self._settings
        positions = compute_tree_layout(
            self.current,
            width if width is not None else settings.canvas_width,
            height if height is not None else settings.canvas_height,
            self._state.positions,
            root_type=settings.root_node_type,
            tier_offset=settings.layout_tier_offset,
            child_spacing=settings.layout_child_spacing,
            max_row_spacing=settings.layout_max_row_spacing,
        )
        # Nodes hidden by a filter or collapse keep their last coordinates
        self._state = self._state.with_positions({**self._state.positions, **positions})
        return self._state
