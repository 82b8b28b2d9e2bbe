"""
Interactive session state.

The explorer keeps two graphs: the one currently displayed and the
"original" baseline that filters and resets go back to. State is a frozen
value; every transition returns a new ExplorerState.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from graph_explorer.graph.merge import merge_graphs, sanitize_view
from graph_explorer.graph.models import GraphView, LayoutMap


class ExplorerState(BaseModel):
    """
    Snapshot of one explorer session.

    Attributes:
        current: Graph on screen
        original: Baseline restored by reset and used by type filters
        positions: Layout coordinates keyed by node id
        last_query: Most recent free-text query, if any
    """

    model_config = ConfigDict(frozen=True)

    current: GraphView = Field(default_factory=GraphView)
    original: GraphView = Field(default_factory=GraphView)
    positions: LayoutMap = Field(default_factory=dict)
    last_query: str | None = None

    def loaded(self, view: GraphView) -> ExplorerState:
        """Replace both graphs with a freshly loaded view."""
        clean = sanitize_view(view)
        return ExplorerState(current=clean, original=clean, last_query=self.last_query)

    def merged(self, fragment: GraphView) -> ExplorerState:
        """Merge a fragment into the current graph; the result becomes the baseline."""
        result = merge_graphs(self.current, fragment)
        return self.model_copy(update={"current": result, "original": result})

    def with_view(self, view: GraphView) -> ExplorerState:
        """
        Show a derived view without touching the baseline.

        Positions of hidden nodes are kept so a later reset restores them;
        snapshots filter positions down to the visible nodes.
        """
        return self.model_copy(update={"current": view})

    def with_positions(self, positions: LayoutMap) -> ExplorerState:
        return self.model_copy(update={"positions": positions})

    def with_query(self, query: str) -> ExplorerState:
        return self.model_copy(update={"last_query": query})

    def reset(self) -> ExplorerState:
        """Show the baseline again."""
        return self.model_copy(update={"current": self.original})

    def cleared(self) -> ExplorerState:
        return ExplorerState()
