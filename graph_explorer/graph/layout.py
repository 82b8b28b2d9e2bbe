"""
Hierarchical tree layout.

Computes pinned coordinates for a GraphView without touching the nodes
themselves: the result is a LayoutMap (node id -> Position) that the
renderer applies on top of its own simulation.

Root nodes (type "Category", or properties.category == True) are placed
on a grid; each root's subtree hangs below it, one tier per level, with
children centered under their parent in source-to-target link order.
"""

from __future__ import annotations

import logging
import math

from graph_explorer.graph.models import GraphView, LayoutMap, Node, Position
from graph_explorer.graph.normalization import CATEGORY_TYPE

logger = logging.getLogger(__name__)

MAX_GRID_COLUMNS = 4
TIER_OFFSET = 200.0
CHILD_SPACING = 120.0

# Placement of freshly expanded children under their parent
EXPANSION_OFFSET = 300.0
EXPANSION_WIDE_SPACING = 150.0
EXPANSION_NARROW_SPACING = 100.0
EXPANSION_WIDE_MAX_CHILDREN = 3


def is_root(node: Node, root_type: str = CATEGORY_TYPE) -> bool:
    return node.type == root_type or node.is_category


def grid_slots(
    count: int, width: float, height: float, max_row_spacing: float | None = None
) -> list[tuple[float, float]]:
    """
    Evenly spaced grid cells for ``count`` roots, row by row.

    Columns are min(4, ceil(sqrt(count))); one cell of margin is left on
    every side of the canvas.
    """
    if count <= 0:
        return []
    columns = min(MAX_GRID_COLUMNS, math.ceil(math.sqrt(count)))
    rows = math.ceil(count / columns)
    col_spacing = width / (columns + 1)
    row_spacing = height / (rows + 1)
    if max_row_spacing is not None:
        row_spacing = min(max_row_spacing, row_spacing)

    return [
        ((i % columns + 1) * col_spacing, (i // columns + 1) * row_spacing)
        for i in range(count)
    ]


def _children_by_parent(graph: GraphView) -> dict[str, list[str]]:
    ids = graph.node_ids()
    children: dict[str, list[str]] = {}
    for link in graph.links:
        if link.source not in ids or link.target not in ids:
            continue
        siblings = children.setdefault(link.source, [])
        if link.target not in siblings:
            siblings.append(link.target)
    return children


def compute_tree_layout(
    graph: GraphView,
    width: float,
    height: float,
    previous: LayoutMap | None = None,
    *,
    root_type: str = CATEGORY_TYPE,
    tier_offset: float = TIER_OFFSET,
    child_spacing: float = CHILD_SPACING,
    max_row_spacing: float | None = None,
) -> LayoutMap:
    """
    Compute pinned tree-layout coordinates.

    Roots are pinned to grid slots; descendants are pinned depth-first,
    ``tier_offset`` below their parent, spaced ``child_spacing`` apart and
    centered on the parent. A node is positioned once: the first parent
    to reach it wins, which also stops traversal around cycles.

    Nodes not reachable from any root keep their previous position. With
    no roots at all the previous positions are returned unchanged.

    Args:
        graph: View to lay out
        width: Canvas width
        height: Canvas height
        previous: Positions from an earlier layout or simulation
        root_type: Node type treated as a layout root
        tier_offset: Vertical distance between a parent and its children
        child_spacing: Horizontal distance between siblings
        max_row_spacing: Optional cap on the grid's row spacing

    Returns:
        New LayoutMap covering every node of the view that has or gains
        a position
    """
    prior: LayoutMap = dict(previous or {})
    roots = [node for node in graph.nodes if is_root(node, root_type)]
    if not roots:
        logger.debug("No root nodes found; keeping existing positions")
        return {
            node_id: position
            for node_id, position in prior.items()
            if graph.has_node(node_id)
        }

    children = _children_by_parent(graph)
    placed: dict[str, tuple[float, float]] = {}

    for root, slot in zip(roots, grid_slots(len(roots), width, height, max_row_spacing)):
        placed[root.id] = slot

    # Iterative depth-first walk; chains can be thousands of tiers deep
    stack = [root.id for root in reversed(roots)]
    while stack:
        parent_id = stack.pop()
        parent_x, parent_y = placed[parent_id]
        pending = [child for child in children.get(parent_id, []) if child not in placed]
        count = len(pending)
        for index, child_id in enumerate(pending):
            offset = (index - (count - 1) / 2) * child_spacing
            placed[child_id] = (parent_x + offset, parent_y + tier_offset)
        stack.extend(reversed(pending))

    layout: LayoutMap = {}
    for node in graph.nodes:
        old = prior.get(node.id)
        if node.id in placed:
            fx, fy = placed[node.id]
            layout[node.id] = Position(
                x=old.x if old else fx,
                y=old.y if old else fy,
                fx=fx,
                fy=fy,
            )
        elif old is not None:
            layout[node.id] = old

    logger.debug(f"Tree layout placed {len(placed)} of {len(graph.nodes)} nodes")
    return layout


def position_expansion(
    parent_id: str, child_ids: list[str], positions: LayoutMap
) -> LayoutMap:
    """
    Pin newly expanded children in a row below their parent.

    Children are spaced 150 apart for up to three, 100 apart otherwise,
    and placed 300 below the parent. Without a known parent position the
    map is returned unchanged.

    Returns:
        New LayoutMap including the children's positions
    """
    parent = positions.get(parent_id)
    if parent is None or not child_ids:
        return dict(positions)

    anchor_x = parent.fx if parent.fx is not None else parent.x
    anchor_y = parent.fy if parent.fy is not None else parent.y
    if anchor_x is None or anchor_y is None:
        return dict(positions)

    spacing = (
        EXPANSION_WIDE_SPACING
        if len(child_ids) <= EXPANSION_WIDE_MAX_CHILDREN
        else EXPANSION_NARROW_SPACING
    )
    start_x = anchor_x - (spacing * (len(child_ids) - 1)) / 2

    updated = dict(positions)
    for index, child_id in enumerate(child_ids):
        x = start_x + index * spacing
        y = anchor_y + EXPANSION_OFFSET
        updated[child_id] = Position(x=x, y=y, fx=x, fy=y)
    return updated
