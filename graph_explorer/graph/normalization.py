"""
Display-text normalization for graph entities.

Derives the human-facing parts of a node from raw store data:
- Display labels (property lookup, id humanization, synthesized fallbacks)
- Semantic types (type property, categorical label, first label)
- Deterministic type-to-color palette

All label text passes through strip_separators() so the key separator
never appears inside a display label. Relationship labels are cleaned by
the Link model itself.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from graph_explorer.graph.models import KEY_SEPARATOR

UNKNOWN_TYPE = "Unknown"
CATEGORY_TYPE = "Category"
DEFAULT_CATEGORICAL_LABELS = frozenset({CATEGORY_TYPE})

# Properties checked in order for an explicit display label
LABEL_PROPERTIES = ("name", "title", "label")

ID_FRAGMENT_LENGTH = 3

TYPE_COLORS: dict[str, str] = {
    "Regulation": "#2980b9",
    "Standard": "#3498db",
    "Organization": "#e67e22",
    "Concept": "#3498db",
    "Entity": "#3498db",
    "Compliance": "#16a085",
    "Legal Case": "#8e44ad",
    "Legislation": "#c0392b",
    CATEGORY_TYPE: "#2c3e50",
}
DEFAULT_COLOR = "#95a5a6"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_WHITESPACE = re.compile(r"\s+")
_SEPARATOR_RUN = re.compile(re.escape(KEY_SEPARATOR[0]) + r"{2,}")
_NUMERIC = re.compile(r"^\d+$")


def strip_separators(text: str) -> str:
    """
    Remove key-separator sequences from display text.

    Runs of the separator character are replaced by a space and
    whitespace is collapsed. A single colon (as in "Note: text") is kept.
    """
    text = _SEPARATOR_RUN.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def humanize_identifier(identifier: str) -> str:
    """
    Turn a machine identifier into readable text.

    Underscores become spaces and camelCase boundaries are split:
    ``customer_id`` -> ``customer id``, ``dataSource`` -> ``data Source``.
    """
    text = identifier.replace("_", " ")
    text = _CAMEL_BOUNDARY.sub(" ", text)
    return strip_separators(text)


def id_fragment(identity: str) -> str:
    """Short prefix of an internal identity used in synthesized labels."""
    return identity[:ID_FRAGMENT_LENGTH]


def is_numeric_id(value: str) -> bool:
    return bool(_NUMERIC.match(value))


def derive_node_type(
    properties: Mapping[str, Any],
    labels: Iterable[str],
    categorical_labels: Iterable[str] = DEFAULT_CATEGORICAL_LABELS,
) -> str:
    """
    Pick the semantic type of a node.

    Priority: explicit ``type`` property, then a categorical store label,
    then the first store label, then "Unknown".
    """
    explicit = properties.get("type")
    if isinstance(explicit, str) and explicit.strip():
        return strip_separators(explicit)

    label_list = [label for label in labels if label]
    categorical = set(categorical_labels)
    for label in label_list:
        if label in categorical:
            return label

    if label_list:
        return label_list[0]
    return UNKNOWN_TYPE


def derive_node_label(
    identity: str, properties: Mapping[str, Any], labels: Iterable[str]
) -> str:
    """
    Pick the display label of a node.

    Args:
        identity: Internal store identity of the node
        properties: Node properties
        labels: Store labels, in store order

    Returns:
        A non-empty display label
    """
    for name in LABEL_PROPERTIES:
        value = properties.get(name)
        if value is None or isinstance(value, (dict, list)):
            continue
        text = strip_separators(str(value))
        if text:
            return text

    raw_id = properties.get("id")
    if isinstance(raw_id, str) and raw_id.strip() and not is_numeric_id(raw_id.strip()):
        text = humanize_identifier(raw_id)
        if text:
            return text

    fragment = id_fragment(identity)
    label_list = [label for label in labels if label]
    if label_list:
        type_label = humanize_identifier(label_list[0])
        if type_label:
            return f"{type_label} {fragment}".strip()
    return f"Node {fragment}".strip()


def color_for_type(node_type: str | None) -> str:
    """Deterministic palette lookup with a neutral default."""
    if not node_type:
        return DEFAULT_COLOR
    return TYPE_COLORS.get(node_type, DEFAULT_COLOR)
