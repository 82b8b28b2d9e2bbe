"""
Tagged raw values produced by graph-store queries.

Query results arrive as records: mappings of field name to value, where a
value is a node, a relationship, a path, or a plain scalar. This module
defines the raw shapes and a single classify() entry point so the
normalizer dispatches on an explicit tag rather than probing attributes.

Driver objects are converted into these models at the store boundary
(see graph_explorer.services.graph_store). JSON payloads carrying a
``kind`` tag decode through the same discriminated union.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter


def _coerce_identity(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# Store identities may be integers (legacy ids) or strings (element ids)
Identity = Annotated[str, BeforeValidator(_coerce_identity)]


class RawNode(BaseModel):
    """A node as returned by the store: identity, labels, properties."""

    kind: Literal["node"] = "node"
    identity: Identity
    labels: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)


class RawRelationship(BaseModel):
    """
    A relationship as returned by the store.

    ``start`` and ``end`` hold endpoint identities when the store reports
    them; they are optional because some payloads only carry the type.
    """

    kind: Literal["relationship"] = "relationship"
    identity: Identity
    type: str | None = None
    start: Identity | None = None
    end: Identity | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class PathSegment(BaseModel):
    """One hop of a path in traversal order."""

    start: RawNode
    relationship: RawRelationship
    end: RawNode


class RawPath(BaseModel):
    kind: Literal["path"] = "path"
    segments: list[PathSegment] = Field(default_factory=list)


GraphValue = Annotated[
    Union[RawNode, RawRelationship, RawPath], Field(discriminator="kind")
]
_graph_value_adapter: TypeAdapter[RawNode | RawRelationship | RawPath] = TypeAdapter(
    GraphValue
)

# A query result row: field name -> value
ResultRecord = dict[str, Any]


class ValueKind(str, Enum):
    """Classification of a single record field value."""

    NODE = "node"
    RELATIONSHIP = "relationship"
    PATH = "path"
    SCALAR = "scalar"
    UNKNOWN = "unknown"


_TAGS = {tag.value for tag in (ValueKind.NODE, ValueKind.RELATIONSHIP, ValueKind.PATH)}


def decode_value(value: Any) -> Any:
    """
    Decode a tagged JSON mapping into its raw model.

    Mappings whose ``kind`` is one of node/relationship/path are validated
    into the matching model; anything else is returned unchanged.

    Raises:
        pydantic.ValidationError: If a tagged mapping is malformed
    """
    if isinstance(value, dict) and value.get("kind") in _TAGS:
        return _graph_value_adapter.validate_python(value)
    return value


def classify(value: Any) -> ValueKind:
    """
    Classify a decoded record value.

    Args:
        value: A field value, already passed through decode_value()

    Returns:
        The ValueKind tag for the value
    """
    if isinstance(value, RawNode):
        return ValueKind.NODE
    if isinstance(value, RawRelationship):
        return ValueKind.RELATIONSHIP
    if isinstance(value, RawPath):
        return ValueKind.PATH
    if value is None or isinstance(value, (str, int, float, bool, list)):
        return ValueKind.SCALAR
    return ValueKind.UNKNOWN
