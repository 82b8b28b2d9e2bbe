"""
Local sample dataset.

A small media-compliance graph used when the graph store is unreachable
or empty, and as the starting graph of a new session. Its center node is
``content_guidelines``.
"""

from __future__ import annotations

from graph_explorer.graph.models import GraphView, Link, Node
from graph_explorer.graph.normalization import color_for_type

SAMPLE_CENTER_ID = "content_guidelines"

_NODES: list[dict] = [
    {
        "id": "content_guidelines",
        "label": "Content Guidelines",
        "type": "Standard",
        "description": "Guidelines for content broadcasting",
        "synonyms": ["Content Guidelines"],
        "properties": {"area": "Compliance Area"},
    },
    {
        "id": "usc_1464",
        "label": "18 U.S.C. § 1464",
        "type": "Regulation",
        "description": "Federal regulation on broadcasting standards",
        "synonyms": ["18 U.S.C. § 1464"],
        "properties": {"citation": "18 U.S.C. § 1464"},
    },
    {
        "id": "fcc_regulations",
        "label": "FCC regulations (47 CFR)",
        "type": "Regulation",
        "synonyms": ["FCC regulations (47 CFR)"],
        "properties": {"citation": "47 CFR"},
    },
    {
        "id": "ip",
        "label": "Intellectual Property",
        "type": "Concept",
        "synonyms": ["Intellectual Property"],
        "properties": {"description": "Compliance related to intellectual property"},
    },
    {"id": "media", "label": "Media", "type": "Entity"},
    {
        "id": "labeling",
        "label": "Labeling",
        "type": "Standard",
        "synonyms": ["Labeling"],
        "properties": {"description": "Labeling standards for media"},
    },
    {
        "id": "mpa",
        "label": "Motion Picture Association (MPA)",
        "type": "Organization",
        "description": "Film rating system",
    },
    {"id": "network_standards", "label": "Network Standards & Practices", "type": "Standard"},
    {"id": "parental_guidelines", "label": "TV Parental Guidelines", "type": "Standard"},
    {"id": "trade_compliance", "label": "Trade Compliance", "type": "Compliance"},
    {
        "id": "miller_v_california",
        "label": "Miller v. California",
        "type": "Legal Case",
        "description": "413 U.S. 15 (1973)",
    },
    {"id": "telecom_act_1996", "label": "Telecommunications Act of 1996", "type": "Legislation"},
    {
        "id": "riaa",
        "label": "Recording Industry Parental Advisory Label",
        "type": "Standard",
    },
]

_LINKS: list[tuple[str, str, str]] = [
    ("content_guidelines", "usc_1464", "HAS_REGULATION"),
    ("content_guidelines", "fcc_regulations", "HAS_REGULATION"),
    ("content_guidelines", "ip", "RELATED_TO"),
    ("content_guidelines", "labeling", "RELATED_TO"),
    ("content_guidelines", "network_standards", "HAS_STANDARD"),
    ("content_guidelines", "parental_guidelines", "HAS_STANDARD"),
    ("media", "content_guidelines", "HAS_COMPLIANCE"),
    ("mpa", "content_guidelines", "HAS_STANDARD"),
    ("content_guidelines", "trade_compliance", "IMPACTS"),
    ("miller_v_california", "content_guidelines", "HAS_REGULATION"),
    ("telecom_act_1996", "content_guidelines", "HAS_REGULATION"),
    ("riaa", "content_guidelines", "RELATED_TO"),
]


def sample_graph() -> GraphView:
    """Build a fresh copy of the sample dataset."""
    nodes = [
        Node(**entry, color=color_for_type(entry["type"])) for entry in _NODES
    ]
    links = [Link(source=s, target=t, label=label) for s, t, label in _LINKS]
    return GraphView(nodes=nodes, links=links)
