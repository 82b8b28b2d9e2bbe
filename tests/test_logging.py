"""Tests for logging configuration and the driver noise filter."""

from __future__ import annotations

import logging

from graph_explorer.core.logging import DefunctConnectionFilter


def make_record(message: str, name: str = "neo4j.io") -> logging.LogRecord:
    return logging.LogRecord(name, logging.ERROR, __file__, 1, message, None, None)


class TestDefunctConnectionFilter:
    def test_drops_defunct_connection_messages(self) -> None:
        record = make_record("Failed to read from defunct connection IPv4Address(...)")
        assert DefunctConnectionFilter().filter(record) is False

    def test_case_insensitive(self) -> None:
        assert DefunctConnectionFilter().filter(make_record("DEFUNCT CONNECTION")) is False

    def test_keeps_other_messages(self) -> None:
        record = make_record("Graph store query failed", name="graph_explorer")
        assert DefunctConnectionFilter().filter(record) is True

    def test_formatted_arguments_checked(self) -> None:
        record = logging.LogRecord(
            "neo4j.pool", logging.ERROR, __file__, 1, "%s connection lost", ("defunct",), None
        )
        assert DefunctConnectionFilter().filter(record) is False
