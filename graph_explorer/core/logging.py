"""
Custom logging filters and configuration.

Provides logging utilities for filtering benign driver errors and
configuring application-wide logging behavior.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DefunctConnectionFilter(logging.Filter):
    """Filter out benign connection-teardown errors from the Neo4j driver."""

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log records about defunct connections.

        Args:
            record: The log record to filter

        Returns:
            False if the record should be filtered out, True otherwise
        """
        # The driver reports closed sockets as errors while shutting down
        return "defunct connection" not in record.getMessage().lower()


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with the driver filter on the console handler."""
    handler = logging.StreamHandler()
    # Driver messages come from child loggers (neo4j.io, neo4j.pool)
    handler.addFilter(DefunctConnectionFilter())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler])
