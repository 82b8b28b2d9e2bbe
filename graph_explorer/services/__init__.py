"""
Service Container and Lifecycle Management.

Provides a centralized container for all service instances with proper
startup/shutdown lifecycle management for FastAPI integration.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from graph_explorer.core.config import get_settings
from graph_explorer.services.explorer_service import ExplorerService
from graph_explorer.services.graph_store import (
    ConnectionThrottledError,
    GraphStore,
    GraphStoreError,
    Neo4jConnection,
)
from graph_explorer.services.qa_client import QAClient, QAServiceError

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Dependency injection container for all services.

    Startup only builds objects; the graph store is connected lazily on
    the first query, so the application starts without a database.
    """

    def __init__(self) -> None:
        """Initialize container with empty service references."""
        self._connection: Neo4jConnection | None = None
        self._qa: QAClient | None = None
        self._explorer: ExplorerService | None = None

    @property
    def connection(self) -> Neo4jConnection:
        """Get graph store connection manager."""
        if self._connection is None:
            raise RuntimeError(
                "ServiceContainer not initialized - call startup() first"
            )
        return self._connection

    @property
    def explorer(self) -> ExplorerService:
        """Get explorer service instance."""
        if self._explorer is None:
            raise RuntimeError(
                "ServiceContainer not initialized - call startup() first"
            )
        return self._explorer

    async def startup(self) -> None:
        """Initialize all services in dependency order."""
        logger.info("Starting service container")

        settings = get_settings()
        self._connection = Neo4jConnection.from_settings(settings)
        self._qa = QAClient.from_settings(settings)
        self._explorer = ExplorerService(
            store=GraphStore(self._connection, settings),
            qa_client=self._qa,
            settings=settings,
        )

        logger.info("Service container started")

    async def shutdown(self) -> None:
        """Close external connections and clear service references."""
        logger.info("Shutting down service container")

        if self._qa:
            await self._qa.close()
        if self._connection:
            await self._connection.close()

        self._connection = None
        self._qa = None
        self._explorer = None

        logger.info("Service container shutdown complete")


# Global service container instance
_services: ServiceContainer | None = None


def get_services() -> ServiceContainer:
    """
    Get the global service container instance.

    Returns:
        Global ServiceContainer singleton

    Raises:
        RuntimeError: If container hasn't been initialized
    """
    if _services is None:
        raise RuntimeError(
            "Services not initialized - ensure services_lifespan() is used"
        )
    return _services


@asynccontextmanager
async def services_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    FastAPI lifespan context manager for service initialization.

    Args:
        app: FastAPI application instance

    Yields:
        None (context manager pattern)
    """
    global _services

    _services = ServiceContainer()
    await _services.startup()
    logger.info("FastAPI services initialized")

    try:
        yield
    finally:
        if _services:
            await _services.shutdown()
        _services = None
        logger.info("FastAPI services cleaned up")


__all__ = [
    "ServiceContainer",
    "get_services",
    "services_lifespan",
    "ConnectionThrottledError",
    "ExplorerService",
    "GraphStore",
    "GraphStoreError",
    "Neo4jConnection",
    "QAClient",
    "QAServiceError",
]
