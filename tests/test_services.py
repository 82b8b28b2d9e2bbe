"""
Service Layer Tests.

Tests for the graph_explorer/services/ module including:
- ServiceContainer lifecycle
- Global container access
"""

import pytest


class TestServiceContainer:
    """Tests for ServiceContainer class."""

    @pytest.mark.asyncio
    async def test_container_startup_initializes_services(self):
        """Test that startup initializes all services."""
        from graph_explorer.services import ExplorerService, ServiceContainer

        container = ServiceContainer()

        # Services should be None before startup
        with pytest.raises(RuntimeError, match="not initialized"):
            _ = container.explorer

        await container.startup()

        assert isinstance(container.explorer, ExplorerService)
        assert container.connection is not None
        # Startup never connects to the graph store
        assert not container.connection.is_connected

        await container.shutdown()

    @pytest.mark.asyncio
    async def test_container_shutdown_clears_references(self):
        """Test that shutdown releases every service."""
        from graph_explorer.services import ServiceContainer

        container = ServiceContainer()
        await container.startup()
        await container.shutdown()

        with pytest.raises(RuntimeError):
            _ = container.connection
        with pytest.raises(RuntimeError):
            _ = container.explorer

    def test_global_container_available_in_tests(self):
        """The session fixture installs the global container."""
        from graph_explorer.api.deps import get_explorer_service, get_graph_connection
        from graph_explorer.graph.sample_data import sample_graph

        assert get_explorer_service().current == sample_graph()
        assert get_graph_connection().uri is None
