"""
FastAPI application entry point.

Configures and creates the FastAPI application with:
- Service lifecycle management
- Exception handlers
- Router mounting
"""

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables first
load_dotenv()

# Configure logging (console handler filters benign driver noise)
from graph_explorer.core.logging import configure_logging  # noqa: E402

configure_logging()

# Import application components
from graph_explorer.api.errors import register_exception_handlers  # noqa: E402
from graph_explorer.api.routers import graph_router, health_router  # noqa: E402
from graph_explorer.services import services_lifespan  # noqa: E402

# Create FastAPI application with service lifecycle management
app = FastAPI(
    title="Graph Explorer",
    description="Interactive exploration of knowledge graphs stored in Neo4j",
    version="1.0.0",
    lifespan=services_lifespan,
)

# Register exception handlers
register_exception_handlers(app)

# Mount API routers
app.include_router(health_router)
app.include_router(graph_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("graph_explorer.main:app", host="127.0.0.1", port=8000, reload=True)
