"""
Main FastAPI application for socialgraph
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..database import init_database
from ..database.connection import test_database_connection
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..store import Store

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting socialgraph API...", environment=settings.environment)
    init_database()

    ok, error = await test_database_connection()
    if ok:
        logger.info("Database connection verified")
    elif settings.environment.lower() in ("production", "prod"):
        logger.error("Database unreachable", error=error)
        raise RuntimeError(error)
    else:
        logger.warning("Database unreachable, requests will fail until it is up", error=error)

    yield

    logger.info("Shutting down socialgraph API...")


def create_app(store: Store | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store backing the GraphQL endpoint; defaults to the shared
            database connection pool
    """
    app = FastAPI(
        title="socialgraph API",
        description="GraphQL API over users, profiles, posts and subscriptions",
        version=__version__,
        lifespan=lifespan if store is None else None,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    from ..graphql.schema import create_graphql_router, validate_schema

    logger.info("Validating GraphQL schema...")
    validate_schema()

    app.include_router(create_graphql_router(store), prefix="")
    logger.info(
        "GraphQL endpoint initialized",
        endpoint="/graphql",
        max_query_depth=settings.max_query_depth,
    )

    return app


# Create the main application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "socialgraph.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
