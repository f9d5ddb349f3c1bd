"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import validate_schema as gql_validate_schema
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionResult

from ..config import settings
from ..database.connection import get_async_session
from ..logging import get_logger
from ..store import SqlAlchemyStore, Store
from .context import build_context
from .depth import depth_limiter
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)


def build_schema(max_depth: int | None = None) -> strawberry.Schema:
    """Build the schema with the depth ceiling applied during validation."""
    if max_depth is None:
        max_depth = settings.max_query_depth
    return strawberry.Schema(
        query=Query,
        mutation=Mutation,
        extensions=[depth_limiter(max_depth)],
    )


schema = build_schema()


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    Runs graphql-core's schema validation and an introspection query so that
    unresolved lazy type references fail at boot rather than on first request.

    Raises:
        RuntimeError: If the schema is invalid or has unresolved types
    """
    from graphql import get_introspection_query, graphql_sync

    graphql_schema = schema._schema

    errors = gql_validate_schema(graphql_schema)
    if errors:
        messages = "; ".join(str(e) for e in errors)
        logger.error("GraphQL schema validation failed", error=messages)
        raise RuntimeError(f"GraphQL schema validation failed: {messages}")

    result = graphql_sync(graphql_schema, get_introspection_query())
    if result.errors:
        messages = "; ".join(str(e) for e in result.errors)
        logger.error("GraphQL introspection failed", error=messages)
        raise RuntimeError(f"GraphQL introspection failed: {messages}")

    logger.info("GraphQL schema validation successful")


async def execute_document(
    source: str,
    variables: dict[str, Any] | None = None,
    *,
    store: Store,
    operation_name: str | None = None,
) -> ExecutionResult:
    """Parse, validate and execute one document with a fresh request context.

    Syntax and validation errors (including the depth ceiling) come back in
    ``errors`` with no data and without running any resolver.
    """
    return await schema.execute(
        source,
        variable_values=variables,
        context_value=build_context(store),
        operation_name=operation_name,
    )


def create_graphql_router(store: Store | None = None) -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI.

    Each HTTP request gets its own context and therefore its own loaders.
    """
    if store is None:
        store = SqlAlchemyStore(get_async_session)

    async def get_context(request: Request) -> dict[str, Any]:
        return build_context(store, request=request)

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphiql=settings.graphiql,
        context_getter=get_context,
    )
