"""
Query depth limiting.

Users embed lists of users in both subscription directions, so a client can
ask for an arbitrarily deep tree. Strawberry's ``QueryDepthLimiter`` runs
with the other validation rules, before any resolver, and rejects documents
nested deeper than the configured ceiling.

Root fields sit at depth 0, so ``{ users { id } }`` has depth 1. Fragments
count as if inlined and introspection fields are ignored.
"""

from collections.abc import Callable

from graphql import DocumentNode, GraphQLError, GraphQLSchema, validate
from strawberry.extensions import QueryDepthLimiter

from ..logging import get_logger

logger = get_logger(__name__)


def log_excessive_depths(max_depth: int) -> Callable[[dict[str, int]], None]:
    def callback(depths: dict[str, int]) -> None:
        for operation, depth in depths.items():
            if depth > max_depth:
                logger.warning(
                    "Query depth limit exceeded", operation=operation, max_depth=max_depth
                )

    return callback


def depth_limiter(max_depth: int) -> Callable[[], QueryDepthLimiter]:
    """Extension factory enforcing ``max_depth`` on every operation."""
    if max_depth < 0:
        raise ValueError("max_depth must be zero or positive")

    def factory() -> QueryDepthLimiter:
        return QueryDepthLimiter(max_depth=max_depth, callback=log_excessive_depths(max_depth))

    return factory


def check_document_depth(
    schema: GraphQLSchema, document: DocumentNode, max_depth: int
) -> tuple[dict[str, int], list[GraphQLError]]:
    """Run only the depth rule over ``document``.

    Returns the depth of every operation keyed by name (``anonymous`` for an
    unnamed one) and the depth errors. Depths above ``max_depth`` are not
    exact; measurement stops once the ceiling is crossed.
    """
    depths: dict[str, int] = {}
    limiter = QueryDepthLimiter(max_depth=max_depth, callback=depths.update)
    errors = validate(schema, document, limiter.validation_rules)
    return depths, list(errors)
