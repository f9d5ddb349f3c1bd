"""
GraphQL API for socialgraph
"""

from .schema import create_graphql_router, execute_document, schema

__all__ = ["create_graphql_router", "execute_document", "schema"]
