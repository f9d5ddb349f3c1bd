"""
socialgraph
GraphQL API over a social network of users, profiles, posts and subscriptions
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
