"""
Per-request GraphQL context
"""

from typing import Any

import strawberry

from ..store import Store
from .loaders import Loaders


def build_context(store: Store, **extra: Any) -> dict[str, Any]:
    """Create the context for one request.

    The loader registry is built here and nowhere else, so its caches live
    exactly as long as the request that owns this context.
    """
    return {"store": store, "loaders": Loaders(store), **extra}


def get_store(info: strawberry.Info) -> Store:
    return info.context["store"]


def get_loaders(info: strawberry.Info) -> Loaders:
    return info.context["loaders"]
