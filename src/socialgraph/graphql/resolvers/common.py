"""
Helpers shared by the mutation resolvers
"""

from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

import strawberry

from ...logging import get_logger
from ...store import EntityNotFoundError
from ..context import get_loaders
from ..errors import NotFoundError

logger = get_logger(__name__)


def input_payload(dto: Any, *, partial: bool = False) -> dict[str, Any]:
    """Turn a Strawberry input object into a store payload.

    Enum members are reduced to their values. With ``partial`` the fields
    left unset (None) are dropped so they keep their stored value.
    """
    values = asdict(dto) if is_dataclass(dto) else dict(vars(dto))
    payload: dict[str, Any] = {}
    for field, value in values.items():
        if value is None and partial:
            continue
        payload[field] = value.value if isinstance(value, Enum) else value
    return payload


def invalidate_loaders(info: strawberry.Info) -> None:
    """Drop every cached value after a write within this request."""
    for loader in get_loaders(info).all():
        loader.clear_all()


@contextmanager
def translate_not_found(kind: str | None = None):
    """Re-raise the store's not-found error as a GraphQL error."""
    try:
        yield
    except EntityNotFoundError as e:
        logger.info("Mutation target not found", kind=e.kind.__name__, id=str(e.ident))
        if kind is None:
            raise NotFoundError.from_store(e) from e
        raise NotFoundError(kind, e.ident) from e
