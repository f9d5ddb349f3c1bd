"""
Persistence collaborator used by the GraphQL layer.
"""

from .base import ConstraintViolationError, EntityNotFoundError, Store, StoreError
from .predicates import And, Eq, In, Predicate, RelatedExists
from .relational import SqlAlchemyStore

__all__ = [
    "And",
    "ConstraintViolationError",
    "EntityNotFoundError",
    "Eq",
    "In",
    "Predicate",
    "RelatedExists",
    "SqlAlchemyStore",
    "Store",
    "StoreError",
]
