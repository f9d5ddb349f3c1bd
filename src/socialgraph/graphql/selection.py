"""
Selection-aware prefetching for root list fields.

Batch loaders already cap every relation at one store query per request.
When a root list field knows up front that its children will ask for
expensive relations, it can do better: fetch the rows and those relations
in a single joined query and seed the relation loaders with the result, so
the nested resolvers never reach the store at all.

The analysis walks Strawberry's selection nodes (``SelectedField``,
``FragmentSpread`` and ``InlineFragment``), flattening fragments into a
set of requested field names.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, assert_never

from strawberry.types.nodes import FragmentSpread, InlineFragment, SelectedField, Selection

from ..logging import get_logger
from .loaders import Loaders

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelationPrefetch:
    """An expensive relation field and how to satisfy it eagerly.

    Attributes:
        field: GraphQL field name on the child type (e.g. ``userSubscribedTo``)
        include: Store relationship joined into the root fetch
        loader: ``Loaders`` attribute primed with the joined rows
    """

    field: str
    include: str
    loader: str


def is_skipped(directives: dict[str, dict[str, Any]] | None) -> bool:
    """Whether ``@skip``/``@include`` removes a selection."""
    if not directives:
        return False
    if "skip" in directives and directives["skip"].get("if") is True:
        return True
    if "include" in directives and directives["include"].get("if") is False:
        return True
    return False


def collect_field_names(selections: Iterable[Selection], type_name: str) -> set[str]:
    """Flatten a selection list into the field names requested on ``type_name``."""
    names: set[str] = set()
    for selection in selections:
        if is_skipped(selection.directives):
            continue
        if isinstance(selection, SelectedField):
            names.add(selection.name)
        elif isinstance(selection, FragmentSpread | InlineFragment):
            condition = getattr(selection, "type_condition", None)
            if condition is not None and condition != type_name:
                continue
            names |= collect_field_names(selection.selections, type_name)
        else:
            assert_never(selection)
    return names


class SelectionAnalyzer:
    """Decides which relation fields a root list query needs."""

    def __init__(self, type_name: str, relations: Sequence[RelationPrefetch]):
        self.type_name = type_name
        self.relations = tuple(relations)

    def requested_fields(self, root_fields: Iterable[Selection]) -> set[str]:
        """Field names requested on the children of the root field."""
        names: set[str] = set()
        for root in root_fields:
            if isinstance(root, SelectedField):
                names |= collect_field_names(root.selections, self.type_name)
        return names

    def plan(self, root_fields: Iterable[Selection]) -> list[RelationPrefetch]:
        """The expensive relations present in this selection, in declared order."""
        requested = self.requested_fields(root_fields)
        return [relation for relation in self.relations if relation.field in requested]

    def prime(
        self,
        loaders: Loaders,
        rows: Sequence[Any],
        plan: Sequence[RelationPrefetch],
        key: str = "id",
    ) -> None:
        """Seed each planned relation loader with the rows joined into ``rows``."""
        for relation in plan:
            loader = getattr(loaders, relation.loader)
            loader.prime_many(
                {getattr(row, key): list(getattr(row, relation.include)) for row in rows}
            )
            logger.debug("Loader primed", loader=relation.loader, keys=len(rows))


USER_RELATIONS = SelectionAnalyzer(
    "User",
    [
        RelationPrefetch(
            field="userSubscribedTo",
            include="user_subscribed_to",
            loader="authors_followed_by",
        ),
        RelationPrefetch(
            field="subscribedToUser",
            include="subscribed_to_user",
            loader="subscribers_of",
        ),
    ],
)
