"""
Tests for the query depth ceiling
"""

from unittest.mock import AsyncMock

import pytest
from graphql import parse

from socialgraph.graphql.context import build_context
from socialgraph.graphql.depth import check_document_depth, depth_limiter
from socialgraph.graphql.schema import build_schema, schema
from socialgraph.store import Store


def depths_of(source: str, max_depth: int = 10) -> dict[str, int]:
    depths, errors = check_document_depth(schema._schema, parse(source), max_depth)
    assert errors == []
    return depths


def nested_subscriptions(levels: int) -> str:
    """``users`` followed by ``levels`` nested userSubscribedTo selections."""
    inner = "id"
    for _ in range(levels):
        inner = f"userSubscribedTo {{ {inner} }}"
    return f"{{ users {{ {inner} }} }}"


class TestCheckDocumentDepth:
    def test_flat_root_field(self):
        assert depths_of("{ users { id } }") == {"anonymous": 1}

    def test_each_nested_selection_adds_one(self):
        assert depths_of(nested_subscriptions(4)) == {"anonymous": 5}
        assert depths_of(nested_subscriptions(5)) == {"anonymous": 6}

    def test_deepest_branch_wins(self):
        source = "{ users { id posts { id } profile { memberType { profiles { id } } } } }"
        assert depths_of(source) == {"anonymous": 4}

    def test_fragments_count_as_inlined(self):
        source = """
            query Q { users { ...UserPosts } }
            fragment UserPosts on User { posts { author { id } } }
        """
        assert depths_of(source) == {"Q": 3}

    def test_inline_fragments_count(self):
        assert depths_of("{ users { ... on User { profile { id } } } }") == {"anonymous": 2}

    def test_introspection_fields_are_ignored(self):
        source = "{ __schema { types { fields { type { ofType { name } } } } } }"
        assert depths_of(source, max_depth=1) == {"anonymous": 0}

    def test_every_operation_is_measured(self):
        source = """
            query Shallow { users { id } }
            query Deep { posts { author { profile { id } } } }
        """
        assert depths_of(source) == {"Shallow": 1, "Deep": 3}

    def test_reports_operations_over_the_ceiling(self):
        depths, errors = check_document_depth(
            schema._schema, parse("query Deep { posts { author { id } } }"), 1
        )

        assert depths["Deep"] > 1
        assert [e.message for e in errors] == ["'Deep' exceeds maximum operation depth of 1"]


class TestDepthLimiter:
    @pytest.fixture
    def mock_store(self):
        return AsyncMock(spec=Store)

    @pytest.mark.asyncio
    async def test_rejects_deep_documents_before_any_resolver(self, mock_store):
        schema = build_schema(max_depth=5)

        result = await schema.execute(
            nested_subscriptions(5), context_value=build_context(mock_store)
        )

        assert result.data is None
        assert len(result.errors) == 1
        assert result.errors[0].message == "'anonymous' exceeds maximum operation depth of 5"
        mock_store.find_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_names_the_offending_operation(self, mock_store):
        schema = build_schema(max_depth=1)

        result = await schema.execute(
            "query Authors { posts { author { id } } }", context_value=build_context(mock_store)
        )

        assert result.errors[0].message == "'Authors' exceeds maximum operation depth of 1"
        mock_store.find_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_accepts_documents_at_the_ceiling(self, mock_store):
        mock_store.find_many.return_value = []
        schema = build_schema(max_depth=5)

        result = await schema.execute(
            nested_subscriptions(4), context_value=build_context(mock_store)
        )

        assert result.errors is None
        assert result.data == {"users": []}

    @pytest.mark.asyncio
    async def test_cyclic_fragments_are_rejected_without_running(self, mock_store):
        schema = build_schema(max_depth=5)

        result = await schema.execute(
            """
            { users { ...A } }
            fragment A on User { userSubscribedTo { ...B } }
            fragment B on User { subscribedToUser { ...A } }
            """,
            context_value=build_context(mock_store),
        )

        assert result.data is None
        assert result.errors
        mock_store.find_many.assert_not_called()

    def test_factory_builds_a_fresh_extension_each_time(self):
        factory = depth_limiter(3)

        assert factory() is not factory()

    def test_rejects_negative_ceiling(self):
        with pytest.raises(ValueError):
            depth_limiter(-1)
