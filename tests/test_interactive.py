"""Tests for the interactive entity builder.

``Prompt.ask`` and ``Confirm.ask`` are patched with scripted answers, so the
tests walk the same question sequence a terminal user would.
"""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from reversekit.interactive import InteractiveBuilder, default_method
from reversekit.models import Entity, RelationshipType


pytestmark = pytest.mark.unit


@pytest.fixture
def builder() -> InteractiveBuilder:
    return InteractiveBuilder(console=Console(file=io.StringIO()))


def _script(prompts: list[str], confirms: list[bool]):
    return (
        patch("reversekit.interactive.Prompt.ask", side_effect=prompts),
        patch("reversekit.interactive.Confirm.ask", side_effect=confirms),
    )


class TestDefaultMethod:
    @pytest.mark.parametrize(
        "kind,related,expected",
        [
            (RelationshipType.HAS_MANY, "Comment", "comments"),
            (RelationshipType.BELONGS_TO_MANY, "Category", "categories"),
            (RelationshipType.BELONGS_TO, "User", "user"),
            (RelationshipType.HAS_ONE, "BlogProfile", "blogProfile"),
        ],
    )
    def test_default_method(self, kind: RelationshipType, related: str, expected: str):
        assert default_method(kind, related) == expected


class TestBuild:
    def test_full_session(self, builder: InteractiveBuilder):
        prompt_patch, confirm_patch = _script(
            prompts=[
                "articles",
                "title", "string",
                "status", "enum", "draft, live",
                "author_id", "foreignId",
                "created_at",
                "",
                "hasMany", "comment", "comments",
            ],
            confirms=[
                False, False,   # title
                False, False,   # status
                True, False,    # author_id
                True,           # add a relationship
                False,          # no more relationships
                True,           # timestamps
                False,          # soft deletes
            ],
        )
        with prompt_patch, confirm_patch:
            entity = builder.build("Article")

        assert entity.name == "Article"
        assert entity.table == "articles"
        assert entity.source == "interactive"
        assert entity.field_names() == ["title", "status", "author_id"]
        assert entity.fields["status"].values == ["draft", "live"]
        assert entity.fields["author_id"].nullable is True
        assert entity.fields["author_id"].references == "authors"
        assert entity.relationship("author").type == RelationshipType.BELONGS_TO
        comments = entity.relationship("comments")
        assert comments.type == RelationshipType.HAS_MANY
        assert comments.related == "Comment"
        assert comments.foreign_key == "article_id"
        assert entity.timestamps is True
        assert entity.soft_deletes is False

    def test_prompts_for_name_until_given(self, builder: InteractiveBuilder):
        prompt_patch, confirm_patch = _script(
            prompts=["", "   ", "invoice", "invoices", ""],
            confirms=[False, False, False],
        )
        with prompt_patch as prompt, confirm_patch:
            entity = builder.build()

        assert entity.name == "Invoice"
        assert prompt.call_count == 5

    def test_deleted_at_enables_soft_deletes(self, builder: InteractiveBuilder):
        prompt_patch, confirm_patch = _script(
            prompts=["tasks", "deleted_at", ""],
            confirms=[False, True],
        )
        with prompt_patch, confirm_patch as confirm:
            entity = builder.build("Task")

        assert entity.soft_deletes is True
        assert entity.fields == {}
        # The soft delete question is not asked again.
        assert confirm.call_count == 2

    def test_blank_related_model_is_ignored(self, builder: InteractiveBuilder):
        prompt_patch, confirm_patch = _script(
            prompts=["notes", "", "hasMany", ""],
            confirms=[True, False, True, False],
        )
        with prompt_patch, confirm_patch:
            entity = builder.build("Note")

        assert entity.relationships == []


class TestAsk:
    def test_default_is_forwarded(self, builder: InteractiveBuilder):
        with patch("reversekit.interactive.Prompt.ask", return_value="posts") as prompt:
            assert builder.ask("Table name", default="posts") == "posts"
        kwargs = prompt.call_args.kwargs
        assert kwargs["default"] == "posts"
        assert kwargs["show_default"] is True

    def test_empty_default_is_hidden(self, builder: InteractiveBuilder):
        with patch("reversekit.interactive.Prompt.ask", return_value="") as prompt:
            builder.ask("Field name", default="")
        assert prompt.call_args.kwargs["show_default"] is False


class TestAddRelationship:
    def test_belongs_to_adds_foreign_key(self, builder: InteractiveBuilder):
        entity = Entity(name="Post")
        rel = builder.add_relationship(entity, RelationshipType.BELONGS_TO, "User", "author")

        assert rel.related == "User"
        assert rel.foreign_key == "author_id"
        assert entity.fields["author_id"].references == "users"

    def test_belongs_to_many_uses_pivot(self, builder: InteractiveBuilder):
        entity = Entity(name="Post")
        rel = builder.add_relationship(entity, RelationshipType.BELONGS_TO_MANY, "Tag", "tags")
        assert rel.pivot_table == "post_tag"
        assert entity.fields == {}

    def test_has_one_sets_foreign_key(self, builder: InteractiveBuilder):
        entity = Entity(name="User")
        rel = builder.add_relationship(entity, RelationshipType.HAS_ONE, "Profile", "profile")
        assert rel.foreign_key == "user_id"
        assert entity.relationship("profile") is rel
