"""Tests for the SQLite schema parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from reversekit.exceptions import ParserError
from reversekit.models import RelationshipType
from reversekit.parser.database import DatabaseParser


pytestmark = pytest.mark.unit


class TestDatabaseParser:
    async def test_tables_become_entities(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db)
        assert [e.name for e in result.entities] == ["Post", "Tag", "User"]
        assert result.warnings == []

    async def test_column_types(self, blog_db: Path):
        post = (await DatabaseParser().parse(blog_db)).entity("Post")
        assert post.field_names() == ["id", "user_id", "title", "body", "price", "status"]
        assert post.fields["id"].type == "id"
        assert post.fields["title"].length == 150
        assert post.fields["title"].nullable is False
        assert post.fields["body"].type == "text"
        assert post.fields["body"].nullable is True
        assert (post.fields["price"].precision, post.fields["price"].scale) == (8, 2)

    async def test_defaults_are_unquoted(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db)
        post = result.entity("Post")
        assert post.fields["price"].default == "0.00"
        assert post.fields["status"].default == "draft"
        assert result.entity("User").fields["is_admin"].default == 0

    async def test_timestamp_and_soft_delete_flags(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db)
        post = result.entity("Post")
        assert post.timestamps is False
        assert post.soft_deletes is True
        assert result.entity("User").timestamps is True

    async def test_foreign_keys(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db)
        post = result.entity("Post")
        assert post.fields["user_id"].type == "foreignId"
        assert post.fields["user_id"].references == "users"
        assert post.relationship("user").type == RelationshipType.BELONGS_TO
        assert result.entity("User").relationship("posts").type == RelationshipType.HAS_MANY

    async def test_unique_index_and_boolean(self, blog_db: Path):
        user = (await DatabaseParser().parse(blog_db)).entity("User")
        assert user.fields["email"].unique is True
        assert user.fields["name"].unique is False
        assert user.fields["is_admin"].type == "boolean"

    async def test_pivot_table_becomes_belongs_to_many(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db)
        tags = result.entity("Post").relationship("tags")
        posts = result.entity("Tag").relationship("posts")
        assert tags.type == RelationshipType.BELONGS_TO_MANY
        assert tags.pivot_table == "post_tag"
        assert posts.type == RelationshipType.BELONGS_TO_MANY
        assert result.entity("PostTag") is None

    async def test_table_selection(self, blog_db: Path):
        result = await DatabaseParser().parse(blog_db, tables=["posts", "comments"])
        assert [e.name for e in result.entities] == ["Post"]
        assert result.warnings == ["Table 'comments' does not exist"]

    async def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ParserError, match="not found"):
            await DatabaseParser().parse(tmp_path / "nope.sqlite")

    async def test_not_a_database(self, tmp_path: Path):
        path = tmp_path / "notes.sqlite"
        path.write_text("this is not a database file\n" * 64, encoding="utf-8")
        with pytest.raises(ParserError, match="cannot read schema"):
            await DatabaseParser().parse(path)
