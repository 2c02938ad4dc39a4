"""Tests for the migration generator."""

from __future__ import annotations

from datetime import datetime

import pytest

from reversekit.config import Config
from reversekit.models import Entity, FieldDefinition
from reversekit.scaffolder.base import FileStatus
from reversekit.scaffolder.migration_gen import MigrationGenerator


pytestmark = pytest.mark.unit


@pytest.fixture
def generator(config: Config) -> MigrationGenerator:
    return MigrationGenerator(config)


class TestColumnDefinition:
    @pytest.mark.parametrize(
        "field,expected",
        [
            (FieldDefinition(name="id", type="id"), "$table->id();"),
            (FieldDefinition(name="id", type="uuid"), "$table->uuid('id')->primary();"),
            (FieldDefinition(name="title"), "$table->string('title');"),
            (FieldDefinition(name="code", length=32), "$table->string('code', 32);"),
            (FieldDefinition(name="body", type="text", nullable=True), "$table->text('body')->nullable();"),
            (FieldDefinition(name="email", unique=True), "$table->string('email')->unique();"),
            (FieldDefinition(name="views", type="integer", default=0), "$table->integer('views')->default(0);"),
            (FieldDefinition(name="active", type="boolean", default=True), "$table->boolean('active')->default(true);"),
            (FieldDefinition(name="status", type="string", default="draft"), "$table->string('status')->default('draft');"),
            (FieldDefinition(name="price", type="decimal", precision=8, scale=2), "$table->decimal('price', 8, 2);"),
            (FieldDefinition(name="total", type="decimal"), "$table->decimal('total', 10, 2);"),
            (
                FieldDefinition(name="state", type="enum", values=["open", "closed"]),
                "$table->enum('state', ['open', 'closed']);",
            ),
            (FieldDefinition(name="meta", type="json"), "$table->json('meta');"),
            (FieldDefinition(name="weird", type="geometry"), "$table->string('weird');"),
        ],
    )
    def test_columns(self, generator: MigrationGenerator, field: FieldDefinition, expected: str):
        assert generator.column_definition(field) == expected

    def test_foreign_key(self, generator: MigrationGenerator):
        field = FieldDefinition(name="user_id", type="foreignId", references="users")
        assert generator.column_definition(field) == "$table->foreignId('user_id')->constrained()->cascadeOnDelete();"

    def test_nullable_foreign_key(self, generator: MigrationGenerator):
        field = FieldDefinition(name="category_id", type="foreignId", nullable=True)
        assert generator.column_definition(field) == (
            "$table->foreignId('category_id')->nullable()->constrained()->nullOnDelete();"
        )

    def test_unconventional_reference(self, generator: MigrationGenerator):
        field = FieldDefinition(name="author_id", type="foreignId", references="users")
        assert generator.column_definition(field) == (
            "$table->foreignId('author_id')->constrained('users')->cascadeOnDelete();"
        )


class TestBuildColumns:
    def test_post_columns(self, generator: MigrationGenerator, post_entity: Entity):
        lines = [line.strip() for line in generator.build_columns(post_entity).splitlines()]
        assert lines[0] == "$table->id();"
        assert lines[1] == "$table->foreignId('user_id')->constrained()->cascadeOnDelete();"
        assert "$table->string('slug')->unique();" in lines
        assert "$table->timestamp('published_at')->nullable();" in lines
        assert lines[-2:] == ["$table->timestamps();", "$table->softDeletes();"]

    def test_id_added_when_missing(self, generator: MigrationGenerator):
        entity = Entity(name="Tag", fields=[{"name": "name"}], timestamps=False)
        lines = [line.strip() for line in generator.build_columns(entity).splitlines()]
        assert lines == ["$table->id();", "$table->string('name');"]

    def test_pivot_columns(self, generator: MigrationGenerator):
        lines = [line.strip() for line in generator.build_pivot_columns("Tag", "Post").splitlines()]
        assert lines == [
            "$table->foreignId('post_id')->constrained()->cascadeOnDelete();",
            "$table->foreignId('tag_id')->constrained()->cascadeOnDelete();",
            "$table->primary(['post_id', 'tag_id']);",
        ]


class TestMigrationFiles:
    async def test_file_name_uses_timestamp(
        self, generator: MigrationGenerator, post_entity: Entity, fixed_timestamp: datetime
    ):
        result = await generator.generate(post_entity, timestamp=fixed_timestamp)
        assert result.path.name == "2024_03_01_120000_create_posts_table.php"
        content = result.path.read_text(encoding="utf-8")
        assert "Schema::create('posts', function (Blueprint $table) {" in content
        assert "Schema::dropIfExists('posts');" in content

    async def test_existing_migration_is_skipped(
        self, generator: MigrationGenerator, post_entity: Entity, fixed_timestamp: datetime
    ):
        first = await generator.generate(post_entity, timestamp=fixed_timestamp)
        second = await generator.generate(post_entity, timestamp=datetime(2025, 1, 1))
        assert second.skipped
        assert second.path == first.path

    async def test_force_rewrites_same_file(
        self, generator: MigrationGenerator, post_entity: Entity, fixed_timestamp: datetime
    ):
        first = await generator.generate(post_entity, timestamp=fixed_timestamp)
        second = await generator.generate(post_entity, force=True, timestamp=datetime(2025, 1, 1))
        assert second.path == first.path
        assert second.status == FileStatus.OVERWRITTEN
        assert len(list(first.path.parent.glob("*_create_posts_table.php"))) == 1

    async def test_pivot(self, generator: MigrationGenerator, fixed_timestamp: datetime):
        result = await generator.generate_pivot("post_tag", "Post", "Tag", timestamp=fixed_timestamp)
        assert result.path.name == "2024_03_01_120000_create_post_tag_table.php"
        content = result.path.read_text(encoding="utf-8")
        assert "$table->primary(['post_id', 'tag_id']);" in content
        assert "$table->timestamps();" not in content
