"""Tests for the Eloquent model generator."""

from __future__ import annotations

import pytest

from reversekit.config import Config
from reversekit.models import Entity, Relationship, RelationshipType
from reversekit.scaffolder.model_gen import ModelGenerator


pytestmark = pytest.mark.unit


class TestModelPieces:
    def test_traits(self, config: Config, post_entity: Entity, user_entity: Entity):
        generator = ModelGenerator(config)
        assert generator.traits(post_entity) == ["HasFactory", "SoftDeletes"]
        assert generator.traits(user_entity) == ["HasFactory"]

    def test_fillable_excludes_id(self, config: Config, user_entity: Entity):
        assert ModelGenerator(config).fillable(user_entity) == ["name", "email", "password"]

    def test_hidden(self, config: Config, user_entity: Entity):
        assert ModelGenerator(config).hidden(user_entity) == ["password"]

    def test_imports_cover_relations(self, config: Config, post_entity: Entity):
        imports = ModelGenerator(config).build_imports(post_entity).splitlines()
        assert imports == [
            "use Illuminate\\Database\\Eloquent\\Factories\\HasFactory;",
            "use Illuminate\\Database\\Eloquent\\Model;",
            "use Illuminate\\Database\\Eloquent\\Relations\\BelongsTo;",
            "use Illuminate\\Database\\Eloquent\\Relations\\BelongsToMany;",
            "use Illuminate\\Database\\Eloquent\\Relations\\HasMany;",
            "use Illuminate\\Database\\Eloquent\\SoftDeletes;",
        ]

    def test_casts(self, config: Config, post_entity: Entity):
        casts = ModelGenerator(config).build_casts(post_entity)
        assert "'price' => 'decimal:2'" in casts
        assert "'views' => 'integer'" in casts
        assert "'is_published' => 'boolean'" in casts
        assert "'published_at' => 'datetime'" in casts
        assert "user_id" not in casts
        assert "'title'" not in casts

    def test_password_is_hashed(self, config: Config, user_entity: Entity):
        assert "'password' => 'hashed'" in ModelGenerator(config).build_casts(user_entity)

    def test_no_casts(self, config: Config):
        entity = Entity(name="Tag", fields=[{"name": "name", "type": "string"}])
        assert ModelGenerator(config).build_casts(entity) == ""


class TestRelationshipMethods:
    def test_conventional_keys_are_omitted(self, config: Config, post_entity: Entity):
        methods = ModelGenerator(config).build_relationships(post_entity)
        assert "public function user(): BelongsTo" in methods
        assert "return $this->belongsTo(User::class);" in methods
        assert "public function comments(): HasMany" in methods
        assert "return $this->hasMany(Comment::class);" in methods
        assert "return $this->belongsToMany(Tag::class, 'post_tag');" in methods

    def test_custom_foreign_keys(self, config: Config):
        entity = Entity(
            name="Article",
            relationships=[
                Relationship(type=RelationshipType.BELONGS_TO, related="User", method="author", foreign_key="user_id"),
                Relationship(type=RelationshipType.HAS_ONE, related="Cover", method="cover", foreign_key="owner_id"),
            ],
        )
        methods = ModelGenerator(config).build_relationships(entity)
        assert "return $this->belongsTo(User::class, 'user_id');" in methods
        assert "public function cover(): HasOne" in methods
        assert "return $this->hasOne(Cover::class, 'owner_id');" in methods


class TestModelGenerator:
    async def test_writes_model(self, config: Config, post_entity: Entity):
        result = await ModelGenerator(config).generate(post_entity)
        assert result.path == config.base_path / "app" / "Models" / "Post.php"

        content = result.path.read_text(encoding="utf-8")
        assert content.startswith("<?php\n\nnamespace App\\Models;")
        assert "class Post extends Model" in content
        assert "use HasFactory, SoftDeletes;" in content
        assert "protected $fillable = [\n        'user_id',\n" in content
        assert "protected $table" not in content
        assert "protected $hidden" not in content
        assert "protected function casts(): array" in content

    async def test_hidden_attributes_rendered(self, config: Config, user_entity: Entity):
        result = await ModelGenerator(config).generate(user_entity)
        content = result.path.read_text(encoding="utf-8")
        assert "protected $hidden = [\n        'password',\n    ];" in content

    async def test_irregular_table_is_declared(self, config: Config):
        entity = Entity(name="Person", table="persons", fields=[{"name": "name"}])
        result = await ModelGenerator(config).generate(entity)
        assert "protected $table = 'persons';" in result.path.read_text(encoding="utf-8")

    async def test_custom_namespace(self, laravel_dir, user_entity: Entity):
        config = Config(base_path=laravel_dir, namespace="Acme")
        result = await ModelGenerator(config).generate(user_entity)
        assert "namespace Acme\\Models;" in result.path.read_text(encoding="utf-8")

    async def test_skip_existing(self, config: Config, user_entity: Entity):
        generator = ModelGenerator(config)
        await generator.generate(user_entity)
        assert (await generator.generate(user_entity)).skipped
