"""Tests for the JSON API resource generator."""

from __future__ import annotations

import pytest

from reversekit.config import Config
from reversekit.models import Entity
from reversekit.scaffolder.resource_gen import ResourceGenerator


pytestmark = pytest.mark.unit


class TestBuildAttributes:
    def test_post_attributes(self, config: Config, post_entity: Entity):
        items = ResourceGenerator(config).build_attributes(post_entity)
        assert items[0] == "'id' => $this->id"
        assert "'title' => $this->title" in items
        assert "'published_at' => $this->published_at?->toIso8601String()" in items
        assert "'user' => new UserResource($this->whenLoaded('user'))" in items
        assert "'comments' => CommentResource::collection($this->whenLoaded('comments'))" in items
        assert "'tags' => TagResource::collection($this->whenLoaded('tags'))" in items
        assert items[-3:] == [
            "'created_at' => $this->created_at?->toIso8601String()",
            "'updated_at' => $this->updated_at?->toIso8601String()",
            "'deleted_at' => $this->deleted_at?->toIso8601String()",
        ]

    def test_hidden_fields_are_left_out(self, config: Config, user_entity: Entity):
        items = ResourceGenerator(config).build_attributes(user_entity)
        assert not any("password" in item for item in items)
        assert "'email' => $this->email" in items

    def test_no_timestamps(self, config: Config):
        entity = Entity(name="Tag", fields=[{"name": "name"}], timestamps=False)
        assert ResourceGenerator(config).build_attributes(entity) == [
            "'id' => $this->id",
            "'name' => $this->name",
        ]


class TestResourceGenerator:
    async def test_writes_resource(self, config: Config, post_entity: Entity):
        result = await ResourceGenerator(config).generate(post_entity)

        assert result.path == config.base_path / "app" / "Http" / "Resources" / "PostResource.php"
        content = result.path.read_text(encoding="utf-8")
        assert "namespace App\\Http\\Resources;" in content
        assert "class PostResource extends JsonResource" in content
        assert "public function toArray(Request $request): array" in content
        assert "        return [\n            'id' => $this->id,\n" in content
