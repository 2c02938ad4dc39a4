"""JSON API resource generation."""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity, Relationship
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile, php_array, php_string
from .model_gen import HIDDEN_MARKERS

# Columns rendered as ISO-8601 strings.
_DATE_COLUMNS = frozenset({"date", "dateTime", "timestamp"})


class ResourceGenerator(BaseGenerator):
    """Generates ``<Model>Resource`` classes for API responses."""

    name = "resource"
    stub = "resource"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        class_name = f"{entity.name}Resource"
        path = self.get_path(class_name)
        if not force and path.exists():
            return self.skip(path)
        content = self.get_stub({
            "namespace": self.get_namespace("Http\\Resources"),
            "class": class_name,
            "attributes": php_array(self.build_attributes(entity), indent=12),
        })
        return await self.write_file(path, content, force)

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("resources") / f"{class_name}.php"

    def build_attributes(self, entity: Entity) -> list[str]:
        """Rendered ``'key' => value`` items for ``toArray``."""
        items = ["'id' => $this->id"]
        for name, field in entity.fields.items():
            if name == "id" or any(marker in name for marker in HIDDEN_MARKERS):
                continue
            if field.type in _DATE_COLUMNS:
                items.append(f"{php_string(name)} => $this->{name}?->toIso8601String()")
            else:
                items.append(f"{php_string(name)} => $this->{name}")

        items.extend(self.relationship_attribute(rel) for rel in entity.relationships)

        if entity.timestamps:
            items.append("'created_at' => $this->created_at?->toIso8601String()")
            items.append("'updated_at' => $this->updated_at?->toIso8601String()")
        if entity.soft_deletes:
            items.append("'deleted_at' => $this->deleted_at?->toIso8601String()")
        return items

    def relationship_attribute(self, rel: Relationship) -> str:
        key = php_string(naming.snake(rel.method))
        loaded = f"$this->whenLoaded({php_string(rel.method)})"
        resource = f"{rel.related}Resource"
        if rel.is_collection:
            return f"{key} => {resource}::collection({loaded})"
        return f"{key} => new {resource}({loaded})"
