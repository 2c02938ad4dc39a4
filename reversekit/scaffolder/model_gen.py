"""Eloquent model generation.

Writes ``app/Models/<Model>.php`` with mass-assignable and hidden attributes,
attribute casts and one typed method per relationship.
"""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity, Relationship, RelationshipType
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile, php_array, php_string


_RELATION_CLASSES: dict[RelationshipType, str] = {
    RelationshipType.BELONGS_TO: "BelongsTo",
    RelationshipType.HAS_ONE: "HasOne",
    RelationshipType.HAS_MANY: "HasMany",
    RelationshipType.BELONGS_TO_MANY: "BelongsToMany",
}

# Substrings marking attributes that must never be serialised.
HIDDEN_MARKERS = ("password", "secret", "token", "api_key")


class ModelGenerator(BaseGenerator):
    """Generates Eloquent model classes."""

    name = "model"
    stub = "model"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        path = self.get_path(entity)
        if not force and path.exists():
            return self.skip(path)
        return await self.write_file(path, self.build_content(entity), force)

    def get_path(self, entity: Entity) -> Path:
        return self.config.path_for("models") / f"{entity.name}.php"

    def build_content(self, entity: Entity) -> str:
        conventional = naming.table_name(entity.name)
        return self.get_stub({
            "namespace": self.get_namespace("Models"),
            "class": entity.name,
            "imports": self.build_imports(entity),
            "traits": ", ".join(self.traits(entity)),
            "table": entity.table if entity.table != conventional else "",
            "fillable": php_array([php_string(f) for f in self.fillable(entity)]),
            "hidden": php_array([php_string(f) for f in self.hidden(entity)]) if self.hidden(entity) else "",
            "casts": self.build_casts(entity),
            "relationships": self.build_relationships(entity),
        })

    # -- Pieces ------------------------------------------------------------

    def traits(self, entity: Entity) -> list[str]:
        traits = ["HasFactory"]
        if entity.soft_deletes:
            traits.append("SoftDeletes")
        return traits

    def fillable(self, entity: Entity) -> list[str]:
        return [name for name in entity.fields if name != "id"]

    def hidden(self, entity: Entity) -> list[str]:
        return [
            name for name in entity.fields
            if any(marker in name for marker in HIDDEN_MARKERS)
        ]

    def build_imports(self, entity: Entity) -> str:
        imports = {"Illuminate\\Database\\Eloquent\\Factories\\HasFactory", "Illuminate\\Database\\Eloquent\\Model"}
        if entity.soft_deletes:
            imports.add("Illuminate\\Database\\Eloquent\\SoftDeletes")
        for rel in entity.relationships:
            imports.add(f"Illuminate\\Database\\Eloquent\\Relations\\{_RELATION_CLASSES[rel.type]}")
        return "\n".join(f"use {name};" for name in sorted(imports))

    def build_casts(self, entity: Entity) -> str:
        casts = []
        for name, field in entity.fields.items():
            if name == "id" or field.is_foreign_key:
                continue
            cast = self.type_inferrer.cast_for(field.type)
            if field.type == "decimal" and field.scale is not None:
                cast = f"decimal:{field.scale}"
            if any(marker in name for marker in ("password",)):
                cast = "hashed"
            if cast:
                casts.append(f"{php_string(name)} => {php_string(cast)}")
        return php_array(casts, indent=12) if casts else ""

    def build_relationships(self, entity: Entity) -> str:
        return "\n".join(self.build_relationship(entity, rel) for rel in entity.relationships)

    def build_relationship(self, entity: Entity, rel: Relationship) -> str:
        relation_class = _RELATION_CLASSES[rel.type]
        related = f"{rel.related}::class"
        arguments = [related]
        if rel.type == RelationshipType.BELONGS_TO:
            conventional = f"{naming.snake(rel.method)}_id"
            if rel.foreign_key and rel.foreign_key != conventional:
                arguments.append(php_string(rel.foreign_key))
        elif rel.type in (RelationshipType.HAS_MANY, RelationshipType.HAS_ONE):
            conventional = f"{naming.snake(entity.name)}_id"
            if rel.foreign_key and rel.foreign_key != conventional:
                arguments.append(php_string(rel.foreign_key))
        elif rel.type == RelationshipType.BELONGS_TO_MANY and rel.pivot_table:
            arguments.append(php_string(rel.pivot_table))

        return f"""
    /**
     * Get the {naming.snake(rel.method).replace('_', ' ')} relationship.
     */
    public function {rel.method}(): {relation_class}
    {{
        return $this->{rel.type.value}({', '.join(arguments)});
    }}"""
