"""Pydantic v2 models for entity descriptions.

An ``Entity`` is the ordered field map every generator consumes: one model
name, one table, a ``name -> FieldDefinition`` mapping and the relationships
detected between entities.  Parsers produce them, generators only read them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from reversekit.support.naming import studly, table_name


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class RelationshipType(str, Enum):
    """Eloquent relationship kinds the generators know how to emit."""
    BELONGS_TO = "belongsTo"
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    BELONGS_TO_MANY = "belongsToMany"


# Migration column types understood by the generators.
COLUMN_TYPES: tuple[str, ...] = (
    "id",
    "string",
    "text",
    "longText",
    "integer",
    "bigInteger",
    "float",
    "double",
    "decimal",
    "boolean",
    "date",
    "dateTime",
    "timestamp",
    "time",
    "json",
    "uuid",
    "foreignId",
    "enum",
)

TIMESTAMP_COLUMNS: frozenset[str] = frozenset({"created_at", "updated_at"})
SOFT_DELETE_COLUMN = "deleted_at"


# ---------------------------------------------------------------------------
# Field & relationship models
# ---------------------------------------------------------------------------

class FieldDefinition(BaseModel):
    """Metadata for a single entity field."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Column name")
    type: str = Field(default="string", description="Migration column type")
    php_type: str = Field(default="string", alias="phpType", description="PHP scalar type")
    nullable: bool = Field(default=False)
    unique: bool = Field(default=False)
    default: Optional[Any] = Field(default=None)
    length: Optional[int] = Field(default=None, description="Max length for string columns")
    precision: Optional[int] = Field(default=None)
    scale: Optional[int] = Field(default=None)
    values: list[str] = Field(default_factory=list, description="Members of an enum column")
    references: Optional[str] = Field(default=None, description="Referenced table of a foreign key")

    @property
    def is_foreign_key(self) -> bool:
        return self.type == "foreignId" or (self.name != "id" and self.name.endswith("_id"))


class Relationship(BaseModel):
    """A relationship from the owning entity to ``related``."""

    type: RelationshipType = Field(..., description="Relationship kind")
    related: str = Field(..., description="Related model name, e.g. 'User'")
    method: str = Field(..., description="Accessor method name, e.g. 'author'")
    foreign_key: Optional[str] = Field(default=None)
    pivot_table: Optional[str] = Field(default=None)

    @property
    def is_collection(self) -> bool:
        return self.type in (RelationshipType.HAS_MANY, RelationshipType.BELONGS_TO_MANY)


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------

class Entity(BaseModel):
    """Description of one model and everything generated for it."""

    name: str = Field(..., description="StudlyCase singular model name")
    table: str = Field(default="", description="Table name; derived from name when empty")
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)
    relationships: list[Relationship] = Field(default_factory=list)
    timestamps: bool = Field(default=True)
    soft_deletes: bool = Field(default=False)
    source: str = Field(default="", description="Parser that produced the entity")

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        """Accept ``fields`` as a list of field dicts and fill in names."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_fields = data.get("fields") or {}
        if isinstance(raw_fields, list):
            raw_fields = {f["name"]: f for f in raw_fields}
        fields: dict[str, Any] = {}
        for name, field in raw_fields.items():
            if isinstance(field, dict):
                field = {"name": name, **field}
            fields[name] = field
        data["fields"] = fields
        if data.get("name"):
            data["name"] = studly(data["name"])
        if not data.get("table") and data.get("name"):
            data["table"] = table_name(data["name"])
        return data

    # -- Queries -----------------------------------------------------------

    def field_names(self) -> list[str]:
        return list(self.fields)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def foreign_keys(self) -> list[FieldDefinition]:
        """Fields holding a reference to another table."""
        return [f for f in self.fields.values() if f.is_foreign_key]

    def relationship(self, method: str) -> Optional[Relationship]:
        for rel in self.relationships:
            if rel.method == method:
                return rel
        return None

    def relationships_of(self, *types: RelationshipType) -> list[Relationship]:
        return [r for r in self.relationships if r.type in types]

    # -- Mutation used while parsing ---------------------------------------

    def add_field(self, field: FieldDefinition) -> None:
        """Add *field*, or merge it into an existing field of the same name.

        Merging keeps the first non-generic type seen and makes the field
        nullable if either sample was nullable.
        """
        existing = self.fields.get(field.name)
        if existing is None:
            self.fields[field.name] = field
            return
        if existing.type == "string" and field.type != "string" and not existing.length:
            merged = field.model_copy(update={"nullable": existing.nullable or field.nullable})
        else:
            merged = existing.model_copy(update={"nullable": existing.nullable or field.nullable})
        self.fields[field.name] = merged

    def add_relationship(self, relationship: Relationship) -> bool:
        """Add *relationship* unless one with the same method exists."""
        if self.relationship(relationship.method) is not None:
            return False
        self.relationships.append(relationship)
        return True

    def merge(self, other: "Entity") -> None:
        """Fold *other* (same model) into this entity."""
        for field in other.fields.values():
            self.add_field(field)
        for rel in other.relationships:
            self.add_relationship(rel)
        self.soft_deletes = self.soft_deletes or other.soft_deletes


class ParseResult(BaseModel):
    """Entities extracted from one input source."""
    source: str = Field(default="", description="Description of the input")
    entities: list[Entity] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Inputs that were skipped or could not be interpreted",
    )

    def entity(self, name: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None
