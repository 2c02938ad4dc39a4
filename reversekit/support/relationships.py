"""Relationship detection between entities.

Relationships are inferred from naming alone:

* ``author_id``                 -> ``belongsTo Author``
* ``"author": {...}``            -> ``belongsTo Author`` (+ ``author_id``)
* ``"comments": [{...}]``        -> ``hasMany Comment`` (child gets ``post_id``)
* ``"tag_ids": [1, 2]``          -> ``belongsToMany Tag`` via ``post_tag``

Inverse ``hasMany`` relations are added once every entity is known.
"""

from __future__ import annotations

from reversekit.models import Entity, FieldDefinition, Relationship, RelationshipType
from reversekit.support import naming
from reversekit.support.type_inferrer import TypeInferrer


class RelationshipDetector:
    """Detects Eloquent relationships from field names and nesting."""

    def __init__(self, type_inferrer: TypeInferrer | None = None) -> None:
        self.type_inferrer = type_inferrer or TypeInferrer()

    # -- Inflection --------------------------------------------------------

    def singularize(self, word: str) -> str:
        return naming.singularize(word)

    def pluralize(self, word: str) -> str:
        return naming.pluralize(word)

    def related_model(self, key: str) -> str:
        """Model name for a foreign key or nested key: ``author_id`` -> ``Author``."""
        base = key[: -len("_id")] if key.endswith("_id") else key
        base = base[: -len("_ids")] if base.endswith("_ids") else base
        return naming.studly(self.singularize(base))

    def pivot_table(self, first: str, second: str) -> str:
        """Alphabetical pivot table name: ``Post`` + ``Tag`` -> ``post_tag``."""
        return "_".join(sorted((naming.snake(first), naming.snake(second))))

    # -- Field based detection ---------------------------------------------

    def detect_from_fields(self, entity: Entity) -> list[Relationship]:
        """Add a ``belongsTo`` for every foreign-key field of *entity*.

        Returns the relationships that were added.
        """
        added: list[Relationship] = []
        for field in entity.foreign_keys():
            related = self.related_model(field.name)
            if not field.references:
                field.references = naming.table_name(related)
            rel = Relationship(
                type=RelationshipType.BELONGS_TO,
                related=related,
                method=naming.camel(field.name[: -len("_id")]),
                foreign_key=field.name,
            )
            if entity.add_relationship(rel):
                added.append(rel)
        return added

    # -- Nesting based detection -------------------------------------------

    def nested_object(self, parent: Entity, key: str, related: str | None = None) -> Relationship:
        """Register *parent* ``belongsTo`` the entity nested under *key*."""
        related = related or self.related_model(key)
        foreign_key = f"{naming.snake(key)}_id"
        if not parent.has_field(foreign_key):
            field = self.type_inferrer.make_field(foreign_key, "foreignId")
            field.references = naming.table_name(related)
            parent.add_field(field)
        rel = Relationship(
            type=RelationshipType.BELONGS_TO,
            related=related,
            method=naming.camel(key),
            foreign_key=foreign_key,
        )
        parent.add_relationship(rel)
        return rel

    def nested_collection(self, parent: Entity, key: str, child: Entity) -> Relationship:
        """Register *parent* ``hasMany`` *child* and link the child back."""
        foreign_key = f"{naming.snake(parent.name)}_id"
        if not child.has_field(foreign_key):
            field: FieldDefinition = self.type_inferrer.make_field(foreign_key, "foreignId")
            field.references = parent.table
            child.add_field(field)
        child.add_relationship(Relationship(
            type=RelationshipType.BELONGS_TO,
            related=parent.name,
            method=naming.camel(parent.name),
            foreign_key=foreign_key,
        ))
        rel = Relationship(
            type=RelationshipType.HAS_MANY,
            related=child.name,
            method=naming.camel(key),
            foreign_key=foreign_key,
        )
        parent.add_relationship(rel)
        return rel

    def id_collection(self, parent: Entity, key: str) -> Relationship:
        """Register a ``belongsToMany`` for a ``*_ids`` array of scalars."""
        related = self.related_model(key)
        rel = Relationship(
            type=RelationshipType.BELONGS_TO_MANY,
            related=related,
            method=naming.camel(self.pluralize(key[: -len("_ids")])),
            pivot_table=self.pivot_table(parent.name, related),
        )
        parent.add_relationship(rel)
        return rel

    # -- Whole-model passes ------------------------------------------------

    def add_inverse_relationships(self, entities: list[Entity]) -> int:
        """Give every ``belongsTo`` target a ``hasMany`` back to its owner.

        Only entities present in *entities* receive inverses.  Returns the
        number of relationships added.
        """
        by_name = {e.name: e for e in entities}
        added = 0
        for entity in entities:
            for rel in entity.relationships_of(RelationshipType.BELONGS_TO):
                target = by_name.get(rel.related)
                if target is None or target is entity:
                    continue
                if any(r.related == entity.name for r in target.relationships):
                    continue
                inverse = Relationship(
                    type=RelationshipType.HAS_MANY,
                    related=entity.name,
                    method=naming.camel(self.pluralize(entity.name)),
                    foreign_key=rel.foreign_key,
                )
                if target.add_relationship(inverse):
                    added += 1
        return added
