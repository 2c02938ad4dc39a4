"""Interactive entity builder.

Walks the user through describing one model on the terminal and returns
the resulting ``Entity``.  Every question has a sensible default so most
answers are a single Enter: field types default to the guess made from the
field name, relationship accessors to the conventional method name.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from reversekit.models import (
    COLUMN_TYPES,
    SOFT_DELETE_COLUMN,
    TIMESTAMP_COLUMNS,
    Entity,
    Relationship,
    RelationshipType,
)
from reversekit.support import naming
from reversekit.support.relationships import RelationshipDetector
from reversekit.utils import console as default_console, print_warning


class InteractiveBuilder:
    """Builds an ``Entity`` from answers to terminal prompts."""

    def __init__(
        self,
        relationship_detector: RelationshipDetector | None = None,
        console: Console | None = None,
    ) -> None:
        self.relationship_detector = relationship_detector or RelationshipDetector()
        self.type_inferrer = self.relationship_detector.type_inferrer
        self.console = console or default_console

    # -- Prompt wrappers ---------------------------------------------------

    def ask(self, question: str, default: Optional[str] = None, choices: Optional[list[str]] = None) -> str:
        if default is None:
            return Prompt.ask(question, console=self.console, choices=choices)
        return Prompt.ask(
            question, console=self.console, default=default, choices=choices, show_default=bool(default)
        )

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, console=self.console, default=default)

    # -- Flow --------------------------------------------------------------

    def build(self, name: Optional[str] = None) -> Entity:
        """Prompt for a complete entity description."""
        name = name or ""
        while not name.strip():
            name = self.ask("Model name")
        entity = Entity(name=name, source="interactive")
        entity.table = self.ask("Table name", default=entity.table)

        self.ask_fields(entity)
        self.relationship_detector.detect_from_fields(entity)
        self.ask_relationships(entity)

        entity.timestamps = self.confirm("Add created_at/updated_at timestamps?", default=True)
        entity.soft_deletes = entity.soft_deletes or self.confirm("Use soft deletes?", default=False)
        return entity

    def ask_fields(self, entity: Entity) -> None:
        while True:
            field_name = naming.snake(self.ask("Field name [dim](blank to finish)[/dim]", default="").strip())
            if not field_name:
                return
            if field_name in TIMESTAMP_COLUMNS:
                print_warning(f"{field_name} is covered by the timestamps option.")
                continue
            if field_name == SOFT_DELETE_COLUMN:
                entity.soft_deletes = True
                continue

            column = self.ask(
                "Column type",
                default=self.type_inferrer.infer_from_name(field_name),
                choices=list(COLUMN_TYPES),
            )
            field = self.type_inferrer.make_field(field_name, column)
            if column == "enum":
                raw = self.ask("Allowed values (comma separated)")
                field.values = [v.strip() for v in raw.split(",") if v.strip()]
            field.nullable = self.confirm("Nullable?", default=False)
            field.unique = self.confirm("Unique?", default=False)
            entity.add_field(field)

    def ask_relationships(self, entity: Entity) -> None:
        for rel in entity.relationships:
            self.console.print(f"  [dim]detected[/dim] {rel.type.value} {rel.related} ({rel.method})")

        while self.confirm("Add a relationship?", default=False):
            kind = RelationshipType(self.ask(
                "Relationship type",
                default=RelationshipType.HAS_MANY.value,
                choices=[t.value for t in RelationshipType],
            ))
            related = naming.studly(self.ask("Related model"))
            if not related:
                continue
            method = self.ask("Method name", default=default_method(kind, related))
            self.add_relationship(entity, kind, related, method)

    def add_relationship(self, entity: Entity, kind: RelationshipType, related: str, method: str) -> Relationship:
        """Register one relationship, adding the foreign key a ``belongsTo`` needs."""
        detector = self.relationship_detector
        if kind == RelationshipType.BELONGS_TO:
            return detector.nested_object(entity, naming.snake(method), related)
        rel = Relationship(type=kind, related=related, method=method)
        if kind == RelationshipType.BELONGS_TO_MANY:
            rel.pivot_table = detector.pivot_table(entity.name, related)
        else:
            rel.foreign_key = f"{naming.snake(entity.name)}_id"
        entity.add_relationship(rel)
        return rel


def default_method(kind: RelationshipType, related: str) -> str:
    """Conventional accessor: ``author`` for one, ``comments`` for many."""
    if kind in (RelationshipType.HAS_MANY, RelationshipType.BELONGS_TO_MANY):
        return naming.camel(naming.pluralize(related))
    return naming.camel(related)
