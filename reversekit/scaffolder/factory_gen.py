"""Model factory generation.

Generates one ``database/factories/<Model>Factory.php`` per entity.  Each
field gets a faker expression picked from ordered lookup tables:

1. foreign keys (``*_id``) delegate to the related model's factory;
2. field-name patterns (``email``, ``title``, ``phone``, ...);
3. date, enum and uuid column types;
4. the field's PHP type, falling back to ``fake()->word()``.

Boolean ``published``/``active`` style fields also get state methods.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from reversekit.models import Entity, FieldDefinition

from .base import BaseGenerator, GeneratedFile, php_string


class FactoryGenerator(BaseGenerator):
    """Generates Eloquent model factories."""

    name = "factory"
    stub = "factory"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        """Generate the factory for *entity*.

        Returns:
            The written file, or a skipped result when the factory exists
            and *force* is false.
        """
        class_name = f"{entity.name}Factory"
        path = self.get_path(class_name)

        if not force and path.exists():
            return self.skip(path)

        content = self.build_content(entity, class_name)
        return await self.write_file(path, content, force)

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("factories") / f"{class_name}.php"

    # -- Content -----------------------------------------------------------

    def build_content(self, entity: Entity, class_name: str) -> str:
        return self.get_stub({
            "namespace": "Database\\Factories",
            "modelNamespace": self.get_namespace("Models"),
            "model": entity.name,
            "class": class_name,
            "definitions": self.build_definitions(entity),
            "imports": self.build_imports(entity),
            "states": self.build_states(entity),
        })

    def build_definitions(self, entity: Entity) -> str:
        definitions = []
        for field_name, field in entity.fields.items():
            if field_name == "id":
                continue
            faker = self.get_faker_method(field_name, field)
            definitions.append(f"            '{field_name}' => {faker},")
        return "\n".join(definitions)

    def get_faker_method(self, field_name: str, field: FieldDefinition | dict[str, Any]) -> str:
        """Return the PHP expression that fakes a value for *field_name*."""
        if isinstance(field, dict):
            field = FieldDefinition.model_validate({"name": field_name, **field})

        # Foreign keys first
        if field_name.endswith("_id"):
            return self.get_foreign_key_faker(field_name)

        pattern_method = get_faker_by_field_name(field_name)
        if pattern_method is not None:
            return pattern_method

        column_method = get_faker_by_column_type(field)
        if column_method is not None:
            return column_method

        return get_faker_by_type(field.php_type)

    def get_foreign_key_faker(self, field_name: str) -> str:
        related = self.relationship_detector.related_model(field_name)
        return f"\\{self.get_namespace('Models')}\\{related}::factory()"

    def build_imports(self, entity: Entity) -> str:
        return ""

    def build_states(self, entity: Entity) -> str:
        states = []
        for field_name in entity.fields:
            if field_name in ("published", "is_published"):
                states.append(_toggle_state(field_name, "published", "unpublished"))
            if field_name in ("active", "is_active"):
                states.append(_toggle_state(field_name, "active", "inactive"))
        return "\n".join(states)


# ---------------------------------------------------------------------------
# Faker lookup tables
# ---------------------------------------------------------------------------

# Checked in order; a pattern matches when it is contained in the field name.
FIELD_NAME_PATTERNS: tuple[tuple[str, str], ...] = (
    ("email", "fake()->unique()->safeEmail()"),
    ("name", "fake()->name()"),
    ("title", "fake()->sentence()"),
    ("body", "fake()->paragraphs(3, true)"),
    ("content", "fake()->paragraphs(3, true)"),
    ("description", "fake()->paragraphs(3, true)"),
    ("url", "fake()->url()"),
    ("link", "fake()->url()"),
    ("phone", "fake()->phoneNumber()"),
    ("address", "fake()->address()"),
    ("city", "fake()->city()"),
    ("country", "fake()->country()"),
    ("zip", "fake()->postcode()"),
    ("postal", "fake()->postcode()"),
    ("image", "fake()->imageUrl()"),
    ("avatar", "fake()->imageUrl()"),
    ("photo", "fake()->imageUrl()"),
    ("password", "bcrypt('password')"),
)

_COLUMN_FAKERS: dict[str, str] = {
    "date": "fake()->date()",
    "dateTime": "fake()->dateTime()",
    "timestamp": "fake()->dateTime()",
    "time": "fake()->time()",
    "uuid": "fake()->uuid()",
}

_TYPE_FAKERS: dict[str, str] = {
    "int": "fake()->numberBetween(1, 1000)",
    "integer": "fake()->numberBetween(1, 1000)",
    "float": "fake()->randomFloat(2, 1, 1000)",
    "bool": "fake()->boolean()",
    "boolean": "fake()->boolean()",
    "array": "[]",
}


def get_faker_by_field_name(field_name: str) -> Optional[str]:
    for pattern, faker in FIELD_NAME_PATTERNS:
        if pattern in field_name:
            return faker
    return None


def get_faker_by_column_type(field: FieldDefinition) -> Optional[str]:
    if field.type == "enum" and field.values:
        options = ", ".join(php_string(v) for v in field.values)
        return f"fake()->randomElement([{options}])"
    return _COLUMN_FAKERS.get(field.type)


def get_faker_by_type(php_type: str) -> str:
    return _TYPE_FAKERS.get(php_type, "fake()->word()")


def _toggle_state(field_name: str, on: str, off: str) -> str:
    """Two state methods flipping a boolean column."""
    return f"""
    /**
     * Indicate that the model is {on}.
     */
    public function {on}(): static
    {{
        return $this->state(fn (array $attributes) => [
            '{field_name}' => true,
        ]);
    }}

    /**
     * Indicate that the model is {off}.
     */
    public function {off}(): static
    {{
        return $this->state(fn (array $attributes) => [
            '{field_name}' => false,
        ]);
    }}"""
