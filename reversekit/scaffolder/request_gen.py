"""Form request generation.

Writes ``Store<Model>Request`` and ``Update<Model>Request``.  Validation rules
are derived per field from its column type, nullability, uniqueness and
name; update rules are prefixed with ``sometimes`` so partial updates pass.
"""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity, FieldDefinition
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile, php_array, php_string


_TYPE_RULES: dict[str, list[str]] = {
    "text": ["string"],
    "longText": ["string"],
    "integer": ["integer"],
    "bigInteger": ["integer"],
    "float": ["numeric"],
    "double": ["numeric"],
    "decimal": ["numeric"],
    "boolean": ["boolean"],
    "date": ["date"],
    "dateTime": ["date"],
    "timestamp": ["date"],
    "time": ["date_format:H:i:s"],
    "json": ["array"],
    "uuid": ["uuid"],
}

_URL_NAMES = ("url", "link", "website")


class FormRequestGenerator(BaseGenerator):
    """Generates store and update form requests."""

    name = "request"
    stub = "request"

    async def generate(self, entity: Entity, force: bool = False) -> list[GeneratedFile]:
        written = []
        for action in ("Store", "Update"):
            class_name = f"{action}{entity.name}Request"
            path = self.get_path(class_name)
            if not force and path.exists():
                written.append(self.skip(path))
                continue
            content = self.build_content(entity, class_name, update=action == "Update")
            written.append(await self.write_file(path, content, force))
        return written

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("requests") / f"{class_name}.php"

    def build_content(self, entity: Entity, class_name: str, update: bool = False) -> str:
        rules = self.build_rules(entity, update)
        imports = ["Illuminate\\Foundation\\Http\\FormRequest"]
        if any("Rule::" in rule for field_rules in rules.values() for rule in field_rules):
            imports.append("Illuminate\\Validation\\Rule")
        items = [
            f"{php_string(name)} => [{', '.join(field_rules)}]"
            for name, field_rules in rules.items()
        ]
        return self.get_stub({
            "namespace": self.get_namespace("Http\\Requests"),
            "class": class_name,
            "imports": "\n".join(f"use {name};" for name in sorted(imports)),
            "rules": php_array(items, indent=12),
        })

    # -- Rules -------------------------------------------------------------

    def build_rules(self, entity: Entity, update: bool = False) -> dict[str, list[str]]:
        """Return ``field -> [rendered rule, ...]`` for every fillable field."""
        rules: dict[str, list[str]] = {}
        for name, field in entity.fields.items():
            if name == "id":
                continue
            rules[name] = self.field_rules(entity, field, update)
        return rules

    def field_rules(self, entity: Entity, field: FieldDefinition, update: bool = False) -> list[str]:
        rules: list[str] = []
        if update:
            rules.append("sometimes")
        rules.append("nullable" if field.nullable else "required")
        rules.extend(self.type_rules(field))

        if field.unique:
            if update:
                parameter = naming.route_parameter(entity.name)
                rules.append(
                    f"Rule::unique({php_string(entity.table)}, {php_string(field.name)})"
                    f"->ignore($this->route({php_string(parameter)}))"
                )
                return [r if r.startswith("Rule::") else php_string(r) for r in rules]
            rules.append(f"unique:{entity.table},{field.name}")

        return [php_string(r) for r in rules]

    def type_rules(self, field: FieldDefinition) -> list[str]:
        lower = field.name.lower()
        if field.is_foreign_key and field.type != "uuid":
            table = field.references or naming.table_name(field.name[: -len("_id")])
            return ["integer", f"exists:{table},id"]
        if field.type == "enum" and field.values:
            return [f"in:{','.join(field.values)}"]
        if field.type == "string":
            rules = ["string"]
            if "email" in lower:
                rules.append("email")
            elif any(marker in lower for marker in _URL_NAMES):
                rules.append("url")
            if "password" in lower:
                rules.append("min:8")
            rules.append(f"max:{field.length or 255}")
            return rules
        return list(_TYPE_RULES.get(field.type, ["string"]))
