"""Migration generation.

Writes ``database/migrations/<timestamp>_create_<table>_table.php``.  Since
the file name carries a timestamp, an existing migration is found by its
``*_create_<table>_table.php`` suffix; forcing overwrites that same file
instead of adding a second migration for the table.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from reversekit.models import Entity, FieldDefinition
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile, php_literal, php_string


TIMESTAMP_FORMAT = "%Y_%m_%d_%H%M%S"

# Column types that take no arguments besides the column name.
_SIMPLE_COLUMNS = frozenset({
    "text", "longText", "integer", "bigInteger", "float", "double", "boolean",
    "date", "dateTime", "timestamp", "time", "json", "uuid",
})


class MigrationGenerator(BaseGenerator):
    """Generates ``create_<table>_table`` migrations."""

    name = "migration"
    stub = "migration"

    async def generate(
        self,
        entity: Entity,
        force: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> GeneratedFile:
        existing = self.find_existing(entity.table)
        if existing is not None and not force:
            return self.skip(existing)

        path = existing or self.get_path(entity.table, timestamp)
        content = self.get_stub({"table": entity.table, "columns": self.build_columns(entity)})
        return await self.write_file(path, content, force=True if existing else force)

    async def generate_pivot(
        self,
        table: str,
        first: str,
        second: str,
        force: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> GeneratedFile:
        existing = self.find_existing(table)
        if existing is not None and not force:
            return self.skip(existing)
        path = existing or self.get_path(table, timestamp)
        content = self.get_stub({"table": table, "columns": self.build_pivot_columns(first, second)})
        return await self.write_file(path, content, force=True if existing else force)

    # -- Paths -------------------------------------------------------------

    def get_path(self, table: str, timestamp: Optional[datetime] = None) -> Path:
        stamp = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return self.config.path_for("migrations") / f"{stamp}_create_{table}_table.php"

    def find_existing(self, table: str) -> Optional[Path]:
        directory = self.config.path_for("migrations")
        if not directory.is_dir():
            return None
        matches = sorted(directory.glob(f"*_create_{table}_table.php"))
        return matches[0] if matches else None

    # -- Columns -----------------------------------------------------------

    def build_columns(self, entity: Entity) -> str:
        lines: list[str] = []
        if "id" not in entity.fields:
            lines.append("$table->id();")
        for field in entity.fields.values():
            lines.append(self.column_definition(field))
        if entity.timestamps:
            lines.append("$table->timestamps();")
        if entity.soft_deletes:
            lines.append("$table->softDeletes();")
        return "\n".join(f"            {line}" for line in lines)

    def column_definition(self, field: FieldDefinition) -> str:
        """Return one ``$table->...;`` line for *field*."""
        if field.type == "id" or (field.name == "id" and field.type in ("integer", "bigInteger")):
            return "$table->id();"
        if field.name == "id" and field.type == "uuid":
            return "$table->uuid('id')->primary();"
        if field.is_foreign_key and field.type in ("foreignId", "integer", "bigInteger"):
            return self.foreign_key_definition(field)

        name = php_string(field.name)
        if field.type == "string":
            column = f"$table->string({name}"
            if field.length and field.length != 255:
                column += f", {field.length}"
            column += ")"
        elif field.type == "decimal":
            column = f"$table->decimal({name}, {field.precision or 10}, {field.scale if field.scale is not None else 2})"
        elif field.type == "enum":
            values = ", ".join(php_string(v) for v in field.values)
            column = f"$table->enum({name}, [{values}])"
        elif field.type in _SIMPLE_COLUMNS:
            column = f"$table->{field.type}({name})"
        else:
            column = f"$table->string({name})"

        return column + self.modifiers(field) + ";"

    def foreign_key_definition(self, field: FieldDefinition) -> str:
        column = f"$table->foreignId({php_string(field.name)})"
        if field.nullable:
            column += "->nullable()"
        conventional = naming.table_name(field.name[: -len("_id")])
        if field.references and field.references != conventional:
            column += f"->constrained({php_string(field.references)})"
        else:
            column += "->constrained()"
        column += "->nullOnDelete()" if field.nullable else "->cascadeOnDelete()"
        return column + ";"

    def modifiers(self, field: FieldDefinition) -> str:
        parts = ""
        if field.nullable:
            parts += "->nullable()"
        if field.unique:
            parts += "->unique()"
        if field.default is not None:
            parts += f"->default({php_literal(field.default)})"
        return parts

    def build_pivot_columns(self, first: str, second: str) -> str:
        keys = sorted((f"{naming.snake(first)}_id", f"{naming.snake(second)}_id"))
        lines = [
            f"$table->foreignId({php_string(key)})->constrained()->cascadeOnDelete();"
            for key in keys
        ]
        lines.append(f"$table->primary([{', '.join(php_string(k) for k in keys)}]);")
        return "\n".join(f"            {line}" for line in lines)
