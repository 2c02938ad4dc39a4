"""Column type inference from sample values, schemas and SQL declarations.

Every rule here is an ordered table lookup: the first matching rule wins.
Name-based rules run before value-based ones because a sample value such as
``"2024"`` says less about a column than its name does.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from reversekit.models import FieldDefinition


_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
)
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")

_MONEY_NAMES = ("price", "amount", "cost", "total", "balance", "fee", "salary", "subtotal", "tax")
_INT32_MAX = 2**31 - 1
_STRING_MAX = 255

_PHP_TYPES: dict[str, str] = {
    "id": "int",
    "integer": "int",
    "bigInteger": "int",
    "foreignId": "int",
    "float": "float",
    "double": "float",
    "decimal": "float",
    "boolean": "bool",
    "json": "array",
}

_CASTS: dict[str, str] = {
    "boolean": "boolean",
    "json": "array",
    "date": "date",
    "dateTime": "datetime",
    "timestamp": "datetime",
    "decimal": "decimal:2",
    "float": "float",
    "double": "float",
    "integer": "integer",
    "bigInteger": "integer",
}

_OPENAPI_FORMATS: dict[str, str] = {
    "date": "date",
    "date-time": "dateTime",
    "time": "time",
    "uuid": "uuid",
    "int64": "bigInteger",
    "int32": "integer",
    "float": "float",
    "double": "double",
}

_OPENAPI_TYPES: dict[str, str] = {
    "integer": "integer",
    "number": "float",
    "boolean": "boolean",
    "array": "json",
    "object": "json",
    "string": "string",
}

# Checked in order against the upper-cased declared SQL type.
_SQL_TYPES: tuple[tuple[str, str], ...] = (
    ("TINYINT(1)", "boolean"),
    ("BOOL", "boolean"),
    ("BIGINT", "bigInteger"),
    ("INT", "integer"),
    ("DECIMAL", "decimal"),
    ("NUMERIC", "decimal"),
    ("DOUBLE", "double"),
    ("REAL", "float"),
    ("FLOAT", "float"),
    ("TIMESTAMP", "timestamp"),
    ("DATETIME", "dateTime"),
    ("DATE", "date"),
    ("TIME", "time"),
    ("JSON", "json"),
    ("UUID", "uuid"),
    ("LONGTEXT", "longText"),
    ("TEXT", "text"),
    ("CLOB", "text"),
    ("CHAR", "string"),
    ("VARCHAR", "string"),
)


class TypeInferrer:
    """Maps samples and schema declarations to ``FieldDefinition`` objects."""

    # -- Name-only guesses -------------------------------------------------

    def infer_from_name(self, name: str) -> str:
        """Return the column type implied by the field name alone."""
        lower = name.lower()
        if lower == "id":
            return "id"
        if lower.endswith("_id"):
            return "foreignId"
        if lower.startswith(("is_", "has_", "can_")):
            return "boolean"
        if lower.endswith("_at"):
            return "timestamp"
        if lower.endswith(("_date", "_on")) or lower in ("date", "birthday", "dob"):
            return "date"
        if any(money in lower for money in _MONEY_NAMES):
            return "decimal"
        if lower in ("description", "body", "content", "bio", "notes", "summary"):
            return "text"
        if lower in ("count", "quantity", "age", "position", "order", "sort_order", "stock"):
            return "integer"
        return "string"

    # -- Sample values -----------------------------------------------------

    def infer(self, name: str, value: Any) -> FieldDefinition:
        """Infer a field from a JSON sample value."""
        column = self._column_for_value(name, value)
        field = self.make_field(name, column, nullable=value is None)
        if column == "string" and isinstance(value, str) and field.length is None:
            field.length = _STRING_MAX
        return field

    def _column_for_value(self, name: str, value: Any) -> str:
        lower = name.lower()
        if lower == "id":
            return "id"
        if value is None:
            return self.infer_from_name(name)
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            if lower.endswith("_id"):
                return "foreignId"
            if lower.startswith(("is_", "has_")) and value in (0, 1):
                return "boolean"
            return "bigInteger" if abs(value) > _INT32_MAX else "integer"
        if isinstance(value, float):
            if any(money in lower for money in _MONEY_NAMES):
                return "decimal"
            return "float"
        if isinstance(value, str):
            return self._column_for_string(lower, value)
        if isinstance(value, (list, dict)):
            return "json"
        return "string"

    def _column_for_string(self, lower_name: str, value: str) -> str:
        if _UUID_PATTERN.match(value):
            return "uuid"
        if _DATETIME_PATTERN.match(value):
            return "timestamp" if lower_name.endswith("_at") else "dateTime"
        if _DATE_PATTERN.match(value):
            return "date"
        if _TIME_PATTERN.match(value):
            return "time"
        if len(value) > _STRING_MAX:
            return "text"
        if lower_name in ("description", "body", "content", "bio"):
            return "text"
        return "string"

    # -- OpenAPI schemas ---------------------------------------------------

    def from_openapi(self, name: str, schema: dict[str, Any], required: bool = True) -> FieldDefinition:
        """Map an OpenAPI property schema to a field."""
        schema_type = schema.get("type", "string")
        if isinstance(schema_type, list):
            # OpenAPI 3.1 style: ["string", "null"]
            non_null = [t for t in schema_type if t != "null"]
            nullable = len(non_null) != len(schema_type)
            schema_type = non_null[0] if non_null else "string"
        else:
            nullable = bool(schema.get("nullable", False))
        nullable = nullable or not required

        if name == "id":
            column = "id"
        elif schema.get("enum"):
            column = "enum"
        elif name.endswith("_id") and schema_type in ("integer", "number"):
            column = "foreignId"
        elif schema.get("format") in _OPENAPI_FORMATS:
            column = _OPENAPI_FORMATS[schema["format"]]
        else:
            column = _OPENAPI_TYPES.get(schema_type, "string")
            if column == "string" and int(schema.get("maxLength", 0) or 0) > _STRING_MAX:
                column = "text"
            if column == "float" and any(m in name.lower() for m in _MONEY_NAMES):
                column = "decimal"

        field = self.make_field(name, column, nullable=nullable, default=schema.get("default"))
        if column == "enum":
            field.values = [str(v) for v in schema["enum"] if v is not None]
        if column == "string":
            field.length = int(schema.get("maxLength") or _STRING_MAX)
        return field

    # -- SQL declarations --------------------------------------------------

    def from_sql(
        self,
        name: str,
        declared_type: str,
        nullable: bool = False,
        default: Any = None,
        primary_key: bool = False,
    ) -> FieldDefinition:
        """Map a declared SQL column type (as SQLite reports it) to a field."""
        upper = (declared_type or "").upper()
        if primary_key and name == "id":
            column = "id"
        elif name.endswith("_id") and "INT" in upper:
            column = "foreignId"
        else:
            column = next((col for key, col in _SQL_TYPES if key in upper), None)
            if column is None:
                column = self.infer_from_name(name) if not upper else "string"

        field = self.make_field(name, column, nullable=nullable, default=_clean_sql_default(default))
        length = _declared_length(upper)
        if column == "string":
            field.length = length or _STRING_MAX
        if column == "decimal":
            precision, scale = _declared_precision(upper)
            field.precision, field.scale = precision, scale
        return field

    # -- Shared ------------------------------------------------------------

    def make_field(
        self,
        name: str,
        column: str,
        nullable: bool = False,
        default: Any = None,
    ) -> FieldDefinition:
        field = FieldDefinition(
            name=name,
            type=column,
            php_type=self.php_type_for(column),
            nullable=nullable,
            default=default,
        )
        if column == "decimal":
            field.precision, field.scale = 10, 2
        return field

    def php_type_for(self, column: str) -> str:
        return _PHP_TYPES.get(column, "string")

    def cast_for(self, column: str) -> Optional[str]:
        """Return the Eloquent cast for *column*, if it needs one."""
        return _CASTS.get(column)


def _declared_length(declared: str) -> Optional[int]:
    match = re.search(r"\((\d+)\)", declared)
    return int(match.group(1)) if match else None


def _declared_precision(declared: str) -> tuple[int, int]:
    match = re.search(r"\((\d+)\s*,\s*(\d+)\)", declared)
    if match:
        return int(match.group(1)), int(match.group(2))
    return 10, 2


def _clean_sql_default(default: Any) -> Any:
    """Strip SQL quoting from a reported column default."""
    if default is None:
        return None
    text = str(default)
    if text.upper() in ("NULL", "CURRENT_TIMESTAMP"):
        return None
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1]
    if re.fullmatch(r"-?\d+", text):
        return int(text)
    if re.fullmatch(r"-?\d+\.\d+", text):
        return float(text)
    return text
