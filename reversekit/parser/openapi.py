"""Entity extraction from OpenAPI 3 / Swagger 2 documents.

Every object schema under ``components.schemas`` (or ``definitions``) becomes
an entity.  ``$ref`` properties pointing at another entity become
``belongsTo`` relations, arrays of such references become ``hasMany``.
Request/response wrapper schemas are skipped and reported as warnings.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import yaml

from reversekit.exceptions import ParserError
from reversekit.models import SOFT_DELETE_COLUMN, TIMESTAMP_COLUMNS, Entity, ParseResult
from reversekit.support import naming
from reversekit.support.relationships import RelationshipDetector
from reversekit.support.type_inferrer import TypeInferrer


_WRAPPER_SUFFIXES = (
    "Request", "Response", "Error", "Errors", "List", "Collection",
    "Input", "Payload", "Paginated", "Problem",
)


class OpenApiParser:
    """Builds entities from the schema section of an OpenAPI document."""

    def __init__(
        self,
        type_inferrer: TypeInferrer | None = None,
        relationship_detector: RelationshipDetector | None = None,
    ) -> None:
        self.type_inferrer = type_inferrer or TypeInferrer()
        self.relationship_detector = relationship_detector or RelationshipDetector(self.type_inferrer)

    async def parse(self, path: str | Path) -> ParseResult:
        """Parse an OpenAPI file in JSON or YAML.

        Raises:
            ParserError: If the file is missing, malformed, or has no schemas.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ParserError(str(file_path), "OpenAPI file not found")
        raw = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        try:
            if file_path.suffix.lower() == ".json":
                document = json.loads(raw)
            else:
                document = yaml.safe_load(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ParserError(str(file_path), f"cannot decode document: {exc}") from exc
        return self.parse_document(document, source=str(file_path))

    def parse_document(self, document: Any, source: str = "openapi") -> ParseResult:
        if not isinstance(document, dict):
            raise ParserError(source, "document root must be a mapping")

        schemas = _schemas(document)
        if not schemas:
            raise ParserError(source, "no schemas found under components.schemas or definitions")

        result = ParseResult(source=source)
        resolved: dict[str, dict[str, Any]] = {}
        entities: dict[str, Entity] = {}

        for schema_name, schema in schemas.items():
            flat = self._flatten(schema, schemas)
            if schema_name.endswith(_WRAPPER_SUFFIXES):
                result.warnings.append(f"Skipped wrapper schema '{schema_name}'")
                continue
            if not flat.get("properties"):
                result.warnings.append(f"Skipped non-object schema '{schema_name}'")
                continue
            resolved[schema_name] = flat
            entities[schema_name] = Entity(name=naming.model_name(schema_name), source=source)

        for schema_name, flat in resolved.items():
            self._fill(entities[schema_name], flat, schemas, entities)

        result.entities = list(entities.values())
        for entity in result.entities:
            self.relationship_detector.detect_from_fields(entity)
        self.relationship_detector.add_inverse_relationships(result.entities)
        return result

    # -- Internals ---------------------------------------------------------

    def _fill(
        self,
        entity: Entity,
        schema: dict[str, Any],
        schemas: dict[str, Any],
        entities: dict[str, Entity],
    ) -> None:
        detector = self.relationship_detector
        required = set(schema.get("required", []))

        for prop, prop_schema in schema.get("properties", {}).items():
            if prop in TIMESTAMP_COLUMNS:
                entity.timestamps = True
                continue
            if prop == SOFT_DELETE_COLUMN:
                entity.soft_deletes = True
                continue

            ref = _ref_name(prop_schema)
            if ref and ref in entities:
                detector.nested_object(entity, prop, entities[ref].name)
                continue

            if prop_schema.get("type") == "array":
                item_ref = _ref_name(prop_schema.get("items", {}))
                if item_ref and item_ref in entities:
                    detector.nested_collection(entity, prop, entities[item_ref])
                    continue
                if prop.endswith("_ids"):
                    detector.id_collection(entity, prop)
                    continue

            if ref:
                # Reference to a non-entity schema such as a string enum.
                prop_schema = self._flatten(prop_schema, schemas)
            entity.add_field(self.type_inferrer.from_openapi(prop, prop_schema, prop in required))

    def _flatten(self, schema: dict[str, Any], schemas: dict[str, Any], depth: int = 0) -> dict[str, Any]:
        """Resolve a top-level ``$ref`` and merge ``allOf`` members."""
        if depth > 10:
            return {}
        ref = _ref_name(schema)
        if ref:
            return self._flatten(schemas.get(ref, {}), schemas, depth + 1)
        if "allOf" not in schema:
            return schema

        merged: dict[str, Any] = {k: v for k, v in schema.items() if k != "allOf"}
        properties: dict[str, Any] = dict(merged.get("properties", {}))
        required: list[str] = list(merged.get("required", []))
        for member in schema["allOf"]:
            part = self._flatten(member, schemas, depth + 1)
            properties.update(part.get("properties", {}))
            required.extend(part.get("required", []))
        merged["type"] = "object"
        merged["properties"] = properties
        merged["required"] = required
        return merged


def _schemas(document: dict[str, Any]) -> dict[str, Any]:
    components = document.get("components") or {}
    return components.get("schemas") or document.get("definitions") or {}


def _ref_name(schema: Any) -> str:
    """``{"$ref": "#/components/schemas/User"}`` -> ``User``."""
    if not isinstance(schema, dict):
        return ""
    ref = schema.get("$ref", "")
    return ref.rsplit("/", 1)[-1] if ref else ""
