"""Entity extraction from JSON samples.

Accepts a single object, an array of objects, or an API envelope whose
payload lives under ``data``.  Nested objects and arrays of objects become
entities of their own, linked to the parent through relationships.  When
several samples are given, a key that is missing or ``null`` in any of them
becomes a nullable field.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from reversekit.exceptions import ParserError
from reversekit.models import (
    SOFT_DELETE_COLUMN,
    TIMESTAMP_COLUMNS,
    Entity,
    ParseResult,
    Relationship,
    RelationshipType,
)
from reversekit.support import naming
from reversekit.support.relationships import RelationshipDetector
from reversekit.support.type_inferrer import TypeInferrer


# Keys that may accompany ``data`` in a paginated or wrapped API response.
_ENVELOPE_KEYS = frozenset({
    "data", "meta", "links", "status", "success", "message", "errors",
    "pagination", "page", "per_page", "total", "current_page", "last_page",
    "next_page_url", "prev_page_url", "first_page_url", "last_page_url",
    "path", "from", "to",
})
_MAX_DEPTH = 5


class JsonParser:
    """Builds entities from JSON documents."""

    def __init__(
        self,
        type_inferrer: TypeInferrer | None = None,
        relationship_detector: RelationshipDetector | None = None,
    ) -> None:
        self.type_inferrer = type_inferrer or TypeInferrer()
        self.relationship_detector = relationship_detector or RelationshipDetector(self.type_inferrer)

    async def parse(self, path: str | Path, name: Optional[str] = None) -> ParseResult:
        """Parse a JSON file.

        Args:
            path: The JSON file to read.
            name: Model name for the root object. Defaults to the singular
                form of the file stem (``users.json`` -> ``User``).

        Raises:
            ParserError: If the file is missing, not JSON, or holds no objects.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ParserError(str(file_path), "JSON file not found")
        raw = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParserError(str(file_path), f"invalid JSON: {exc}") from exc
        return self.parse_data(data, name or naming.model_name(file_path.stem), source=str(file_path))

    def parse_data(self, data: Any, name: str, source: str = "json") -> ParseResult:
        """Parse an already-decoded JSON value with *name* as the root model."""
        samples = _samples(unwrap_envelope(data))
        if not samples:
            raise ParserError(source, "expected a JSON object or an array of objects")

        entities: dict[str, Entity] = {}
        self._build(naming.model_name(name), samples, entities, source, depth=0)
        result = ParseResult(source=source, entities=list(entities.values()))
        self.relationship_detector.add_inverse_relationships(result.entities)
        return result

    # -- Internals ---------------------------------------------------------

    def _build(
        self,
        name: str,
        samples: list[dict[str, Any]],
        entities: dict[str, Entity],
        source: str,
        depth: int,
    ) -> Entity:
        entity = entities.get(name)
        if entity is None:
            entity = Entity(name=name, source=source)
            entities[name] = entity

        all_keys: dict[str, None] = {}
        for sample in samples:
            for key in sample:
                all_keys.setdefault(key, None)

        for sample in samples:
            for key, value in sample.items():
                self._add_key(entity, key, value, entities, source, depth)

        for key in all_keys:
            rel = self._relationship_for(entity, key)
            if rel is not None:
                # A relation key that was null or empty in some sample is not a column.
                entity.fields.pop(key, None)
                if rel.type == RelationshipType.BELONGS_TO and any(s.get(key) is None for s in samples):
                    foreign_key = entity.fields.get(rel.foreign_key or "")
                    if foreign_key is not None:
                        foreign_key.nullable = True
                continue
            field = entity.fields.get(key)
            if field is None:
                continue
            # Keys absent from some samples cannot be required.
            if any(key not in s for s in samples):
                field.nullable = True

        self.relationship_detector.detect_from_fields(entity)
        return entity

    def _add_key(
        self,
        entity: Entity,
        key: str,
        value: Any,
        entities: dict[str, Entity],
        source: str,
        depth: int,
    ) -> None:
        detector = self.relationship_detector

        if key in TIMESTAMP_COLUMNS:
            entity.timestamps = True
            return
        if key == SOFT_DELETE_COLUMN:
            entity.soft_deletes = True
            return

        if isinstance(value, dict) and value and depth < _MAX_DEPTH:
            child_name = detector.related_model(key)
            self._build(child_name, [value], entities, source, depth + 1)
            detector.nested_object(entity, key)
            return

        if isinstance(value, list) and value and all(isinstance(v, dict) for v in value):
            if depth < _MAX_DEPTH:
                child = self._build(naming.model_name(key), value, entities, source, depth + 1)
                detector.nested_collection(entity, key, child)
                return

        if isinstance(value, list) and key.endswith("_ids"):
            detector.id_collection(entity, key)
            return

        entity.add_field(self.type_inferrer.infer(key, value))

    def _relationship_for(self, entity: Entity, key: str) -> Optional[Relationship]:
        """The nested or ``*_ids`` relation built from *key*, if any."""
        if key.endswith("_ids"):
            method = naming.camel(self.relationship_detector.pluralize(key[: -len("_ids")]))
            return entity.relationship(method)
        return entity.relationship(naming.camel(key))


def unwrap_envelope(data: Any) -> Any:
    """Return the payload of a ``{"data": ..., "meta": ...}`` style response."""
    if (
        isinstance(data, dict)
        and isinstance(data.get("data"), (dict, list))
        and set(data) <= _ENVELOPE_KEYS
    ):
        return data["data"]
    return data


def _samples(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    return []
