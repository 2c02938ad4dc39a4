"""Entity extraction from Postman v2.x collections.

Walks the (possibly nested) item tree, parses every JSON request body and
saved example response with ``JsonParser``, and names the resulting entity
after the resource segment of the request URL.  Entities seen in several
requests are merged into one.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Iterator

from reversekit.exceptions import ParserError
from reversekit.models import Entity, ParseResult
from reversekit.parser.api_url import model_name_from_url
from reversekit.parser.json_parser import JsonParser


class PostmanParser:
    """Builds entities from the requests of a Postman collection."""

    def __init__(self, json_parser: JsonParser | None = None) -> None:
        self.json_parser = json_parser or JsonParser()

    async def parse(self, path: str | Path) -> ParseResult:
        """Parse a Postman collection export.

        Raises:
            ParserError: If the file is missing, not JSON, or not a collection.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ParserError(str(file_path), "Postman collection not found")
        raw = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        try:
            collection = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParserError(str(file_path), f"invalid JSON: {exc}") from exc
        return self.parse_collection(collection, source=str(file_path))

    def parse_collection(self, collection: Any, source: str = "postman") -> ParseResult:
        if not isinstance(collection, dict) or "item" not in collection:
            raise ParserError(source, "not a Postman collection (missing 'item')")

        merged: dict[str, Entity] = {}
        warnings: list[str] = []

        for request_name, request, responses in _walk(collection["item"]):
            url = _request_url(request)
            model = model_name_from_url(url) if url else "Item"
            bodies = [_request_body(request)] + [_response_body(r) for r in responses]
            for body in bodies:
                if body is None:
                    continue
                try:
                    data = json.loads(body)
                except json.JSONDecodeError:
                    warnings.append(f"Skipped non-JSON body in '{request_name}'")
                    continue
                try:
                    parsed = self.json_parser.parse_data(data, model, source=source)
                except ParserError:
                    warnings.append(f"Skipped body without objects in '{request_name}'")
                    continue
                for entity in parsed.entities:
                    if entity.name in merged:
                        merged[entity.name].merge(entity)
                    else:
                        merged[entity.name] = entity

        entities = list(merged.values())
        self.json_parser.relationship_detector.add_inverse_relationships(entities)
        if not entities:
            warnings.append("No JSON request or response bodies found")
        return ParseResult(source=source, entities=entities, warnings=warnings)


def _walk(items: list[Any]) -> Iterator[tuple[str, dict[str, Any], list[dict[str, Any]]]]:
    """Yield ``(name, request, responses)`` for every request, depth-first."""
    for item in items:
        if not isinstance(item, dict):
            continue
        if "item" in item:
            yield from _walk(item["item"])
        elif "request" in item:
            request = item["request"]
            if isinstance(request, str):
                request = {"url": request}
            yield item.get("name", ""), request, item.get("response", []) or []


def _request_url(request: dict[str, Any]) -> str:
    url = request.get("url", "")
    if isinstance(url, dict):
        if url.get("raw"):
            return url["raw"]
        path = url.get("path", [])
        return "/" + "/".join(str(p) for p in path)
    return str(url)


def _request_body(request: dict[str, Any]) -> str | None:
    body = request.get("body") or {}
    if body.get("mode") == "raw" and body.get("raw"):
        return body["raw"]
    return None


def _response_body(response: dict[str, Any]) -> str | None:
    body = response.get("body") if isinstance(response, dict) else None
    return body or None
