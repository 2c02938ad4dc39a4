"""Entity extraction from a live JSON API endpoint.

Fetches the URL with ``httpx`` and hands the decoded body to ``JsonParser``.
The root model name is taken from the last path segment that is not an
identifier: ``/api/v1/blog-posts/42`` -> ``BlogPost``.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

import httpx

from reversekit.config import ApiConfig
from reversekit.exceptions import ParserError
from reversekit.models import ParseResult
from reversekit.parser.json_parser import JsonParser
from reversekit.support import naming


_ID_SEGMENT = re.compile(
    r"^(\d+|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|\{+[^}]+\}+|:[a-z_]+)$",
    re.IGNORECASE,
)
_VERSION_SEGMENT = re.compile(r"^(api|v\d+(\.\d+)?)$", re.IGNORECASE)


class ApiUrlParser:
    """Fetches a JSON endpoint and parses its response body."""

    def __init__(self, json_parser: JsonParser | None = None, api: ApiConfig | None = None) -> None:
        self.json_parser = json_parser or JsonParser()
        self.api = api or ApiConfig()

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with headers and timeout."""
        headers = {"Accept": "application/json", **self.api.headers}
        if self.api.token:
            headers["Authorization"] = f"Bearer {self.api.token}"
        return httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(self.api.timeout, connect=10.0),
            follow_redirects=True,
        )

    async def parse(self, url: str, name: Optional[str] = None) -> ParseResult:
        """Fetch *url* and build entities from the JSON response.

        Raises:
            ParserError: On transport errors, non-2xx statuses or non-JSON bodies.
        """
        if not url.startswith(("http://", "https://")):
            raise ParserError(url, "URL must start with http:// or https://")

        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ParserError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ParserError(url, f"request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ParserError(url, "response body is not JSON") from exc

        return self.json_parser.parse_data(data, name or model_name_from_url(url), source=url)


def model_name_from_url(url: str) -> str:
    """Infer a model name from the resource segment of *url*."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    for segment in reversed(segments):
        if _ID_SEGMENT.match(segment) or _VERSION_SEGMENT.match(segment):
            continue
        return naming.model_name(segment)
    return "Item"
