"""Shared plumbing for all file generators.

Every generator follows the same protocol: resolve the target path, skip if
the file exists unless forced, render a stub, write the file.  The outcome is
a ``GeneratedFile`` whose ``tag`` is the written path, or ``skipped:<path>``
when nothing was written.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from reversekit.config import Config
from reversekit.models import Entity
from reversekit.support.relationships import RelationshipDetector
from reversekit.support.type_inferrer import TypeInferrer

from .templates import TemplateRenderer


class FileStatus(str, Enum):
    """What a generator did with its target file."""
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    UPDATED = "updated"
    SKIPPED = "skipped"


class GeneratedFile(BaseModel):
    """Outcome of writing (or skipping) one file."""

    path: Path = Field(..., description="Target file path")
    status: FileStatus = Field(..., description="What happened to the file")
    generator: str = Field(default="", description="Generator that produced it")

    @property
    def skipped(self) -> bool:
        return self.status == FileStatus.SKIPPED

    @property
    def tag(self) -> str:
        """The written path, or ``skipped:<path>``."""
        if self.skipped:
            return f"skipped:{self.path}"
        return str(self.path)

    def __str__(self) -> str:
        return self.tag


class BaseGenerator:
    """Base class for stub-driven generators.

    Subclasses set ``name`` and ``stub`` and implement :meth:`generate`.
    """

    name: str = ""
    stub: str = ""

    def __init__(
        self,
        config: Config | None = None,
        renderer: TemplateRenderer | None = None,
        relationship_detector: RelationshipDetector | None = None,
    ) -> None:
        self.config = config or Config()
        self.renderer = renderer or TemplateRenderer(self.config.stubs_path)
        self.relationship_detector = relationship_detector or RelationshipDetector()

    @property
    def type_inferrer(self) -> TypeInferrer:
        return self.relationship_detector.type_inferrer

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        raise NotImplementedError

    # -- Helpers -----------------------------------------------------------

    def get_namespace(self, key: str) -> str:
        """PHP namespace for a sub-namespace: ``Models`` -> ``App\\Models``."""
        return self.config.namespace_for(key)

    def get_stub(self, context: dict[str, Any], stub: str | None = None) -> str:
        return self.renderer.render(stub or self.stub, context)

    async def write_file(self, path: Path, content: str, force: bool = False) -> GeneratedFile:
        """Write *content* to *path* unless it exists and *force* is false."""
        existed = await asyncio.to_thread(path.exists)
        if existed and not force:
            return self.skip(path)
        await asyncio.to_thread(_write_file, path, content)
        status = FileStatus.OVERWRITTEN if existed else FileStatus.CREATED
        return GeneratedFile(path=path, status=status, generator=self.name)

    def skip(self, path: Path) -> GeneratedFile:
        return GeneratedFile(path=path, status=FileStatus.SKIPPED, generator=self.name)


# ---------------------------------------------------------------------------
# PHP literal helpers
# ---------------------------------------------------------------------------

def php_string(value: str) -> str:
    """Single-quoted PHP string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def php_literal(value: Any) -> str:
    """PHP literal for a JSON-like scalar default."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return php_string(str(value))


def php_array(items: list[str], indent: int = 8) -> str:
    """Multi-line PHP array body from already-rendered item expressions."""
    if not items:
        return "[]"
    pad = " " * indent
    closing = " " * (indent - 4)
    body = "\n".join(f"{pad}{item}," for item in items)
    return f"[\n{body}\n{closing}]"


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
