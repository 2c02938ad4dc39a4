"""Jinja2 stub rendering for code generation.

Provides the TemplateRenderer class which loads stubs from the packaged
``reversekit/scaffolder/stubs/`` directory and renders them with per-entity
context data.  A user stub directory, when configured, is searched first so
any packaged stub can be overridden file by file.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from reversekit.support import naming


# ---------------------------------------------------------------------------
# Stub directory discovery
# ---------------------------------------------------------------------------

DEFAULT_STUB_DIR = Path(__file__).parent / "stubs"
STUB_SUFFIX = ".php.j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 stubs into PHP source.

    Stubs are addressed by their short name: ``render("factory", ctx)``
    renders ``factory.php.j2`` from the first stub directory that has it.
    """

    def __init__(self, stubs_path: str | Path | None = None) -> None:
        self.stub_dir = DEFAULT_STUB_DIR
        self.custom_dir = Path(stubs_path) if stubs_path else None
        search_path = [str(self.stub_dir)]
        if self.custom_dir is not None and self.custom_dir.is_dir():
            search_path.insert(0, str(self.custom_dir))
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["studly"] = naming.studly
        self.env.filters["camel"] = naming.camel
        self.env.filters["snake"] = naming.snake
        self.env.filters["kebab"] = naming.kebab
        self.env.filters["plural"] = naming.pluralize
        self.env.filters["singular"] = naming.singularize

    # -- Rendering ---------------------------------------------------------

    def render(self, stub: str, context: dict[str, Any]) -> str:
        """Render the stub named *stub* with the provided context.

        Args:
            stub: Short stub name (``"factory"``) or a file name ending in
                ``.php.j2``.
            context: Dictionary of variables available inside the stub.

        Returns:
            The rendered stub content as a string.
        """
        template = self.env.get_template(_stub_file(stub))
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    # -- Utility -----------------------------------------------------------

    def list_stubs(self) -> list[str]:
        """Return the sorted short names of all packaged stubs."""
        return sorted(
            p.name[: -len(STUB_SUFFIX)] for p in self.stub_dir.glob(f"*{STUB_SUFFIX}")
        )

    def is_overridden(self, stub: str) -> bool:
        """``True`` if the user stub directory provides *stub*."""
        if self.custom_dir is None:
            return False
        return (self.custom_dir / _stub_file(stub)).is_file()

    async def publish(self, target_dir: str | Path, force: bool = False) -> list[tuple[Path, bool]]:
        """Copy every packaged stub into *target_dir* for customisation.

        Existing files are left alone unless *force* is set.

        Returns:
            ``(path, written)`` pairs for every packaged stub.
        """
        target = Path(target_dir)
        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        published: list[tuple[Path, bool]] = []
        for name in self.list_stubs():
            source = self.stub_dir / _stub_file(name)
            destination = target / source.name
            if destination.exists() and not force:
                published.append((destination, False))
                continue
            await asyncio.to_thread(shutil.copyfile, source, destination)
            published.append((destination, True))
        return published


def _stub_file(stub: str) -> str:
    return stub if stub.endswith(STUB_SUFFIX) else f"{stub}{STUB_SUFFIX}"
