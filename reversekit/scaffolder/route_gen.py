"""API route registration.

Unlike the other generators this one edits a shared file: it appends an
``apiResource`` line and the controller import to ``routes/api.php``,
creating the file from the ``routes`` stub first if needed.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from reversekit.models import Entity
from reversekit.support import naming

from .base import BaseGenerator, FileStatus, GeneratedFile, php_string
from .controller_gen import CONTROLLER_NAMESPACE

_USE_LINE = re.compile(r"^use [^;]+;[ \t]*$", re.MULTILINE)


class RouteGenerator(BaseGenerator):
    name = "route"
    stub = "routes"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        path = self.get_path()
        uri = naming.resource_uri(entity.name)
        created = not await asyncio.to_thread(path.exists)
        if created:
            content = self.get_stub({})
        else:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")

        if self.is_registered(content, uri):
            return self.skip(path)

        controller = f"{entity.name}Controller"
        content = self.add_import(content, f"{self.get_namespace(CONTROLLER_NAMESPACE)}\\{controller}")
        content = content.rstrip("\n") + "\n\n" + self.route_line(uri, controller) + "\n"
        written = await self.write_file(path, content, force=True)
        if not created:
            written.status = FileStatus.UPDATED
        return written

    def get_path(self) -> Path:
        return self.config.path_for("routes")

    def is_registered(self, content: str, uri: str) -> bool:
        return re.search(rf"Route::apiResource\(\s*['\"]{re.escape(uri)}['\"]", content) is not None

    def route_line(self, uri: str, controller: str) -> str:
        line = f"Route::apiResource({php_string(uri)}, {controller}::class)"
        if self.config.route_middleware:
            middleware = ", ".join(php_string(m) for m in self.config.route_middleware)
            line += f"->middleware([{middleware}])"
        return line + ";"

    def add_import(self, content: str, class_path: str) -> str:
        """Insert ``use <class_path>;`` after the last existing import."""
        statement = f"use {class_path};"
        if statement in content:
            return content
        matches = list(_USE_LINE.finditer(content))
        if matches:
            end = matches[-1].end()
            return content[:end] + "\n" + statement + content[end:]
        if content.startswith("<?php"):
            head, _, rest = content.partition("\n")
            return head + "\n\n" + statement + "\n" + rest.lstrip("\n")
        return f"{statement}\n{content}"
