"""Database seeder generation."""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity

from .base import BaseGenerator, GeneratedFile


class SeederGenerator(BaseGenerator):
    """Generates ``database/seeders/<Model>Seeder.php`` using the model factory."""

    name = "seeder"
    stub = "seeder"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        class_name = f"{entity.name}Seeder"
        path = self.get_path(class_name)
        if not force and path.exists():
            return self.skip(path)

        content = self.get_stub({
            "modelNamespace": self.get_namespace("Models"),
            "model": entity.name,
            "class": class_name,
            "table": entity.table,
            "count": self.config.seeder_count,
        })
        return await self.write_file(path, content, force)

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("seeders") / f"{class_name}.php"
