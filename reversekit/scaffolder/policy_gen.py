"""Authorization policy generation.

Emits the seven abilities Laravel's ``--model`` policies carry.  Abilities
acting on a single record check ownership when the entity has a ``user_id``
column; otherwise every authenticated user is allowed.
"""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile

OWNER_KEY = "user_id"


class PolicyGenerator(BaseGenerator):
    name = "policy"
    stub = "policy"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        class_name = f"{entity.name}Policy"
        path = self.get_path(class_name)
        if not force and path.exists():
            return self.skip(path)

        variable = naming.camel(entity.name)
        if variable == "user":
            variable = "model"
        owned = entity.has_field(OWNER_KEY)
        content = self.get_stub({
            "namespace": self.get_namespace("Policies"),
            "modelNamespace": self.get_namespace("Models"),
            "class": class_name,
            "model": entity.name,
            "variable": variable,
            "owned": owned,
            # ``User`` is imported once even when the entity is the user model.
            "importModel": entity.name != "User",
            "check": f"$user->id === ${variable}->{OWNER_KEY}" if owned else "true",
        })
        return await self.write_file(path, content, force)

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("policies") / f"{class_name}.php"
