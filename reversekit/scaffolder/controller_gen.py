"""API resource controller generation."""

from __future__ import annotations

from pathlib import Path

from reversekit.models import Entity, RelationshipType
from reversekit.support import naming

from .base import BaseGenerator, GeneratedFile, php_string

CONTROLLER_NAMESPACE = "Http\\Controllers\\Api"


class ControllerGenerator(BaseGenerator):
    """Generates ``<Model>Controller`` with the five ``apiResource`` actions.

    Writes go through the store/update form requests, responses through the
    API resource.  When policies are enabled every action is authorised with
    ``Gate::authorize`` and ``belongsTo`` relations are eager-loaded.
    """

    name = "controller"
    stub = "controller"

    async def generate(self, entity: Entity, force: bool = False) -> GeneratedFile:
        class_name = f"{entity.name}Controller"
        path = self.get_path(class_name)
        if not force and path.exists():
            return self.skip(path)
        return await self.write_file(path, self.build_content(entity, class_name), force)

    def get_path(self, class_name: str) -> Path:
        return self.config.path_for("controllers") / f"{class_name}.php"

    def build_content(self, entity: Entity, class_name: str) -> str:
        relations = self.eager_loads(entity)
        return self.get_stub({
            "namespace": self.get_namespace(CONTROLLER_NAMESPACE),
            "imports": self.build_imports(entity),
            "class": class_name,
            "model": entity.name,
            "variable": naming.camel(entity.name),
            "collection": naming.camel(naming.pluralize(entity.name)),
            "resource": f"{entity.name}Resource",
            "storeRequest": f"Store{entity.name}Request",
            "updateRequest": f"Update{entity.name}Request",
            "relations": "[" + ", ".join(php_string(r) for r in relations) + "]" if relations else "",
            "ordered": entity.timestamps,
            "authorize": self.config.use_policies and self.config.is_enabled("policy"),
        })

    def eager_loads(self, entity: Entity) -> list[str]:
        return [rel.method for rel in entity.relationships_of(RelationshipType.BELONGS_TO)]

    def build_imports(self, entity: Entity) -> str:
        requests = self.get_namespace("Http\\Requests")
        resources = self.get_namespace("Http\\Resources")
        imports = {
            self.get_namespace("Http\\Controllers") + "\\Controller",
            f"{requests}\\Store{entity.name}Request",
            f"{requests}\\Update{entity.name}Request",
            f"{resources}\\{entity.name}Resource",
            f"{self.get_namespace('Models')}\\{entity.name}",
            "Illuminate\\Http\\Resources\\Json\\AnonymousResourceCollection",
            "Illuminate\\Http\\Response",
        }
        if self.config.use_policies and self.config.is_enabled("policy"):
            imports.add("Illuminate\\Support\\Facades\\Gate")
        return "\n".join(f"use {name};" for name in sorted(imports))
