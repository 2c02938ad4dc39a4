"""Main scaffolding orchestrator.

Runs every enabled generator over a set of entities and collects the
outcome in a ``GenerationReport``.  Generators run in the fixed
``GENERATOR_NAMES`` order; migrations are emitted so that referenced tables
come first, each with its own strictly increasing timestamp, followed by
the pivot tables of ``belongsToMany`` relations.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field

from reversekit.config import GENERATOR_NAMES, Config
from reversekit.models import Entity, RelationshipType
from reversekit.support import naming
from reversekit.support.relationships import RelationshipDetector

from .base import BaseGenerator, FileStatus, GeneratedFile
from .controller_gen import ControllerGenerator
from .factory_gen import FactoryGenerator
from .migration_gen import MigrationGenerator
from .model_gen import ModelGenerator
from .policy_gen import PolicyGenerator
from .request_gen import FormRequestGenerator
from .resource_gen import ResourceGenerator
from .route_gen import RouteGenerator
from .seeder_gen import SeederGenerator
from .templates import TemplateRenderer
from .test_gen import TestGenerator


GENERATOR_CLASSES: dict[str, type[BaseGenerator]] = {
    "model": ModelGenerator,
    "migration": MigrationGenerator,
    "factory": FactoryGenerator,
    "seeder": SeederGenerator,
    "request": FormRequestGenerator,
    "controller": ControllerGenerator,
    "resource": ResourceGenerator,
    "policy": PolicyGenerator,
    "test": TestGenerator,
    "route": RouteGenerator,
}


# ---------------------------------------------------------------------------
# Report model
# ---------------------------------------------------------------------------


class GenerationReport(BaseModel):
    """Every file a run wrote, updated or skipped."""

    files: list[GeneratedFile] = Field(default_factory=list)

    def add(self, result: GeneratedFile | list[GeneratedFile]) -> None:
        if isinstance(result, list):
            self.files.extend(result)
        else:
            self.files.append(result)

    def with_status(self, *statuses: FileStatus) -> list[GeneratedFile]:
        return [f for f in self.files if f.status in statuses]

    @property
    def written(self) -> list[GeneratedFile]:
        return self.with_status(FileStatus.CREATED, FileStatus.OVERWRITTEN, FileStatus.UPDATED)

    @property
    def skipped(self) -> list[GeneratedFile]:
        return self.with_status(FileStatus.SKIPPED)

    @property
    def tags(self) -> list[str]:
        return [f.tag for f in self.files]

    def by_generator(self) -> dict[str, list[GeneratedFile]]:
        grouped: dict[str, list[GeneratedFile]] = {}
        for item in self.files:
            grouped.setdefault(item.generator, []).append(item)
        return grouped


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Scaffolds the Laravel files for a list of entities.

    All generators share one ``TemplateRenderer`` and one
    ``RelationshipDetector`` so user stub overrides and inflection apply
    uniformly.
    """

    def __init__(
        self,
        config: Config | None = None,
        renderer: TemplateRenderer | None = None,
        relationship_detector: RelationshipDetector | None = None,
    ) -> None:
        self.config = config or Config()
        self.renderer = renderer or TemplateRenderer(self.config.stubs_path)
        self.relationship_detector = relationship_detector or RelationshipDetector()
        self.generators: dict[str, BaseGenerator] = {
            name: cls(self.config, self.renderer, self.relationship_detector)
            for name, cls in GENERATOR_CLASSES.items()
        }

    def enabled(self, only: Optional[list[str]] = None) -> list[str]:
        """Generator names to run, in execution order."""
        names = [name for name in GENERATOR_NAMES if self.config.is_enabled(name)]
        if only:
            names = [name for name in names if name in only]
        return names

    # -- Public API --------------------------------------------------------

    async def generate(
        self,
        entities: list[Entity],
        force: bool = False,
        only: Optional[list[str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> GenerationReport:
        """Generate files for *entities*.

        Args:
            entities: Entities to scaffold.
            force: Overwrite existing files.
            only: Restrict the run to these generator names.
            timestamp: First migration timestamp, defaults to now.

        Returns:
            A report with one ``GeneratedFile`` per target file.
        """
        report = GenerationReport()
        for name in self.enabled(only):
            if name == "migration":
                report.add(await self._generate_migrations(entities, force, timestamp or datetime.now()))
                continue
            generator = self.generators[name]
            for entity in entities:
                report.add(await generator.generate(entity, force))
        return report

    async def _generate_migrations(
        self, entities: list[Entity], force: bool, start: datetime
    ) -> list[GeneratedFile]:
        generator: MigrationGenerator = self.generators["migration"]  # type: ignore[assignment]
        results: list[GeneratedFile] = []
        step = 0
        for entity in order_by_dependencies(entities):
            results.append(await generator.generate(entity, force, start + timedelta(seconds=step)))
            step += 1

        seen: set[str] = set()
        for entity in entities:
            for rel in entity.relationships_of(RelationshipType.BELONGS_TO_MANY):
                pivot = rel.pivot_table or self.relationship_detector.pivot_table(entity.name, rel.related)
                if pivot in seen:
                    continue
                seen.add(pivot)
                results.append(await generator.generate_pivot(
                    pivot, entity.name, rel.related, force, start + timedelta(seconds=step)
                ))
                step += 1
        return results


def order_by_dependencies(entities: list[Entity]) -> list[Entity]:
    """Order entities so that every referenced table precedes its referrers.

    Self references are ignored; entities caught in a reference cycle keep
    their input order after everything that can be ordered.
    """
    by_table = {entity.table: entity for entity in entities}
    depends: dict[str, set[str]] = {}
    for entity in entities:
        targets = {
            f.references or naming.table_name(f.name.removesuffix("_id"))
            for f in entity.foreign_keys()
        }
        depends[entity.table] = {t for t in targets if t in by_table and t != entity.table}

    ordered: list[Entity] = []
    placed: set[str] = set()
    remaining = list(entities)
    while remaining:
        ready = [e for e in remaining if depends[e.table] <= placed]
        if not ready:
            ready = remaining[:1]
        for entity in ready:
            ordered.append(entity)
            placed.add(entity.table)
        remaining = [e for e in remaining if e.table not in placed]
    return ordered
