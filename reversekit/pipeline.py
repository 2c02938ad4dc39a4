"""ReverseKit pipeline and command-line interface.

Two steps turn an input into Laravel source files:

PARSE    -- Read JSON, a live API URL, OpenAPI, Postman or SQLite into entities.
GENERATE -- Render models, migrations, factories and friends for each entity.

Usage::

    reversekit generate json users.json --name User
    reversekit generate openapi openapi.yaml --only model,migration,factory
    reversekit generate url https://api.example.com/v1/posts --dry-run
    reversekit interactive
    reversekit publish-stubs
    reversekit init-config
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import Any, Optional

from rich.panel import Panel

from reversekit.config import GENERATOR_NAMES, Config
from reversekit.exceptions import ConfigError, ParserError, ReverseKitError
from reversekit.interactive import InteractiveBuilder
from reversekit.models import Entity, ParseResult
from reversekit.parser import ApiUrlParser, DatabaseParser, JsonParser, OpenApiParser, PostmanParser
from reversekit.scaffolder import GenerationReport, ProjectGenerator, TemplateRenderer
from reversekit.support.relationships import RelationshipDetector
from reversekit.utils import (
    console,
    format_duration,
    print_entity,
    print_error,
    print_files,
    print_header,
    print_success,
    print_summary_table,
    print_warning,
)

PARSER_KINDS: tuple[str, ...] = ("json", "url", "openapi", "postman", "database")

CONFIG_FILE = "reversekit.json"
STUBS_DIR = Path("stubs") / "reversekit"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ReversePipeline:
    """Parses an input source and scaffolds every entity found in it.

    Attributes:
        config: Global configuration handed to every generator.
        generator: The ``ProjectGenerator`` doing the writing.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.relationship_detector = RelationshipDetector()
        json_parser = JsonParser(self.relationship_detector.type_inferrer, self.relationship_detector)
        self.parsers: dict[str, Any] = {
            "json": json_parser,
            "url": ApiUrlParser(json_parser, self.config.api),
            "openapi": OpenApiParser(self.relationship_detector.type_inferrer, self.relationship_detector),
            "postman": PostmanParser(json_parser),
            "database": DatabaseParser(self.relationship_detector),
        }
        self.generator = ProjectGenerator(self.config, relationship_detector=self.relationship_detector)

    # ------------------------------------------------------------------
    # Parse
    # ------------------------------------------------------------------

    async def parse(
        self,
        kind: str,
        source: str,
        name: Optional[str] = None,
        tables: Optional[list[str]] = None,
    ) -> ParseResult:
        """Dispatch *source* to the parser registered for *kind*.

        Raises:
            ParserError: For an unknown kind or unreadable input.
        """
        parser = self.parsers.get(kind)
        if parser is None:
            raise ParserError(source, f"unknown input kind '{kind}' (expected one of {', '.join(PARSER_KINDS)})")
        if kind in ("json", "url"):
            return await parser.parse(source, name=name)
        if kind == "database":
            return await parser.parse(source, tables=tables)
        return await parser.parse(source)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(
        self,
        kind: str,
        source: str,
        name: Optional[str] = None,
        tables: Optional[list[str]] = None,
        models: Optional[list[str]] = None,
        only: Optional[list[str]] = None,
        force: bool = False,
        dry_run: bool = False,
    ) -> GenerationReport:
        """Parse *source* and generate files for the resulting entities.

        Args:
            models: Restrict generation to these model names.
            only: Restrict generation to these generator names.
            dry_run: Print the parsed entities without writing anything.

        Returns:
            The generation report (empty on a dry run).
        """
        started = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]ReverseKit[/bold bright_cyan]\n"
                f"Input  : {kind} {source}\n"
                f"Output : {self.config.base_path.resolve()}",
                border_style="bright_cyan",
            )
        )

        print_header("Parse")
        result = await self.parse(kind, source, name=name, tables=tables)
        for warning in result.warnings:
            print_warning(warning)
        entities = select_entities(result.entities, models)
        if not entities:
            print_warning("No entities found.")
            return GenerationReport()

        return await self.generate(entities, only=only, force=force, dry_run=dry_run, started=started)

    async def generate(
        self,
        entities: list[Entity],
        only: Optional[list[str]] = None,
        force: bool = False,
        dry_run: bool = False,
        started: Optional[float] = None,
    ) -> GenerationReport:
        """Preview and/or generate *entities*."""
        unknown = sorted(set(only or []) - set(GENERATOR_NAMES))
        if unknown:
            raise ConfigError(f"Unknown generators: {', '.join(unknown)}")
        started = started if started is not None else time.monotonic()
        for entity in entities:
            print_entity(entity)

        if dry_run:
            print_warning(
                f"Dry run: would run {', '.join(self.generator.enabled(only)) or 'no generators'} "
                f"for {len(entities)} entit{'y' if len(entities) == 1 else 'ies'}."
            )
            return GenerationReport()

        print_header("Generate", color="bright_green")
        report = await self.generator.generate(entities, force=force, only=only)
        print_files(report.tags)
        console.print()
        print_summary_table(
            {
                "Entities": len(entities),
                "Written": len(report.written),
                "Skipped": len(report.skipped),
                "Duration": format_duration(time.monotonic() - started),
            },
            title="ReverseKit",
        )
        if report.skipped and not force:
            print_warning("Existing files were skipped; pass --force to overwrite them.")
        return report


def select_entities(entities: list[Entity], models: Optional[list[str]] = None) -> list[Entity]:
    """Keep only the entities named in *models* (case-insensitive)."""
    if not models:
        return entities
    wanted = {m.lower() for m in models}
    return [e for e in entities if e.name.lower() in wanted]


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _split(value: Optional[str]) -> Optional[list[str]]:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def load_config(config_path: Optional[str] = None, base_path: Optional[str] = None) -> Config:
    """Resolve the configuration for a CLI run.

    An explicit ``--config`` file wins, then ``reversekit.json`` in the base
    path, then ``REVERSEKIT_*`` environment variables.  ``--base-path``
    overrides whichever was used.
    """
    if config_path:
        config = Config.load(Path(config_path))
    else:
        default = Path(base_path or ".") / CONFIG_FILE
        config = Config.load(default) if default.exists() else Config.from_env()
    if base_path:
        config.base_path = Path(base_path)
    return config


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="reversekit",
        description="ReverseKit -- scaffold Laravel code from existing data sources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  reversekit generate json users.json --name User\n"
            "  reversekit generate openapi openapi.yaml --only model,factory\n"
            "  reversekit generate database database.sqlite --tables posts,users\n"
            "  reversekit interactive --dry-run\n"
        ),
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", default=None, help="Path to a reversekit.json/.yaml config file")
    common.add_argument("--base-path", "-b", default=None, help="Laravel project root (default: .)")

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", parents=[common], help="Parse a source and generate files")
    gen.add_argument("kind", choices=PARSER_KINDS, help="Input kind")
    gen.add_argument("source", help="File path, URL or database path")
    gen.add_argument("--name", "-n", default=None, help="Root model name (json and url inputs)")
    gen.add_argument("--tables", default=None, help="Comma-separated tables to read (database input)")
    gen.add_argument("--models", "-m", default=None, help="Comma-separated models to generate")
    gen.add_argument(
        "--only",
        default=None,
        help=f"Comma-separated generators to run ({', '.join(GENERATOR_NAMES)})",
    )
    gen.add_argument("--force", "-f", action="store_true", help="Overwrite existing files")
    gen.add_argument("--dry-run", action="store_true", help="Show parsed entities without writing")

    inter = sub.add_parser("interactive", parents=[common], help="Describe a model interactively")
    inter.add_argument("--name", "-n", default=None, help="Model name (prompted when omitted)")
    inter.add_argument("--only", default=None, help="Comma-separated generators to run")
    inter.add_argument("--force", "-f", action="store_true", help="Overwrite existing files")
    inter.add_argument("--dry-run", action="store_true", help="Show the entity without writing")

    stubs = sub.add_parser("publish-stubs", parents=[common], help="Copy the stubs for customisation")
    stubs.add_argument("--path", default=None, help=f"Target directory (default: <base>/{STUBS_DIR})")
    stubs.add_argument("--force", "-f", action="store_true", help="Overwrite published stubs")

    init = sub.add_parser("init-config", parents=[common], help="Write a default reversekit.json")
    init.add_argument("--force", "-f", action="store_true", help="Overwrite an existing config file")

    return parser


async def _dispatch(args) -> int:
    if args.command == "init-config":
        config = Config(base_path=Path(args.base_path or "."))
        target = config.base_path / CONFIG_FILE
        if target.exists() and not args.force:
            print_warning(f"{target} already exists; pass --force to overwrite it.")
            return 0
        config.save(target)
        print_success(f"Wrote {target}")
        return 0

    config = load_config(args.config, args.base_path)

    if args.command == "publish-stubs":
        target = Path(args.path) if args.path else config.base_path / STUBS_DIR
        published = await TemplateRenderer().publish(target, force=args.force)
        print_files(str(path) if written else f"skipped:{path}" for path, written in published)
        print_success(f"Stubs published to {target}")
        if config.stubs_path is None:
            console.print(f'[dim]Set "stubs_path": "{target}" in {CONFIG_FILE} to use them.[/dim]')
        return 0

    pipeline = ReversePipeline(config)

    if args.command == "interactive":
        builder = InteractiveBuilder(pipeline.relationship_detector)
        entity = await asyncio.to_thread(builder.build, args.name)
        await pipeline.generate([entity], only=_split(args.only), force=args.force, dry_run=args.dry_run)
        return 0

    await pipeline.run(
        args.kind,
        args.source,
        name=args.name,
        tables=_split(args.tables),
        models=_split(args.models),
        only=_split(args.only),
        force=args.force,
        dry_run=args.dry_run,
    )
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``reversekit`` and ``python -m reversekit``."""
    args = _build_parser().parse_args(argv)
    try:
        code = asyncio.run(_dispatch(args))
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        sys.exit(1)
    except ReverseKitError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
