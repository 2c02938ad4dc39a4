"""ReverseKit configuration.

Centralised, typed configuration for parsing and generation. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON (or YAML) or environment variables without boiler-plate.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from reversekit.exceptions import ConfigError


# Order matters: ``ProjectGenerator`` runs generators in this sequence.
GENERATOR_NAMES: tuple[str, ...] = (
    "model",
    "migration",
    "factory",
    "seeder",
    "request",
    "controller",
    "resource",
    "policy",
    "test",
    "route",
)


class PathsConfig(BaseModel):
    """Output locations, relative to ``Config.base_path``."""

    models: str = Field(default="app/Models")
    controllers: str = Field(default="app/Http/Controllers/Api")
    requests: str = Field(default="app/Http/Requests")
    resources: str = Field(default="app/Http/Resources")
    policies: str = Field(default="app/Policies")
    migrations: str = Field(default="database/migrations")
    factories: str = Field(default="database/factories")
    seeders: str = Field(default="database/seeders")
    tests: str = Field(default="tests/Feature")
    routes: str = Field(default="routes/api.php")


class ApiConfig(BaseModel):
    """Settings for fetching live JSON endpoints."""

    timeout: int = Field(default=30, ge=1, description="Per-request timeout in seconds")
    headers: dict[str, str] = Field(default_factory=dict)
    token: Optional[str] = Field(default=None, description="Bearer token sent as Authorization")


class Config(BaseModel):
    """Global ReverseKit configuration.

    Instances are typically created once by the CLI entry point (or loaded
    from ``reversekit.json``) and then passed to the pipeline, which hands
    them to every generator.
    """

    base_path: Path = Field(default=Path("."))
    namespace: str = Field(default="App")
    paths: PathsConfig = Field(default_factory=PathsConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    generators: list[str] = Field(default_factory=lambda: list(GENERATOR_NAMES))
    stubs_path: Optional[Path] = Field(
        default=None, description="Directory of user stubs that override the packaged ones"
    )
    seeder_count: int = Field(default=10, ge=1)
    route_middleware: list[str] = Field(default_factory=list)
    use_policies: bool = Field(default=True)

    @field_validator("generators")
    @classmethod
    def _known_generators(cls, value: list[str]) -> list[str]:
        unknown = [name for name in value if name not in GENERATOR_NAMES]
        if unknown:
            raise ValueError(f"Unknown generators: {', '.join(unknown)}")
        return value

    @field_validator("namespace")
    @classmethod
    def _strip_namespace(cls, value: str) -> str:
        return value.strip("\\")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def namespace_for(self, key: str) -> str:
        """Return the PHP namespace for a sub-namespace, e.g. ``App\\Models``."""
        if not key:
            return self.namespace
        return f"{self.namespace}\\{key}"

    def path_for(self, key: str) -> Path:
        """Absolute-ish output path for one of the ``PathsConfig`` entries."""
        return self.base_path / getattr(self.paths, key)

    def is_enabled(self, generator: str) -> bool:
        return generator in self.generators

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<base_path>/reversekit.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.base_path / "reversekit.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration file (``.json``, ``.yaml`` or ``.yml``).

        Raises:
            ConfigError: If the file is missing, unreadable or invalid.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ConfigError(f"Config file not found: {file_path}")

        raw = file_path.read_text(encoding="utf-8")
        try:
            if file_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(raw) or {}
            else:
                data = json.loads(raw)
            return cls.model_validate(data)
        except (json.JSONDecodeError, yaml.YAMLError, ValidationError) as exc:
            raise ConfigError(f"Invalid config file {file_path}: {exc}") from exc

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            REVERSEKIT_BASE_PATH, REVERSEKIT_NAMESPACE, REVERSEKIT_GENERATORS,
            REVERSEKIT_STUBS_PATH, REVERSEKIT_SEEDER_COUNT,
            REVERSEKIT_ROUTE_MIDDLEWARE, REVERSEKIT_API_TIMEOUT,
            REVERSEKIT_API_TOKEN.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("REVERSEKIT_BASE_PATH"):
            kwargs["base_path"] = Path(os.environ["REVERSEKIT_BASE_PATH"])
        if os.environ.get("REVERSEKIT_NAMESPACE"):
            kwargs["namespace"] = os.environ["REVERSEKIT_NAMESPACE"]
        if os.environ.get("REVERSEKIT_GENERATORS"):
            kwargs["generators"] = _split_csv(os.environ["REVERSEKIT_GENERATORS"])
        if os.environ.get("REVERSEKIT_STUBS_PATH"):
            kwargs["stubs_path"] = Path(os.environ["REVERSEKIT_STUBS_PATH"])
        if os.environ.get("REVERSEKIT_SEEDER_COUNT"):
            kwargs["seeder_count"] = os.environ["REVERSEKIT_SEEDER_COUNT"]
        if os.environ.get("REVERSEKIT_ROUTE_MIDDLEWARE"):
            kwargs["route_middleware"] = _split_csv(os.environ["REVERSEKIT_ROUTE_MIDDLEWARE"])

        api_kwargs: dict[str, Any] = {}
        if os.environ.get("REVERSEKIT_API_TIMEOUT"):
            api_kwargs["timeout"] = os.environ["REVERSEKIT_API_TIMEOUT"]
        if os.environ.get("REVERSEKIT_API_TOKEN"):
            api_kwargs["token"] = os.environ["REVERSEKIT_API_TOKEN"]

        try:
            return cls(api=ApiConfig(**api_kwargs), **kwargs)
        except ValidationError as exc:
            raise ConfigError(f"Invalid REVERSEKIT_* environment: {exc}") from exc


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]
