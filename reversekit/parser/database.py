"""Entity extraction from an existing SQLite database.

Reads the schema through ``PRAGMA`` queries:

* ``table_info``        -- columns, declared types, nullability, defaults
* ``foreign_key_list``  -- ``belongsTo`` relations (and referenced tables)
* ``index_list`` / ``index_info`` -- single-column unique indexes

Framework bookkeeping tables are ignored.  Tables with exactly two foreign
keys and no other columns besides ``id``/timestamps are treated as pivot
tables and become ``belongsToMany`` relations instead of entities.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import aiosqlite

from reversekit.exceptions import ParserError
from reversekit.models import (
    SOFT_DELETE_COLUMN,
    TIMESTAMP_COLUMNS,
    Entity,
    ParseResult,
    Relationship,
    RelationshipType,
)
from reversekit.support import naming
from reversekit.support.relationships import RelationshipDetector
from reversekit.support.type_inferrer import TypeInferrer


IGNORED_TABLES: frozenset[str] = frozenset({
    "migrations",
    "sqlite_sequence",
    "password_reset_tokens",
    "password_resets",
    "failed_jobs",
    "jobs",
    "job_batches",
    "cache",
    "cache_locks",
    "sessions",
    "personal_access_tokens",
})


class DatabaseParser:
    """Builds entities from the tables of a SQLite database file."""

    def __init__(
        self,
        relationship_detector: RelationshipDetector | None = None,
    ) -> None:
        self.relationship_detector = relationship_detector or RelationshipDetector()

    @property
    def type_inferrer(self) -> TypeInferrer:
        return self.relationship_detector.type_inferrer

    async def parse(self, path: str | Path, tables: Optional[list[str]] = None) -> ParseResult:
        """Introspect the database at *path*.

        Args:
            path: SQLite database file.
            tables: Restrict the parse to these tables. Unknown names are
                reported as warnings.

        Raises:
            ParserError: If the file does not exist or is not a database.
        """
        db_path = Path(path)
        if not db_path.exists():
            raise ParserError(str(db_path), "database file not found")

        result = ParseResult(source=str(db_path))
        try:
            async with aiosqlite.connect(str(db_path)) as conn:
                available = await _table_names(conn)
                selected = self._select_tables(available, tables, result)
                schemas = {name: await _describe(conn, name) for name in selected}
        except aiosqlite.DatabaseError as exc:
            raise ParserError(str(db_path), f"cannot read schema: {exc}") from exc

        pivots = {name: s for name, s in schemas.items() if _is_pivot(s)}
        entities: dict[str, Entity] = {}
        for name, schema in schemas.items():
            if name in pivots:
                continue
            entities[name] = self._entity(name, schema, str(db_path))

        for name, schema in pivots.items():
            self._link_pivot(name, schema, entities, result)

        result.entities = list(entities.values())
        self.relationship_detector.add_inverse_relationships(result.entities)
        return result

    # -- Internals ---------------------------------------------------------

    def _select_tables(
        self,
        available: list[str],
        requested: Optional[list[str]],
        result: ParseResult,
    ) -> list[str]:
        if not requested:
            return [t for t in available if t not in IGNORED_TABLES]
        selected = []
        for table in requested:
            if table in available:
                selected.append(table)
            else:
                result.warnings.append(f"Table '{table}' does not exist")
        return selected

    def _entity(self, table: str, schema: dict[str, Any], source: str) -> Entity:
        entity = Entity(name=naming.model_name(table), table=table, source=source)
        entity.timestamps = False
        foreign = {fk["from"]: fk for fk in schema["foreign_keys"]}

        for column in schema["columns"]:
            name = column["name"]
            if name in TIMESTAMP_COLUMNS:
                entity.timestamps = True
                continue
            if name == SOFT_DELETE_COLUMN:
                entity.soft_deletes = True
                continue
            field = self.type_inferrer.from_sql(
                name,
                column["type"],
                nullable=not column["notnull"] and not column["pk"],
                default=column["dflt_value"],
                primary_key=bool(column["pk"]),
            )
            if name in foreign:
                field.type = "foreignId"
                field.php_type = "int"
                field.references = foreign[name]["table"]
            if name in schema["unique"]:
                field.unique = True
            entity.add_field(field)

        for column_name, fk in foreign.items():
            entity.add_relationship(Relationship(
                type=RelationshipType.BELONGS_TO,
                related=naming.model_name(fk["table"]),
                method=naming.camel(column_name[: -len("_id")] if column_name.endswith("_id") else column_name),
                foreign_key=column_name,
            ))
        self.relationship_detector.detect_from_fields(entity)
        return entity

    def _link_pivot(
        self,
        table: str,
        schema: dict[str, Any],
        entities: dict[str, Entity],
        result: ParseResult,
    ) -> None:
        first, second = schema["foreign_keys"][:2]
        left = entities.get(first["table"])
        right = entities.get(second["table"])
        if left is None or right is None:
            result.warnings.append(f"Pivot table '{table}' references unknown tables")
            return
        left.add_relationship(Relationship(
            type=RelationshipType.BELONGS_TO_MANY,
            related=right.name,
            method=naming.camel(right.table),
            pivot_table=table,
        ))
        right.add_relationship(Relationship(
            type=RelationshipType.BELONGS_TO_MANY,
            related=left.name,
            method=naming.camel(left.table),
            pivot_table=table,
        ))


async def _table_names(conn: aiosqlite.Connection) -> list[str]:
    async with conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
    ) as cursor:
        rows = await cursor.fetchall()
    return [row[0] for row in rows]


async def _describe(conn: aiosqlite.Connection, table: str) -> dict[str, Any]:
    """Collect columns, foreign keys and unique columns of *table*."""
    quoted = table.replace('"', '""')

    async with conn.execute(f'PRAGMA table_info("{quoted}")') as cursor:
        columns = [
            {"name": r[1], "type": r[2], "notnull": bool(r[3]), "dflt_value": r[4], "pk": bool(r[5])}
            for r in await cursor.fetchall()
        ]

    async with conn.execute(f'PRAGMA foreign_key_list("{quoted}")') as cursor:
        foreign_keys = [{"table": r[2], "from": r[3], "to": r[4]} for r in await cursor.fetchall()]

    unique: set[str] = set()
    async with conn.execute(f'PRAGMA index_list("{quoted}")') as cursor:
        indexes = await cursor.fetchall()
    for index in indexes:
        # (seq, name, unique, origin, partial)
        if not index[2] or index[3] == "pk":
            continue
        index_name = str(index[1]).replace('"', '""')
        async with conn.execute(f'PRAGMA index_info("{index_name}")') as cursor:
            index_columns = [r[2] for r in await cursor.fetchall()]
        if len(index_columns) == 1:
            unique.add(index_columns[0])

    return {"columns": columns, "foreign_keys": foreign_keys, "unique": unique}


def _is_pivot(schema: dict[str, Any]) -> bool:
    if len(schema["foreign_keys"]) != 2:
        return False
    extra = {
        c["name"] for c in schema["columns"]
    } - {fk["from"] for fk in schema["foreign_keys"]} - {"id"} - TIMESTAMP_COLUMNS
    return not extra
