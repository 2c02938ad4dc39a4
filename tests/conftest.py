"""Shared pytest fixtures for the ReverseKit test suite.

Provides reusable fixtures for:
- A temporary Laravel project root and a ``Config`` pointing at it
- Hand-built entities (``User``, ``Post``) covering every generator branch
- Paths to the JSON / OpenAPI / Postman sample inputs
- A small SQLite database built with the standard ``sqlite3`` module
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from reversekit.config import Config
from reversekit.models import Entity, FieldDefinition, Relationship, RelationshipType


FIXTURES = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def laravel_dir(tmp_path: Path) -> Path:
    """Temporary Laravel project root (auto-cleanup)."""
    project_dir = tmp_path / "laravel-app"
    project_dir.mkdir()
    return project_dir


@pytest.fixture
def config(laravel_dir: Path) -> Config:
    """Default configuration writing into ``laravel_dir``."""
    return Config(base_path=laravel_dir)


@pytest.fixture
def fixed_timestamp() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@pytest.fixture
def user_entity() -> Entity:
    """A ``User`` with unique email and a hidden password."""
    return Entity(
        name="User",
        fields=[
            {"name": "id", "type": "id", "phpType": "int"},
            {"name": "name", "type": "string", "length": 255},
            {"name": "email", "type": "string", "unique": True, "length": 255},
            {"name": "password", "type": "string", "length": 255},
        ],
    )


@pytest.fixture
def post_entity() -> Entity:
    """A ``Post`` exercising foreign keys, enums, states and every relation kind."""
    return Entity(
        name="Post",
        fields=[
            {"name": "id", "type": "id", "phpType": "int"},
            {"name": "user_id", "type": "foreignId", "phpType": "int", "references": "users"},
            {"name": "title", "type": "string", "length": 255},
            {"name": "slug", "type": "string", "unique": True, "length": 255},
            {"name": "body", "type": "text"},
            {"name": "status", "type": "enum", "values": ["draft", "published"]},
            {"name": "price", "type": "decimal", "phpType": "float", "precision": 8, "scale": 2},
            {"name": "views", "type": "integer", "phpType": "int", "default": 0},
            {"name": "is_published", "type": "boolean", "phpType": "bool"},
            {"name": "published_at", "type": "timestamp", "nullable": True},
        ],
        relationships=[
            Relationship(type=RelationshipType.BELONGS_TO, related="User", method="user", foreign_key="user_id"),
            Relationship(type=RelationshipType.HAS_MANY, related="Comment", method="comments", foreign_key="post_id"),
            Relationship(type=RelationshipType.BELONGS_TO_MANY, related="Tag", method="tags", pivot_table="post_tag"),
        ],
        soft_deletes=True,
    )


@pytest.fixture
def simple_field() -> FieldDefinition:
    return FieldDefinition(name="title", type="string")


# ---------------------------------------------------------------------------
# Sample inputs
# ---------------------------------------------------------------------------

@pytest.fixture
def posts_json() -> Path:
    """Paginated API response with nested author, comments and tag ids."""
    path = FIXTURES / "posts.json"
    assert path.exists(), f"Fixture not found at {path}"
    return path


@pytest.fixture
def openapi_yaml() -> Path:
    path = FIXTURES / "openapi.yaml"
    assert path.exists(), f"Fixture not found at {path}"
    return path


@pytest.fixture
def postman_collection() -> Path:
    path = FIXTURES / "postman_collection.json"
    assert path.exists(), f"Fixture not found at {path}"
    return path


@pytest.fixture
def blog_db(tmp_path: Path) -> Path:
    """SQLite database with users, posts, tags and a post_tag pivot."""
    db_path = tmp_path / "blog.sqlite"
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(
            """
            CREATE TABLE migrations (id INTEGER PRIMARY KEY, migration VARCHAR(255));
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name VARCHAR(255) NOT NULL,
                email VARCHAR(255) NOT NULL,
                is_admin TINYINT(1) NOT NULL DEFAULT 0,
                created_at DATETIME,
                updated_at DATETIME
            );
            CREATE UNIQUE INDEX users_email_unique ON users (email);
            CREATE TABLE posts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL REFERENCES users (id),
                title VARCHAR(150) NOT NULL,
                body TEXT,
                price DECIMAL(8, 2) NOT NULL DEFAULT '0.00',
                status VARCHAR(20) NOT NULL DEFAULT 'draft',
                deleted_at DATETIME
            );
            CREATE TABLE tags (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name VARCHAR(50) NOT NULL
            );
            CREATE TABLE post_tag (
                post_id INTEGER NOT NULL REFERENCES posts (id),
                tag_id INTEGER NOT NULL REFERENCES tags (id),
                PRIMARY KEY (post_id, tag_id)
            );
            """
        )
        conn.commit()
    finally:
        conn.close()
    return db_path
