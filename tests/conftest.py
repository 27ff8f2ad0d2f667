"""Test fixtures for chronicle.

Provides:
- engine: A file-backed SQLite engine with ``users`` and ``notes`` live tables
- user_columns: Column descriptors for the ``users`` table
- chronicle: A Chronicle bound to the engine with ``users`` registered
- fetch_users: Reads the live ``users`` rows straight from the database
"""

from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from chronicle import Chronicle, ColumnDescriptor


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    """Create a fresh SQLite database holding the live tables used by tests.

    Args:
        tmp_path: pytest's per-test temporary directory.

    Yields:
        An Engine whose database has empty ``users`` and ``notes`` tables.
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'chronicle.db'}", future=True)
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT,
                    value INTEGER
                )
                """
            )
        )
        conn.execute(
            text(
                """
                CREATE TABLE notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    body TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'draft'
                )
                """
            )
        )
    yield engine
    engine.dispose()


@pytest.fixture()
def user_columns() -> list[ColumnDescriptor]:
    """Return descriptors matching the ``users`` table, in declared order."""
    return [
        ColumnDescriptor(name="id", storage_class="integer", primary_key=True),
        ColumnDescriptor(name="name", storage_class="text"),
        ColumnDescriptor(name="email", storage_class="text"),
        ColumnDescriptor(name="value", storage_class="integer"),
    ]


@pytest.fixture()
def note_columns() -> list[ColumnDescriptor]:
    """Return descriptors matching the ``notes`` table."""
    return [
        ColumnDescriptor(name="id", storage_class="integer", primary_key=True),
        ColumnDescriptor(name="body"),
        ColumnDescriptor(name="status"),
    ]


@pytest.fixture()
def chronicle(engine: Engine, user_columns: list[ColumnDescriptor]) -> Chronicle:
    """Create a Chronicle with the ``users`` table registered.

    Args:
        engine: Injected SQLite engine fixture.
        user_columns: Injected ``users`` descriptors.

    Returns:
        A Chronicle using the default configuration.
    """
    chronicle = Chronicle(engine)
    chronicle.register_table(user_columns, "users")
    return chronicle


@pytest.fixture()
def fetch_users(engine: Engine) -> Callable[[], list[dict[str, Any]]]:
    """Return a callable that reads every live ``users`` row ordered by id."""

    def fetch() -> list[dict[str, Any]]:
        with engine.connect() as conn:
            rows = conn.execute(text("SELECT * FROM users ORDER BY id")).mappings()
            return [dict(row) for row in rows]

    return fetch
