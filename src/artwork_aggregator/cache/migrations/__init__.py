"""SQLite schema migrations for the artwork cache database.

Migrations are the `.sql` files bundled next to this module, applied in
filename order and recorded in a `migrations` table so each runs once.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from importlib import resources
from importlib.abc import Traversable
from pathlib import Path

import aiosqlite

__all__ = [
    "MigrationFile",
    "apply_migrations",
    "ensure_connection_migrated",
    "get_migration_files",
]

_CREATE_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS migrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    applied_at TEXT NOT NULL
)
"""


@dataclass(frozen=True)
class MigrationFile:
    """A bundled SQL migration."""

    name: str
    sql: str


def _sql_resources() -> Iterable[Traversable]:
    for entry in resources.files(__name__).iterdir():
        if entry.name.endswith(".sql"):
            yield entry


def get_migration_files() -> list[MigrationFile]:
    """Load bundled migration files in name order."""

    ordered = sorted(_sql_resources(), key=lambda item: item.name)
    return [
        MigrationFile(name=entry.name, sql=entry.read_text(encoding="utf-8"))
        for entry in ordered
    ]


async def _applied_names(connection: aiosqlite.Connection) -> set[str]:
    async with connection.execute("SELECT name FROM migrations") as cursor:
        return {row[0] for row in await cursor.fetchall()}


async def ensure_connection_migrated(connection: aiosqlite.Connection) -> list[str]:
    """Bring an open connection up to date.

    Returns:
        Names of the migrations applied by this call (empty when current).
    """

    await connection.execute(_CREATE_MIGRATIONS_TABLE)
    await connection.commit()

    applied = await _applied_names(connection)
    newly_applied: list[str] = []

    for migration in get_migration_files():
        if migration.name in applied:
            continue

        await connection.executescript(migration.sql)
        stamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        await connection.execute(
            "INSERT INTO migrations (name, applied_at) VALUES (?, ?)",
            (migration.name, stamp),
        )
        await connection.commit()
        newly_applied.append(migration.name)

    return newly_applied


async def apply_migrations(db_path: str | Path) -> list[str]:
    """Open the database at `db_path` and apply pending migrations."""

    target = str(db_path)
    if target != ":memory:":
        path_obj = Path(db_path).expanduser()
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        target = str(path_obj)

    async with aiosqlite.connect(target) as connection:
        return await ensure_connection_migrated(connection)
