"""CLI commands for cache management."""

from __future__ import annotations

import asyncio
import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from artwork_aggregator.cache.migrations import apply_migrations
from artwork_aggregator.cache.paths import resolve_cache_db_path
from artwork_aggregator.cache.provider_cache import ProviderCache

app: TyperType = typer.Typer(help="Manage the artwork cache database.")

DbPathOption = Annotated[
    Path | None,
    typer.Option(
        "--db-path",
        help="Optional override for the cache database location.",
    ),
]
NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        help="Only clear one namespace (e.g. logo, fanartApiKey).",
    ),
]


def migrate(db_path: DbPathOption = None) -> None:
    """Apply cache migrations to ensure schema is up-to-date."""

    resolved_path = resolve_cache_db_path(db_path)
    applied = asyncio.run(apply_migrations(resolved_path))
    typer.secho(f"Migrations applied to {resolved_path}", fg=typer.colors.GREEN)
    for name in applied:
        typer.echo(f"  {name}")


async def _clear(db_path: Path | None, namespace: str | None) -> int:
    async with ProviderCache(db_path) as cache:
        return await cache.clear(namespace)


def clear(db_path: DbPathOption = None, namespace: NamespaceOption = None) -> None:
    """Delete cached entries."""

    removed = asyncio.run(_clear(db_path, namespace))
    scope = f"namespace '{namespace}'" if namespace else "all namespaces"
    typer.secho(f"Removed {removed} entries from {scope}", fg=typer.colors.GREEN)


async def _cleanup(db_path: Path | None) -> int:
    async with ProviderCache(db_path) as cache:
        return await cache.cleanup_expired()


def cleanup(db_path: DbPathOption = None) -> None:
    """Drop expired entries."""

    removed = asyncio.run(_cleanup(db_path))
    typer.secho(f"Removed {removed} expired entries", fg=typer.colors.GREEN)


app.command("migrate")(migrate)
app.command("clear")(clear)
app.command("cleanup")(cleanup)
