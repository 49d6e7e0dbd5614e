"""CLI commands for poster and logo lookups."""

from __future__ import annotations

import asyncio
import importlib
from collections.abc import Sequence
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from artwork_aggregator.cache.provider_cache import ProviderCache
from artwork_aggregator.cli.cache import app as cache_app
from artwork_aggregator.core.config import ArtworkSettings
from artwork_aggregator.core.ids import normalize_content_type
from artwork_aggregator.metadata.artwork import ArtworkProvider
from artwork_aggregator.metadata.logos import LogoService
from artwork_aggregator.utils.debug import configure_logging

app: TyperType = typer.Typer(help="Look up posters and logos across providers.")
app.add_typer(cache_app, name="cache")

ContentTypeArgument = Annotated[
    str,
    typer.Argument(help="Content type: movie, series or tv."),
]
ItemIdArgument = Annotated[
    str,
    typer.Argument(help="Item id: tt..., tmdb:..., tvdb:... (:season:episode ok)."),
]
LanguageOption = Annotated[
    str,
    typer.Option("--language", help="Preferred ISO 639-1 language."),
]


def _check_content_type(content_type: str) -> None:
    if normalize_content_type(content_type) is None:
        typer.secho(
            f"Unknown content type: {content_type}", err=True, fg=typer.colors.RED
        )
        raise typer.Exit(code=2)


async def _lookup_poster(
    settings: ArtworkSettings, content_type: str, item_id: str
) -> str | None:
    async with ProviderCache() as cache:
        async with ArtworkProvider(settings, cache=cache) as provider:
            return await provider.get_poster_url(content_type, item_id)


def poster(content_type: ContentTypeArgument, item_id: ItemIdArgument) -> None:
    """Print the poster URL for an item (RPDB, then Fanart.tv)."""

    configure_logging()
    _check_content_type(content_type)

    url = asyncio.run(_lookup_poster(ArtworkSettings.from_env(), content_type, item_id))
    if url is None:
        typer.secho("No poster found", err=True, fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    typer.echo(url)


async def _lookup_logo(
    settings: ArtworkSettings, content_type: Any, item_id: str, language: str
) -> str | None:
    async with ProviderCache() as cache:
        async with LogoService(cache=cache, settings=settings) as service:
            return await service.get_logo(item_id, content_type, language)


def logo(
    content_type: ContentTypeArgument,
    item_id: ItemIdArgument,
    language: LanguageOption = "en",
) -> None:
    """Print the logo URL for an item (Fanart.tv, then TMDB)."""

    configure_logging()
    _check_content_type(content_type)

    url = asyncio.run(
        _lookup_logo(ArtworkSettings.from_env(), content_type, item_id, language)
    )
    if url is None:
        typer.secho("No logo found", err=True, fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    typer.echo(url)


async def _validate(settings: ArtworkSettings) -> dict[str, bool | None]:
    async with ProviderCache() as cache:
        async with ArtworkProvider(settings, cache=cache) as provider:
            results = await provider.validate_api_keys()
        async with LogoService(cache=cache, settings=settings) as service:
            for name, is_valid in (await service.validate_api_keys()).items():
                results.setdefault(name, is_valid)
    return results


def validate() -> None:
    """Check the configured provider keys and tokens."""

    configure_logging()
    results = asyncio.run(_validate(ArtworkSettings.from_env()))
    if not results:
        typer.secho("No providers configured", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    for name, is_valid in results.items():
        if is_valid is None:
            typer.secho(f"{name}: unknown", fg=typer.colors.YELLOW)
        elif is_valid:
            typer.secho(f"{name}: valid", fg=typer.colors.GREEN)
        else:
            typer.secho(f"{name}: invalid", fg=typer.colors.RED)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.command("poster")(poster)
app.command("logo")(logo)
app.command("validate")(validate)
