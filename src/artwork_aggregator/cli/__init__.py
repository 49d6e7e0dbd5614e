"""CLI entrypoints for the artwork aggregator."""

from artwork_aggregator.cli.artwork import app, run_cli
from artwork_aggregator.cli.cache import app as cache_app

__all__ = ["app", "cache_app", "run_cli"]
