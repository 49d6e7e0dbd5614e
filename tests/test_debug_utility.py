"""Tests for the logging setup module.

Debug output is toggled via the ARTWORK_DEBUG environment variable and
rendered by structlog to stderr.
"""

import os
from unittest.mock import patch

import pytest
import structlog


def test_debug_import() -> None:
    """Test that the logging helpers can be imported."""
    from artwork_aggregator.utils.debug import configure_logging, is_debug_enabled

    assert callable(configure_logging)
    assert callable(is_debug_enabled)


def test_debug_disabled_by_default() -> None:
    """Test that debug is off when ARTWORK_DEBUG is not set."""
    from artwork_aggregator.utils.debug import is_debug_enabled

    with patch.dict(os.environ, {}, clear=True):
        assert is_debug_enabled() is False


@pytest.mark.parametrize("value", ["1", "true", "True", "TRUE", "yes", "Yes", "YES"])
def test_debug_with_various_truthy_values(value: str) -> None:
    """Test that common truthy spellings enable debug output."""
    from artwork_aggregator.utils.debug import is_debug_enabled

    with patch.dict(os.environ, {"ARTWORK_DEBUG": value}):
        assert is_debug_enabled() is True


@pytest.mark.parametrize("value", ["0", "false", "False", "no", "NO", ""])
def test_debug_disabled_for_falsy_values(value: str) -> None:
    """Test that anything else keeps debug output off."""
    from artwork_aggregator.utils.debug import is_debug_enabled

    with patch.dict(os.environ, {"ARTWORK_DEBUG": value}):
        assert is_debug_enabled() is False


def test_debug_messages_rendered_when_enabled(capsys) -> None:
    """Test that debug events reach stderr with their key/value pairs."""
    from artwork_aggregator.utils.debug import configure_logging

    with patch.dict(os.environ, {"ARTWORK_DEBUG": "1"}):
        configure_logging()

    logger = structlog.get_logger("artwork_aggregator.test")
    logger.debug("logo_cache_hit", id="tmdb:603")
    logger.info("poster_found", provider="rpdb")

    err = capsys.readouterr().err
    assert "logo_cache_hit" in err
    assert "id=tmdb:603" in err
    assert "poster_found" in err
    assert "debug" in err


def test_debug_messages_filtered_when_disabled(capsys) -> None:
    """Test that the default level drops debug events but keeps info."""
    from artwork_aggregator.utils.debug import configure_logging

    configure_logging(debug=False)

    logger = structlog.get_logger("artwork_aggregator.test")
    logger.debug("hidden_event")
    logger.warning("provider_disabled", provider="RPDB")

    err = capsys.readouterr().err
    assert "hidden_event" not in err
    assert "provider_disabled" in err
    assert "provider=RPDB" in err


def test_explicit_flag_overrides_environment(capsys) -> None:
    """Test that debug=True wins over an unset ARTWORK_DEBUG."""
    from artwork_aggregator.utils.debug import configure_logging

    with patch.dict(os.environ, {}, clear=True):
        configure_logging(debug=True)

    structlog.get_logger("artwork_aggregator.test").debug("forced_event")

    assert "forced_event" in capsys.readouterr().err
