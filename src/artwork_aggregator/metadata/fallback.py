"""Ordered provider fallback.

Providers are tried one after another; the first truthy result wins. A
provider that raises is logged and skipped, it never stops the chain, but
the failure is remembered: a miss is only conclusive when every provider
actually answered.
"""

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Attempt = tuple[str, Callable[[], Awaitable[str | None] | str | None]]


@dataclass(frozen=True)
class FallbackResult:
    """Outcome of a fallback chain.

    Attributes:
        provider: Name of the provider that produced `value`, if any
        value: The first truthy result, or None
        failed: Providers whose attempt raised, in call order
    """

    provider: str | None = None
    value: str | None = None
    failed: tuple[str, ...] = ()

    @property
    def conclusive(self) -> bool:
        """True for a hit, or for a miss where no provider failed."""
        return self.value is not None or not self.failed


async def first_available(attempts: Sequence[Attempt]) -> FallbackResult:
    """Run attempts in order and stop at the first hit.

    Args:
        attempts: `(provider_name, call)` pairs; `call` may be sync or async

    Returns:
        The winning provider and its result, plus the providers that failed
        along the way
    """
    failed: list[str] = []
    for provider_name, call in attempts:
        try:
            result = call()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:  # noqa: BLE001 - provider failures are non-fatal
            logger.debug(
                "provider_failed",
                provider=provider_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            failed.append(provider_name)
            continue

        if result:
            return FallbackResult(provider_name, result, tuple(failed))

    return FallbackResult(failed=tuple(failed))


def optional_provider(provider_name: str, factory: Callable[[], T]) -> T | None:
    """Construct a provider, treating a rejected key as "provider absent"."""
    try:
        return factory()
    except ValueError as exc:
        logger.warning("provider_disabled", provider=provider_name, reason=str(exc))
        return None
