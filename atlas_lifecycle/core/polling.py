"""
Convergence polling for the Atlas instance lifecycle tools.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..utils.exceptions import ConfigurationError, PollTimeoutError
from ..utils.logging import get_logger
from .context import Context, background

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 5.0


@dataclass
class PollSettings:
    """How often and for how long to poll.

    ``max_attempts`` bounds the number of status queries and ``timeout`` the
    wall time of one poll loop: no query is scheduled past it, and the loop
    never sleeps less than ``interval``. ``None`` means unbounded for either.
    When ``sleep`` is ``None`` the loop sleeps on the context so that
    cancellation wakes it early.
    """

    interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int | None = None
    timeout: float | None = None
    sleep: Callable[[float], None] | None = None
    clock: Callable[[], float] = time.monotonic

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigurationError(
                f"Poll interval must be positive, got {self.interval}"
            )
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ConfigurationError(
                f"Poll max attempts must be at least 1, got {self.max_attempts}"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"Poll timeout must be positive, got {self.timeout}")


def poll_settings_from_config(config: dict[str, Any]) -> PollSettings:
    """Build PollSettings from a loaded configuration mapping."""

    def _optional(key: str, cast: Callable[[Any], Any]) -> Any:
        value = config.get(key)
        if value in (None, ""):
            return None
        try:
            return cast(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid numeric value for {key}: {value}")

    interval = _optional("ATLAS_POLL_INTERVAL", float)
    return PollSettings(
        interval=DEFAULT_POLL_INTERVAL if interval is None else interval,
        max_attempts=_optional("ATLAS_POLL_MAX_ATTEMPTS", int),
        timeout=_optional("ATLAS_POLL_TIMEOUT", float),
    )


def poll_until(
    probe: Callable[[], T],
    converged: Callable[[T], bool],
    settings: PollSettings | None = None,
    ctx: Context | None = None,
    initial: T | None = None,
    on_wait: Callable[[T], None] | None = None,
) -> T:
    """Query with ``probe`` until ``converged`` holds for the observation.

    If ``initial`` is given it is used as the first observation and the loop
    sleeps before the first query. ``converged`` may raise to abort polling.
    The context is checked before every sleep and every query.
    """
    settings = settings or PollSettings()
    ctx = ctx or background()
    started = settings.clock()
    attempts = 0

    if initial is None:
        ctx.check()
        observation = probe()
        attempts += 1
    else:
        observation = initial

    while not converged(observation):
        if settings.max_attempts is not None and attempts >= settings.max_attempts:
            raise PollTimeoutError(
                f"Gave up after {attempts} status queries without converging"
            )
        elapsed = settings.clock() - started
        # stop early rather than query past the timeout
        if settings.timeout is not None and elapsed + settings.interval > settings.timeout:
            raise PollTimeoutError(
                f"Gave up after {elapsed:.1f}s without converging "
                f"(timeout {settings.timeout:g}s)"
            )

        if on_wait is not None:
            on_wait(observation)

        ctx.check()
        if settings.sleep is not None:
            settings.sleep(settings.interval)
        else:
            ctx.sleep(settings.interval)
        ctx.check()

        observation = probe()
        attempts += 1

    logger.debug(f"Converged after {attempts} status queries")
    return observation
