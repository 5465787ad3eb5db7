"""Bounded polling used to await asynchronous remote state changes."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple

from mp_common.errors import WaitTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 60
DEFAULT_INTERVAL = 3.0


def wait_for_specific_or_error(
    probe: Callable[[], Tuple[bool, Optional[Exception]]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    deadline: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Poll ``probe`` until it reports done, fails, or the budget runs out.

    ``probe`` returns ``(done, error)``. A non-None error is raised as-is
    without further polling. ``deadline`` bounds the total wall time in
    seconds on top of ``max_attempts``.
    """
    started = clock()
    for attempt in range(1, max_attempts + 1):
        done, error = probe()
        if error is not None:
            raise error
        if done:
            logger.debug("Condition met after %d attempt(s)", attempt)
            return
        if attempt == max_attempts:
            break
        elapsed = clock() - started
        if deadline is not None and elapsed + interval > deadline:
            raise WaitTimeoutError(attempt, elapsed=elapsed)
        sleep(interval)
    raise WaitTimeoutError(max_attempts, elapsed=clock() - started)


def wait_for(
    probe: Callable[[], bool],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    deadline: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Poll a boolean ``probe`` until it returns True."""
    wait_for_specific_or_error(
        lambda: (bool(probe()), None),
        max_attempts=max_attempts,
        interval=interval,
        deadline=deadline,
        sleep=sleep,
        clock=clock,
    )
