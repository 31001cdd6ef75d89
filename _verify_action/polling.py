"""
Retry-with-deadline combinator used by the Stage 5 poll loop.

The policy is fixed interval, no backoff, no jitter, hard ceiling. The
checked artifact is a small CSV/TSV that the server usually processes in a
few seconds, so a short constant interval keeps the action responsive.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .errors import PollTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PollPolicy:
    interval_seconds: float = 3.0
    max_wait_seconds: float = 120.0


def poll_until(
    check: Callable[[], Optional[T]],
    policy: PollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call check() until it returns a non-None value.

    Waited time is accumulated from the policy interval, not measured from
    the wall clock, so the number of attempts is deterministic:
    ceil(max_wait / interval). check() may raise to abort early; the error
    propagates unchanged.

    Raises:
        PollTimeoutError: when the accumulated wait reaches the ceiling.
    """
    waited = 0.0
    attempt = 0
    while waited < policy.max_wait_seconds:
        attempt += 1
        result = check()
        if result is not None:
            logger.debug("poll finished after %d attempt(s), %.0fs waited", attempt, waited)
            return result
        logger.debug("poll attempt %d not done, sleeping %.0fs", attempt, policy.interval_seconds)
        sleep(policy.interval_seconds)
        waited += policy.interval_seconds

    raise PollTimeoutError(policy.max_wait_seconds)
