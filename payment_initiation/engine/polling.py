"""
Fixed-interval status polling.

Used for both the SCA status and the payment status. The first read happens
immediately; subsequent reads are spaced by a fixed interval with no backoff.
A poll without max_wait runs until a terminal status is seen, which is what
waiting on a person to finish authenticating looks like. Callers that need
a bound pass max_wait, and an asyncio.Event can stop the wait early.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from payment_initiation.engine.errors import PollingCancelledError, PollingTimeoutError

logger = logging.getLogger("payment_initiation.polling")


@dataclass
class PollResult:
    status: str
    attempts: int


async def poll_until(
    fetch: Callable[[], Awaitable[str]],
    is_terminal: Callable[[str], bool],
    *,
    label: str,
    interval: float,
    max_wait: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
) -> PollResult:
    """
    Read a status until it is terminal.

    Args:
        fetch: Async callable returning the current status.
        is_terminal: Predicate deciding whether a status ends the poll.
        label: Name of the status, used in logs and errors.
        interval: Delay between reads, in seconds.
        max_wait: Give up after this many seconds. None waits indefinitely.
        cancel: Stop polling once this event is set.

    Returns:
        The terminal status and the number of reads performed.

    Raises:
        PollingTimeoutError: max_wait elapsed without a terminal status.
        PollingCancelledError: The cancel event was set.
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    attempts = 0

    while True:
        if cancel is not None and cancel.is_set():
            raise PollingCancelledError(label, attempts)

        status = await fetch()
        attempts += 1
        logger.info("%s: %s (poll %d)", label, status, attempts)

        if is_terminal(status):
            return PollResult(status=status, attempts=attempts)

        if max_wait is not None and loop.time() - started >= max_wait:
            raise PollingTimeoutError(label, max_wait, attempts, status)

        await _wait(interval, cancel)


async def _wait(interval: float, cancel: Optional[asyncio.Event]) -> None:
    if cancel is None:
        await asyncio.sleep(interval)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=interval)
    except asyncio.TimeoutError:
        pass
