"""Operator prompt for the authorisation code."""

import asyncio
import logging
import threading
from typing import Optional

from payment_initiation.interaction.base import AuthorisationCodeSource

logger = logging.getLogger("payment_initiation.console")

CODE_PROMPT = "Enter authorisation code returned by redirect query param: "


class ConsoleCodeSource(AuthorisationCodeSource):
    """
    Reads the code from standard input; the operator copies it from the redirect URL.

    The prompt runs on a daemon thread so an interrupt or the cancel event
    ends the wait without waiting for the operator to press Enter.
    """

    def __init__(self, cancel: Optional[asyncio.Event] = None):
        self._cancel = cancel

    async def get_code(self, state: str) -> Optional[str]:
        loop = asyncio.get_running_loop()
        line = loop.create_future()
        threading.Thread(target=_read_line, args=(loop, line), daemon=True).start()

        waiters = {line}
        if self._cancel is not None:
            waiters.add(asyncio.ensure_future(self._cancel.wait()))
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if line.cancelled():
            logger.warning("Authorisation code prompt cancelled (state=%s)", state)
            return None
        return line.result().strip() or None


def _read_line(loop: asyncio.AbstractEventLoop, future: asyncio.Future) -> None:
    try:
        line = input(CODE_PROMPT)
    except EOFError:
        line = ""
    try:
        loop.call_soon_threadsafe(_resolve, future, line)
    except RuntimeError:
        # Event loop closed while the prompt was open
        pass


def _resolve(future: asyncio.Future, line: str) -> None:
    if not future.done():
        future.set_result(line)
