"""
Authorisation codes delivered by the redirect callback endpoint.

get_code() registers a waiter for a state value; the FastAPI callback route
calls deliver() when the bank redirects the PSU back with that state.
Both sides run on the same event loop.
"""

import asyncio
import logging
from typing import Optional

from payment_initiation.interaction.base import AuthorisationCodeSource

logger = logging.getLogger("payment_initiation.callback")


class CallbackCodeSource(AuthorisationCodeSource):
    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout
        self._pending: dict[str, asyncio.Future] = {}

    def is_pending(self, state: str) -> bool:
        return state in self._pending

    async def get_code(self, state: str) -> Optional[str]:
        future = asyncio.get_running_loop().create_future()
        self._pending[state] = future
        logger.info("Waiting for redirect callback (state=%s)", state)
        try:
            return await asyncio.wait_for(future, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("No redirect callback received for state %s", state)
            return None
        finally:
            self._pending.pop(state, None)

    def deliver(self, state: str, code: Optional[str], error: Optional[str] = None) -> bool:
        """
        Hand a redirect result to the waiter for state.

        Returns:
            False when nothing is waiting for this state.
        """
        future = self._pending.get(state)
        if future is None or future.done():
            return False
        if error:
            logger.warning("Redirect callback reported error %s (state=%s)", error, state)
            code = None
        future.set_result(code or None)
        return True
