"""
SCA flow controller: drives Strong Customer Authentication to an outcome.

Given a payment whose SCA method has been resolved, runs exactly one of:

  OAuth redirect: open the bank's SCA URL, wait for the authorisation code
                  returned to the redirect URI, exchange it for a token bound
                  to the payment, then poll the SCA status.
  Redirect:       open the bank's SCA URL, then poll the SCA status.
  Decoupled:      show a BankID deep link as a QR code, then poll the SCA status.

State transitions:
  PENDING → RESOLVED → IN_PROGRESS → FINALISED | FAILED

A controller runs once. Terminal states are final and an undefined SCA
method is rejected before anything is shown to the PSU.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote_plus

import httpx

from payment_initiation.audit.logger import log_event
from payment_initiation.clients.api import PaymentApiClient
from payment_initiation.clients.auth import AuthClient
from payment_initiation.engine.errors import (
    ApiError,
    MalformedResponseError,
    PaymentFlowError,
    UndefinedScaMethodError,
)
from payment_initiation.engine.polling import poll_until
from payment_initiation.interaction.base import AuthorisationCodeSource, ScaRenderer
from payment_initiation.models.enums import (
    TERMINAL_SCA_STATUSES,
    ScaFlowState,
    ScaMethod,
    ScaOutcome,
    ScaStatus,
)
from payment_initiation.models.payment import Payment

logger = logging.getLogger("payment_initiation.sca_flow")

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_DECOUPLED_RETURN_URI = "https://openpayments.io"

REDIRECT_METHODS = {ScaMethod.OAUTH_REDIRECT, ScaMethod.REDIRECT}
RUNNABLE_METHODS = REDIRECT_METHODS | {ScaMethod.DECOUPLED}


def format_redirect_url(template: str, client_id: str, redirect_uri: str, state: str) -> str:
    """Fill in the placeholders of the bank's SCA redirect URL template."""
    return (
        template.replace("[CLIENT_ID]", client_id)
        .replace("[TPP_REDIRECT_URI]", quote_plus(redirect_uri))
        .replace("[TPP_STATE]", quote_plus(state))
    )


def format_bankid_url(autostart_token: str, redirect_uri: str) -> str:
    """Deep link that starts BankID with the decoupled challenge token."""
    return f"bankid:///?autostarttoken={autostart_token}&redirect={quote_plus(redirect_uri)}"


class ScaFlowController:
    """
    Runs the SCA sub-flow for one payment.

    Args:
        api: Payment API client, used for SCA status reads.
        auth: Auth client, used for the OAuth code exchange.
        renderer: Shows redirect URLs and decoupled QR codes to the PSU.
        code_source: Supplies the authorisation code in the OAuth redirect flow.
        scope: Scope requested in the code exchange.
        poll_interval: Seconds between SCA status reads.
        max_wait: Give up polling after this many seconds. None waits indefinitely.
        decoupled_return_uri: Where BankID returns the PSU after a decoupled SCA.
        cancel: Event that stops the SCA status poll.
    """

    def __init__(
        self,
        api: PaymentApiClient,
        auth: AuthClient,
        renderer: ScaRenderer,
        code_source: AuthorisationCodeSource,
        *,
        scope: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_wait: Optional[float] = None,
        decoupled_return_uri: str = DEFAULT_DECOUPLED_RETURN_URI,
        cancel: Optional[asyncio.Event] = None,
    ):
        self.api = api
        self.auth = auth
        self.renderer = renderer
        self.code_source = code_source
        self.scope = scope
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.decoupled_return_uri = decoupled_return_uri
        self.cancel = cancel
        self.state = ScaFlowState.PENDING

    async def run(self, payment: Payment, state: str) -> bool:
        """
        Drive SCA for the payment to a terminal outcome.

        Args:
            payment: Payment with a resolved SCA method and data.
            state: Opaque value passed through the OAuth redirect.

        Returns:
            True when SCA was finalised, False when it failed.

        Raises:
            UndefinedScaMethodError: The payment has no runnable SCA method.
            PaymentFlowError: The controller has already run.
        """
        if self.state != ScaFlowState.PENDING:
            raise PaymentFlowError(f"SCA flow already {self.state.value}")
        if payment.sca_method not in RUNNABLE_METHODS:
            raise UndefinedScaMethodError(f"Unknown SCA method {payment.sca_method.value}")

        self.state = ScaFlowState.RESOLVED
        log_event("sca_started", payment.payment_id, {"method": payment.sca_method.value})

        self.state = ScaFlowState.IN_PROGRESS
        if payment.sca_method in REDIRECT_METHODS:
            outcome = await self._redirect_flow(payment, state)
        else:
            outcome = await self._decoupled_flow(payment)

        self.state = ScaFlowState.FINALISED if outcome == ScaOutcome.FINALISED else ScaFlowState.FAILED
        log_event("sca_completed", payment.payment_id, {"outcome": outcome.value})
        return outcome == ScaOutcome.FINALISED

    async def _redirect_flow(self, payment: Payment, state: str) -> ScaOutcome:
        url = format_redirect_url(payment.sca_data, self.auth.client_id, self.auth.redirect_uri, state)
        self.renderer.open_url(url)

        if payment.sca_method == ScaMethod.OAUTH_REDIRECT:
            if not await self._activate_oauth_authorisation(payment, state):
                return ScaOutcome.FAILED

        return await self.poll_sca_status(payment)

    async def _activate_oauth_authorisation(self, payment: Payment, state: str) -> bool:
        code = await self.code_source.get_code(state)
        if not code:
            logger.warning("No authorisation code supplied for payment %s", payment.payment_id)
            return False

        try:
            token = await self.auth.exchange_code(
                self.scope, code, payment.payment_id, payment.authorisation_id
            )
        except (ApiError, MalformedResponseError, httpx.TransportError) as e:
            logger.error("OAuth code exchange failed: %s", e)
            return False

        if not token:
            logger.warning("OAuth code exchange returned no access token")
            return False

        log_event("oauth_authorisation_activated", payment.payment_id, {"token": token})
        return True

    async def _decoupled_flow(self, payment: Payment) -> ScaOutcome:
        self.renderer.show_qr(format_bankid_url(payment.sca_data, self.decoupled_return_uri))
        return await self.poll_sca_status(payment)

    async def poll_sca_status(self, payment: Payment) -> ScaOutcome:
        """Read the SCA status until it is finalised or failed."""
        result = await poll_until(
            lambda: self.api.get_sca_status(payment),
            lambda status: status in TERMINAL_SCA_STATUSES,
            label="scaStatus",
            interval=self.poll_interval,
            max_wait=self.max_wait,
            cancel=self.cancel,
        )
        if result.status == ScaStatus.FAILED.value:
            return ScaOutcome.FAILED
        return ScaOutcome.FINALISED
