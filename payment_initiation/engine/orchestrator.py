"""
Payment orchestrator: the end-to-end payment initiation run.

Each step needs the identifier produced by the previous one:

  1. Client credentials token (scope from the payment catalog)
  2. Create payment → payment id
  3. Start authorisation → authorisation id
  4. Update PSU data → SCA method and data
  5. SCA sub-flow (OAuth redirect, redirect or decoupled)
  6. Payment status polling until the payment leaves RCVD

Steps run strictly in sequence and none is retried: an API error at any
step aborts the run. A failed SCA ends the run without polling the payment
status.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from payment_initiation.audit.logger import log_event
from payment_initiation.catalog import CatalogEntry
from payment_initiation.clients.api import PaymentApiClient
from payment_initiation.clients.auth import AuthClient
from payment_initiation.engine.errors import UndefinedScaMethodError
from payment_initiation.engine.polling import poll_until
from payment_initiation.engine.sca_flow import DEFAULT_POLL_INTERVAL, ScaFlowController
from payment_initiation.engine.sca_resolver import resolve_sca_method
from payment_initiation.models.enums import TRANSACTION_STATUS_RECEIVED
from payment_initiation.models.payment import Payment

logger = logging.getLogger("payment_initiation.orchestrator")


@dataclass
class PaymentResult:
    """Outcome of a payment initiation run."""

    payment: Payment
    sca_success: bool
    transaction_status: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.sca_success and self.transaction_status is not None


async def execute_payment(
    entry: CatalogEntry,
    auth: AuthClient,
    api: PaymentApiClient,
    sca_flow: ScaFlowController,
    *,
    state: str,
    authentication_method_id: str = "mbid",
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_wait: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
) -> PaymentResult:
    """
    Run a catalog payment through initiation, SCA and status polling.

    Args:
        entry: The payment to initiate.
        auth: Auth server client.
        api: Payment API client; receives the client credentials token.
        sca_flow: Controller for the SCA sub-flow of this payment.
        state: Opaque value passed through the OAuth redirect.
        authentication_method_id: Authentication method selected in the PSU data update.
        poll_interval: Seconds between payment status reads.
        max_wait: Give up on the payment status after this many seconds. None waits indefinitely.
        cancel: Event that stops the payment status poll.

    Returns:
        PaymentResult with the SCA outcome and the final transaction status.

    Raises:
        ApiError: A request was rejected by the auth server or the API.
        MalformedResponseError: A response could not be used.
        UnknownScaApproachError: The bank advertised no SCA approach.
        UndefinedScaMethodError: No runnable SCA method could be resolved.
        PollingTimeoutError: A status poll exceeded its maximum wait.
        PollingCancelledError: A status poll was cancelled.
    """
    # Step 1: API access token
    api.token = await auth.get_token(entry.scope)
    log_event("token_acquired", details={"scope": entry.scope, "token": api.token})

    # Step 2: Create the payment
    payment = entry.to_payment()
    payment.payment_id = await api.create_payment(payment)
    log_event("payment_created", payment.payment_id, {
        "bic_fi": payment.bic_fi,
        "service": payment.payment_service,
        "product": payment.payment_product,
    })

    # Step 3: Authorisation resource for the PSU to authorise the payment
    payment.authorisation_id = await api.start_authorisation(payment)
    log_event("authorisation_started", payment.payment_id, {
        "authorisation_id": payment.authorisation_id,
    })

    # Step 4: Select the authentication method and classify the SCA flow
    response = await api.update_psu_data(payment, authentication_method_id)
    resolution = resolve_sca_method(response)
    payment.sca_method = resolution.method
    payment.sca_data = resolution.data
    log_event("sca_resolved", payment.payment_id, {
        "method": resolution.method.value,
        "data": resolution.data,
    })

    if not resolution.is_defined:
        raise UndefinedScaMethodError(
            f"Unknown SCA method {resolution.method.value} for payment {payment.payment_id}"
        )

    # Step 5: Strong Customer Authentication
    if not await sca_flow.run(payment, state):
        logger.warning("SCA failed for payment %s", payment.payment_id)
        return PaymentResult(payment=payment, sca_success=False)

    logger.info("SCA completed successfully for payment %s", payment.payment_id)

    # Step 6: Wait for the payment to leave the received status
    result = await poll_until(
        lambda: api.get_payment_status(payment),
        lambda status: status != TRANSACTION_STATUS_RECEIVED,
        label="transactionStatus",
        interval=poll_interval,
        max_wait=max_wait,
        cancel=cancel,
    )
    log_event("payment_status", payment.payment_id, {
        "transaction_status": result.status,
        "polls": result.attempts,
    })

    return PaymentResult(payment=payment, sca_success=True, transaction_status=result.status)
