"""
Payment initiation API client.

Wraps the PSD2 payment initiation endpoints used by the flow:

  POST /psd2/paymentinitiation/v1/{service}/{product}                              create payment
  POST .../{paymentId}/authorisations                                             start authorisation
  PUT  .../{paymentId}/authorisations/{authorisationId}                           update PSU data
  GET  .../{paymentId}/authorisations/{authorisationId}                           SCA status
  GET  .../{paymentId}/status                                                     payment status

Every request carries the bearer token, X-BicFi, PSU-IP-Address and a fresh
X-Request-ID. Error responses are surfaced verbatim.
"""

import logging
import ssl
import uuid
from typing import Optional, Union

import httpx

from payment_initiation.clients.base import JSON_ACCEPT, parse_response
from payment_initiation.models.payment import Payment, PsuContext
from payment_initiation.models.responses import (
    AuthorisationResponse,
    PaymentInitiationResponse,
    PaymentStatusResponse,
    ScaStatusResponse,
)

logger = logging.getLogger("payment_initiation.api")

BASE_PATH = "/psd2/paymentinitiation/v1"
JSON_CONTENT = {"Content-Type": "application/json"}


def client_certificate_context(
    certificate_file: str,
    key_file: Optional[str] = None,
    password: Optional[str] = None,
) -> ssl.SSLContext:
    """Build a TLS context presenting the production client certificate."""
    context = ssl.create_default_context()
    context.load_cert_chain(certificate_file, keyfile=key_file, password=password)
    return context


class PaymentApiClient:
    """
    Authenticated client for the payment initiation API.

    The bearer token is set by the caller once it has been obtained from the
    auth server; it is sent with every request.
    """

    def __init__(
        self,
        base_url: str,
        psu: PsuContext,
        *,
        token: Optional[str] = None,
        timeout: float = 30.0,
        verify: Union[bool, ssl.SSLContext] = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.psu = psu
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=JSON_ACCEPT,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    async def __aenter__(self) -> "PaymentApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, bic_fi: str, with_user_agent: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "X-BicFi": bic_fi,
            "PSU-IP-Address": self.psu.psu_ip_address,
            "X-Request-ID": str(uuid.uuid4()),
        }
        if self.psu.psu_corporate_id:
            headers["PSU-Corporate-Id"] = self.psu.psu_corporate_id
        if with_user_agent and self.psu.psu_user_agent:
            headers["PSU-User-Agent"] = self.psu.psu_user_agent
        return headers

    @staticmethod
    def _payment_path(payment: Payment) -> str:
        if not payment.payment_id:
            raise ValueError("Payment has not been created yet")
        return f"{BASE_PATH}/{payment.payment_service}/{payment.payment_product}/{payment.payment_id}"

    @classmethod
    def _authorisation_path(cls, payment: Payment) -> str:
        if not payment.authorisation_id:
            raise ValueError("Payment authorisation has not been started yet")
        return f"{cls._payment_path(payment)}/authorisations/{payment.authorisation_id}"

    async def create_payment(self, payment: Payment) -> str:
        """Submit the payment body. Returns the payment id assigned by the API."""
        logger.info("Create payment initiation %s/%s at %s", payment.payment_service,
                    payment.payment_product, payment.bic_fi)
        logger.debug("requestBody: %s", payment.payment_body)
        response = await self._client.post(
            f"{BASE_PATH}/{payment.payment_service}/{payment.payment_product}",
            content=payment.payment_body.encode("utf-8"),
            headers={**self._headers(payment.bic_fi, with_user_agent=True), **JSON_CONTENT},
        )
        return parse_response("Create payment initiation", response, PaymentInitiationResponse).payment_id

    async def start_authorisation(self, payment: Payment) -> str:
        """Create the authorisation resource for a payment. Returns the authorisation id."""
        logger.info("Start payment initiation authorisation process for %s", payment.payment_id)
        response = await self._client.post(
            f"{self._payment_path(payment)}/authorisations",
            content=b"",
            headers={**self._headers(payment.bic_fi), **JSON_CONTENT},
        )
        return parse_response(
            "Start payment initiation authorisation process", response, AuthorisationResponse
        ).authorisation_id

    async def update_psu_data(self, payment: Payment, authentication_method_id: str = "mbid") -> httpx.Response:
        """
        Select the authentication method for the authorisation.

        The raw response is returned so the SCA method can be classified from
        both its headers and its body; status checking is left to the caller.
        """
        logger.info("Update PSU data for payment initiation %s (authorisation %s)",
                    payment.payment_id, payment.authorisation_id)
        response = await self._client.put(
            self._authorisation_path(payment),
            json={"authenticationMethodId": authentication_method_id},
            headers=self._headers(payment.bic_fi),
        )
        logger.debug("Update PSU data: statusCode=%d body=%s", response.status_code, response.text)
        return response

    async def get_sca_status(self, payment: Payment) -> str:
        response = await self._client.get(
            self._authorisation_path(payment),
            headers=self._headers(payment.bic_fi),
        )
        return parse_response(
            "Get payment initiation authorisation SCA status", response, ScaStatusResponse
        ).sca_status

    async def get_payment_status(self, payment: Payment) -> str:
        response = await self._client.get(
            f"{self._payment_path(payment)}/status",
            headers=self._headers(payment.bic_fi),
        )
        return parse_response(
            "Get payment initiation status", response, PaymentStatusResponse
        ).transaction_status
