"""
Auth server client.

Obtains bearer tokens from the token endpoint with either the
client-credentials grant (machine access to the payment API) or the
authorization-code grant (activating a payment authorisation after the PSU
completed an OAuth redirect).
"""

import logging
from typing import Optional

import httpx

from payment_initiation.clients.base import JSON_ACCEPT, parse_response
from payment_initiation.engine.errors import MalformedResponseError
from payment_initiation.models.responses import TokenResponse

logger = logging.getLogger("payment_initiation.auth")

TOKEN_PATH = "/connect/token"


class AuthClient:
    """Token endpoint client. Use as an async context manager or call aclose()."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self._client_secret = client_secret
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=JSON_ACCEPT,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_token(self, scope: str) -> str:
        """
        Request an access token with the client-credentials grant.

        Raises:
            ApiError: The auth server rejected the request.
            MalformedResponseError: The response carried no access token.
        """
        logger.info("Requesting client credentials token (scope=%s)", scope)
        response = await self._client.post(TOKEN_PATH, data={
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
            "scope": scope,
        })
        token = parse_response("Get token", response, TokenResponse).access_token
        if not token:
            raise MalformedResponseError(
                f"Get token: no access_token in response: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return token

    async def exchange_code(
        self,
        scope: str,
        code: str,
        payment_id: str,
        authorisation_id: str,
    ) -> Optional[str]:
        """
        Activate a payment authorisation by exchanging the OAuth code returned to the redirect URI.

        The token request is bound to the payment through the X-PaymentId and
        X-PaymentAuthorisationId headers.

        Returns:
            The new access token, or None when the response carried none.

        Raises:
            ApiError: The auth server rejected the exchange.
            MalformedResponseError: The response body was not a token response.
        """
        logger.info("Activating OAuth payment authorisation %s for payment %s", authorisation_id, payment_id)
        response = await self._client.post(
            TOKEN_PATH,
            data={
                "client_id": self.client_id,
                "client_secret": self._client_secret,
                "redirect_uri": self.redirect_uri,
                "scope": scope,
                "grant_type": "authorization_code",
                "code": code,
            },
            headers={
                "X-PaymentId": payment_id,
                "X-PaymentAuthorisationId": authorisation_id,
            },
        )
        return parse_response("Activate OAuth payment authorisation", response, TokenResponse).access_token
