"""Tests for the auth server and payment API clients."""

import json

import httpx
import pytest

from payment_initiation.clients.api import BASE_PATH, PaymentApiClient
from payment_initiation.engine.errors import ApiError, MalformedResponseError
from payment_initiation.models.payment import Payment, PsuContext

PAYMENT_PATH = f"{BASE_PATH}/payments/domestic"


class TestAuthClient:
    @pytest.mark.asyncio
    async def test_client_credentials_grant(self, auth_client, bank):
        token = await auth_client.get_token("private paymentinitiation")

        assert token == "cc-token"
        request = bank.requests[0]
        assert request.headers["Accept"] == "application/json"
        assert bank.token_requests("client_credentials") == [{
            "client_id": "client-1",
            "client_secret": "secret-1",
            "grant_type": "client_credentials",
            "scope": "private paymentinitiation",
        }]

    @pytest.mark.asyncio
    async def test_code_exchange_bound_to_payment(self, auth_client, bank):
        token = await auth_client.exchange_code("private paymentinitiation", "c1", "p1", "a1")

        assert token == "sca-token"
        request = bank.requests[0]
        assert request.headers["X-PaymentId"] == "p1"
        assert request.headers["X-PaymentAuthorisationId"] == "a1"
        assert bank.token_requests("authorization_code") == [{
            "client_id": "client-1",
            "client_secret": "secret-1",
            "redirect_uri": "https://tpp.example/callback",
            "scope": "private paymentinitiation",
            "grant_type": "authorization_code",
            "code": "c1",
        }]

    @pytest.mark.asyncio
    async def test_code_exchange_rejected(self, auth_client, bank):
        bank.token_exchange_status = 400

        with pytest.raises(ApiError) as exc_info:
            await auth_client.exchange_code("private paymentinitiation", "bad", "p1", "a1")
        assert exc_info.value.status_code == 400
        assert "invalid_grant" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_access_token(self, auth_client, bank):
        bank.tokens["client_credentials"] = None

        with pytest.raises(MalformedResponseError):
            await auth_client.get_token("private paymentinitiation")


class TestPaymentApiClient:
    @pytest.mark.asyncio
    async def test_create_payment_headers(self, api_client, bank, authorised_payment):
        payment_id = await api_client.create_payment(authorised_payment)

        assert payment_id == "p1"
        request = bank.calls("POST", PAYMENT_PATH)[0]
        assert request.headers["Authorization"] == "Bearer cc-token"
        assert request.headers["X-BicFi"] == "ESSESESS"
        assert request.headers["PSU-IP-Address"] == "10.0.0.1"
        assert request.headers["PSU-User-Agent"] == "pytest-agent"
        assert request.headers["Content-Type"] == "application/json"
        assert "PSU-Corporate-Id" not in request.headers
        assert request.content == authorised_payment.payment_body.encode()

    @pytest.mark.asyncio
    async def test_fresh_request_id_per_request(self, api_client, bank, authorised_payment):
        await api_client.get_sca_status(authorised_payment)
        await api_client.get_sca_status(authorised_payment)
        await api_client.get_payment_status(authorised_payment)

        request_ids = [r.headers["X-Request-ID"] for r in bank.requests]
        assert len(request_ids) == 3
        assert len(set(request_ids)) == 3

    @pytest.mark.asyncio
    async def test_user_agent_only_on_create(self, api_client, bank, authorised_payment):
        await api_client.start_authorisation(authorised_payment)

        assert "PSU-User-Agent" not in bank.requests[0].headers

    @pytest.mark.asyncio
    async def test_corporate_id_header(self, bank, authorised_payment):
        psu = PsuContext(psu_ip_address="10.0.0.1", psu_corporate_id="corporate")
        async with PaymentApiClient("https://api.test", psu, token="t", transport=httpx.MockTransport(bank)) as api:
            await api.get_payment_status(authorised_payment)

        assert bank.requests[0].headers["PSU-Corporate-Id"] == "corporate"

    @pytest.mark.asyncio
    async def test_authorisation_and_statuses(self, api_client, bank, authorised_payment):
        assert await api_client.start_authorisation(authorised_payment) == "a1"
        assert await api_client.get_sca_status(authorised_payment) == "finalised"
        assert await api_client.get_payment_status(authorised_payment) == "ACCP"

    @pytest.mark.asyncio
    async def test_update_psu_data_returns_raw_response(self, api_client, bank, authorised_payment):
        response = await api_client.update_psu_data(authorised_payment, "mbid")

        assert response.headers["aspsp-sca-approach"] == "REDIRECT"
        request = bank.calls("PUT", f"{PAYMENT_PATH}/p1/authorisations/a1")[0]
        assert json.loads(request.content) == {"authenticationMethodId": "mbid"}

    @pytest.mark.asyncio
    async def test_error_body_surfaced_verbatim(self, api_client, bank, authorised_payment):
        bank.create_status = 400

        with pytest.raises(ApiError) as exc_info:
            await api_client.create_payment(authorised_payment)
        assert exc_info.value.status_code == 400
        assert exc_info.value.body == '{"tppMessages":[{"code":"FORMAT_ERROR"}]}'

    @pytest.mark.asyncio
    async def test_unexpected_success_body(self, api_client, bank, authorised_payment):
        bank.create_body = {"transactionStatus": "RCVD"}

        with pytest.raises(MalformedResponseError):
            await api_client.create_payment(authorised_payment)

    @pytest.mark.asyncio
    async def test_status_requires_created_payment(self, api_client):
        payment = Payment("ESSESESS", "payments", "domestic", "{}")

        with pytest.raises(ValueError):
            await api_client.get_payment_status(payment)
