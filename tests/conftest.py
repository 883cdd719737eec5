"""Shared test fixtures."""

from typing import Optional
from urllib.parse import parse_qsl

import httpx
import pytest
import pytest_asyncio

from payment_initiation.catalog import CatalogEntry
from payment_initiation.clients.api import BASE_PATH, PaymentApiClient
from payment_initiation.clients.auth import AuthClient
from payment_initiation.interaction.base import AuthorisationCodeSource, ScaRenderer
from payment_initiation.models.payment import Payment, PsuContext

AUTH_URL = "https://auth.test"
API_URL = "https://api.test"
PAYMENT_PATH = f"{BASE_PATH}/payments/domestic"


class StubBank:
    """
    Scripted auth server and payment API behind an httpx.MockTransport.

    Status lists are consumed one value per read; the last value repeats.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.tokens = {"client_credentials": "cc-token", "authorization_code": "sca-token"}
        self.token_exchange_status = 200
        self.create_status = 201
        self.create_body: dict = {"paymentId": "p1", "transactionStatus": "RCVD"}
        self.sca_approach: Optional[str] = "REDIRECT"
        self.update_body: dict = {"_links": {"scaOAuth": {"href": "https://auth/x"}}}
        self.sca_statuses = ["finalised"]
        self.transaction_statuses = ["ACCP"]

    @staticmethod
    def _next(values: list[str]) -> str:
        return values.pop(0) if len(values) > 1 else values[0]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/connect/token":
            form = dict(parse_qsl(request.content.decode()))
            grant_type = form["grant_type"]
            if grant_type == "authorization_code" and self.token_exchange_status != 200:
                return httpx.Response(self.token_exchange_status, text='{"error":"invalid_grant"}')
            return httpx.Response(200, json={"access_token": self.tokens[grant_type], "token_type": "Bearer"})

        if request.method == "POST" and path == PAYMENT_PATH:
            if self.create_status >= 400:
                return httpx.Response(self.create_status, text='{"tppMessages":[{"code":"FORMAT_ERROR"}]}')
            return httpx.Response(self.create_status, json=self.create_body)

        if request.method == "POST" and path == f"{PAYMENT_PATH}/p1/authorisations":
            return httpx.Response(201, json={"authorisationId": "a1", "scaStatus": "received"})

        if path == f"{PAYMENT_PATH}/p1/authorisations/a1":
            if request.method == "PUT":
                headers = {"aspsp-sca-approach": self.sca_approach} if self.sca_approach else {}
                return httpx.Response(200, json=self.update_body, headers=headers)
            return httpx.Response(200, json={"scaStatus": self._next(self.sca_statuses)})

        if request.method == "GET" and path == f"{PAYMENT_PATH}/p1/status":
            return httpx.Response(200, json={"transactionStatus": self._next(self.transaction_statuses)})

        return httpx.Response(404, text="not found")

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def token_requests(self, grant_type: str) -> list[dict]:
        forms = [dict(parse_qsl(r.content.decode())) for r in self.calls("POST", "/connect/token")]
        return [f for f in forms if f["grant_type"] == grant_type]


class RecordingRenderer(ScaRenderer):
    def __init__(self):
        self.opened: list[str] = []
        self.qr_codes: list[str] = []

    def open_url(self, url: str) -> None:
        self.opened.append(url)

    def show_qr(self, data: str) -> None:
        self.qr_codes.append(data)


class StaticCodeSource(AuthorisationCodeSource):
    def __init__(self, code: Optional[str]):
        self.code = code
        self.states: list[str] = []

    async def get_code(self, state: str) -> Optional[str]:
        self.states.append(state)
        return self.code


class ScriptedScaApi:
    """Payment API stand-in returning a scripted SCA status sequence."""

    def __init__(self, statuses: list[str]):
        self.statuses = list(statuses)
        self.calls = 0

    async def get_sca_status(self, payment: Payment) -> str:
        self.calls += 1
        return self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]


class ScriptedAuth:
    """Auth client stand-in recording code exchanges."""

    client_id = "client-1"
    redirect_uri = "https://tpp.example/callback"

    def __init__(self, token: Optional[str] = "sca-token", error: Optional[Exception] = None):
        self.token = token
        self.error = error
        self.exchanges: list[dict] = []

    async def exchange_code(self, scope, code, payment_id, authorisation_id):
        self.exchanges.append({
            "scope": scope,
            "code": code,
            "payment_id": payment_id,
            "authorisation_id": authorisation_id,
        })
        if self.error is not None:
            raise self.error
        return self.token


@pytest.fixture
def bank() -> StubBank:
    return StubBank()


@pytest_asyncio.fixture
async def auth_client(bank):
    async with AuthClient(
        AUTH_URL,
        "client-1",
        "secret-1",
        "https://tpp.example/callback",
        transport=httpx.MockTransport(bank),
    ) as client:
        yield client


@pytest_asyncio.fixture
async def api_client(bank):
    psu = PsuContext(psu_ip_address="10.0.0.1", psu_user_agent="pytest-agent")
    async with PaymentApiClient(API_URL, psu, token="cc-token", transport=httpx.MockTransport(bank)) as client:
        yield client


@pytest.fixture
def catalog_entry() -> CatalogEntry:
    return CatalogEntry.model_validate({
        "Name": "domestic-private",
        "BICFI": "ESSESESS",
        "PaymentService": "payments",
        "PaymentProduct": "domestic",
        "PSUContextScope": "private",
        "Payment": {"instructedAmount": {"currency": "SEK", "amount": "100.00"}},
    })


@pytest.fixture
def authorised_payment() -> Payment:
    """Payment that has been created and has an authorisation resource."""
    return Payment(
        bic_fi="ESSESESS",
        payment_service="payments",
        payment_product="domestic",
        payment_body='{"instructedAmount":{"currency":"SEK","amount":"100.00"}}',
        payment_id="p1",
        authorisation_id="a1",
    )


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def code_source_factory():
    return StaticCodeSource


@pytest.fixture
def sca_api_factory():
    return ScriptedScaApi


@pytest.fixture
def auth_factory():
    return ScriptedAuth
