"""
Error taxonomy for the payment initiation flow.

Nothing here is retried. Every error unwinds to the top-level run, which
reports it and exits. The only failure that does not raise is an empty or
rejected OAuth code exchange, which the SCA flow reports as a failed SCA.
"""

from typing import Optional

import httpx


class PaymentFlowError(Exception):
    """Base exception for payment initiation errors."""


class ConfigurationError(PaymentFlowError):
    """Settings or payment catalog are missing or invalid."""


class PaymentNotFoundError(ConfigurationError):
    """The named payment is not present in the payment catalog."""

    def __init__(self, payment_name: str):
        super().__init__(f"Payment not found: {payment_name}")
        self.payment_name = payment_name


class ApiError(PaymentFlowError):
    """Non-success HTTP status from the auth server or the payment API."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, operation: str, response: httpx.Response) -> "ApiError":
        return cls(
            f"{operation} failed: statusCode={response.status_code} Message={response.text}",
            status_code=response.status_code,
            body=response.text,
        )


class MalformedResponseError(PaymentFlowError):
    """A response could not be used: error status on classification or unexpected body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnknownScaApproachError(PaymentFlowError):
    """The authorisation response did not advertise an SCA approach."""


class UndefinedScaMethodError(PaymentFlowError):
    """No runnable SCA method could be resolved for the payment."""


class PollingTimeoutError(PaymentFlowError):
    """A status poll did not reach a terminal value within its maximum wait."""

    def __init__(self, label: str, max_wait: float, attempts: int, last_status: str):
        super().__init__(
            f"{label} still '{last_status}' after {attempts} polls ({max_wait:.1f}s max wait)"
        )
        self.label = label
        self.max_wait = max_wait
        self.attempts = attempts
        self.last_status = last_status


class PollingCancelledError(PaymentFlowError):
    """A status poll was cancelled before a terminal value was observed."""

    def __init__(self, label: str, attempts: int):
        super().__init__(f"{label} polling cancelled after {attempts} polls")
        self.label = label
        self.attempts = attempts
