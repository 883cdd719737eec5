"""Enumerations for the payment initiation domain model."""

from enum import Enum


class ScaMethod(str, Enum):
    """SCA method resolved from an authorisation update. Never changes once resolved."""

    UNDEFINED = "undefined"
    OAUTH_REDIRECT = "oauth_redirect"
    REDIRECT = "redirect"
    DECOUPLED = "decoupled"


class ScaApproach(str, Enum):
    """Values of the aspsp-sca-approach response header."""

    REDIRECT = "REDIRECT"
    DECOUPLED = "DECOUPLED"


class ScaStatus(str, Enum):
    """Terminal SCA status values reported by the payment API."""

    FINALISED = "finalised"
    FAILED = "failed"


class ScaOutcome(str, Enum):
    """Terminal result of an SCA sub-flow."""

    FINALISED = "finalised"
    FAILED = "failed"


class ScaFlowState(str, Enum):
    """Lifecycle states for an SCA sub-flow."""

    PENDING = "pending"
    RESOLVED = "resolved"
    IN_PROGRESS = "in_progress"
    FINALISED = "finalised"
    FAILED = "failed"


TERMINAL_SCA_STATUSES = {ScaStatus.FINALISED.value, ScaStatus.FAILED.value}

# Payment received but not yet processed; every other transaction status is terminal
TRANSACTION_STATUS_RECEIVED = "RCVD"
