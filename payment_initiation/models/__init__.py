from payment_initiation.models.enums import (
    TERMINAL_SCA_STATUSES,
    TRANSACTION_STATUS_RECEIVED,
    ScaApproach,
    ScaFlowState,
    ScaMethod,
    ScaOutcome,
    ScaStatus,
)
from payment_initiation.models.payment import Payment, PsuContext

__all__ = [
    "Payment",
    "PsuContext",
    "ScaApproach",
    "ScaFlowState",
    "ScaMethod",
    "ScaOutcome",
    "ScaStatus",
    "TERMINAL_SCA_STATUSES",
    "TRANSACTION_STATUS_RECEIVED",
]
