"""In-memory records for a single payment initiation run."""

from dataclasses import dataclass
from typing import Optional

from payment_initiation.models.enums import ScaMethod


@dataclass
class Payment:
    """
    A single payment initiation attempt.

    bic_fi, payment_service, payment_product and payment_body are set when the
    run starts. The identifiers and SCA fields are filled in as each step of
    the flow completes. Records are discarded when the run ends.
    """

    bic_fi: str
    payment_service: str  # e.g. "payments"
    payment_product: str  # e.g. "domestic"
    payment_body: str  # Serialized JSON request body
    payment_id: Optional[str] = None
    authorisation_id: Optional[str] = None
    sca_method: ScaMethod = ScaMethod.UNDEFINED
    sca_data: str = ""  # URL template or decoupled challenge token


@dataclass
class PsuContext:
    """Payment Service User headers sent with every payment API request."""

    psu_ip_address: str
    psu_user_agent: Optional[str] = None
    psu_corporate_id: Optional[str] = None
