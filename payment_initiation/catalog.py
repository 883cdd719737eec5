"""
Payment catalog loader.

The catalog is a JSON list of named payments, each carrying the target bank,
the payment service and product, the PSU context scope and the request body:

    [
        {
            "Name": "domestic-private",
            "BICFI": "ESSESESS",
            "PaymentService": "payments",
            "PaymentProduct": "domestic",
            "PSUContextScope": "private",
            "Payment": {"instructedAmount": {"currency": "SEK", "amount": "100.00"}, ...}
        }
    ]

Looking up a payment is a precondition of the run: an unknown name fails
before any network call is made.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from payment_initiation.engine.errors import ConfigurationError, PaymentNotFoundError
from payment_initiation.models.payment import Payment

logger = logging.getLogger("payment_initiation.catalog")

CORPORATE_SCOPE = "corporate"


class CatalogEntry(BaseModel):
    """A named payment from the catalog."""

    name: str = Field(alias="Name")
    bic_fi: str = Field(alias="BICFI")
    payment_service: str = Field(alias="PaymentService")
    payment_product: str = Field(alias="PaymentProduct")
    psu_context_scope: str = Field(alias="PSUContextScope")
    payment: dict[str, Any] = Field(alias="Payment")

    @property
    def scope(self) -> str:
        """OAuth scope requested for this payment's access token."""
        return f"{self.psu_context_scope} paymentinitiation"

    @property
    def psu_corporate_id(self) -> Optional[str]:
        if self.psu_context_scope == CORPORATE_SCOPE:
            return self.psu_context_scope
        return None

    @property
    def payment_body(self) -> str:
        return json.dumps(self.payment, separators=(",", ":"))

    def to_payment(self) -> Payment:
        return Payment(
            bic_fi=self.bic_fi,
            payment_service=self.payment_service,
            payment_product=self.payment_product,
            payment_body=self.payment_body,
        )


def load_catalog(path: Union[str, Path]) -> list[CatalogEntry]:
    """
    Read and validate every entry of a payment catalog file.

    Raises:
        ConfigurationError: The file is missing, is not JSON, or has invalid entries.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Payment catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Payment catalog is not valid JSON: {path}: {e}") from e

    if not isinstance(raw, list):
        raise ConfigurationError(f"Payment catalog must be a JSON list: {path}")

    try:
        return [CatalogEntry.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid payment catalog entry in {path}: {e}") from e


def find_payment(name: str, path: Union[str, Path]) -> CatalogEntry:
    """Return the catalog entry whose name matches, ignoring case."""
    for entry in load_catalog(path):
        if entry.name.lower() == name.lower():
            logger.info("Selected payment %s (%s/%s at %s)", entry.name,
                        entry.payment_service, entry.payment_product, entry.bic_fi)
            return entry
    raise PaymentNotFoundError(name)
