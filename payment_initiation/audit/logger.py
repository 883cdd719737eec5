"""
Flow event trail for a payment initiation run.

Every milestone of the run (token acquired, payment created, SCA method
resolved, statuses observed) gets a single structured log line with:
  - Payment ID (once the API has assigned one)
  - Action (what happened)
  - Details (identifiers, statuses, error messages)

Nothing is persisted; the trail lives in the application log.
"""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger("payment_initiation.audit")

# Keys whose values are never written to the log in full
_SECRET_KEYS = {"token", "access_token", "code"}


def mask(value: Optional[str], visible: int = 6) -> str:
    """Shorten a secret to a recognisable prefix."""
    if not value:
        return ""
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}***"


def log_event(
    action: str,
    payment_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Emit a flow event.

    Args:
        action: What happened (e.g. "payment_created", "sca_resolved", "payment_status").
        payment_id: The payment this event relates to, if already assigned.
        details: Arbitrary context (serialized to JSON, secrets masked).

    Returns:
        The event as logged.
    """
    safe_details = {
        key: mask(value) if key in _SECRET_KEYS and isinstance(value, str) else value
        for key, value in (details or {}).items()
    }
    event = {"action": action, "payment_id": payment_id, "details": safe_details}
    logger.info(
        "AUDIT | payment=%s action=%s | %s",
        payment_id or "-",
        action,
        json.dumps(safe_details, default=str)[:200] if safe_details else "",
    )
    return event
