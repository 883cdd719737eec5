"""
SCA method classification.

Inspects the response of the update PSU data call and decides which SCA
flow the bank expects, based on the aspsp-sca-approach header and the
links or challenge data present in the body.

Classification priority:
  - REDIRECT with an scaOAuth link → OAuth redirect (code exchange required)
  - REDIRECT with an scaRedirect link → plain redirect
  - DECOUPLED with challenge data → decoupled (autostart token in the data)
  - Anything else → undefined, left to the caller to reject
"""

import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from payment_initiation.engine.errors import MalformedResponseError, UnknownScaApproachError
from payment_initiation.models.enums import ScaApproach, ScaMethod
from payment_initiation.models.responses import UpdatePsuDataResponse

logger = logging.getLogger("payment_initiation.sca_resolver")

SCA_APPROACH_HEADER = "aspsp-sca-approach"


@dataclass(frozen=True)
class ScaResolution:
    """Result of SCA method classification."""

    method: ScaMethod
    data: str = ""  # Redirect URL template or decoupled challenge token

    @property
    def is_defined(self) -> bool:
        return self.method != ScaMethod.UNDEFINED


UNDEFINED_RESOLUTION = ScaResolution(ScaMethod.UNDEFINED, "")


def resolve_sca_method(response: httpx.Response) -> ScaResolution:
    """
    Classify the SCA method required by an authorisation.

    Args:
        response: Response of the update PSU data call.

    Returns:
        ScaResolution with the method and its method-specific data.

    Raises:
        MalformedResponseError: Non-success status, or a body that cannot be read.
        UnknownScaApproachError: The aspsp-sca-approach header is missing.
    """
    if not response.is_success:
        raise MalformedResponseError(
            f"Update PSU data failed: statusCode={response.status_code} Message={response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    approach = response.headers.get(SCA_APPROACH_HEADER)
    if approach is None:
        raise UnknownScaApproachError(f"Response has no {SCA_APPROACH_HEADER} header")

    if approach == ScaApproach.REDIRECT.value:
        resolution = _resolve_redirect(_parse_body(response))
    elif approach == ScaApproach.DECOUPLED.value:
        resolution = _resolve_decoupled(_parse_body(response))
    else:
        logger.warning("Unrecognised SCA approach %r", approach)
        resolution = UNDEFINED_RESOLUTION

    logger.info("SCA approach %s resolved to %s", approach, resolution.method.value)
    return resolution


def _parse_body(response: httpx.Response) -> UpdatePsuDataResponse:
    try:
        return UpdatePsuDataResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Update PSU data: unexpected response body: {response.text}",
            status_code=response.status_code,
            body=response.text,
        ) from e


def _resolve_redirect(body: UpdatePsuDataResponse) -> ScaResolution:
    links = body.links
    if links is None:
        return UNDEFINED_RESOLUTION
    if links.sca_oauth is not None:
        return ScaResolution(ScaMethod.OAUTH_REDIRECT, links.sca_oauth.href)
    if links.sca_redirect is not None:
        return ScaResolution(ScaMethod.REDIRECT, links.sca_redirect.href)
    return UNDEFINED_RESOLUTION


def _resolve_decoupled(body: UpdatePsuDataResponse) -> ScaResolution:
    if body.challenge_data is None or not body.challenge_data.data:
        return UNDEFINED_RESOLUTION
    return ScaResolution(ScaMethod.DECOUPLED, body.challenge_data.data[0])
