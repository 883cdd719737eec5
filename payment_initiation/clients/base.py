"""Response handling shared by the auth and payment API clients."""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from payment_initiation.engine.errors import ApiError, MalformedResponseError

logger = logging.getLogger("payment_initiation.http")

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_ACCEPT = {"Accept": "application/json"}


def parse_response(operation: str, response: httpx.Response, model: type[ModelT]) -> ModelT:
    """
    Check the status of a response and validate its JSON body.

    Raises:
        ApiError: Non-success status; the body is kept verbatim.
        MalformedResponseError: Success status but the body does not match the schema.
    """
    if not response.is_success:
        raise ApiError.from_response(operation, response)

    logger.debug("%s: statusCode=%d body=%s", operation, response.status_code, response.text)
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise MalformedResponseError(
            f"{operation}: unexpected response body: {response.text}",
            status_code=response.status_code,
            body=response.text,
        ) from e
