"""
Response Parser
Decodes Paynow response bodies, verifies their hash and types the result.

A GatewayResponse is only ever constructed after verification succeeds, so
any GatewayResponse a caller holds was issued by a holder of the integration
key and not altered in transit.
"""

import logging
from typing import Dict, List, Optional, Tuple, Type, Union
from urllib.parse import unquote_plus

from marshmallow import ValidationError as SchemaValidationError

from paynow.errors import (
    AmountOverflow,
    EncodingError,
    GatewayError,
    InsufficientBalance,
    IntegrityError,
    InvalidAmount,
    InvalidIntegrationId,
    MalformedResponse,
    ResponseIntegrityError,
    TraceNotFound,
)
from paynow.models.response import LAYOUT_ORDERS, LAYOUT_REQUIRED, GatewayResponse, ResponseLayout
from paynow.models.transaction import map_status
from paynow.schemas.payment_schema import GatewayResponseSchema
from paynow.utils.encoding import HASH_FIELD, encode
from paynow.utils.signing import IntegrationKey, verify

logger = logging.getLogger(__name__)

# Paynow error text (lower-cased) -> exception
GATEWAY_ERRORS: Dict[str, Type[GatewayError]] = {
    "invalid id.": InvalidIntegrationId,
    "invalid amount field.": InvalidAmount,
    "conversion overflows.": AmountOverflow,
    "insufficient balance": InsufficientBalance,
}

_response_schema = GatewayResponseSchema()


def parse(
    raw_body: Union[bytes, str],
    key: IntegrationKey,
    layout: Optional[ResponseLayout] = None,
) -> GatewayResponse:
    """
    Parse and verify a Paynow response body.

    Args:
        raw_body: Form-encoded response body
        key: Integration key
        layout: Expected layout; detected from the fields when None.
            Error and NotFound bodies are always recognised as such.

    Returns:
        Verified GatewayResponse

    Raises:
        MalformedResponse: body cannot be split into pairs or lacks required fields
        ResponseIntegrityError: hash missing or not matching
        GatewayError: Paynow reported an error (subclass per known error text)
    """
    pairs = split_body(raw_body)
    fields = dict(pairs)

    status_text = fields.get("status")
    if not status_text:
        raise MalformedResponse("Response has no status field")

    layout = _detect_layout(fields, layout)

    missing = [name for name in LAYOUT_REQUIRED[layout] if not fields.get(name)]
    if missing:
        raise MalformedResponse(
            f"{layout.value} response is missing required fields: {', '.join(missing)}"
        )

    if layout is ResponseLayout.ERROR:
        if HASH_FIELD in fields:
            _verified_fields(pairs, layout, key)
        raise _gateway_error(fields["error"])

    verified = _verified_fields(pairs, layout, key)

    if layout is ResponseLayout.NOT_FOUND:
        raise TraceNotFound("Paynow has no payment for this merchant trace", status_text)

    try:
        typed = _response_schema.load(dict(verified))
    except SchemaValidationError as exc:
        raise MalformedResponse(f"Response fields have invalid values: {exc.messages}") from exc
    typed.pop("status", None)

    return GatewayResponse(
        layout=layout,
        status=map_status(status_text),
        status_text=status_text,
        hash=fields[HASH_FIELD],
        fields=tuple(verified),
        **typed,
    )


def parse_status_update(raw_body: Union[bytes, str], key: IntegrationKey) -> GatewayResponse:
    """Parse a status update, either polled or POSTed by Paynow to the result URL."""
    return parse(raw_body, key, layout=ResponseLayout.STATUS_UPDATE)


def split_body(raw_body: Union[bytes, str]) -> List[Tuple[str, str]]:
    """
    Split a form-encoded body into (name, value) pairs.

    Names are lower-cased; values are percent-decoded with form rules.
    """
    if isinstance(raw_body, bytes):
        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedResponse("Response body is not valid UTF-8") from exc
    else:
        body = raw_body

    body = (body or "").strip()
    if not body:
        raise MalformedResponse("Response body is empty")

    pairs = []
    seen = set()
    for part in body.split("&"):
        if "=" not in part:
            raise MalformedResponse(f"Response field '{part[:40]}' is not a key=value pair")
        name, value = part.split("=", 1)
        name = unquote_plus(name).strip().lower()
        if not name:
            raise MalformedResponse("Response contains a field with an empty name")
        if name in seen:
            raise MalformedResponse(f"Response field '{name}' appears more than once")
        seen.add(name)
        pairs.append((name, unquote_plus(value)))
    return pairs


# Private helpers

def _detect_layout(fields: Dict[str, str], expected: Optional[ResponseLayout]) -> ResponseLayout:
    status = fields["status"].strip().lower()
    if status == "error":
        return ResponseLayout.ERROR
    if status == "notfound":
        return ResponseLayout.NOT_FOUND
    if expected is not None:
        return expected
    if "browserurl" in fields:
        return ResponseLayout.INITIATION
    if "instructions" in fields or ("paynowreference" in fields and "reference" not in fields):
        return ResponseLayout.REMOTE_INITIATION
    if "reference" in fields:
        return ResponseLayout.STATUS_UPDATE
    raise MalformedResponse(
        f"Cannot tell what kind of response this is from fields: {', '.join(sorted(fields))}"
    )


def _verified_fields(
    pairs: List[Tuple[str, str]],
    layout: ResponseLayout,
    key: IntegrationKey,
) -> List[Tuple[str, str]]:
    body = [(name, value) for name, value in pairs if name != HASH_FIELD]
    try:
        encoded = encode(body, LAYOUT_ORDERS[layout], allow_extra=True, strict=False)
    except EncodingError as exc:
        raise MalformedResponse(f"Response cannot be canonically encoded: {exc}") from exc

    supplied = [(name, value) for name, value in pairs if name == HASH_FIELD]
    try:
        verify(encoded + supplied, key)
    except IntegrityError as exc:
        logger.warning("Rejected %s response from Paynow: %s", layout.value, exc.message)
        raise ResponseIntegrityError(
            f"Paynow {layout.value} response failed verification: {exc.message}",
            integrity_error=exc,
        ) from exc
    return encoded


def _gateway_error(error_text: str) -> GatewayError:
    error_class = GATEWAY_ERRORS.get(error_text.strip().lower(), GatewayError)
    return error_class(f"Paynow returned an error: {error_text}", error_text)
