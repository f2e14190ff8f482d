"""
Canonical Encoder
Renders Paynow message fields into the ordered ``name=value`` string pairs
that are hashed and sent on the wire.

The hash covers field values in a fixed sequence, so every message kind has
an explicit order tuple below. The order a caller builds its mapping in never
matters.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import unquote

from paynow.errors import EncodingError

HASH_FIELD = "hash"

# Outgoing messages always carry this literal in their ``status`` field
OUTGOING_STATUS = "Message"

AMOUNT_PLACES = 2
_AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)

# Token expiry dates travel as e.g. 05Mar2027
DATE_FORMAT = "%d%b%Y"

WEB_INITIATION_ORDER: Tuple[str, ...] = (
    "id",
    "reference",
    "amount",
    "additionalinfo",
    "returnurl",
    "resulturl",
    "authemail",
    "tokenize",
    "merchanttrace",
    "status",
)

REMOTE_INITIATION_ORDER: Tuple[str, ...] = (
    ("method",)
    + WEB_INITIATION_ORDER
    + (
        "phone",
        "cardnumber",
        "cardname",
        "cardcvv",
        "cardexpiry",
        "billingline1",
        "billingline2",
        "billingcity",
        "billingprovince",
        "billingcountry",
        "token",
    )
)

TRACE_ORDER: Tuple[str, ...] = ("id", "merchanttrace", "status")

URL_FIELDS = frozenset({"returnurl", "resulturl", "pollurl", "browserurl"})
AMOUNT_FIELDS = frozenset({"amount"})

# Fields that must survive the pair/field delimiters untouched
IDENTIFIER_FIELDS = frozenset({
    "id",
    "reference",
    "authemail",
    "merchanttrace",
    "status",
    "method",
    "phone",
    "paynowreference",
    "cardnumber",
    "cardcvv",
    "cardexpiry",
})

_DELIMITERS = ("&", "=")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

Fields = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def format_amount(value: Any) -> str:
    """
    Render an amount with exactly two decimal places.

    Raises:
        EncodingError: value is a float, not a finite number, or needs more
            precision than the gateway's minor unit
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise EncodingError(
            f"amount must be a Decimal, int or numeric string, got {type(value).__name__}"
        )
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise EncodingError(f"amount '{value}' is not a number") from exc

    if not amount.is_finite():
        raise EncodingError(f"amount '{value}' is not a finite number")

    try:
        quantized = amount.quantize(_AMOUNT_QUANTUM)
    except InvalidOperation as exc:
        raise EncodingError(f"amount '{value}' is too large to encode") from exc

    if quantized != amount:
        raise EncodingError(
            f"amount '{value}' has more than {AMOUNT_PLACES} decimal places"
        )
    return f"{quantized:f}"


def render_value(name: str, value: Any, strict: bool = True) -> Optional[str]:
    """Render a single field value; ``None`` means the field is omitted."""
    if value is None:
        return None

    if name in AMOUNT_FIELDS and (strict or not isinstance(value, str)):
        rendered = format_amount(value)
    elif isinstance(value, bool):
        rendered = "true" if value else "false"
    elif isinstance(value, float):
        raise EncodingError(f"field '{name}': floats cannot be encoded canonically")
    elif isinstance(value, (int, Decimal)):
        rendered = str(value)
    elif isinstance(value, datetime):
        rendered = value.replace(microsecond=0).isoformat()
    elif isinstance(value, date):
        rendered = value.strftime(DATE_FORMAT)
    elif isinstance(value, str):
        rendered = unquote(value) if strict and name in URL_FIELDS else value
    else:
        raise EncodingError(
            f"field '{name}': cannot encode value of type {type(value).__name__}"
        )

    if strict:
        _check_representable(name, rendered)
    return rendered


def encode(
    fields: Fields,
    order: Sequence[str],
    allow_extra: bool = False,
    strict: bool = True,
) -> List[Tuple[str, str]]:
    """
    Encode fields into the canonical ordered list of ``(name, value)`` pairs.

    Args:
        fields: Mapping or iterable of (name, typed value) pairs
        order: Protocol field order for this message kind
        allow_extra: Keep fields missing from ``order`` after the known ones,
            in the order they were given (used for gateway responses)
        strict: Reject values the protocol cannot carry. Responses are encoded
            with ``strict=False`` so the received bytes are hashed untouched.

    Returns:
        Ordered list of (name, string value); absent values are omitted

    Raises:
        EncodingError: unknown or duplicate field, or an unrepresentable value
    """
    known = {}
    extras: List[Tuple[str, Any]] = []
    positions = set(order)

    for name, value in _pairs(fields):
        if name == HASH_FIELD:
            raise EncodingError("the hash field is produced by the signer, not encoded")
        if name in known or any(name == extra for extra, _ in extras):
            raise EncodingError(f"duplicate field '{name}'")
        if name in positions:
            known[name] = value
        elif allow_extra:
            extras.append((name, value))
        else:
            raise EncodingError(f"field '{name}' is not part of this message")

    encoded = []
    for name in order:
        if name not in known:
            continue
        rendered = render_value(name, known[name], strict=strict)
        if rendered is not None:
            encoded.append((name, rendered))

    for name, value in extras:
        rendered = render_value(name, value, strict=strict)
        if rendered is not None:
            encoded.append((name, rendered))

    return encoded


def _pairs(fields: Fields) -> Iterable[Tuple[str, Any]]:
    if isinstance(fields, Mapping):
        return fields.items()
    return fields


def _check_representable(name: str, rendered: str) -> None:
    if _CONTROL_CHARS.search(rendered):
        raise EncodingError(f"field '{name}' contains a control character")
    if name in IDENTIFIER_FIELDS:
        for delimiter in _DELIMITERS:
            if delimiter in rendered:
                raise EncodingError(
                    f"field '{name}' contains the delimiter '{delimiter}'"
                )
