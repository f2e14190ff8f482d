"""
Paynow request builder
Based on the Paynow Zimbabwe HTTP integration.

Message kinds
-------------
Web (redirect) payment             → POST {base}/initiatetransaction
Remote payment (mobile money/card) → POST {base}/remotetransaction
Merchant trace lookup              → POST {base}/trace
Status poll                        → POST {pollurl} with an empty body

Every outgoing message is a form body whose last field is ``hash``. The hash
covers the field values in protocol order with the integration key appended.
See paynow.utils.encoding for the orders and paynow.utils.signing for the digest.

Nothing here performs I/O: each builder validates its input, encodes, signs
and returns a SignedPayload for the caller's transport.
"""

import logging
import re
from typing import Any, Dict, Optional, Sequence, Tuple

from paynow.errors import UnsupportedMethod, ValidationError
from paynow.models.payment import BillingAddress, Card, PaymentRequest, SignedPayload
from paynow.utils.encoding import (
    HASH_FIELD,
    OUTGOING_STATUS,
    REMOTE_INITIATION_ORDER,
    TRACE_ORDER,
    WEB_INITIATION_ORDER,
    encode,
)
from paynow.utils.signing import IntegrationKey, sign
from paynow.utils.validators import (
    CodeLookup,
    sanitize_phone_number,
    validate_amount,
    validate_card,
    validate_currency,
    validate_email,
    validate_line_items,
    validate_phone_number,
    validate_reference,
    validate_url,
)

logger = logging.getLogger(__name__)

# Endpoints relative to the interface base URL
EP_INITIATE = "initiatetransaction"
EP_REMOTE = "remotetransaction"
EP_TRACE = "trace"

MOBILE_METHODS: Tuple[str, ...] = ("ecocash", "onemoney")
CARD_METHOD = "vmc"
REMOTE_METHODS: Tuple[str, ...] = MOBILE_METHODS + (CARD_METHOD,)


def build_web_request(
    request: PaymentRequest,
    key: IntegrationKey,
    integration_id: int,
    currency_lookup: Optional[CodeLookup] = None,
) -> SignedPayload:
    """
    Build a signed web (browser redirect) payment initiation.

    Raises:
        ValidationError: bad request data, caught before any encoding
        EncodingError: a value cannot be rendered canonically
    """
    _validate_payment(request, integration_id, currency_lookup)
    _check(validate_url(request.return_url, "Return URL"))

    logger.debug("Building web payment for reference %s", request.reference)
    return _signed(_payment_fields(request, integration_id), WEB_INITIATION_ORDER, key)


def build_mobile_request(
    request: PaymentRequest,
    phone: str,
    method: str,
    key: IntegrationKey,
    integration_id: int,
    currency_lookup: Optional[CodeLookup] = None,
) -> SignedPayload:
    """
    Build a signed remote (USSD push) mobile money payment.

    Args:
        request: Payment; customer_email is required by Paynow for remote payments
        phone: Subscriber number, local or +263 form
        method: 'ecocash' or 'onemoney'

    Raises:
        UnsupportedMethod: method is not a mobile money method
        ValidationError: bad request data or phone number
    """
    method_name = _method_name(method)
    if method_name == CARD_METHOD:
        raise UnsupportedMethod("Card payments need card details; use build_card_request()")
    if method_name not in MOBILE_METHODS:
        raise UnsupportedMethod(
            f"Unsupported mobile money method '{method}'. Use one of: {', '.join(MOBILE_METHODS)}"
        )

    _validate_payment(request, integration_id, currency_lookup)
    _require_auth_email(request)
    _check(validate_phone_number(phone, method_name))

    fields = _payment_fields(request, integration_id)
    fields["method"] = method_name
    fields["phone"] = sanitize_phone_number(phone)

    logger.debug("Building %s payment for reference %s", method_name, request.reference)
    return _signed(fields, REMOTE_INITIATION_ORDER, key)


def build_card_request(
    request: PaymentRequest,
    card: Card,
    address: BillingAddress,
    token: str,
    key: IntegrationKey,
    integration_id: int,
    currency_lookup: Optional[CodeLookup] = None,
    country_lookup: Optional[CodeLookup] = None,
) -> SignedPayload:
    """Build a signed remote Visa/Mastercard payment."""
    _validate_payment(request, integration_id, currency_lookup)
    _require_auth_email(request)
    _check(validate_card(card))
    _validate_address(address, country_lookup)
    if not token or not str(token).strip():
        raise ValidationError("Card token is required")

    fields = _payment_fields(request, integration_id)
    fields.update({
        "method": CARD_METHOD,
        "cardnumber": re.sub(r"[\s\-]", "", card.number),
        "cardname": card.name,
        "cardcvv": card.cvv,
        "cardexpiry": card.expiry,
        "billingline1": address.line1,
        "billingline2": address.line2,
        "billingcity": address.city,
        "billingprovince": address.province,
        "billingcountry": address.country,
        "token": token,
    })

    logger.debug("Building card payment for reference %s", request.reference)
    return _signed(fields, REMOTE_INITIATION_ORDER, key)


def build_trace_request(
    merchant_trace: str,
    key: IntegrationKey,
    integration_id: int,
) -> SignedPayload:
    """Build a signed lookup of a payment by its merchant trace id."""
    _validate_integration_id(integration_id)
    if not isinstance(merchant_trace, str) or not merchant_trace.strip():
        raise ValidationError("Merchant trace is required")

    fields = {
        "id": integration_id,
        "merchanttrace": merchant_trace,
        "status": OUTGOING_STATUS,
    }
    return _signed(fields, TRACE_ORDER, key)


# Private helpers

def _signed(fields: Dict[str, Any], order: Sequence[str], key: IntegrationKey) -> SignedPayload:
    encoded = encode(fields, order)
    digest = sign(encoded, key)
    return SignedPayload(tuple(encoded) + ((HASH_FIELD, digest),))


def _payment_fields(request: PaymentRequest, integration_id: int) -> Dict[str, Any]:
    return {
        "id": integration_id,
        "reference": request.reference,
        "amount": request.amount,
        "additionalinfo": request.description,
        "returnurl": request.return_url,
        "resulturl": request.result_url,
        "authemail": request.customer_email,
        "tokenize": request.tokenize,
        "merchanttrace": request.merchant_trace,
        "status": OUTGOING_STATUS,
    }


def _validate_payment(
    request: PaymentRequest,
    integration_id: int,
    currency_lookup: Optional[CodeLookup],
) -> None:
    _validate_integration_id(integration_id)
    _check(validate_reference(request.reference))
    _check(validate_amount(request.amount))
    _check(validate_currency(request.currency, currency_lookup))
    _check(validate_url(request.result_url, "Result URL"))
    _check(validate_line_items(request.items, request.amount))
    if request.customer_email is not None:
        _check(validate_email(request.customer_email))
    if request.tokenize is not None and not isinstance(request.tokenize, bool):
        raise ValidationError("tokenize must be a boolean")


def _validate_integration_id(integration_id: Any) -> None:
    if isinstance(integration_id, bool) or not isinstance(integration_id, int) or integration_id <= 0:
        raise ValidationError("Integration id must be a positive integer")


def _validate_address(address: BillingAddress, country_lookup: Optional[CodeLookup]) -> None:
    if not address.line1 or not address.line1.strip():
        raise ValidationError("Billing address line 1 is required")
    if not address.city or not address.city.strip():
        raise ValidationError("Billing city is required")
    if not address.country or not address.country.strip():
        raise ValidationError("Billing country is required")
    if country_lookup is not None and not country_lookup.is_valid(address.country):
        raise ValidationError(f"Unknown billing country: {address.country}")


def _require_auth_email(request: PaymentRequest) -> None:
    if not request.customer_email:
        raise ValidationError("Customer email is required for remote payments")


def _method_name(method: Any) -> str:
    if not isinstance(method, str):
        raise UnsupportedMethod(f"Unsupported payment method {method!r}")
    return method.strip().lower()


def _check(result: Tuple[bool, Optional[str]]) -> None:
    is_valid, error = result
    if not is_valid:
        raise ValidationError(error)
