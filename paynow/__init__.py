"""
Paynow Zimbabwe client.

Builds signed payment requests, verifies the hash on every Paynow response
and tracks each payment from creation to a terminal status.
"""

from paynow.errors import (
    PaynowError,
    ValidationError,
    EncodingError,
    IntegrityError,
    HashMismatch,
    MissingHash,
    ResponseError,
    MalformedResponse,
    ResponseIntegrityError,
    GatewayError,
    TraceNotFound,
    UnsupportedMethod,
    StateConflict,
    TransportError,
)
from paynow.models import (
    PaymentRequest,
    LineItem,
    Card,
    BillingAddress,
    SignedPayload,
    Transaction,
    TransactionStatus,
    GatewayResponse,
    ResponseLayout,
)
from paynow.providers import (
    build_web_request,
    build_mobile_request,
    build_card_request,
    build_trace_request,
    Transport,
    TransportResponse,
    RequestsTransport,
)
from paynow.services import PaynowClient, TransactionService, advance, parse, parse_status_update
from paynow.utils.encoding import encode
from paynow.utils.signing import IntegrationKey, sign, verify

__all__ = [
    'PaynowError', 'ValidationError', 'EncodingError', 'IntegrityError', 'HashMismatch',
    'MissingHash', 'ResponseError', 'MalformedResponse', 'ResponseIntegrityError',
    'GatewayError', 'TraceNotFound', 'UnsupportedMethod', 'StateConflict', 'TransportError',
    'PaymentRequest', 'LineItem', 'Card', 'BillingAddress', 'SignedPayload',
    'Transaction', 'TransactionStatus', 'GatewayResponse', 'ResponseLayout',
    'build_web_request', 'build_mobile_request', 'build_card_request', 'build_trace_request',
    'Transport', 'TransportResponse', 'RequestsTransport',
    'PaynowClient', 'TransactionService', 'advance', 'parse', 'parse_status_update',
    'encode', 'IntegrationKey', 'sign', 'verify',
]
