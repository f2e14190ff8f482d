from paynow.providers.base import Transport, TransportResponse, RequestsTransport
from paynow.providers.paynow_provider import (
    build_web_request,
    build_mobile_request,
    build_card_request,
    build_trace_request,
    MOBILE_METHODS,
    REMOTE_METHODS,
)

__all__ = [
    'Transport',
    'TransportResponse',
    'RequestsTransport',
    'build_web_request',
    'build_mobile_request',
    'build_card_request',
    'build_trace_request',
    'MOBILE_METHODS',
    'REMOTE_METHODS',
]
