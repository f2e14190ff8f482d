from paynow.errors.exceptions import (
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
    InvalidIntegrationId,
    InvalidAmount,
    AmountOverflow,
    InsufficientBalance,
    TraceNotFound,
    UnsupportedMethod,
    StateConflict,
    TransportError,
)

__all__ = [
    'PaynowError',
    'ValidationError',
    'EncodingError',
    'IntegrityError',
    'HashMismatch',
    'MissingHash',
    'ResponseError',
    'MalformedResponse',
    'ResponseIntegrityError',
    'GatewayError',
    'InvalidIntegrationId',
    'InvalidAmount',
    'AmountOverflow',
    'InsufficientBalance',
    'TraceNotFound',
    'UnsupportedMethod',
    'StateConflict',
    'TransportError',
]
