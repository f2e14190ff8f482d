class PaynowError(Exception):
    error = "Paynow error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(PaynowError):
    error = "Validation error"


class EncodingError(PaynowError):
    error = "Encoding error"


class IntegrityError(PaynowError):
    error = "Integrity error"


class HashMismatch(IntegrityError):
    error = "Hash mismatch"


class MissingHash(IntegrityError):
    error = "Missing hash"


class ResponseError(PaynowError):
    error = "Response error"


class MalformedResponse(ResponseError):
    error = "Malformed response"


class ResponseIntegrityError(ResponseError):
    error = "Response failed integrity check"

    def __init__(self, message, integrity_error):
        super().__init__(message)
        self.integrity_error = integrity_error


class GatewayError(ResponseError):
    """Paynow answered with ``status=Error`` (or a hashed ``NotFound``)."""
    error = "Paynow returned an error"

    def __init__(self, message, gateway_message=None):
        super().__init__(message)
        self.gateway_message = gateway_message if gateway_message is not None else message


class InvalidIntegrationId(GatewayError):
    error = "Invalid integration id"


class InvalidAmount(GatewayError):
    error = "Invalid amount"


class AmountOverflow(GatewayError):
    error = "Amount is larger than Paynow can handle"


class InsufficientBalance(GatewayError):
    error = "Insufficient balance"


class TraceNotFound(GatewayError):
    error = "Merchant trace not found"


class UnsupportedMethod(PaynowError):
    error = "Unsupported payment method"


class StateConflict(PaynowError):
    error = "Transaction state conflict"


class TransportError(PaynowError):
    error = "Transport error"

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
