"""
Utils Package
Encoding, signing, validation and logging helpers
"""

from paynow.utils.encoding import (
    encode,
    format_amount,
    WEB_INITIATION_ORDER,
    REMOTE_INITIATION_ORDER,
    TRACE_ORDER,
)
from paynow.utils.signing import IntegrationKey, sign, verify, constant_time_equals
from paynow.utils.logger import get_logger, configure_logging
from paynow.utils.validators import (
    validate_phone_number,
    validate_amount,
    validate_currency,
    validate_email,
    sanitize_phone_number,
)

__all__ = [
    'encode',
    'format_amount',
    'WEB_INITIATION_ORDER',
    'REMOTE_INITIATION_ORDER',
    'TRACE_ORDER',
    'IntegrationKey',
    'sign',
    'verify',
    'constant_time_equals',
    'get_logger',
    'configure_logging',
    'validate_phone_number',
    'validate_amount',
    'validate_currency',
    'validate_email',
    'sanitize_phone_number',
]
