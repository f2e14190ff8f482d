from paynow.services.response_parser import parse, parse_status_update
from paynow.services.transaction_service import TransactionService, advance
from paynow.services.payment_service import PaynowClient

__all__ = [
    'parse',
    'parse_status_update',
    'TransactionService',
    'advance',
    'PaynowClient',
]
