from paynow.models.payment import PaymentRequest, LineItem, Card, BillingAddress, SignedPayload
from paynow.models.transaction import Transaction, TransactionStatus, TERMINAL_STATUSES, map_status
from paynow.models.response import GatewayResponse, ResponseLayout

__all__ = [
    'PaymentRequest', 'LineItem', 'Card', 'BillingAddress', 'SignedPayload',
    'Transaction', 'TransactionStatus', 'TERMINAL_STATUSES', 'map_status',
    'GatewayResponse', 'ResponseLayout',
]
