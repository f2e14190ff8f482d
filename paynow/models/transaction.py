import re
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from paynow.models.payment import PaymentRequest


class TransactionStatus(str, Enum):
    CREATED = 'created'
    SENT = 'sent'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    FAILED = 'failed'
    UNKNOWN = 'unknown'


TERMINAL_STATUSES = frozenset({
    TransactionStatus.PAID,
    TransactionStatus.CANCELLED,
    TransactionStatus.FAILED,
})

# Paynow status token (lower-cased, single-spaced) -> lifecycle status
STATUS_TABLE: Dict[str, TransactionStatus] = {
    'ok': TransactionStatus.SENT,
    'created': TransactionStatus.SENT,
    'sent': TransactionStatus.SENT,
    'paid': TransactionStatus.PAID,
    'awaiting delivery': TransactionStatus.PAID,
    'delivered': TransactionStatus.PAID,
    'cancelled': TransactionStatus.CANCELLED,
    'failed': TransactionStatus.FAILED,
}


def map_status(status_text: Optional[str]) -> TransactionStatus:
    """Normalise a Paynow status string; anything unrecognised is UNKNOWN."""
    if not status_text:
        return TransactionStatus.UNKNOWN
    token = re.sub(r'\s+', ' ', status_text.strip().lower())
    return STATUS_TABLE.get(token, TransactionStatus.UNKNOWN)


class Transaction:
    """A single payment's lifecycle; owned by the caller, never persisted here."""

    def __init__(self, request: PaymentRequest, created_at: Optional[datetime] = None):
        self.request = request
        self.status = TransactionStatus.CREATED
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = self.created_at
        self.poll_url: Optional[str] = None
        self.browser_url: Optional[str] = None
        self.paynow_reference: Optional[int] = None
        self.instructions: Optional[str] = None
        self.last_status_text: Optional[str] = None
        self.history: List[Tuple[TransactionStatus, Optional[str]]] = []

    @property
    def reference(self) -> str:
        return self.request.reference

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self):
        return {
            'reference': self.reference,
            'paynow_reference': self.paynow_reference,
            'amount': str(self.request.amount),
            'currency': self.request.currency,
            'status': self.status.value,
            'status_text': self.last_status_text,
            'poll_url': self.poll_url,
            'browser_url': self.browser_url,
            'instructions': self.instructions,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Transaction {self.reference} - {self.status.value}>'
