from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

from paynow.models.transaction import TransactionStatus


class ResponseLayout(str, Enum):
    ERROR = 'error'
    NOT_FOUND = 'not_found'
    INITIATION = 'initiation'
    REMOTE_INITIATION = 'remote_initiation'
    STATUS_UPDATE = 'status_update'


# Hash order per layout; fields Paynow adds beyond these are hashed after them
LAYOUT_ORDERS: Dict[ResponseLayout, Tuple[str, ...]] = {
    ResponseLayout.ERROR: ('status', 'error'),
    ResponseLayout.NOT_FOUND: ('status',),
    ResponseLayout.INITIATION: ('status', 'browserurl', 'pollurl'),
    ResponseLayout.REMOTE_INITIATION: ('status', 'instructions', 'paynowreference', 'pollurl'),
    ResponseLayout.STATUS_UPDATE: (
        'reference',
        'paynowreference',
        'amount',
        'status',
        'pollurl',
        'token',
        'tokenexpiry',
    ),
}

LAYOUT_REQUIRED: Dict[ResponseLayout, Tuple[str, ...]] = {
    ResponseLayout.ERROR: ('error',),
    ResponseLayout.NOT_FOUND: (),
    ResponseLayout.INITIATION: ('browserurl', 'pollurl'),
    ResponseLayout.REMOTE_INITIATION: ('paynowreference', 'pollurl'),
    ResponseLayout.STATUS_UPDATE: ('reference', 'paynowreference', 'amount'),
}


@dataclass(frozen=True)
class GatewayResponse:
    """A Paynow response whose hash has been verified"""
    layout: ResponseLayout
    status: TransactionStatus
    status_text: str
    hash: str
    fields: Tuple[Tuple[str, str], ...] = field(repr=False)
    reference: Optional[str] = None
    paynow_reference: Optional[int] = None
    amount: Optional[Decimal] = None
    poll_url: Optional[str] = None
    browser_url: Optional[str] = None
    instructions: Optional[str] = None
    token: Optional[str] = field(default=None, repr=False)
    token_expiry: Optional[date] = None
    error: Optional[str] = None

    def get(self, name: str, default=None) -> Optional[str]:
        """Raw verified value of any field, including ones not typed above"""
        for key, value in self.fields:
            if key == name:
                return value
        return default
