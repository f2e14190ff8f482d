from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

from paynow.utils.encoding import HASH_FIELD

Amount = Union[Decimal, int, str]


@dataclass
class LineItem:
    name: str
    amount: Amount
    quantity: int = 1

    @property
    def total(self) -> Decimal:
        return Decimal(self.amount) * self.quantity


@dataclass
class PaymentRequest:
    """A payment the merchant wants Paynow to collect"""
    reference: str
    amount: Amount
    result_url: str
    currency: str = 'USD'
    return_url: Optional[str] = None
    customer_email: Optional[str] = None
    items: List[LineItem] = field(default_factory=list)
    additional_info: Optional[str] = None
    merchant_trace: Optional[str] = None
    tokenize: Optional[bool] = None

    def add_item(self, name: str, amount: Amount, quantity: int = 1) -> 'PaymentRequest':
        self.items.append(LineItem(name=name, amount=amount, quantity=quantity))
        return self

    @property
    def description(self) -> Optional[str]:
        """additionalinfo as sent to Paynow"""
        if self.additional_info is not None:
            return self.additional_info
        if self.items:
            return ', '.join(item.name for item in self.items)
        return None


@dataclass
class Card:
    number: str
    name: str
    cvv: str
    expiry: str

    def __repr__(self) -> str:
        return f'<Card ****{self.number[-4:] if self.number else ""}>'


@dataclass
class BillingAddress:
    line1: str
    city: str
    country: str
    line2: Optional[str] = None
    province: Optional[str] = None


@dataclass(frozen=True)
class SignedPayload:
    """Ordered (name, value) pairs ready for the transport, hash always last"""
    fields: Tuple[Tuple[str, str], ...]

    def __post_init__(self):
        if not self.fields or self.fields[-1][0] != HASH_FIELD:
            raise ValueError('SignedPayload must end with the hash field')

    @property
    def hash(self) -> str:
        return self.fields[-1][1]

    def as_dict(self) -> Dict[str, str]:
        return dict(self.fields)

    def urlencode(self) -> str:
        """Form-encoded body; the only place values are percent-escaped"""
        return urlencode(self.fields)

    def __repr__(self) -> str:
        names = ', '.join(name for name, _ in self.fields)
        return f'<SignedPayload [{names}]>'
