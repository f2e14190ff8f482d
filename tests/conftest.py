"""
Pytest Configuration and Fixtures
"""
import hashlib
from decimal import Decimal
from unittest.mock import Mock
from urllib.parse import urlencode

import pytest

from paynow.models import PaymentRequest, LineItem
from paynow.providers.base import Transport, TransportResponse
from paynow.utils.signing import IntegrationKey

INTEGRATION_ID = 1201
INTEGRATION_KEY = '3e9fed89-60e1-4ce5-ab6e-6b1eb2d4f977'
POLL_URL = 'https://www.paynow.co.zw/Interface/CheckPayment/?guid=8d1c7e0b-6a11-4f0e-9d6c-1f0f3f2a9b77'
BROWSER_URL = 'https://www.paynow.co.zw/Payment/ConfirmPayment/9510'


def gateway_hash(values, key=INTEGRATION_KEY):
    """Paynow's digest, computed independently of the library"""
    return hashlib.sha512((''.join(values) + key).encode('utf-8')).hexdigest().upper()


def gateway_body(pairs, key=INTEGRATION_KEY, hash_value=None):
    """Form-encoded response body signed the way Paynow signs it"""
    pairs = list(pairs)
    digest = hash_value if hash_value is not None else gateway_hash([v for _, v in pairs], key)
    return urlencode(pairs + [('hash', digest)]).encode('ascii')


@pytest.fixture
def integration_key():
    return IntegrationKey(INTEGRATION_KEY)


@pytest.fixture
def payment_request():
    """USD 10.50 web payment"""
    return PaymentRequest(
        reference='INV-001',
        amount=Decimal('10.50'),
        currency='USD',
        return_url='https://merchant.test/return?order=INV-001',
        result_url='https://merchant.test/paynow/result',
        customer_email='buyer@example.com',
    )


@pytest.fixture
def itemised_request():
    return PaymentRequest(
        reference='INV-002',
        amount=Decimal('25.00'),
        return_url='https://merchant.test/return',
        result_url='https://merchant.test/paynow/result',
        customer_email='buyer@example.com',
        items=[
            LineItem(name='Bananas', amount=Decimal('2.50'), quantity=4),
            LineItem(name='Apples', amount=Decimal('15.00')),
        ],
    )


@pytest.fixture
def initiation_body():
    return gateway_body([
        ('status', 'Ok'),
        ('browserurl', BROWSER_URL),
        ('pollurl', POLL_URL),
    ])


@pytest.fixture
def status_body():
    """Factory for signed status updates for INV-001"""
    def _make(status='Paid', reference='INV-001', amount='10.50', **extra):
        pairs = [
            ('reference', reference),
            ('paynowreference', '9510'),
            ('amount', amount),
            ('status', status),
            ('pollurl', POLL_URL),
        ]
        pairs.extend(extra.items())
        return gateway_body(pairs)
    return _make


@pytest.fixture
def transport():
    """Transport mock; queue bodies with transport.post.side_effect"""
    mock = Mock(spec=Transport)
    mock.reply = lambda *bodies: setattr(
        mock.post, 'side_effect', [TransportResponse(status_code=200, body=b) for b in bodies]
    )
    return mock
