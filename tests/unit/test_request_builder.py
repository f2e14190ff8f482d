"""
Unit Tests for the Paynow request builders
"""
from decimal import Decimal
from unittest.mock import Mock, patch
from urllib.parse import parse_qsl

import pytest

from conftest import INTEGRATION_ID, INTEGRATION_KEY, gateway_hash
from paynow.errors import EncodingError, HashMismatch, UnsupportedMethod, ValidationError
from paynow.models import BillingAddress, Card
from paynow.providers.paynow_provider import (
    build_card_request,
    build_mobile_request,
    build_trace_request,
    build_web_request,
)
from paynow.utils.signing import IntegrationKey, verify


class TestBuildWebRequest:

    def test_payload_fields_and_hash(self, payment_request, integration_key):
        payload = build_web_request(payment_request, integration_key, INTEGRATION_ID)

        assert payload.fields[:-1] == (
            ('id', '1201'),
            ('reference', 'INV-001'),
            ('amount', '10.50'),
            ('returnurl', 'https://merchant.test/return?order=INV-001'),
            ('resulturl', 'https://merchant.test/paynow/result'),
            ('authemail', 'buyer@example.com'),
            ('status', 'Message'),
        )
        assert payload.fields[-1][0] == 'hash'
        assert payload.hash == gateway_hash([value for _, value in payload.fields[:-1]])

    def test_deterministic(self, payment_request, integration_key):
        first = build_web_request(payment_request, integration_key, INTEGRATION_ID)
        second = build_web_request(payment_request, integration_key, INTEGRATION_ID)

        assert first == second
        assert first.urlencode() == second.urlencode()

    def test_round_trip_and_wrong_key(self, payment_request, integration_key):
        payload = build_web_request(payment_request, integration_key, INTEGRATION_ID)

        verify(payload.fields, integration_key)
        with pytest.raises(HashMismatch):
            verify(payload.fields, IntegrationKey('not-the-key'))

    def test_scenario_amount_change_breaks_integrity(self, payment_request):
        payload = build_web_request(payment_request, 's3cr3t', INTEGRATION_ID)
        verify(payload.fields, 's3cr3t')

        tampered = [(name, '10.51' if name == 'amount' else value) for name, value in payload.fields]
        with pytest.raises(HashMismatch):
            verify(tampered, 's3cr3t')

    def test_items_become_additional_info(self, itemised_request, integration_key):
        payload = build_web_request(itemised_request, integration_key, INTEGRATION_ID)

        assert payload.as_dict()['additionalinfo'] == 'Bananas, Apples'
        assert payload.as_dict()['amount'] == '25.00'

    def test_urlencode_escapes_values_and_keeps_order(self, payment_request, integration_key):
        payload = build_web_request(payment_request, integration_key, INTEGRATION_ID)
        body = payload.urlencode()

        assert 'returnurl=https%3A%2F%2Fmerchant.test%2Freturn%3Forder%3DINV-001' in body
        assert body.rsplit('&', 1)[1].startswith('hash=')
        assert parse_qsl(body) == list(payload.fields)

    def test_repr_hides_values(self, payment_request, integration_key):
        payload = build_web_request(payment_request, integration_key, INTEGRATION_ID)
        assert 'INV-001' not in repr(payload)
        assert payload.hash not in repr(payload)

    @pytest.mark.parametrize("changes, message", [
        ({'reference': ''}, 'Reference is required'),
        ({'amount': Decimal('0')}, 'greater than 0'),
        ({'amount': Decimal('-5.00')}, 'greater than 0'),
        ({'amount': Decimal('1.005')}, 'decimal places'),
        ({'return_url': None}, 'Return URL is required'),
        ({'result_url': 'not a url'}, 'Result URL'),
        ({'currency': 'dollars'}, 'Currency'),
        ({'customer_email': 'nope'}, 'Invalid email'),
        ({'tokenize': 'yes'}, 'tokenize'),
    ])
    def test_validation_fails_fast(self, payment_request, integration_key, changes, message):
        for name, value in changes.items():
            setattr(payment_request, name, value)

        with patch('paynow.providers.paynow_provider.sign') as mock_sign, \
                pytest.raises(ValidationError, match=message):
            build_web_request(payment_request, integration_key, INTEGRATION_ID)

        mock_sign.assert_not_called()

    def test_line_item_mismatch(self, itemised_request, integration_key):
        itemised_request.amount = Decimal('30.00')
        with pytest.raises(ValidationError, match='does not match'):
            build_web_request(itemised_request, integration_key, INTEGRATION_ID)

    @pytest.mark.parametrize("integration_id", [0, -1, '1201', True, None])
    def test_integration_id(self, payment_request, integration_key, integration_id):
        with pytest.raises(ValidationError, match='Integration id'):
            build_web_request(payment_request, integration_key, integration_id)

    def test_currency_lookup(self, payment_request, integration_key):
        lookup = Mock()
        lookup.is_valid.return_value = False
        with pytest.raises(ValidationError, match='Unknown currency'):
            build_web_request(payment_request, integration_key, INTEGRATION_ID, currency_lookup=lookup)

    def test_reference_with_delimiter_is_an_encoding_error(self, payment_request, integration_key):
        payment_request.reference = 'INV&001'
        with pytest.raises(EncodingError):
            build_web_request(payment_request, integration_key, INTEGRATION_ID)

    def test_key_not_in_payload(self, payment_request, integration_key):
        payload = build_web_request(payment_request, integration_key, INTEGRATION_ID)
        assert INTEGRATION_KEY not in payload.urlencode()


class TestBuildMobileRequest:

    def test_ecocash_payload(self, payment_request, integration_key):
        payload = build_mobile_request(payment_request, '+263771111111', 'EcoCash', integration_key, INTEGRATION_ID)
        names = [name for name, _ in payload.fields]

        assert names[0] == 'method'
        assert names[-2:] == ['phone', 'hash']
        assert payload.as_dict()['method'] == 'ecocash'
        assert payload.as_dict()['phone'] == '0771111111'
        verify(payload.fields, integration_key)
        assert payload.hash == gateway_hash([value for _, value in payload.fields[:-1]])

    def test_onemoney(self, payment_request, integration_key):
        payload = build_mobile_request(payment_request, '0711111111', 'onemoney', integration_key, INTEGRATION_ID)
        assert payload.as_dict()['method'] == 'onemoney'

    @pytest.mark.parametrize("method", ['telecash', 'paypal', '', None])
    def test_unknown_method(self, payment_request, integration_key, method):
        with pytest.raises(UnsupportedMethod):
            build_mobile_request(payment_request, '0771111111', method, integration_key, INTEGRATION_ID)

    def test_card_method_is_redirected(self, payment_request, integration_key):
        with pytest.raises(UnsupportedMethod, match='build_card_request'):
            build_mobile_request(payment_request, '0771111111', 'vmc', integration_key, INTEGRATION_ID)

    def test_phone_must_match_method(self, payment_request, integration_key):
        with pytest.raises(ValidationError, match='ecocash'):
            build_mobile_request(payment_request, '0711111111', 'ecocash', integration_key, INTEGRATION_ID)

    def test_auth_email_required(self, payment_request, integration_key):
        payment_request.customer_email = None
        with pytest.raises(ValidationError, match='email'):
            build_mobile_request(payment_request, '0771111111', 'ecocash', integration_key, INTEGRATION_ID)

    def test_return_url_optional(self, payment_request, integration_key):
        payment_request.return_url = None
        payload = build_mobile_request(payment_request, '0771111111', 'ecocash', integration_key, INTEGRATION_ID)
        assert 'returnurl' not in payload.as_dict()


class TestBuildCardRequest:

    @pytest.fixture
    def card(self):
        return Card(number='4111 1111 1111 1111', name='T Moyo', cvv='123', expiry='0928')

    @pytest.fixture
    def address(self):
        return BillingAddress(line1='1 Samora Machel Ave', city='Harare', country='Zimbabwe')

    def test_card_payload(self, payment_request, integration_key, card, address):
        payload = build_card_request(payment_request, card, address, 'tok_1', integration_key, INTEGRATION_ID)
        fields = payload.as_dict()

        assert fields['method'] == 'vmc'
        assert fields['cardnumber'] == '4111111111111111'
        assert fields['billingcountry'] == 'Zimbabwe'
        assert 'billingline2' not in fields
        assert [name for name, _ in payload.fields][-2:] == ['token', 'hash']
        verify(payload.fields, integration_key)

    def test_card_details_hidden_in_repr(self, card):
        assert '4111 1111 1111 1111' not in repr(card)
        assert '123' not in repr(card)

    def test_country_lookup(self, payment_request, integration_key, card, address):
        lookup = Mock()
        lookup.is_valid.return_value = False
        with pytest.raises(ValidationError, match='billing country'):
            build_card_request(payment_request, card, address, 'tok_1', integration_key, INTEGRATION_ID,
                               country_lookup=lookup)

    def test_token_required(self, payment_request, integration_key, card, address):
        with pytest.raises(ValidationError, match='token'):
            build_card_request(payment_request, card, address, '', integration_key, INTEGRATION_ID)


class TestBuildTraceRequest:

    def test_trace_payload(self, integration_key):
        payload = build_trace_request('trace-42', integration_key, INTEGRATION_ID)

        assert payload.fields[:-1] == (('id', '1201'), ('merchanttrace', 'trace-42'), ('status', 'Message'))
        assert payload.hash == gateway_hash(['1201', 'trace-42', 'Message'])

    def test_trace_required(self, integration_key):
        with pytest.raises(ValidationError):
            build_trace_request('', integration_key, INTEGRATION_ID)
