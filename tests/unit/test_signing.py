"""
Unit Tests for signing and verification
"""
import logging
import pickle
import uuid
from decimal import Decimal

import pytest

from conftest import INTEGRATION_KEY, gateway_hash
from paynow.errors import EncodingError, HashMismatch, IntegrityError, MissingHash, ValidationError
from paynow.utils.encoding import WEB_INITIATION_ORDER, encode
from paynow.utils.signing import IntegrationKey, constant_time_equals, sign, verify


@pytest.fixture
def encoded():
    return encode(
        {
            'id': 1201,
            'reference': 'INV-001',
            'amount': Decimal('10.50'),
            'resulturl': 'https://merchant.test/result',
            'status': 'Message',
        },
        WEB_INITIATION_ORDER,
    )


class TestIntegrationKey:

    def test_every_rendering_is_redacted(self, integration_key):
        for rendered in (str(integration_key), repr(integration_key), f'{integration_key}',
                         f'{integration_key!r}', '%s' % integration_key, str([integration_key])):
            assert INTEGRATION_KEY not in rendered
            assert '**********' in rendered

    def test_expose_returns_raw_value(self, integration_key):
        assert integration_key.expose() == INTEGRATION_KEY

    def test_accepts_uuid(self):
        key = IntegrationKey(uuid.UUID(INTEGRATION_KEY))
        assert key.expose() == INTEGRATION_KEY

    def test_cannot_be_pickled(self, integration_key):
        with pytest.raises(TypeError):
            pickle.dumps(integration_key)

    @pytest.mark.parametrize("value", ['', '   ', None])
    def test_empty_key_rejected(self, value):
        with pytest.raises(ValidationError):
            IntegrationKey(value)


class TestSign:

    def test_digest_is_values_then_key_sha512_uppercase(self, encoded, integration_key):
        expected = gateway_hash(['1201', 'INV-001', '10.50', 'https://merchant.test/result', 'Message'])

        assert sign(encoded, integration_key) == expected
        assert len(expected) == 128
        assert expected == expected.upper()

    def test_field_names_are_not_hashed(self, integration_key):
        assert sign([('a', 'x'), ('b', 'y')], integration_key) == sign([('c', 'x'), ('d', 'y')], integration_key)

    def test_order_matters(self, integration_key):
        assert sign([('a', 'x'), ('b', 'y')], integration_key) != sign([('b', 'y'), ('a', 'x')], integration_key)

    def test_deterministic(self, encoded, integration_key):
        assert sign(encoded, integration_key) == sign(list(encoded), INTEGRATION_KEY)

    def test_refuses_to_sign_hash_field(self, encoded, integration_key):
        with pytest.raises(EncodingError):
            sign(encoded + [('hash', 'ABC')], integration_key)


class TestVerify:

    def test_round_trip(self, encoded, integration_key):
        verify(encoded + [('hash', sign(encoded, integration_key))], integration_key)

    def test_hash_position_and_case_do_not_matter(self, encoded, integration_key):
        digest = sign(encoded, integration_key)
        verify([('HASH', digest.lower())] + encoded, integration_key)

    def test_different_key_fails(self, encoded, integration_key):
        signed = encoded + [('hash', sign(encoded, integration_key))]
        with pytest.raises(HashMismatch):
            verify(signed, IntegrationKey('another-key'))

    @pytest.mark.parametrize("index", range(5))
    def test_tampering_any_field_fails(self, encoded, integration_key, index):
        digest = sign(encoded, integration_key)
        tampered = list(encoded)
        name, value = tampered[index]
        tampered[index] = (name, value + 'x')

        with pytest.raises(HashMismatch):
            verify(tampered + [('hash', digest)], integration_key)

    def test_forced_wrong_hash_fails(self, encoded, integration_key):
        with pytest.raises(HashMismatch):
            verify(encoded + [('hash', 'A' * 128)], integration_key)

    @pytest.mark.parametrize("fields", [[('status', 'Ok')], [('status', 'Ok'), ('hash', '')]])
    def test_missing_hash(self, fields, integration_key):
        with pytest.raises(MissingHash):
            verify(fields, integration_key)

    def test_mismatch_is_an_integrity_error(self, encoded, integration_key):
        with pytest.raises(IntegrityError):
            verify(encoded + [('hash', '00')], integration_key)

    def test_key_never_logged_or_in_error(self, encoded, integration_key, caplog):
        with caplog.at_level(logging.DEBUG), pytest.raises(HashMismatch) as exc_info:
            verify(encoded + [('hash', '00')], integration_key)

        assert INTEGRATION_KEY not in str(exc_info.value)
        assert INTEGRATION_KEY not in caplog.text


class TestConstantTimeEquals:

    @pytest.mark.parametrize("a, b, expected", [
        ('ABC', 'ABC', True),
        ('ABC', 'ABD', False),
        ('ABC', 'ABCD', False),
        ('', '', True),
        (b'\x00\x01', b'\x00\x01', True),
        (b'\x00\x01', b'\x01\x01', False),
    ])
    def test_compares(self, a, b, expected):
        assert constant_time_equals(a, b) is expected
