"""
Message signing and verification

Paynow hashes the values of a message (never the names), in canonical order,
with the integration key appended directly after the last value:

    SHA512(value1 + value2 + ... + valueN + integration_key), upper-case hex
"""

import hashlib
import logging
import uuid
from typing import Iterable, Tuple, Union

from paynow.errors import EncodingError, HashMismatch, MissingHash, ValidationError
from paynow.utils.encoding import HASH_FIELD

logger = logging.getLogger(__name__)

_REDACTED = "IntegrationKey('**********')"


class IntegrationKey:
    """
    Opaque holder for the Paynow integration key.

    Every textual rendering is redacted so the key cannot leak through
    logging, tracebacks or error formatting. Use expose() at the single
    point where the raw value is needed.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, uuid.UUID, "IntegrationKey"]):
        if isinstance(value, IntegrationKey):
            value = value.expose()
        raw = str(value).strip() if value is not None else ""
        if not raw:
            raise ValidationError("Integration key must not be empty")
        self._value = raw

    def expose(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return _REDACTED

    __str__ = __repr__

    def __format__(self, format_spec: str) -> str:
        return _REDACTED

    def __reduce__(self):
        raise TypeError("IntegrationKey cannot be pickled")


def as_integration_key(key: Union[str, uuid.UUID, IntegrationKey]) -> IntegrationKey:
    if isinstance(key, IntegrationKey):
        return key
    return IntegrationKey(key)


def sign(
    encoded_fields: Iterable[Tuple[str, str]],
    key: Union[str, uuid.UUID, IntegrationKey],
) -> str:
    """
    Compute the hash for a list of encoded (name, value) pairs.

    Args:
        encoded_fields: Canonically ordered output of encoding.encode()
        key: Integration key

    Returns:
        Upper-case hex SHA-512 digest
    """
    key = as_integration_key(key)

    values = []
    for name, value in encoded_fields:
        if name.lower() == HASH_FIELD:
            raise EncodingError("Cannot sign a message that already carries a hash")
        values.append(value)

    message = "".join(values) + key.expose()
    return hashlib.sha512(message.encode("utf-8")).hexdigest().upper()


def verify(
    encoded_fields: Iterable[Tuple[str, str]],
    key: Union[str, uuid.UUID, IntegrationKey],
) -> None:
    """
    Verify the hash carried by a list of encoded (name, value) pairs.

    The hash field is removed, the digest recomputed over the remaining
    fields in the order given, and the two compared in constant time.

    Raises:
        MissingHash: no (or an empty) hash field is present
        HashMismatch: the recomputed digest differs from the supplied one
    """
    supplied = None
    signed = []
    for name, value in encoded_fields:
        if name.lower() == HASH_FIELD:
            supplied = value
        else:
            signed.append((name, value))

    if supplied is None or not supplied.strip():
        raise MissingHash("Message carries no hash field")

    expected = sign(signed, key)
    if not constant_time_equals(expected, supplied.strip().upper()):
        logger.warning(
            "Hash mismatch on message with fields %s",
            [name for name, _ in signed],
        )
        raise HashMismatch("Message hash does not match its contents")


def constant_time_equals(a: Union[str, bytes], b: Union[str, bytes]) -> bool:
    """Compare two digests without stopping at the first differing byte."""
    left = a.encode("utf-8") if isinstance(a, str) else bytes(a)
    right = b.encode("utf-8") if isinstance(b, str) else bytes(b)

    result = 0
    if len(left) != len(right):
        result = 1
        right = left

    for x, y in zip(left, right):
        result |= x ^ y
    return result == 0
