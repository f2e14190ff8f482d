"""
Custom Validators
Validation functions for Paynow request data
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol, Sequence
from urllib.parse import urlparse

from paynow.utils.encoding import AMOUNT_PLACES

# Mobile money number patterns, local form after sanitize_phone_number()
MOBILE_NUMBER_PATTERNS = {
    'ecocash': re.compile(r'^07[78]\d{7}$'),
    'onemoney': re.compile(r'^071\d{7}$'),
}


class CodeLookup(Protocol):
    """External currency / country table"""

    def is_valid(self, code: str) -> bool:
        ...


def validate_reference(reference: Any) -> tuple[bool, Optional[str]]:
    """
    Validate a merchant transaction reference

    Args:
        reference: Merchant reference, unique per merchant

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(reference, str) or not reference.strip():
        return False, "Reference is required"

    if len(reference) > 255:
        return False, "Reference must not exceed 255 characters"

    return True, None


def validate_amount(
        amount: Any,
        min_amount: Decimal = Decimal('0.01'),
        max_amount: Optional[Decimal] = None
) -> tuple[bool, Optional[str]]:
    """
    Validate payment amount

    Args:
        amount: Amount to validate
        min_amount: Minimum allowed amount
        max_amount: Maximum allowed amount, unbounded when None

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        if isinstance(amount, bool):
            return False, "Amount must be a number, got bool"
        elif isinstance(amount, Decimal):
            amount_decimal = amount
        elif isinstance(amount, (str, int)):
            amount_decimal = Decimal(amount)
        else:
            return False, f"Amount must be a Decimal, int or string, got {type(amount).__name__}"

        if not amount_decimal.is_finite():
            return False, "Amount must be a finite number"

        # Check if positive
        if amount_decimal <= 0:
            return False, "Amount must be greater than 0"

        if amount_decimal < min_amount:
            return False, f"Amount must be at least {min_amount}"

        if max_amount is not None and amount_decimal > max_amount:
            return False, f"Amount must not exceed {max_amount}"

        # Minor-unit precision
        if amount_decimal.normalize().as_tuple().exponent < -AMOUNT_PLACES:
            return False, f"Amount can have at most {AMOUNT_PLACES} decimal places"

        return True, None

    except (InvalidOperation, ValueError) as e:
        return False, f"Invalid amount format: {str(e)}"


def validate_currency(currency: str, lookup: Optional[CodeLookup] = None) -> tuple[bool, Optional[str]]:
    """
    Validate currency code

    Args:
        currency: Currency code to validate (e.g., 'USD', 'ZWG')
        lookup: Optional currency table consulted after the format check

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not currency:
        return False, "Currency is required"

    if not re.match(r'^[A-Z]{3}$', currency):
        return False, "Currency must be a 3-letter uppercase code (e.g., USD, ZWG)"

    if lookup is not None and not lookup.is_valid(currency):
        return False, f"Unknown currency: {currency}"

    return True, None


def validate_email(email: str) -> tuple[bool, Optional[str]]:
    """
    Validate email address format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email:
        return False, "Email is required"

    email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

    if not re.match(email_pattern, email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address is too long (max 254 characters)"

    local_part = email.split('@')[0]
    if len(local_part) > 64:  # RFC 5321
        return False, "Email local part is too long (max 64 characters)"

    return True, None


def validate_url(url: Any, field: str = 'URL') -> tuple[bool, Optional[str]]:
    """Validate an absolute http(s) URL"""
    if not url or not isinstance(url, str):
        return False, f"{field} is required"

    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return False, f"{field} must be an absolute http(s) URL"

    return True, None


def sanitize_phone_number(phone: str) -> str:
    """
    Sanitize a Zimbabwean phone number to local format (07XXXXXXXX)

    Accepts: +263771111111, 263771111111, 0771111111, 077 111 1111
    """
    if not phone:
        return ""
    phone_clean = re.sub(r'[\s\-\(\)]', '', str(phone))

    if phone_clean.startswith('+263'):
        phone_clean = '0' + phone_clean[4:]
    elif phone_clean.startswith('263'):
        phone_clean = '0' + phone_clean[3:]

    return phone_clean


def validate_phone_number(phone: str, method: str) -> tuple[bool, Optional[str]]:
    """
    Validate phone number format for a mobile money method

    Args:
        phone: Phone number to validate
        method: Mobile money method ('ecocash', 'onemoney')

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone:
        return False, "Phone number is required"

    pattern = MOBILE_NUMBER_PATTERNS.get(method)
    if pattern is None:
        return False, f"No phone number pattern for method '{method}'"

    if not pattern.match(sanitize_phone_number(phone)):
        return False, f"Phone number is not a valid {method} number"

    return True, None


def validate_line_items(items: Sequence[Any], amount: Decimal) -> tuple[bool, Optional[str]]:
    """
    Validate that line items are well formed and add up to the total amount

    Args:
        items: LineItem sequence
        amount: Total payment amount

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not items:
        return True, None

    total = Decimal('0')
    for index, item in enumerate(items):
        if not item.name or not str(item.name).strip():
            return False, f"Line item {index} has no name"

        is_valid, error = validate_amount(item.amount)
        if not is_valid:
            return False, f"Line item '{item.name}': {error}"

        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity < 1:
            return False, f"Line item '{item.name}': quantity must be a positive integer"

        total += Decimal(item.amount) * item.quantity

    if total != Decimal(amount):
        return False, f"Line items total {total} does not match amount {amount}"

    return True, None


def validate_card(card: Any) -> tuple[bool, Optional[str]]:
    """
    Validate card details for Visa/Mastercard remote payments

    Returns:
        Tuple of (is_valid, error_message)
    """
    number = re.sub(r'[\s\-]', '', card.number or '')
    if not re.match(r'^\d{12,19}$', number):
        return False, "Card number must be 12 to 19 digits"

    if not card.name or not card.name.strip():
        return False, "Card holder name is required"

    if not re.match(r'^\d{3,4}$', card.cvv or ''):
        return False, "Card CVV must be 3 or 4 digits"

    # Paynow expects MMYY
    if not re.match(r'^(0[1-9]|1[0-2])\d{2}$', card.expiry or ''):
        return False, "Card expiry must be in MMYY format"

    return True, None
