import logging
from datetime import datetime, timezone
from decimal import Decimal

from paynow.errors import StateConflict
from paynow.models.payment import PaymentRequest
from paynow.models.response import GatewayResponse
from paynow.models.transaction import TERMINAL_STATUSES, Transaction, TransactionStatus

logger = logging.getLogger(__name__)


class TransactionService:
    """Transaction lifecycle: Created -> Sent -> Paid | Cancelled | Failed | Unknown"""

    @staticmethod
    def create(request: PaymentRequest) -> Transaction:
        return Transaction(request)

    @staticmethod
    def advance(transaction: Transaction, response: GatewayResponse) -> Transaction:
        """
        Apply a verified gateway response to a transaction

        Transitions only move forward. Re-applying the current status is a
        no-op, so repeated polls are safe. UNKNOWN is not terminal and may
        still resolve to a terminal status, but never falls back to SENT.
        A stale SENT after a terminal status is ignored; any other change
        after a terminal status (a refund or dispute included) is a conflict.

        Args:
            transaction: Transaction to update in place
            response: Verified response for this transaction

        Returns:
            The same transaction

        Raises:
            StateConflict: response belongs to another reference or amount, changes
                a terminal status, or moves to SENT without a poll URL
        """
        if response.reference is not None and response.reference != transaction.reference:
            raise StateConflict(
                f"Response for reference '{response.reference}' cannot update "
                f"transaction '{transaction.reference}'"
            )

        if response.amount is not None and response.amount != Decimal(transaction.request.amount):
            raise StateConflict(
                f"Response amount {response.amount} does not match transaction "
                f"'{transaction.reference}' amount {transaction.request.amount}"
            )

        new_status = response.status

        if transaction.is_terminal:
            if new_status == transaction.status:
                transaction.last_status_text = response.status_text
                return transaction
            # Refunded, Disputed and other unmapped statuses land here
            if new_status in TERMINAL_STATUSES or new_status == TransactionStatus.UNKNOWN:
                raise StateConflict(
                    f"Transaction '{transaction.reference}' is already {transaction.status.value}; "
                    f"Paynow now reports '{response.status_text}'"
                )
            logger.warning(
                "Ignoring stale '%s' for transaction %s which is already %s",
                response.status_text, transaction.reference, transaction.status.value,
            )
            transaction.last_status_text = response.status_text
            return transaction

        if transaction.status == TransactionStatus.UNKNOWN and new_status == TransactionStatus.SENT:
            logger.info(
                "Transaction %s stays unknown; Paynow reports '%s'",
                transaction.reference, response.status_text,
            )
            transaction.last_status_text = response.status_text
            return transaction

        if new_status == TransactionStatus.SENT and not (response.poll_url or transaction.poll_url):
            raise StateConflict(
                f"Transaction '{transaction.reference}' cannot be marked sent without a poll URL"
            )

        TransactionService._copy_details(transaction, response)

        if new_status != transaction.status:
            logger.info(
                "Transaction %s: %s -> %s (%s)",
                transaction.reference, transaction.status.value, new_status.value, response.status_text,
            )
            transaction.status = new_status
            transaction.history.append((new_status, response.status_text))

        transaction.last_status_text = response.status_text
        transaction.updated_at = datetime.now(timezone.utc)
        return transaction

    @staticmethod
    def _copy_details(transaction: Transaction, response: GatewayResponse) -> None:
        if response.poll_url:
            transaction.poll_url = response.poll_url
        if response.browser_url:
            transaction.browser_url = response.browser_url
        if response.paynow_reference is not None:
            transaction.paynow_reference = response.paynow_reference
        if response.instructions:
            transaction.instructions = response.instructions


def advance(transaction: Transaction, response: GatewayResponse) -> Transaction:
    return TransactionService.advance(transaction, response)
