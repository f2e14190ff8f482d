from decimal import Decimal
from typing import List, Optional, Union
from urllib.parse import urljoin

from paynow.errors import StateConflict, ValidationError
from paynow.models.payment import BillingAddress, Card, LineItem, PaymentRequest, SignedPayload
from paynow.models.response import GatewayResponse, ResponseLayout
from paynow.models.transaction import Transaction, TransactionStatus
from paynow.providers.base import RequestsTransport, Transport
from paynow.providers.paynow_provider import (
    EP_INITIATE,
    EP_REMOTE,
    EP_TRACE,
    build_card_request,
    build_mobile_request,
    build_trace_request,
    build_web_request,
)
from paynow.services.response_parser import parse, parse_status_update
from paynow.services.transaction_service import TransactionService
from paynow.utils.logger import configure_logging, get_logger
from paynow.utils.signing import as_integration_key
from paynow.utils.validators import CodeLookup

logger = get_logger(__name__)


class PaynowClient:
    """Paynow client: builds, sends, verifies and tracks payments"""

    DEFAULT_BASE_URL = 'https://www.paynow.co.zw/interface/'

    def __init__(
            self,
            integration_id: int,
            integration_key,
            transport: Optional[Transport] = None,
            base_url: str = DEFAULT_BASE_URL,
            return_url: Optional[str] = None,
            result_url: Optional[str] = None,
            currency_lookup: Optional[CodeLookup] = None,
            country_lookup: Optional[CodeLookup] = None,
            timeout: float = 30,
    ):
        """
        Args:
            integration_id: Paynow integration id
            integration_key: Integration key (str, UUID or IntegrationKey)
            transport: HTTP collaborator; a requests-backed one by default
            base_url: Paynow interface base URL
            return_url: Default browser return URL for new payments
            result_url: Default status update URL for new payments
            currency_lookup: Optional currency table with is_valid(code)
            country_lookup: Optional country table with is_valid(name)
            timeout: Timeout for the default transport, in seconds
        """
        self.integration_id = integration_id
        self._key = as_integration_key(integration_key)
        self.transport = transport or RequestsTransport(timeout=timeout)
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.return_url = return_url
        self.result_url = result_url
        self.currency_lookup = currency_lookup
        self.country_lookup = country_lookup

    @classmethod
    def from_config(cls, cfg=None, transport: Optional[Transport] = None) -> 'PaynowClient':
        """
        Create a client from a config class (see paynow.config)

        paynow.config, which loads .env into the environment, is only
        imported when no config class is given.

        Raises:
            ValidationError: credentials missing, or id/timeout not numeric
        """
        if cfg is None:
            from paynow.config import Config
            cfg = Config

        if not cfg.PAYNOW_INTEGRATION_ID:
            raise ValidationError('PAYNOW_INTEGRATION_ID is not configured')
        if not cfg.PAYNOW_INTEGRATION_KEY:
            raise ValidationError('PAYNOW_INTEGRATION_KEY is not configured')

        integration_id = _config_number(cfg, 'PAYNOW_INTEGRATION_ID', int)
        timeout = _config_number(cfg, 'PAYNOW_TIMEOUT', float)
        if integration_id <= 0:
            raise ValidationError('PAYNOW_INTEGRATION_ID must be a positive integer')
        if timeout <= 0:
            raise ValidationError('PAYNOW_TIMEOUT must be a positive number of seconds')

        configure_logging(cfg.PAYNOW_LOG_LEVEL, cfg.PAYNOW_LOG_DIR)

        return cls(
            integration_id=integration_id,
            integration_key=cfg.PAYNOW_INTEGRATION_KEY,
            transport=transport,
            base_url=cfg.PAYNOW_BASE_URL,
            return_url=cfg.PAYNOW_RETURN_URL,
            result_url=cfg.PAYNOW_RESULT_URL,
            timeout=timeout,
        )

    def create_payment(
            self,
            reference: str,
            amount: Union[Decimal, int, str],
            currency: str = 'USD',
            customer_email: Optional[str] = None,
            items: Optional[List[LineItem]] = None,
            return_url: Optional[str] = None,
            result_url: Optional[str] = None,
            additional_info: Optional[str] = None,
            merchant_trace: Optional[str] = None,
            tokenize: Optional[bool] = None,
    ) -> Transaction:
        """Create a transaction in the CREATED state; nothing is sent yet"""
        request = PaymentRequest(
            reference=reference,
            amount=amount,
            currency=currency,
            result_url=result_url or self.result_url,
            return_url=return_url or self.return_url,
            customer_email=customer_email,
            items=list(items or []),
            additional_info=additional_info,
            merchant_trace=merchant_trace,
            tokenize=tokenize,
        )
        return TransactionService.create(request)

    def send(self, transaction: Transaction) -> Transaction:
        """Initiate a web payment; the customer is then sent to transaction.browser_url"""
        self._assert_unsent(transaction)
        payload = build_web_request(
            transaction.request, self._key, self.integration_id, self.currency_lookup
        )
        response = self._submit(EP_INITIATE, payload, ResponseLayout.INITIATION)
        return TransactionService.advance(transaction, response)

    def send_mobile(self, transaction: Transaction, phone: str, method: str) -> Transaction:
        """Initiate a mobile money payment; the customer confirms on their handset"""
        self._assert_unsent(transaction)
        payload = build_mobile_request(
            transaction.request, phone, method, self._key, self.integration_id, self.currency_lookup
        )
        response = self._submit(EP_REMOTE, payload, ResponseLayout.REMOTE_INITIATION)
        return TransactionService.advance(transaction, response)

    def send_card(self, transaction: Transaction, card: Card, address: BillingAddress, token: str) -> Transaction:
        """Initiate a Visa/Mastercard remote payment"""
        self._assert_unsent(transaction)
        payload = build_card_request(
            transaction.request, card, address, token, self._key, self.integration_id,
            self.currency_lookup, self.country_lookup,
        )
        response = self._submit(EP_REMOTE, payload, ResponseLayout.REMOTE_INITIATION)
        return TransactionService.advance(transaction, response)

    def poll(self, transaction: Transaction) -> Transaction:
        """Ask Paynow for the current status and advance the transaction"""
        if not transaction.poll_url:
            raise StateConflict(
                f"Transaction '{transaction.reference}' has no poll URL; send it first"
            )
        resp = self.transport.post(transaction.poll_url)
        response = parse_status_update(resp.body, self._key)
        return TransactionService.advance(transaction, response)

    def process_status_update(self, transaction: Transaction, body: Union[bytes, str]) -> Transaction:
        """Apply a status update Paynow POSTed to the result URL"""
        response = parse_status_update(body, self._key)
        return TransactionService.advance(transaction, response)

    def trace(self, merchant_trace: str) -> GatewayResponse:
        """
        Look up a payment by merchant trace id

        Raises:
            TraceNotFound: Paynow has no payment with this trace id
        """
        payload = build_trace_request(merchant_trace, self._key, self.integration_id)
        resp = self.transport.post(urljoin(self.base_url, EP_TRACE), payload.fields)
        return parse_status_update(resp.body, self._key)

    def _submit(self, endpoint: str, payload: SignedPayload, layout: ResponseLayout) -> GatewayResponse:
        url = urljoin(self.base_url, endpoint)
        logger.info('Sending %s to Paynow (%s)', payload, endpoint)
        resp = self.transport.post(url, payload.fields)
        return parse(resp.body, self._key, layout=layout)

    @staticmethod
    def _assert_unsent(transaction: Transaction) -> None:
        if transaction.status != TransactionStatus.CREATED:
            raise StateConflict(
                f"Transaction '{transaction.reference}' was already sent "
                f"(status {transaction.status.value})"
            )

    def __repr__(self):
        return f'<PaynowClient id={self.integration_id} key={self._key!r}>'


def _config_number(cfg, name: str, kind):
    value = getattr(cfg, name)
    try:
        return kind(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'{name} must be a number, got {value!r}') from exc
