import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import requests

from paynow.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: bytes


class Transport(ABC):
    """Abstract base class for the HTTP collaborator that talks to Paynow"""

    @abstractmethod
    def post(self, url: str, fields: Optional[Sequence[Tuple[str, str]]] = None) -> TransportResponse:
        """
        POST a form body to Paynow

        Args:
            url: Absolute endpoint or poll URL
            fields: Ordered (name, value) pairs, form-encoded in that order;
                None sends an empty body

        Returns:
            TransportResponse with the raw body

        Raises:
            TransportError: network failure or non-2xx status
        """
        pass


class RequestsTransport(Transport):
    """Transport backed by a requests.Session"""

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/x-www-form-urlencoded"})

    def post(self, url: str, fields: Optional[Sequence[Tuple[str, str]]] = None) -> TransportResponse:
        try:
            if fields is None:
                resp = self._session.post(
                    url,
                    headers={"Content-Length": "0"},
                    timeout=self.timeout,
                )
            else:
                resp = self._session.post(url, data=list(fields), timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Network error posting to Paynow: {exc}") from exc

        logger.debug("Paynow POST %s -> HTTP %s", url, resp.status_code)

        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"Paynow returned HTTP {resp.status_code}: {resp.text[:300]}",
                status_code=resp.status_code,
            )
        return TransportResponse(status_code=resp.status_code, body=resp.content)
