"""HTTP client with retries and a default timeout for talking to a cluster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_TIMEOUT = 10
DEFAULT_RETRY_MAX = 4
_RETRY_STATUSES = (429, 500, 502, 503, 504)


@dataclass
class Client:
    """Sends requests through a session, applying a default timeout."""

    session: Any
    timeout: float = DEFAULT_TIMEOUT

    def request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one request; a ``timeout`` given by the caller wins."""
        kwargs.setdefault("timeout", self.timeout)
        return self.session.request(method, url, **kwargs)


def _retrying_session() -> requests.Session:
    session = requests.Session()
    # Clusters commonly run with self-signed certificates.
    session.verify = False
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    retry = Retry(
        total=DEFAULT_RETRY_MAX,
        backoff_factor=1,
        status_forcelist=_RETRY_STATUSES,
        allowed_methods=None,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def new_client(session: Optional[Any] = None) -> Client:
    """Build a client over ``session``, or over a retrying session that skips TLS checks."""
    if session is None:
        session = _retrying_session()
    return Client(session=session)