"""HTTP client for the Calendafy CRM API: the single chokepoint for outbound calls."""

import logging
from typing import Any, Optional

import httpx

from calendafy_crm.errors import RemoteApiError, TransportError
from calendafy_crm.models.credentials import CalendafyCredentials
from calendafy_crm.models.request import RequestDescriptor

logger = logging.getLogger(__name__)


class CalendafyClient:
    """
    Sends request descriptors to the Calendafy CRM API.
    Attaches authentication headers; does not retry (the transport owns that).
    """

    DEFAULT_HEADERS = {
        "User-Agent": "calendafy-crm/0.1",
        "Accept": "application/json",
    }

    def __init__(
        self,
        credentials: CalendafyCredentials,
        client: Optional[httpx.Client] = None,
    ):
        self._credentials = credentials
        self._base_url = credentials.resolved_base_url
        self._client = client or httpx.Client(
            timeout=30.0,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return self._base_url + "/" + path.lstrip("/")

    def send(self, descriptor: RequestDescriptor) -> Any:
        """
        Send one descriptor; return the decoded JSON response (None for an empty body).
        Raises RemoteApiError with the remote status/body verbatim, or TransportError.
        """
        method = descriptor.method.upper()
        kwargs: dict[str, Any] = {"headers": self._credentials.headers()}
        if descriptor.body and method != "GET":
            kwargs["json"] = descriptor.body

        try:
            resp = self._client.request(method, self._url(descriptor.path), **kwargs)
        except httpx.RequestError as e:
            logger.warning("Request %s %s failed: %s", method, descriptor.path, e)
            raise TransportError(f"Request to Calendafy CRM failed: {e}") from e

        if resp.is_error:
            body = _decode(resp)
            logger.warning(
                "Calendafy CRM returned %d for %s %s", resp.status_code, method, descriptor.path
            )
            raise RemoteApiError(resp.status_code, body)

        return _decode(resp)

    def get(self, path: str) -> Any:
        """Plain GET, used for selector and filter lookups."""
        return self.send(RequestDescriptor(method="GET", path=path))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CalendafyClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _decode(resp: httpx.Response) -> Any:
    """JSON when possible, raw text otherwise, None when empty."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
