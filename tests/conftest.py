"""Pytest fixtures for calendafy-crm tests."""

from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.errors import RemoteApiError
from calendafy_crm.models.credentials import CalendafyCredentials
from calendafy_crm.models.request import RequestDescriptor


def paginated_source(records: list[dict], page_size: int, key: str = "contacts"):
    """
    Build a send() side effect serving records page by page,
    the way the API answers listing requests.
    """
    total_pages = max(1, -(-len(records) // page_size))
    calls: list[RequestDescriptor] = []

    def send(descriptor: RequestDescriptor) -> dict[str, Any]:
        calls.append(descriptor)
        page = descriptor.body.get("page", 1)
        start = (page - 1) * page_size
        return {
            key: records[start : start + page_size],
            "meta": {"total_pages": total_pages, "total": len(records)},
        }

    send.calls = calls  # type: ignore[attr-defined]
    return send


@pytest.fixture
def credentials() -> CalendafyCredentials:
    """Token-mode credentials for a test domain."""
    return CalendafyCredentials(api_key="test-key", user_id="7", domain="acme")


@pytest.fixture
def bearer_credentials() -> CalendafyCredentials:
    """Bearer-mode credentials against the fixed base URL."""
    return CalendafyCredentials(api_key="test-key", auth_mode="bearer")


@pytest.fixture
def http_client() -> MagicMock:
    """Mocked httpx.Client; set .request.return_value per test."""
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def api_client() -> MagicMock:
    """Mocked CalendafyClient; set .send.side_effect / .return_value per test."""
    client = MagicMock(spec=CalendafyClient)
    client.send.return_value = {"id": 1}
    return client


@pytest.fixture
def contact_records() -> list[dict]:
    """Ten contact records in the API's natural order."""
    return [{"id": i, "first_name": f"Contact {i}"} for i in range(1, 11)]


@pytest.fixture
def remote_404() -> RemoteApiError:
    """A not-found error as raised by the client."""
    return RemoteApiError(404, {"errors": {"code": "not_found", "message": "Record not found"}})
