"""Tests for CalendafyClient."""

from unittest.mock import MagicMock

import httpx
import pytest

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.errors import RemoteApiError, TransportError
from calendafy_crm.models.credentials import CalendafyCredentials
from calendafy_crm.models.request import RequestDescriptor


def _descriptor(**body) -> RequestDescriptor:
    return RequestDescriptor(body={"resource": "contact", "operation": "create", **body})


class TestSend:
    """Tests for CalendafyClient.send."""

    def test_token_mode_url_and_headers(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Token mode posts to the domain URL with a token header and the body as JSON."""
        http_client.request.return_value = httpx.Response(200, json={"contact": {"id": 1}})
        client = CalendafyClient(credentials, client=http_client)

        result = client.send(_descriptor(first_name="Ada"))

        assert result == {"contact": {"id": 1}}
        args, kwargs = http_client.request.call_args
        assert args == ("POST", "https://acme.mycalendafy.com/crm/sales/api/")
        assert kwargs["headers"] == {
            "Authorization": "Token token=test-key",
            "X-Calendafy-User-Id": "7",
        }
        assert kwargs["json"]["first_name"] == "Ada"
        assert kwargs["json"]["resource"] == "contact"

    def test_bearer_mode(self, bearer_credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Bearer mode uses the fixed base URL and a bearer header."""
        http_client.request.return_value = httpx.Response(200, json={})
        client = CalendafyClient(bearer_credentials, client=http_client)

        client.send(RequestDescriptor(path="/lookup", body={"q": "x"}))

        args, kwargs = http_client.request.call_args
        assert args[1] == "https://api.calendafy.com/crm/lookup"
        assert kwargs["headers"] == {"Authorization": "Bearer test-key"}

    def test_get_sends_no_body(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """GET lookups carry no JSON body."""
        http_client.request.return_value = httpx.Response(200, json={"filters": []})
        client = CalendafyClient(credentials, client=http_client)

        assert client.get("/contacts/filters") == {"filters": []}
        args, kwargs = http_client.request.call_args
        assert args == ("GET", "https://acme.mycalendafy.com/crm/sales/api/contacts/filters")
        assert "json" not in kwargs

    def test_error_status_raises_remote_error(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Non-2xx answers keep status and body verbatim."""
        body = {"errors": {"code": "invalid", "message": "Email is invalid"}}
        http_client.request.return_value = httpx.Response(422, json=body)
        client = CalendafyClient(credentials, client=http_client)

        with pytest.raises(RemoteApiError, match="Email is invalid") as exc_info:
            client.send(_descriptor())

        assert exc_info.value.status_code == 422
        assert exc_info.value.body == body

    def test_empty_body_returns_none(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Deletes answer with an empty body."""
        http_client.request.return_value = httpx.Response(204)
        client = CalendafyClient(credentials, client=http_client)
        assert client.send(_descriptor()) is None

    def test_text_body(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Non-JSON bodies come back as text."""
        http_client.request.return_value = httpx.Response(200, text="ok")
        client = CalendafyClient(credentials, client=http_client)
        assert client.send(_descriptor()) == "ok"

    def test_transport_failure(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Connection failures become TransportError."""
        http_client.request.side_effect = httpx.ConnectError("connection refused")
        client = CalendafyClient(credentials, client=http_client)

        with pytest.raises(TransportError, match="connection refused"):
            client.send(_descriptor())


class TestLifecycle:
    """Tests for client construction and closing."""

    def test_base_url_override(self, http_client: MagicMock) -> None:
        """base_url wins over the computed one."""
        creds = CalendafyCredentials(api_key="k", base_url="http://localhost:8080/api/")
        assert CalendafyClient(creds, client=http_client).base_url == "http://localhost:8080/api"

    def test_context_manager_closes(self, credentials: CalendafyCredentials, http_client: MagicMock) -> None:
        """Leaving the context closes the transport."""
        with CalendafyClient(credentials, client=http_client):
            pass
        http_client.close.assert_called_once()
