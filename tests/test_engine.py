"""Tests for OperationDispatcher."""

from unittest.mock import MagicMock

import pytest

from calendafy_crm.dispatch.engine import OperationDispatcher, unwrap_response
from calendafy_crm.errors import (
    EmptyUpdateError,
    InvalidTemporalInput,
    RemoteApiError,
    UnknownFieldShape,
    UnsupportedOperationError,
)
from calendafy_crm.models.results import ItemState

from conftest import paginated_source


def _fail_on(indexes: set, error: Exception):
    """send() side effect failing for the n-th call (0-based)."""
    counter = {"n": 0}

    def send(descriptor):
        n = counter["n"]
        counter["n"] += 1
        if n in indexes:
            raise error
        return {"id": n}

    return send


class TestFaultIsolation:
    """Tests for continue_on_fail handling."""

    def test_continue_on_fail_keeps_alignment(self, api_client: MagicMock, remote_404: RemoteApiError) -> None:
        """A failed middle item leaves an error record at its own index."""
        api_client.send.side_effect = _fail_on({1}, remote_404)
        items = [{"contactId": "1"}, {"contactId": "2"}, {"contactId": "3"}]

        result = OperationDispatcher(api_client).run(items, "contact", "get", continue_on_fail=True)

        assert len(result) == 3
        assert [r.state for r in result.results] == [ItemState.SUCCEEDED, ItemState.FAILED, ItemState.SUCCEEDED]
        assert result.results[0].data == {"id": 0}
        assert result.results[2].data == {"id": 2}
        error = result.results[1].error
        assert error.item_index == 1
        assert error.error_type == "RemoteApiError"
        assert "Record not found" in error.message
        assert api_client.send.call_count == 3

    def test_abort_propagates_unchanged(self, api_client: MagicMock, remote_404: RemoteApiError) -> None:
        """Without fault isolation the first error aborts the batch as is."""
        api_client.send.side_effect = _fail_on({1}, remote_404)
        items = [{"contactId": "1"}, {"contactId": "2"}, {"contactId": "3"}]

        with pytest.raises(RemoteApiError) as exc_info:
            OperationDispatcher(api_client).run(items, "contact", "delete")

        assert exc_info.value is remote_404
        assert api_client.send.call_count == 2

    def test_local_validation_sends_nothing(self, api_client: MagicMock) -> None:
        """Empty updates fail before any request is made."""
        with pytest.raises(EmptyUpdateError):
            OperationDispatcher(api_client).run([{"dealId": "1", "updateFields": {}}], "deal", "update")
        api_client.send.assert_not_called()

    def test_local_validation_recorded(self, api_client: MagicMock) -> None:
        """Under fault isolation local errors are recorded like remote ones."""
        items = [{"dueDate": "whenever", "title": "t", "ownerId": "1", "targetableType": "Deal", "targetable_id": "2"}]
        result = OperationDispatcher(api_client).run(items, "task", "create", continue_on_fail=True)
        assert result.errors[0].error_type == InvalidTemporalInput.__name__
        api_client.send.assert_not_called()

    def test_non_object_items_recorded(self, api_client: MagicMock) -> None:
        """Items that are not objects fail at their own index."""
        items = [{"contactId": "1"}, None, 7, {"contactId": "3"}]

        result = OperationDispatcher(api_client).run(items, "contact", "get", continue_on_fail=True)

        assert len(result) == 4
        assert [r.ok for r in result.results] == [True, False, False, True]
        assert [e.item_index for e in result.errors] == [1, 2]
        assert {e.error_type for e in result.errors} == {"UnknownFieldShape"}
        assert api_client.send.call_count == 2

    def test_non_object_item_aborts_without_isolation(self, api_client: MagicMock) -> None:
        """Without fault isolation a non-object item aborts the batch."""
        with pytest.raises(UnknownFieldShape, match="Item #0"):
            OperationDispatcher(api_client).run([["contactId", "1"]], "contact", "get")
        api_client.send.assert_not_called()

    def test_unsupported_pair_fails_whole_batch(self, api_client: MagicMock) -> None:
        """Unsupported pairs are rejected before any item runs, even with fault isolation."""
        with pytest.raises(UnsupportedOperationError):
            OperationDispatcher(api_client).run([{}], "search", "delete", continue_on_fail=True)
        api_client.send.assert_not_called()


class TestResults:
    """Tests for result shaping."""

    def test_get_all_returns_records(self, api_client: MagicMock, contact_records: list) -> None:
        """getAll items produce the list of records."""
        api_client.send.side_effect = paginated_source(contact_records, page_size=4)

        result = OperationDispatcher(api_client).run([{"returnAll": True, "view": "5"}], "contact", "getAll")

        assert result.results[0].data == contact_records
        assert len(result.to_json_items()) == 10

    def test_response_unwrapped(self, api_client: MagicMock) -> None:
        """Deal responses are taken out of their wrapper."""
        api_client.send.return_value = {"deal": {"id": 3, "name": "Big"}}
        result = OperationDispatcher(api_client).run([{"dealId": "3"}], "deal", "get")
        assert result.results[0].data == {"id": 3, "name": "Big"}

    def test_empty_delete_is_success(self, api_client: MagicMock) -> None:
        """An empty response body reads as success."""
        api_client.send.return_value = None
        result = OperationDispatcher(api_client).run([{"noteId": "3"}], "note", "delete")
        assert result.results[0].data == {"success": True}

    def test_to_json_items(self, api_client: MagicMock, remote_404: RemoteApiError) -> None:
        """Output items pair with their input index; errors carry the message."""
        api_client.send.side_effect = _fail_on({0}, remote_404)
        result = OperationDispatcher(api_client).run(
            [{"taskId": "1"}, {"taskId": "2"}], "task", "get", continue_on_fail=True
        )
        items = result.to_json_items()
        assert items[0]["pairedItem"] == {"item": 0}
        assert "Record not found" in items[0]["json"]["error"]
        assert items[1] == {"json": {"id": 1}, "pairedItem": {"item": 1}}

    def test_default_timezone_threaded(self, api_client: MagicMock) -> None:
        """The batch default timezone reaches date resolution."""
        items = [
            {
                "title": "Call",
                "ownerId": "1",
                "dueDate": "2024-01-10T09:00",
                "targetableType": "Contact",
                "targetable_id": "4",
            }
        ]
        OperationDispatcher(api_client).run(items, "task", "create", default_timezone="Europe/Berlin")
        sent = api_client.send.call_args.args[0]
        assert sent.body["due_date"] == "2024-01-10T09:00:00+01:00"

    def test_unwrap_passthrough(self) -> None:
        """Responses without the key are returned untouched."""
        assert unwrap_response({"id": 1}, "deal") == {"id": 1}


class TestIterRun:
    """Tests for streaming execution."""

    def test_closing_stops_remaining_items(self, api_client: MagicMock) -> None:
        """Items after the point of cancellation are never sent."""
        dispatcher = OperationDispatcher(api_client)
        results = dispatcher.iter_run([{"accountId": str(i)} for i in range(5)], "account", "delete")

        first = next(results)
        results.close()

        assert first.index == 0
        assert api_client.send.call_count == 1

    def test_items_processed_in_order(self, api_client: MagicMock) -> None:
        """Requests follow input order."""
        list(OperationDispatcher(api_client).iter_run([{"accountId": "a"}, {"accountId": "b"}], "account", "get"))
        sent = [c.args[0].body["accountId"] for c in api_client.send.call_args_list]
        assert sent == ["a", "b"]
