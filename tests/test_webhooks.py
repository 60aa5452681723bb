"""Tests for webhook normalization."""

import pytest

from calendafy_crm.errors import UnknownFieldShape
from calendafy_crm.webhooks import normalize_notifications


class TestNormalizeNotifications:
    """Tests for normalize_notifications."""

    def test_contact_creation(self) -> None:
        """objectId becomes contactId."""
        events = normalize_notifications({"subscriptionType": "contact.creation", "objectId": 5, "portalId": 1})
        assert events == [{"subscriptionType": "contact.creation", "contactId": 5, "portalId": 1}]

    def test_array_fans_out(self) -> None:
        """An array yields one event per notification."""
        events = normalize_notifications(
            [
                {"subscriptionType": "deal.creation", "objectId": 1},
                {"subscriptionType": "contact.creation", "objectId": 2},
            ]
        )
        assert events == [
            {"subscriptionType": "deal.creation", "dealId": 1},
            {"subscriptionType": "contact.creation", "contactId": 2},
        ]

    def test_other_subscription_drops_object_id(self) -> None:
        """Unmapped subscriptions lose objectId without gaining a field."""
        assert normalize_notifications({"subscriptionType": "task.update", "objectId": 3}) == [
            {"subscriptionType": "task.update"}
        ]

    def test_input_not_mutated(self) -> None:
        """The payload is copied."""
        payload = {"subscriptionType": "deal.creation", "objectId": 1}
        normalize_notifications(payload)
        assert payload == {"subscriptionType": "deal.creation", "objectId": 1}

    def test_non_object_raises(self) -> None:
        """Scalars are not notifications."""
        with pytest.raises(UnknownFieldShape):
            normalize_notifications(["oops"])
