"""Normalize inbound Calendafy webhook notifications into trigger events."""

from typing import Any

from calendafy_crm.errors import UnknownFieldShape

# subscriptionType fragment -> field receiving objectId
SUBSCRIPTION_ID_FIELDS = {
    "contact.creation": "contactId",
    "deal.creation": "dealId",
}


def normalize_notifications(payload: Any) -> list[dict[str, Any]]:
    """
    Fan a notification (or an array of them) out to one event each.
    objectId is renamed after the subscription's entity and never kept.
    """
    notifications = payload if isinstance(payload, list) else [payload]
    events: list[dict[str, Any]] = []
    for position, notification in enumerate(notifications):
        if not isinstance(notification, dict):
            raise UnknownFieldShape(f"Notification #{position} is not an object")
        event = dict(notification)
        subscription = str(event.get("subscriptionType") or "")
        object_id = event.pop("objectId", None)
        for fragment, field in SUBSCRIPTION_ID_FIELDS.items():
            if fragment in subscription:
                event[field] = object_id
        events.append(event)
    return events
