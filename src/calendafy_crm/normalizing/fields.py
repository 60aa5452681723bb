"""Reshape caller-supplied fields into the shape the Calendafy CRM API expects.

Three independent transformations, each touching its own keys:
renames (caller names -> API names), nested-list reshaping (attendees,
sales accounts) and passthrough of everything else, including ids already
resolved through option lookups.
"""

from typing import Any, Mapping

from calendafy_crm.errors import UnknownFieldShape
from calendafy_crm.models.resources import Operation, Resource

# Caller-facing name -> API field name
FIELD_RENAMES: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "ownerId": "owner_id",
    "targetableType": "targetable_type",
    "targetableId": "targetable_id",
    "salesActivityTypeId": "sales_activity_type_id",
    "timeZone": "time_zone",
    "isAllDay": "is_allday",
    "dueDate": "due_date",
    "fromDate": "from_date",
    "endDate": "end_date",
}

ATTENDEES_FIELD = "attendees"
ATTENDEES_API_FIELD = "appointment_attendees_attributes"
ACCOUNTS_FIELD = "sales_accounts"

# attendee type -> (API participant type, entry key holding its id)
_ATTENDEE_TYPES: dict[str, tuple[str, str]] = {
    "contact": ("contact", "contactId"),
    "user": ("user", "userId"),
}

_ACCOUNT_RESOURCES = frozenset({Resource.CONTACT, Resource.DEAL})


def adjust_attendees(attendees: Any) -> list[dict[str, str]]:
    """
    Convert [{type, contactId, userId}] entries into the API's nested
    attendee attributes, one element per attendee.
    Also accepts the collection wrapper {"attendee": [...]}.
    """
    if isinstance(attendees, Mapping):
        attendees = attendees.get("attendee", [])
    if not isinstance(attendees, list):
        raise UnknownFieldShape(f"Attendees must be a list, got {type(attendees).__name__}")

    adjusted: list[dict[str, str]] = []
    for position, attendee in enumerate(attendees):
        if not isinstance(attendee, Mapping):
            raise UnknownFieldShape(f"Attendee #{position} is not an object")
        kind = str(attendee.get("type") or "").lower()
        if kind not in _ATTENDEE_TYPES:
            raise UnknownFieldShape(
                f"Attendee #{position} has unknown type {attendee.get('type')!r} "
                f"(expected one of: {sorted(_ATTENDEE_TYPES)})"
            )
        api_type, id_key = _ATTENDEE_TYPES[kind]
        attendee_id = attendee.get(id_key)
        if attendee_id in (None, ""):
            raise UnknownFieldShape(f"Attendee #{position} of type '{kind}' is missing '{id_key}'")
        adjusted.append({"attendee_type": api_type, "attendee_id": str(attendee_id)})
    return adjusted


def adjust_accounts(accounts: Any) -> list[dict[str, Any]]:
    """Turn a list of account ids into [{id, is_primary}], the first one primary."""
    if isinstance(accounts, (str, int)):
        accounts = [accounts]
    if not isinstance(accounts, list):
        raise UnknownFieldShape(f"Sales accounts must be a list of ids, got {type(accounts).__name__}")

    adjusted: list[dict[str, Any]] = []
    for position, account in enumerate(accounts):
        if isinstance(account, Mapping):
            if "id" not in account:
                raise UnknownFieldShape(f"Sales account #{position} is missing 'id'")
            adjusted.append({"id": account["id"], "is_primary": False})
        else:
            adjusted.append({"id": account, "is_primary": False})
    if adjusted:
        adjusted[0]["is_primary"] = True
    return adjusted


def rename_fields(raw_fields: Mapping[str, Any]) -> dict[str, Any]:
    """Apply FIELD_RENAMES; an API-named key already present wins over its alias."""
    renamed: dict[str, Any] = {}
    for key, value in raw_fields.items():
        api_key = FIELD_RENAMES.get(key, key)
        if api_key != key and api_key in raw_fields:
            continue
        renamed[api_key] = value
    return renamed


def normalize(
    resource: Resource,
    operation: Operation,
    raw_fields: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Normalize a flat map of optional fields for (resource, operation).
    Pure: the input mapping is never modified.
    """
    fields = rename_fields(raw_fields)

    if resource == Resource.APPOINTMENT and ATTENDEES_FIELD in fields:
        attendees = adjust_attendees(fields.pop(ATTENDEES_FIELD))
        if attendees:
            fields[ATTENDEES_API_FIELD] = attendees

    if resource in _ACCOUNT_RESOURCES and fields.get(ACCOUNTS_FIELD):
        fields[ACCOUNTS_FIELD] = adjust_accounts(fields[ACCOUNTS_FIELD])

    return fields
