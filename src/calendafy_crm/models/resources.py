"""Resources and operations exposed by the Calendafy CRM API."""

from enum import Enum

from calendafy_crm.errors import UnsupportedOperationError


class Resource(str, Enum):
    """Top-level entity category."""

    ACCOUNT = "account"
    APPOINTMENT = "appointment"
    CONTACT = "contact"
    DEAL = "deal"
    NOTE = "note"
    SALES_ACTIVITY = "salesActivity"
    SEARCH = "search"
    TASK = "task"


class Operation(str, Enum):
    """Action applied to a resource."""

    CREATE = "create"
    GET = "get"
    GET_ALL = "getAll"
    UPDATE = "update"
    DELETE = "delete"
    QUERY = "query"
    LOOKUP = "lookup"


_CRUD = frozenset(
    {Operation.CREATE, Operation.GET, Operation.GET_ALL, Operation.UPDATE, Operation.DELETE}
)

SUPPORTED_OPERATIONS: dict[Resource, frozenset[Operation]] = {
    Resource.ACCOUNT: _CRUD,
    Resource.APPOINTMENT: _CRUD,
    Resource.CONTACT: _CRUD,
    Resource.DEAL: _CRUD,
    Resource.NOTE: frozenset({Operation.CREATE, Operation.UPDATE, Operation.DELETE}),
    Resource.SALES_ACTIVITY: _CRUD,
    Resource.SEARCH: frozenset({Operation.QUERY, Operation.LOOKUP}),
    Resource.TASK: _CRUD,
}

# Item parameter carrying the record id for get/update/delete
ID_PARAMETERS: dict[Resource, str] = {
    Resource.ACCOUNT: "accountId",
    Resource.APPOINTMENT: "appointmentId",
    Resource.CONTACT: "contactId",
    Resource.DEAL: "dealId",
    Resource.NOTE: "noteId",
    Resource.SALES_ACTIVITY: "salesActivityId",
    Resource.TASK: "taskId",
}

# Listings scoped by a saved view, keyed to the collection serving its filters
VIEW_COLLECTIONS: dict[Resource, str] = {
    Resource.ACCOUNT: "sales_accounts",
    Resource.CONTACT: "contacts",
    Resource.DEAL: "deals",
}


def resolve_pair(resource: "Resource | str", operation: "Operation | str") -> tuple[Resource, Operation]:
    """
    Coerce raw tags into a supported (Resource, Operation) pair.
    Raises UnsupportedOperationError for unknown tags or unsupported combinations.
    """
    try:
        res = Resource(resource)
        op = Operation(operation)
    except ValueError:
        raise UnsupportedOperationError(str(resource), str(operation)) from None
    if op not in SUPPORTED_OPERATIONS[res]:
        raise UnsupportedOperationError(res.value, op.value)
    return res, op
