"""Build outbound request descriptors from raw item parameters.

The remote endpoint is a single dispatch URL: its router keys off the
`resource` and `operation` body fields, so every descriptor carries both.
"""

from typing import Any, Callable, Optional

from calendafy_crm.errors import EmptyUpdateError, UnknownFieldShape
from calendafy_crm.models.request import ListingOptions, RequestDescriptor
from calendafy_crm.models.resources import ID_PARAMETERS, Operation, Resource, resolve_pair
from calendafy_crm.models.results import BatchItem
from calendafy_crm.normalizing.fields import normalize, rename_fields
from calendafy_crm.normalizing.temporal import resolve, resolve_range

SEARCH_PAGE_SIZE = 100
DEFAULT_TASK_FILTER = "open"


def as_bool(value: Any) -> bool:
    """Coerce flags that may arrive as strings ('true', '1', 'yes')."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def join_entities(entities: Any) -> Any:
    """The API takes several entity types as one comma-joined string."""
    if isinstance(entities, (list, tuple)):
        return ",".join(str(e) for e in entities)
    return entities


def _collection(item: BatchItem, name: str) -> dict[str, Any]:
    """Read an optional fields collection (additionalFields, updateFields, filters)."""
    value = item.get(name, None)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UnknownFieldShape(f"'{name}' must be an object, got {type(value).__name__}")
    return dict(value)


def _required(item: BatchItem, *names: str) -> dict[str, Any]:
    """Read required parameters, renamed to their API field names."""
    return rename_fields({name: item.get(name) for name in names})


Handler = Callable[[Resource, Operation, BatchItem, str], RequestDescriptor]


class RequestBuilder:
    """
    Turns one item into a RequestDescriptor for a fixed (resource, operation).
    No network I/O happens here.
    """

    def __init__(self) -> None:
        self._handlers: dict[tuple[Resource, Operation], Handler] = {
            (Resource.APPOINTMENT, Operation.CREATE): self._create_appointment,
            (Resource.APPOINTMENT, Operation.UPDATE): self._update_appointment,
            (Resource.APPOINTMENT, Operation.GET_ALL): self._list_filtered,
            (Resource.SALES_ACTIVITY, Operation.CREATE): self._create_sales_activity,
            (Resource.SALES_ACTIVITY, Operation.UPDATE): self._update_sales_activity,
            (Resource.TASK, Operation.CREATE): self._create_task,
            (Resource.TASK, Operation.UPDATE): self._update_task,
            (Resource.TASK, Operation.GET_ALL): self._list_filtered,
            (Resource.NOTE, Operation.CREATE): self._create_note,
            (Resource.SEARCH, Operation.QUERY): self._search_query,
            (Resource.SEARCH, Operation.LOOKUP): self._search_lookup,
        }

    def build(
        self,
        resource: "Resource | str",
        operation: "Operation | str",
        item: BatchItem,
        default_timezone: str,
    ) -> RequestDescriptor:
        """Build the descriptor for one item. For getAll this is the listing template."""
        res, op = resolve_pair(resource, operation)
        handler = self._handlers.get((res, op))
        if handler is None:
            handler = {
                Operation.CREATE: self._create_simple,
                Operation.UPDATE: self._update_simple,
                Operation.GET: self._by_id,
                Operation.DELETE: self._by_id,
                Operation.GET_ALL: self._list_plain,
            }[op]
        descriptor = handler(res, op, item, default_timezone)
        # Tags go last so caller fields can never reroute the request
        descriptor.body.update(resource=res.value, operation=op.value)
        return descriptor

    @staticmethod
    def listing_options(item: BatchItem) -> ListingOptions:
        """returnAll / limit / view for a getAll item."""
        view = item.get("view", None)
        return ListingOptions(
            return_all=as_bool(item.get("returnAll", False)),
            limit=int(item.get("limit", 50)),
            view=str(view) if view not in (None, "") else None,
        )

    # --- generic shapes -------------------------------------------------

    _CREATE_REQUIRED: dict[Resource, tuple[str, ...]] = {
        Resource.ACCOUNT: ("name",),
        Resource.CONTACT: ("firstName", "lastName", "emails"),
        Resource.DEAL: ("name", "amount"),
    }

    _RESPONSE_KEYS: dict[tuple[Resource, Operation], str] = {
        (Resource.DEAL, Operation.GET): "deal",
        (Resource.DEAL, Operation.UPDATE): "deal",
        (Resource.APPOINTMENT, Operation.UPDATE): "appointment",
        (Resource.TASK, Operation.UPDATE): "task",
    }

    def _descriptor(
        self,
        res: Resource,
        op: Operation,
        body: dict[str, Any],
        *,
        method: str = "POST",
        path: str = "/",
    ) -> RequestDescriptor:
        return RequestDescriptor(
            method=method,
            path=path,
            body=body,
            response_key=self._RESPONSE_KEYS.get((res, op)),
        )

    def _id_body(self, res: Resource, item: BatchItem) -> dict[str, Any]:
        id_param = ID_PARAMETERS[res]
        return {id_param: item.get(id_param)}

    def _update_fields(self, res: Resource, item: BatchItem) -> dict[str, Any]:
        fields = _collection(item, "updateFields")
        if not fields:
            raise EmptyUpdateError(res.value)
        return fields

    def _create_simple(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, _collection(item, "additionalFields"))
        body.update(_required(item, *self._CREATE_REQUIRED[res]))
        return self._descriptor(res, op, body)

    def _update_simple(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        fields = self._update_fields(res, item)
        body = normalize(res, op, fields)
        body.update(self._id_body(res, item))
        return self._descriptor(res, op, body)

    def _by_id(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        return self._descriptor(res, op, self._id_body(res, item))

    def _list_plain(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        return self._descriptor(res, op, {})

    def _list_filtered(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        filters = _collection(item, "filters")
        body: dict[str, Any] = {}
        if res == Resource.TASK:
            body = {"filter": DEFAULT_TASK_FILTER, "include": ""}
        if filters.get("filter"):
            body["filter"] = filters["filter"]
        if filters.get("include"):
            body["include"] = filters["include"]
        return self._descriptor(res, op, body)

    # --- appointment ----------------------------------------------------

    def _create_appointment(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        fields = _collection(item, "additionalFields")
        attendees = item.get("attendees.attendee", [])
        if attendees:
            fields["attendees"] = attendees
        body = normalize(res, op, fields)

        start, end = resolve_range(
            item.get("fromDate"),
            item.get("endDate"),
            body.get("time_zone"),
            tz,
            all_day=as_bool(body.get("is_allday", False)),
        )
        body.update(title=item.get("title"), from_date=start, end_date=end)
        return self._descriptor(res, op, body)

    def _update_appointment(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, self._update_fields(res, item))
        timezone = body.get("time_zone")
        for key in ("from_date", "end_date"):
            if body.get(key):
                body[key] = resolve(body[key], timezone, tz)
        if body.get("from_date") and as_bool(body.get("is_allday", False)):
            body["end_date"] = body["from_date"]
        body.update(self._id_body(res, item))
        return self._descriptor(res, op, body, method="PUT")

    # --- sales activity -------------------------------------------------

    def _create_sales_activity(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, _collection(item, "additionalFields"))
        body.update(
            _required(item, "sales_activity_type_id", "title", "ownerId", "targetableType", "targetable_id")
        )
        timezone = body.get("time_zone")
        body["start_date"] = resolve(item.get("from_date"), timezone, tz)
        body["end_date"] = resolve(item.get("end_date"), timezone, tz)
        return self._descriptor(res, op, body)

    def _update_sales_activity(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, self._update_fields(res, item))
        for key in ("from_date", "end_date"):
            if body.get(key):
                body[key] = resolve(body[key], body.get("time_zone"), tz)
        body.update(self._id_body(res, item))
        return self._descriptor(res, op, body)

    # --- task -----------------------------------------------------------

    def _create_task(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, _collection(item, "additionalFields"))
        body.update(_required(item, "title", "ownerId", "targetableType", "targetable_id"))
        body["due_date"] = resolve(item.get("dueDate"), body.get("time_zone"), tz)
        return self._descriptor(res, op, body)

    def _update_task(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = normalize(res, op, self._update_fields(res, item))
        if body.get("due_date"):
            body["due_date"] = resolve(body["due_date"], body.get("time_zone"), tz)
        body.update(self._id_body(res, item))
        return self._descriptor(res, op, body)

    # --- note -----------------------------------------------------------

    def _create_note(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = _required(item, "description", "targetable_id", "targetableType")
        return self._descriptor(res, op, body)

    # --- search ---------------------------------------------------------

    def _search_query(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        body = {
            "q": item.get("query"),
            "include": join_entities(item.get("entities")),
            "per_page": SEARCH_PAGE_SIZE,
        }
        return self._descriptor(res, op, body)

    def _search_lookup(self, res: Resource, op: Operation, item: BatchItem, tz: str) -> RequestDescriptor:
        search_field = item.get("searchField")
        field_value = item.get("fieldValue", "")
        if search_field == "customField":
            search_field = item.get("customFieldName")
            field_value = item.get("customFieldValue")

        body: dict[str, Any] = {"q": field_value, "f": search_field}
        entities: Optional[Any] = join_entities(item.get("options.entities", None))
        if entities:
            body["entities"] = entities
        return self._descriptor(res, op, body, path="/lookup")
