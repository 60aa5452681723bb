"""Listing executor: view resolution and page-by-page fetching for getAll operations."""

import logging
from typing import Any, Iterator, Optional

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.errors import CalendafyError, PaginationError, ViewNotFoundError
from calendafy_crm.models.request import ListingOptions, RequestDescriptor
from calendafy_crm.models.resources import VIEW_COLLECTIONS, Resource

logger = logging.getLogger(__name__)

# Name fragment of the default view per collection ('All Deals' does not exist)
_DEFAULT_VIEW_KEYWORDS = {"deals": "My Deals"}
_DEFAULT_VIEW_KEYWORD = "All"


def extract_records(response: Any) -> list[dict]:
    """Records live under the collection key of a listing response (e.g. {'contacts': [...], 'meta': {...}})."""
    if isinstance(response, list):
        return response
    if not isinstance(response, dict):
        return []
    for key, value in response.items():
        if key != "meta" and isinstance(value, list):
            return value
    return []


def total_pages(response: Any) -> Optional[int]:
    """meta.total_pages of a listing response, or None when absent."""
    if not isinstance(response, dict):
        return None
    meta = response.get("meta")
    if not isinstance(meta, dict) or meta.get("total_pages") in (None, ""):
        return None
    try:
        return int(meta["total_pages"])
    except (TypeError, ValueError):
        return None


class ViewResolver:
    """Resolves a listing view (id, name or default) through the collection's filters endpoint."""

    def __init__(self, client: CalendafyClient):
        self._client = client

    def filters(self, collection: str) -> list[dict]:
        """Saved views of a collection: [{name, id, ...}]."""
        response = self._client.get(f"/{collection}/filters")
        if isinstance(response, dict) and isinstance(response.get("filters"), list):
            return response["filters"]
        return extract_records(response)

    def resolve(self, resource: Resource, view: Optional[str] = None) -> str:
        """
        Return the view id to list with.
        Digits are taken as an id; other values are matched by name;
        no value selects the collection's default 'All ...' view.
        """
        collection = VIEW_COLLECTIONS[resource]
        if view is not None and str(view).strip().isdigit():
            return str(view).strip()

        filters = self.filters(collection)
        if view:
            wanted = str(view).strip().lower()
            for f in filters:
                if str(f.get("name", "")).strip().lower() == wanted:
                    return str(f["id"])
            raise ViewNotFoundError(f"No {collection} view named {view!r}")

        keyword = _DEFAULT_VIEW_KEYWORDS.get(collection, _DEFAULT_VIEW_KEYWORD)
        for f in filters:
            if keyword in str(f.get("name", "")):
                return str(f["id"])
        raise ViewNotFoundError(f"Failed to get the default {collection} view")


class ListingExecutor:
    """
    Executes getAll operations.
    Fetches one page and truncates to limit, or every page when return_all is set.
    """

    def __init__(self, client: CalendafyClient, view_resolver: Optional[ViewResolver] = None):
        self._client = client
        self._views = view_resolver or ViewResolver(client)

    def iter_records(
        self,
        descriptor: RequestDescriptor,
        *,
        return_all: bool = False,
    ) -> Iterator[dict]:
        """
        Yield records page by page in the API's natural order.
        Without return_all, only the first page is requested.
        A failing first page raises its own error; a later one raises PaginationError.
        """
        page = 1
        while True:
            logger.debug("Fetching %s page %d", descriptor.resource, page)
            try:
                response = self._client.send(descriptor.for_page(page))
            except CalendafyError as e:
                if page == 1:
                    raise
                raise PaginationError(page, e) from e

            records = extract_records(response)
            yield from records

            if not return_all:
                return
            pages = total_pages(response)
            if not records or pages is None or page >= pages:
                return
            page += 1

    def list(self, descriptor: RequestDescriptor, options: ListingOptions) -> list[dict]:
        """
        Run the listing and return all matched records.
        All-or-nothing: a failing page discards records from earlier pages.
        """
        resource = Resource(descriptor.resource)
        if resource in VIEW_COLLECTIONS:
            view_id = self._views.resolve(resource, options.view)
            descriptor = descriptor.model_copy(update={"body": {**descriptor.body, "view": view_id}})

        records = list(self.iter_records(descriptor, return_all=options.return_all))
        if not options.return_all:
            records = records[: options.limit]
        logger.debug("Listed %d %s records", len(records), resource.value)
        return records
