"""Dynamic option lists (views, currencies, users, selectors) fetched from the API."""

from typing import Any

from pydantic import BaseModel

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.client.listing import ListingExecutor, ViewResolver, extract_records
from calendafy_crm.models.request import ListingOptions, RequestDescriptor
from calendafy_crm.models.resources import VIEW_COLLECTIONS, Operation, Resource

# Selectors that return plain {name, id} entries
SELECTORS = (
    "business_types",
    "campaigns",
    "contact_statuses",
    "deal_payment_statuses",
    "deal_pipelines",
    "deal_products",
    "deal_reasons",
    "deal_stages",
    "deal_types",
    "industry_types",
    "lifecycle_stages",
    "sales_activity_outcomes",
    "sales_activity_types",
    "territories",
)


class LoadOption(BaseModel):
    """One entry of a dynamic option list."""

    name: str
    value: Any


def _to_options(entries: list[dict], name_key: str = "name") -> list[LoadOption]:
    return [LoadOption(name=str(e.get(name_key, "")), value=e.get("id")) for e in entries]


class OptionsLoader:
    """Lookups behind the parameter schema's dynamic option lists."""

    def __init__(self, client: CalendafyClient):
        self._client = client
        self._views = ViewResolver(client)

    def selector(self, name: str) -> list[LoadOption]:
        """GET /selector/{name}; entries sit under the response's first key."""
        if name not in SELECTORS:
            raise ValueError(f"Unknown selector: {name}. Available: {list(SELECTORS)}")
        return _to_options(extract_records(self._client.get(f"/selector/{name}")))

    def currencies(self) -> list[LoadOption]:
        return _to_options(extract_records(self._client.get("/selector/currencies")), "currency_code")

    def users(self) -> list[LoadOption]:
        """Users, for attendees, owners and creators."""
        return _to_options(extract_records(self._client.get("/selector/owners")), "display_name")

    def views(self, resource: Resource) -> list[LoadOption]:
        """Saved views of an account, contact or deal listing."""
        if resource not in VIEW_COLLECTIONS:
            raise ValueError(f"Resource {resource.value} has no saved views")
        collection = VIEW_COLLECTIONS[resource]
        return _to_options(self._views.filters(collection))

    def accounts(self) -> list[LoadOption]:
        """Every account of the default accounts view."""
        descriptor = RequestDescriptor(
            body={"resource": Resource.ACCOUNT.value, "operation": Operation.GET_ALL.value}
        )
        listing = ListingExecutor(self._client, self._views)
        records = listing.list(descriptor, ListingOptions(return_all=True))
        return _to_options(records)

    def load(self, name: str) -> list[LoadOption]:
        """Dispatch by option-list name, as exposed on the CLI."""
        loaders = {
            "accounts": self.accounts,
            "account_views": lambda: self.views(Resource.ACCOUNT),
            "contact_views": lambda: self.views(Resource.CONTACT),
            "deal_views": lambda: self.views(Resource.DEAL),
            "currencies": self.currencies,
            "users": self.users,
        }
        if name in loaders:
            return loaders[name]()
        return self.selector(name)

    @staticmethod
    def available() -> list[str]:
        return ["accounts", "account_views", "contact_views", "deal_views", "currencies", "users", *SELECTORS]
