"""HTTP access to the Calendafy CRM API."""

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.client.listing import ListingExecutor, ViewResolver
from calendafy_crm.client.options import LoadOption, OptionsLoader

__all__ = ["CalendafyClient", "ListingExecutor", "LoadOption", "OptionsLoader", "ViewResolver"]
