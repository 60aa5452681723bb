"""Calendafy CRM integration adapter: per-item operation dispatch against the Calendafy CRM API."""

from calendafy_crm.client import CalendafyClient, ListingExecutor, OptionsLoader
from calendafy_crm.dispatch import OperationDispatcher, RequestBuilder
from calendafy_crm.models import BatchResult, CalendafyCredentials, Operation, Resource

__all__ = [
    "BatchResult",
    "CalendafyClient",
    "CalendafyCredentials",
    "ListingExecutor",
    "Operation",
    "OperationDispatcher",
    "OptionsLoader",
    "RequestBuilder",
    "Resource",
]
