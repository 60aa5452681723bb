"""Data models for the Calendafy CRM adapter."""

from calendafy_crm.models.credentials import CalendafyCredentials
from calendafy_crm.models.request import ListingOptions, RequestDescriptor
from calendafy_crm.models.resources import Operation, Resource
from calendafy_crm.models.results import (
    BatchItem,
    BatchResult,
    ErrorRecord,
    ExecutionResult,
    ItemState,
)

__all__ = [
    "BatchItem",
    "BatchResult",
    "CalendafyCredentials",
    "ErrorRecord",
    "ExecutionResult",
    "ItemState",
    "ListingOptions",
    "Operation",
    "RequestDescriptor",
    "Resource",
]
