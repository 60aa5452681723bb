"""Outbound request descriptors."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RequestDescriptor(BaseModel):
    """
    One outbound call to the Calendafy CRM API.
    The body always carries the `resource` and `operation` routing tags.
    """

    method: str = "POST"
    path: str = "/"
    body: dict[str, Any] = Field(default_factory=dict)
    # Key under which the remote API wraps the record in its response
    response_key: Optional[str] = None

    @property
    def resource(self) -> str:
        return self.body["resource"]

    @property
    def operation(self) -> str:
        return self.body["operation"]

    def for_page(self, page: int) -> "RequestDescriptor":
        """Copy of this descriptor requesting the given 1-based page."""
        return self.model_copy(update={"body": {**self.body, "page": page}})


class ListingOptions(BaseModel):
    """How much of a listing to fetch, and which view scopes it."""

    return_all: bool = False
    limit: int = Field(default=50, ge=1)
    view: Optional[str] = None
