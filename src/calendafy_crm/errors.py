"""Error taxonomy for the Calendafy CRM adapter.

Local validation errors (temporal input, field shape, empty update, missing
parameter) are raised before any network call. Remote and transport errors
originate at the HTTP boundary.
"""

from typing import Any, Optional


class CalendafyError(Exception):
    """Base class for every error raised by this package."""


class UnsupportedOperationError(CalendafyError):
    """Resource/operation pair is not part of the remote API."""

    def __init__(self, resource: str, operation: str):
        super().__init__(f"The operation '{operation}' is not supported for resource '{resource}'")
        self.resource = resource
        self.operation = operation


class MissingParameterError(CalendafyError):
    """A required item parameter was not supplied."""

    def __init__(self, name: str):
        super().__init__(f"Missing required parameter '{name}'")
        self.name = name


class InvalidTemporalInput(CalendafyError):
    """A date/time string or timezone could not be interpreted."""


class UnknownFieldShape(CalendafyError):
    """A nested structure does not match the expected element shape."""


class EmptyUpdateError(CalendafyError):
    """An update was requested without any field to update."""

    def __init__(self, resource: str):
        super().__init__(f"Please enter at least one field to update for the {resource}.")
        self.resource = resource


class ViewNotFoundError(CalendafyError):
    """A listing view could not be resolved to an id."""


class RemoteApiError(CalendafyError):
    """The remote API answered with a non-success status."""

    def __init__(self, status_code: int, body: Any = None):
        super().__init__(_remote_message(status_code, body))
        self.status_code = status_code
        self.body = body


class TransportError(CalendafyError):
    """The request never got a response (connect error, timeout...)."""


class PaginationError(CalendafyError):
    """A page after the first failed; records from earlier pages are discarded."""

    def __init__(self, page: int, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Listing failed while fetching page {page}{detail}")
        self.page = page


def _remote_message(status_code: int, body: Any) -> str:
    """Build a readable message, preferring the API's own error text."""
    detail = None
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, dict):
            detail = errors.get("message") or errors.get("code")
        elif isinstance(errors, list) and errors:
            detail = "; ".join(str(e) for e in errors)
        detail = detail or body.get("message") or body.get("error")
    elif isinstance(body, str) and body.strip():
        detail = body.strip()[:200]
    if detail:
        return f"Calendafy CRM API error {status_code}: {detail}"
    return f"Calendafy CRM API error {status_code}"
