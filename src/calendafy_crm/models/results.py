"""Per-item batch input and output models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from calendafy_crm.errors import MissingParameterError

_MISSING = object()


class ItemState(str, Enum):
    """Processing state of one item."""

    PENDING = "pending"
    BUILDING = "building"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchItem(BaseModel):
    """One unit of input: raw parameter values plus the item's position."""

    index: int
    parameters: dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str, default: Any = _MISSING) -> Any:
        """
        Read a parameter by name; dotted names walk nested mappings
        (e.g. 'attendees.attendee'). Without a default, a missing
        parameter raises MissingParameterError.
        """
        value: Any = self.parameters
        for part in name.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                if default is _MISSING:
                    raise MissingParameterError(name)
                return default
        return value


class ErrorRecord(BaseModel):
    """A failure recorded for one item under fault isolation."""

    message: str
    item_index: int
    error_type: str = "CalendafyError"


class ExecutionResult(BaseModel):
    """Outcome for one item: remote response data or an error record."""

    index: int
    state: ItemState
    data: Any = None
    error: Optional[ErrorRecord] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchResult(BaseModel):
    """Results of one batch, index-aligned with its input items."""

    resource: str
    operation: str
    results: list[ExecutionResult] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def errors(self) -> list[ErrorRecord]:
        return [r.error for r in self.results if r.error is not None]

    def to_json_items(self) -> list[dict[str, Any]]:
        """
        Flatten into workflow output items paired with their input index.
        List responses fan out one entry per record.
        """
        items: list[dict[str, Any]] = []
        for result in self.results:
            paired = {"item": result.index}
            if result.error is not None:
                items.append({"json": {"error": result.error.message}, "pairedItem": paired})
                continue
            records = result.data if isinstance(result.data, list) else [result.data]
            for record in records:
                items.append({"json": record, "pairedItem": paired})
        return items
