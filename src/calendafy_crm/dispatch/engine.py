"""Per-item operation dispatch with optional fault isolation."""

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

from calendafy_crm.client.http import CalendafyClient
from calendafy_crm.client.listing import ListingExecutor
from calendafy_crm.errors import UnknownFieldShape
from calendafy_crm.models.resources import Operation, Resource, resolve_pair
from calendafy_crm.models.results import (
    BatchItem,
    BatchResult,
    ErrorRecord,
    ExecutionResult,
    ItemState,
)

from .builder import RequestBuilder

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def _batch_item(index: int, parameters: Any) -> BatchItem:
    if not isinstance(parameters, Mapping):
        raise UnknownFieldShape(f"Item #{index} is not an object, got {type(parameters).__name__}")
    return BatchItem(index=index, parameters=dict(parameters))


def unwrap_response(response: Any, key: Optional[str]) -> Any:
    """Pull the record out of its wrapper (e.g. {'deal': {...}}); empty bodies mean success."""
    if response is None:
        return {"success": True}
    if key and isinstance(response, dict) and key in response:
        return response[key]
    return response


class OperationDispatcher:
    """
    Runs one (resource, operation) over a batch of items, strictly in order.

    Resource and operation are fixed for the whole batch. Each item goes
    Pending -> Building -> Sending -> Succeeded | Failed. With
    continue_on_fail, a failure becomes an ErrorRecord at the item's index
    and the batch goes on; without it, the first failure propagates unchanged.
    """

    def __init__(
        self,
        client: CalendafyClient,
        *,
        builder: Optional[RequestBuilder] = None,
        listing: Optional[ListingExecutor] = None,
    ):
        self._client = client
        self._builder = builder or RequestBuilder()
        self._listing = listing or ListingExecutor(client)

    def execute_item(
        self,
        resource: Resource,
        operation: Operation,
        item: BatchItem,
        default_timezone: str,
    ) -> Any:
        """Build and send one item; returns the response data or raises."""
        logger.debug("Item %d: %s", item.index, ItemState.BUILDING.value)
        descriptor = self._builder.build(resource, operation, item, default_timezone)

        logger.debug("Item %d: %s %s %s", item.index, ItemState.SENDING.value, descriptor.method, descriptor.path)
        if operation == Operation.GET_ALL:
            return self._listing.list(descriptor, self._builder.listing_options(item))
        response = self._client.send(descriptor)
        return unwrap_response(response, descriptor.response_key)

    def iter_run(
        self,
        items: Iterable[Mapping[str, Any]],
        resource: "Resource | str",
        operation: "Operation | str",
        *,
        continue_on_fail: bool = False,
        default_timezone: str = DEFAULT_TIMEZONE,
    ) -> Iterator[ExecutionResult]:
        """
        Yield one ExecutionResult per item as it reaches a terminal state.
        Closing the iterator early abandons the remaining items.
        """
        res, op = resolve_pair(resource, operation)

        for index, parameters in enumerate(items):
            try:
                data = self.execute_item(res, op, _batch_item(index, parameters), default_timezone)
            except Exception as e:
                if not continue_on_fail:
                    logger.warning("Item %d failed, aborting %s %s batch: %s", index, res.value, op.value, e)
                    raise
                logger.warning("Item %d failed (%s %s): %s", index, res.value, op.value, e)
                yield ExecutionResult(
                    index=index,
                    state=ItemState.FAILED,
                    error=ErrorRecord(message=str(e), item_index=index, error_type=type(e).__name__),
                )
                continue
            yield ExecutionResult(index=index, state=ItemState.SUCCEEDED, data=data)

    def run(
        self,
        items: Iterable[Mapping[str, Any]],
        resource: "Resource | str",
        operation: "Operation | str",
        *,
        continue_on_fail: bool = False,
        default_timezone: str = DEFAULT_TIMEZONE,
    ) -> BatchResult:
        """Run the whole batch; results are index-aligned with items."""
        res, op = resolve_pair(resource, operation)
        results = list(
            self.iter_run(
                items,
                res,
                op,
                continue_on_fail=continue_on_fail,
                default_timezone=default_timezone,
            )
        )
        failed = sum(1 for r in results if not r.ok)
        logger.info("%s %s: %d items, %d failed", res.value, op.value, len(results), failed)
        return BatchResult(resource=res.value, operation=op.value, results=results)
