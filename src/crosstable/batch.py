"""Batched dispatch: queue many read queries, send them as one multiplexed call.

State of a `RequestQueue`: empty -> accumulating (`enqueue`) -> dispatched
(`BatchDispatcher.flush`) -> empty again. Sub-responses are paired with
requests by position; the service answers fragment `qN` for request `N`.

A queue belongs to one batch-building caller at a time. It does no locking;
sharing one across threads needs external synchronization.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .constants import MULTI_QUERY_PREFIX
from .decoder import ResponseDecoder, response_decoder
from .exceptions import ApiError, CrossTableError, DecodeError, InvalidQueryError
from .logger import get_logger
from .queries.base import BaseQuery
from .schema import Response, ResponseShape
from .transport import Transport, relative_url

__all__ = (
    "BatchDispatcher",
    "MultiResponse",
    "QueuedRequest",
    "RequestHandle",
    "RequestQueue",
    "SlotResult",
)


@dataclass(frozen=True)
class RequestHandle:
    """Position of a queued request; addresses its slot in the MultiResponse."""

    index: int

    @property
    def key(self) -> str:
        return f"{MULTI_QUERY_PREFIX}{self.index}"


@dataclass(frozen=True)
class QueuedRequest:
    resource: str
    path: str
    params: Dict[str, str]
    shape: ResponseShape

    @property
    def url(self) -> str:
        return relative_url(self.path, self.params)


@dataclass(frozen=True)
class SlotResult:
    """Outcome of one sub-request: a decoded response or the error decoding it."""

    handle: RequestHandle
    response: Optional[Response] = None
    error: Optional[CrossTableError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MultiResponse:
    """Sub-responses of one batch, in enqueue order.

    Indexing with a handle (or its int position) returns the response, or
    raises the error captured for that slot.
    """

    def __init__(self, slots: Sequence[SlotResult] = ()) -> None:
        self._slots: Tuple[SlotResult, ...] = tuple(slots)

    def _slot(self, handle: Union[RequestHandle, int]) -> SlotResult:
        index = handle.index if isinstance(handle, RequestHandle) else handle
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[SlotResult]:
        return iter(self._slots)

    def __getitem__(self, handle: Union[RequestHandle, int]) -> Response:
        slot = self._slot(handle)
        if slot.error is not None:
            raise slot.error
        return slot.response

    def result(self, handle: Union[RequestHandle, int]) -> SlotResult:
        return self._slot(handle)

    def ok(self, handle: Union[RequestHandle, int]) -> bool:
        return self._slot(handle).ok

    def error(self, handle: Union[RequestHandle, int]) -> Optional[CrossTableError]:
        return self._slot(handle).error

    @property
    def responses(self) -> List[Optional[Response]]:
        """Decoded responses by position; None where the slot failed."""
        return [slot.response for slot in self._slots]

    @property
    def errors(self) -> Dict[int, CrossTableError]:
        return {slot.handle.index: slot.error for slot in self._slots if slot.error is not None}

    def __repr__(self) -> str:
        return f"<MultiResponse: {len(self)} slots, {len(self.errors)} failed>"


class RequestQueue:
    """Ordered read queries awaiting one batched dispatch.

    Queries are serialized on `enqueue`, so an invalid query fails there and
    never reaches the wire.
    """

    def __init__(self) -> None:
        self._items: List[QueuedRequest] = []

    def enqueue(self, resource: str, query: BaseQuery) -> RequestHandle:
        """Queue `query` against `resource` and return its handle.

        Raises:
            InvalidQueryError: For write queries, or if the query cannot be serialized
        """
        if query.is_write:
            raise InvalidQueryError(
                "Write queries cannot be batched", query=query.__class__.__name__, resource=resource
            )
        item = QueuedRequest(
            resource=resource,
            path=query.path(resource),
            params=query.to_params(),
            shape=query.shape,
        )
        self._items.append(item)
        return RequestHandle(len(self._items) - 1)

    @property
    def requests(self) -> Tuple[QueuedRequest, ...]:
        return tuple(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def drain(self) -> List[QueuedRequest]:
        """Remove and return every queued request."""
        items, self._items = self._items, []
        return items

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)


class BatchDispatcher:
    """Send a queue as one multiplexed request and demultiplex the answer.

    A transport failure or non-2xx status for the multiplexed call fails the
    whole batch. Past that point each slot decodes independently; a bad
    fragment is recorded in its own slot.
    """

    def __init__(self, transport: Transport, decoder: ResponseDecoder = response_decoder) -> None:
        self._transport = transport
        self._decoder = decoder
        self.logger = get_logger(__name__)

    def flush(self, queue: RequestQueue) -> MultiResponse:
        """Dispatch everything in `queue`; the queue is empty afterwards.

        Returns:
            MultiResponse aligned with enqueue order; empty, with no network
            call, when the queue is empty.

        Raises:
            TransportError: No response received for the multiplexed call
            ApiError: The multiplexed call returned a non-2xx status
            DecodeError: The combined body could not be split into fragments
        """
        if queue.is_empty():
            return MultiResponse()
        requests = queue.drain()
        self.logger.message("Dispatching batch of %d requests", len(requests))

        raw = self._transport.send_multi([(r.path, r.params) for r in requests])
        self._decoder.raise_for_status(raw.body, raw.status_code, raw.url, raw.reason_phrase)

        combined = self._split(raw.body, raw.url)
        slots = [self._decode_slot(index, request, combined, raw.status_code) for index, request in enumerate(requests)]
        failed = sum(1 for slot in slots if not slot.ok)
        if failed:
            self.logger.warning("Batch finished with %d of %d failed slots", failed, len(slots))
        return MultiResponse(slots)

    @staticmethod
    def _split(body: str, url: str) -> Dict[str, Any]:
        try:
            combined = json.loads(body)
        except ValueError as e:
            raise DecodeError("Multiplexed response is not valid JSON", url=url) from e
        if not isinstance(combined, dict):
            raise DecodeError("Multiplexed response is not a JSON object", url=url)
        return combined

    def _decode_slot(
        self, index: int, request: QueuedRequest, combined: Dict[str, Any], status_code: int
    ) -> SlotResult:
        handle = RequestHandle(index)
        try:
            if handle.key not in combined:
                raise DecodeError("Missing sub-response", slot=handle.key, url=request.url)
            response = self._decoder.decode_envelope(
                combined[handle.key],
                request.shape,
                status_code=status_code,
                request_url=request.url,
                raw=json.dumps(combined[handle.key]),
            )
        except (DecodeError, ApiError) as e:
            self.logger.warning("Slot %s failed: %s", handle.key, e)
            return SlotResult(handle, error=e)
        return SlotResult(handle, response=response)
