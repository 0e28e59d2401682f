"""
Main client for reading from and writing to the table service.

This module provides `Client`, a high-level facade that serializes queries,
hands them to a pluggable transport, and decodes the responses. Single
requests go straight to the transport; read queries can also be queued and
sent together as one multiplexed request.
"""

from typing import Optional

import httpx

from .batch import BatchDispatcher, MultiResponse, RequestHandle, RequestQueue
from .decoder import ResponseDecoder, response_decoder
from .exceptions import InvalidQueryError, MissingConfigError
from .logger import get_logger
from .queries.base import BaseQuery
from .queries.raw import RawQuery
from .queries.write import Flag, Metadata, Suggest, WriteQuery
from .schema import (
    Response,
    ResponseShape,
    SchemaResponse,
    SuggestResponse,
    WriteResponse,
)
from .settings import settings
from .transport import HttpTransport, Transport


class Client:
    """High-level entry point for the table service.

    Key Features:
        - `fetch` for any read query (rows, facets, crosswalk, resolve, diffs)
        - `suggest` / `flag` for row-level writes with attribution metadata
        - `queue_fetch` + `send_requests` for batched reads in one round trip
        - Pluggable transport; `HttpTransport` (httpx) by default

    Attributes:
        transport: Transport used for every call
        queue: Pending batched requests
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        auth: Optional[httpx.Auth] = None,
        transport: Optional[Transport] = None,
        decoder: ResponseDecoder = response_decoder,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key (default from settings). Not needed when `auth` or `transport` is given.
            base_url: Service root URL (default from settings)
            timeout: Request timeout in seconds (default from settings)
            auth: httpx auth flow used to sign requests
            transport: Ready-made transport; overrides the other connection arguments

        Raises:
            MissingConfigError: If no credentials are available for the default transport
        """
        if transport is None:
            key = api_key or settings.API_KEY
            if not key and auth is None:
                raise MissingConfigError(
                    "API_KEY is not set. Please configure it in your .env file.",
                    config_key="API_KEY",
                    env_file=".env",
                )
            transport = HttpTransport(base_url=base_url, api_key=key, timeout=timeout, auth=auth)
        self.transport = transport
        self._decoder = decoder
        self.queue = RequestQueue()
        self._dispatcher = BatchDispatcher(transport, decoder)
        self.logger = get_logger(__name__)
        self.logger.message("Client initialized: transport=%s", transport.__class__.__name__)

    def debug(self, enabled: bool = True) -> "Client":
        """Trace every request and response at INFO level."""
        self.logger.tracing = enabled
        return self

    # ------------------------------------------------------------------
    # Single dispatch
    # ------------------------------------------------------------------
    def _dispatch(self, path: str, params: dict, shape: ResponseShape, method: str = "GET") -> Response:
        self.logger.trace("%s %s params=%s", method, path, params)
        raw = self.transport.send(path, params, method=method)
        self.logger.trace("%s %s -> %s %s", method, raw.url, raw.status_code, raw.body)
        return self._decoder.decode(raw.body, shape, raw.status_code, raw.url, raw.reason_phrase)

    def fetch(self, table: str, query: BaseQuery) -> Response:
        """Run a read query against `table`.

        Returns:
            The response variant for the query type (ReadResponse for `Query`,
            FacetResponse for `Facet`, CrosswalkResponse for `CrosswalkQuery`, ...)

        Raises:
            InvalidQueryError: Write query given, or query cannot be serialized
            TransportError: No response received
            ApiError: Service answered with an error
            DecodeError: Response does not match the query's shape
        """
        if query.is_write:
            raise InvalidQueryError("Use suggest() or flag() for write queries", query=query.__class__.__name__)
        return self._dispatch(query.path(table), query.to_params(), query.shape)

    def schema(self, table: str) -> SchemaResponse:
        """Fetch the column schema of `table`."""
        return self._dispatch(f"t/{table}/schema", {}, ResponseShape.SCHEMA)

    def fetch_raw(self, path: str, query: Optional[RawQuery] = None) -> str:
        """Send raw parameters to `path` and return the body undecoded."""
        query = query or RawQuery()
        response = self._dispatch(query.path(path), query.to_params(), ResponseShape.RAW)
        return response.body

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _write(
        self, table: str, write: WriteQuery, metadata: Metadata, factual_id: Optional[str] = None
    ) -> Response:
        params = write.to_params()
        for name, value in metadata.to_params().items():
            params.setdefault(name, value)
        return self._dispatch(write.path(table, factual_id), params, write.shape, method=write.method)

    def suggest(
        self, table: str, suggest: Suggest, metadata: Metadata, factual_id: Optional[str] = None
    ) -> SuggestResponse:
        """Suggest values for entity `factual_id`, or a new entity when it is None."""
        return self._write(table, suggest, metadata, factual_id)

    def flag(self, table: str, factual_id: str, flag: Flag, metadata: Metadata) -> WriteResponse:
        """Flag a problem with entity `factual_id`."""
        if not factual_id:
            raise InvalidQueryError("Flag requires an entity id", table=table)
        return self._write(table, flag, metadata, factual_id)

    # ------------------------------------------------------------------
    # Batched dispatch
    # ------------------------------------------------------------------
    def queue_fetch(self, table: str, query: BaseQuery) -> RequestHandle:
        """Queue a read query for the next `send_requests` call."""
        handle = self.queue.enqueue(table, query)
        self.logger.trace("Queued %s for %s as %s", query.__class__.__name__, table, handle.key)
        return handle

    def send_requests(self) -> MultiResponse:
        """Send every queued query in one request; the queue is empty afterwards."""
        return self._dispatcher.flush(self.queue)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
