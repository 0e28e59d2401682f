"""HTTP transport.

The core only needs two calls from the transport: `send` for one request and
`send_multi` for a multiplexed batch. `HttpTransport` implements both with
`httpx`; request signing is left to a caller-supplied `httpx.Auth`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlencode

import httpx

from .constants import MULTI_QUERIES_PARAM, MULTI_QUERY_PREFIX
from .exceptions import TransportError
from .logger import get_logger
from .querydsl.compilers.utils import dump_json
from .settings import settings as api_settings
from .types import SubRequests

__all__ = (
    "HttpTransport",
    "Transport",
    "TransportResponse",
    "encode_multi",
    "relative_url",
)

KEY_PARAM = "KEY"


@dataclass(frozen=True)
class TransportResponse:
    """What the transport hands back: status, body text, and the URL requested (without the API key)."""

    status_code: int
    body: str
    url: str
    reason_phrase: str = ""


def relative_url(path: str, params: Mapping[str, str]) -> str:
    """`/path?query` form of a request, as used inside multi envelopes."""
    path = "/" + path.lstrip("/")
    if not params:
        return path
    return f"{path}?{urlencode(list(params.items()))}"


def encode_multi(requests: SubRequests) -> str:
    """Encode sub-requests as `{"q0": "/path?query", "q1": ...}` keyed by position."""
    queries = {
        f"{MULTI_QUERY_PREFIX}{index}": relative_url(path, params) for index, (path, params) in enumerate(requests)
    }
    return dump_json(queries)


class Transport(ABC):
    """Transport collaborator contract."""

    @abstractmethod
    def send(self, path: str, params: Mapping[str, str], method: str = "GET") -> TransportResponse:
        """Perform one request.

        Raises:
            TransportError: If no response was received
        """
        raise NotImplementedError

    @abstractmethod
    def send_multi(self, requests: SubRequests) -> TransportResponse:
        """Perform one multiplexed request carrying every `(path, params)` pair.

        Raises:
            TransportError: If no response was received
        """
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class HttpTransport(Transport):
    """`httpx` backed transport.

    Authentication: pass an `httpx.Auth` (e.g. an OAuth signer) as `auth`;
    without one, `api_key` is sent as the `KEY` query parameter.

    Attributes:
        base_url: Service root every path is resolved against
        multi_path: Path of the multiplexed endpoint
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        auth: Optional[httpx.Auth] = None,
        client: Optional[httpx.Client] = None,
        multi_path: Optional[str] = None,
    ) -> None:
        self.base_url = base_url or api_settings.API_BASE_URL
        self.multi_path = multi_path or api_settings.MULTI_PATH
        self._api_key = api_key if auth is None else None
        self._client = client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else api_settings.API_TIMEOUT,
            auth=auth,
        )
        self.logger = get_logger(__name__)

    @property
    def client(self) -> httpx.Client:
        return self._client

    def _with_key(self, params: Mapping[str, str]) -> dict:
        merged = dict(params)
        if self._api_key:
            merged.setdefault(KEY_PARAM, self._api_key)
        return merged

    def send(self, path: str, params: Mapping[str, str], method: str = "GET") -> TransportResponse:
        path = path.lstrip("/")
        params = self._with_key(params)
        try:
            if method.upper() == "GET":
                response = self._client.get(path, params=params)
            else:
                response = self._client.request(method.upper(), path, data=params)
        except httpx.HTTPError as e:
            raise TransportError(
                f"{method.upper()} request failed: {e}", path=path, base_url=str(self._client.base_url)
            ) from e
        # the key never leaves the transport in URLs, logs or errors
        url = response.request.url.copy_remove_param(KEY_PARAM)
        self.logger.debug("%s %s -> %s", method.upper(), url, response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            body=response.text,
            url=str(url),
            reason_phrase=response.reason_phrase,
        )

    def send_multi(self, requests: SubRequests) -> TransportResponse:
        return self.send(self.multi_path, {MULTI_QUERIES_PARAM: encode_multi(requests)})

    def close(self) -> None:
        self._client.close()
