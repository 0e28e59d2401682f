"""Response decoding.

Maps a raw response envelope to the typed response variant selected by the
query's `ResponseShape`:

    {"version": 3, "status": "ok", "response": {...payload...}}

An envelope whose status is not `ok` (or an HTTP status outside 2xx) becomes
an `ApiError`; a body that does not fit the expected shape becomes a
`DecodeError`.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from .constants import STATUS_OK
from .exceptions import ApiError, DecodeError
from .schema import (
    RESPONSE_TYPES,
    ColumnSchema,
    Crosswalk,
    Response,
    ResponseShape,
)

__all__ = (
    "ResponseDecoder",
    "response_decoder",
)


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class ResponseDecoder:
    """Decode response bodies and envelopes into `Response` variants."""

    def decode(
        self,
        raw_body: Union[str, bytes],
        shape: ResponseShape,
        status_code: int = 200,
        request_url: Optional[str] = None,
        reason_phrase: Optional[str] = None,
    ) -> Response:
        """Decode a whole response body.

        Args:
            raw_body: Body as received from the transport
            shape: Response variant the query expects
            status_code: HTTP status of the response
            request_url: URL of the request, carried into ApiError
            reason_phrase: HTTP reason phrase, used as ApiError message for non-2xx responses

        Raises:
            ApiError: Non-2xx HTTP status or error status envelope
            DecodeError: Body does not match the expected shape
        """
        body = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
        self.raise_for_status(body, status_code, request_url, reason_phrase)

        if shape is ResponseShape.RAW:
            return RESPONSE_TYPES[shape](body=body, raw=body)

        envelope = self._try_parse(body)
        if shape is ResponseShape.DIFFS and not (isinstance(envelope, dict) and "status" in envelope):
            return self._decode_diff_stream(body)
        if not isinstance(envelope, dict):
            raise DecodeError("Response body is not a JSON object", shape=shape.value, url=request_url)
        return self.decode_envelope(envelope, shape, status_code=status_code, request_url=request_url, raw=body)

    def raise_for_status(
        self,
        body: str,
        status_code: int,
        request_url: Optional[str] = None,
        reason_phrase: Optional[str] = None,
    ) -> None:
        """Raise ApiError for a non-2xx response.

        The HTTP reason phrase is the error message; the envelope's own
        message and error type, when the body has them, go into the details.
        """
        if _is_success(status_code):
            return
        envelope = self._try_parse(body)
        details = self._error_details(envelope) if isinstance(envelope, dict) else {}
        message = reason_phrase or details.pop("message", None) or f"HTTP {status_code}"
        if "message" in details:
            details["detail"] = details.pop("message")
        details.pop("code", None)
        raise ApiError(status_code, message, request_url, **details)

    def decode_envelope(
        self,
        envelope: Dict[str, Any],
        shape: ResponseShape,
        status_code: int = 200,
        request_url: Optional[str] = None,
        raw: Optional[str] = None,
    ) -> Response:
        """Decode an already-parsed envelope (a whole body or one batch fragment)."""
        if not isinstance(envelope, dict):
            raise DecodeError("Envelope is not a JSON object", shape=shape.value, url=request_url)
        status = envelope.get("status")
        if status != STATUS_OK:
            details = self._error_details(envelope)
            code = details.pop("code", None) or status_code
            message = details.pop("message", None) or str(status or "error")
            raise ApiError(code, message, request_url, **details)

        if shape is ResponseShape.RAW:
            text = raw if raw is not None else json.dumps(envelope)
            return RESPONSE_TYPES[shape](body=text, raw=text)

        payload = envelope.get("response")
        if not isinstance(payload, dict):
            raise DecodeError("Envelope has no response payload", shape=shape.value, url=request_url)

        common = {
            "status": status,
            "version": envelope.get("version"),
            "total_row_count": payload.get("total_row_count"),
            "included_row_count": payload.get("included_rows"),
            "raw": raw if raw is not None else json.dumps(envelope),
        }
        try:
            fields = self._payload_decoders[shape](self, payload)
            return RESPONSE_TYPES[shape](**common, **fields)
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise DecodeError(
                "Payload does not match expected shape", shape=shape.value, url=request_url, reason=str(e)
            ) from e

    # -------------------
    # Payload decoders
    # -------------------
    def _rows(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = payload["data"]
        if not isinstance(data, list):
            raise TypeError("data must be a list of rows")
        return {"data": data}

    def _crosswalks(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"crosswalks": [Crosswalk.model_validate(item) for item in payload["data"]]}

    def _facets(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = payload["data"]
        if not isinstance(data, dict):
            raise TypeError("facet data must be an object keyed by field")
        return {"data": data}

    def _schema(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        view = payload["view"]
        return {
            "title": view.get("title"),
            "description": view.get("description"),
            "search_enabled": bool(view.get("search_enabled", view.get("searchable", False))),
            "geo_enabled": bool(view.get("geo_enabled", False)),
            "column_schemas": [ColumnSchema.model_validate(f) for f in view.get("fields", [])],
        }

    def _suggest(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"factual_id": payload.get("factual_id"), "new_entity": bool(payload.get("new_entity", False))}

    def _write(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"payload": payload}

    _payload_decoders: Dict[ResponseShape, Callable[["ResponseDecoder", Dict[str, Any]], Dict[str, Any]]] = {
        ResponseShape.READ: _rows,
        ResponseShape.CROSSWALK: _crosswalks,
        ResponseShape.FACETS: _facets,
        ResponseShape.SCHEMA: _schema,
        ResponseShape.SUGGEST: _suggest,
        ResponseShape.WRITE: _write,
        ResponseShape.DIFFS: _rows,
    }

    # -------------------
    # Helpers
    # -------------------
    def _decode_diff_stream(self, body: str) -> Response:
        # Diffs may also arrive as one JSON record per line.
        records: List[Dict[str, Any]] = []
        for lineno, line in enumerate(body.splitlines(), start=1):
            if not line.strip():
                continue
            record = self._try_parse(line)
            if not isinstance(record, dict):
                raise DecodeError("Diff stream line is not a JSON object", shape="diffs", line=lineno)
            records.append(record)
        return RESPONSE_TYPES[ResponseShape.DIFFS](data=records, raw=body)

    @staticmethod
    def _try_parse(body: str) -> Any:
        try:
            return json.loads(body)
        except ValueError:
            return None

    @staticmethod
    def _error_details(envelope: Dict[str, Any]) -> Dict[str, Any]:
        details: Dict[str, Any] = {}
        for key in ("message", "error_type", "code"):
            if envelope.get(key) is not None:
                details[key] = envelope[key]
        return details


response_decoder = ResponseDecoder()
