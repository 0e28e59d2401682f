"""Tests for response decoding."""

import json

import pytest
from fakes import envelope, rows

from crosstable.decoder import response_decoder
from crosstable.exceptions import ApiError, DecodeError
from crosstable.schema import (
    CrosswalkResponse,
    DiffsResponse,
    FacetResponse,
    RawResponse,
    ReadResponse,
    ResponseShape,
    SchemaResponse,
    SuggestResponse,
    WriteResponse,
)

URL = "http://api.v3.factual.com/t/places?filters=%7B%7D"


def decode(body, shape=ResponseShape.READ, **kwargs):
    text = body if isinstance(body, (str, bytes)) else json.dumps(body)
    return response_decoder.decode(text, shape, **kwargs)


class TestReadResponses:
    """Row payloads."""

    def test_rows(self):
        response = decode(rows({"name": "Starbucks", "country": "US"}, {"name": "Peet's"}, total=10))
        assert isinstance(response, ReadResponse)
        assert response.is_ok
        assert response.version == 3
        assert response.included_row_count == 2
        assert response.total_row_count == 10
        assert len(response) == 2
        assert response.map_values("country") == ["US"]

    def test_empty(self):
        response = decode(rows())
        assert response.is_empty()
        assert response.total_row_count is None

    def test_raw_body_kept(self):
        body = json.dumps(rows({"name": "Starbucks"}))
        assert decode(body).raw == body

    def test_bytes_body(self):
        assert decode(json.dumps(rows({"a": 1})).encode("utf-8")).data == [{"a": 1}]


class TestOtherShapes:
    """Every response variant."""

    def test_crosswalk(self):
        body = envelope(
            {
                "data": [
                    {
                        "factual_id": "97598010-433f-4946-8fd5-4a6dd1639d77",
                        "namespace": "loopt",
                        "namespace_id": "zRxb",
                        "url": "http://www.loopt.com/place/zRxb",
                    }
                ]
            }
        )
        response = decode(body, ResponseShape.CROSSWALK)
        assert isinstance(response, CrosswalkResponse)
        assert response.crosswalks[0].namespace == "loopt"
        assert response.crosswalks[0].url == "http://www.loopt.com/place/zRxb"

    def test_facets(self):
        body = envelope({"data": {"region": {"CA": 120, "NY": 80}, "locality": {"los angeles": 40}}, "total_row_count": 200})
        response = decode(body, ResponseShape.FACETS)
        assert isinstance(response, FacetResponse)
        assert response.data["region"]["CA"] == 120
        assert response.total_row_count == 200

    def test_schema(self):
        view = {
            "title": "Restaurants",
            "search_enabled": True,
            "geo_enabled": True,
            "fields": [
                {"name": "name", "datatype": "String", "faceted": False, "sortable": True},
                {"name": "cuisine", "datatype": "String", "faceted": True},
            ],
        }
        response = decode(envelope({"view": view}), ResponseShape.SCHEMA)
        assert isinstance(response, SchemaResponse)
        assert response.title == "Restaurants"
        assert response.search_enabled and response.geo_enabled
        assert response.get_column_schema("cuisine").faceted
        assert response.get_column_schema("name").sortable
        assert response.get_column_schema("missing") is None

    def test_suggest(self):
        response = decode(envelope({"factual_id": "1234", "new_entity": True}), ResponseShape.SUGGEST)
        assert isinstance(response, SuggestResponse)
        assert response.factual_id == "1234"
        assert response.new_entity

    def test_write(self):
        response = decode(envelope({"flag_id": 42}), ResponseShape.WRITE)
        assert isinstance(response, WriteResponse)
        assert response.payload == {"flag_id": 42}

    def test_diffs_envelope(self):
        response = decode(envelope({"data": [{"type": "insert", "factual_id": "a"}]}), ResponseShape.DIFFS)
        assert isinstance(response, DiffsResponse)
        assert response.data[0]["type"] == "insert"

    def test_diffs_line_stream(self):
        body = '{"type":"insert","factual_id":"a"}\n\n{"type":"delete","factual_id":"b"}\n'
        response = decode(body, ResponseShape.DIFFS)
        assert [r["type"] for r in response.data] == ["insert", "delete"]
        assert response.raw == body

    def test_diffs_line_stream_malformed(self):
        with pytest.raises(DecodeError, match="Diff stream line"):
            decode('{"type":"insert"}\nnot json\n', ResponseShape.DIFFS)

    def test_raw(self):
        response = decode("anything at all", ResponseShape.RAW)
        assert isinstance(response, RawResponse)
        assert response.body == "anything at all"


class TestErrors:
    """ApiError and DecodeError mapping."""

    def test_unauthorized(self):
        body = {"version": 3, "status": "error", "error_type": "Auth", "message": "Invalid API key"}
        with pytest.raises(ApiError) as exc_info:
            decode(body, status_code=401, request_url=URL, reason_phrase="Unauthorized")
        error = exc_info.value
        assert error.status_code == 401
        assert error.status_message == "Unauthorized"
        assert error.request_url == URL
        assert error.details["error_type"] == "Auth"
        assert error.details["detail"] == "Invalid API key"

    def test_non_2xx_without_envelope(self):
        with pytest.raises(ApiError) as exc_info:
            decode("<html>Bad Gateway</html>", status_code=502, request_url=URL)
        assert exc_info.value.status_code == 502
        assert exc_info.value.status_message == "HTTP 502"

    def test_non_2xx_raw_shape_still_fails(self):
        with pytest.raises(ApiError):
            decode("oops", ResponseShape.RAW, status_code=500, reason_phrase="Internal Server Error")

    def test_error_envelope_with_ok_http_status(self):
        with pytest.raises(ApiError) as exc_info:
            decode(envelope(status="error", message="Unknown table"), request_url=URL)
        assert exc_info.value.status_code == 200
        assert exc_info.value.status_message == "Unknown table"

    def test_error_envelope_code_wins(self):
        with pytest.raises(ApiError) as exc_info:
            response_decoder.decode_envelope({"status": "error", "code": 403, "message": "Forbidden"}, ResponseShape.READ)
        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            "[1, 2, 3]",
            json.dumps({"version": 3, "status": "ok"}),
            json.dumps(envelope({"data": {"not": "a list"}})),
            json.dumps(envelope({"rows": []})),
        ],
    )
    def test_malformed_read(self, body):
        with pytest.raises(DecodeError):
            decode(body)

    def test_crosswalk_missing_namespace(self):
        with pytest.raises(DecodeError, match="does not match"):
            decode(envelope({"data": [{"factual_id": "a"}]}), ResponseShape.CROSSWALK)

    def test_facets_wrong_counts(self):
        with pytest.raises(DecodeError):
            decode(envelope({"data": {"region": {"CA": "many"}}}), ResponseShape.FACETS)

    def test_schema_without_view(self):
        with pytest.raises(DecodeError):
            decode(envelope({"fields": []}), ResponseShape.SCHEMA)

    def test_decode_error_carries_url(self):
        with pytest.raises(DecodeError) as exc_info:
            decode("not json", request_url=URL)
        assert exc_info.value.details["url"] == URL
