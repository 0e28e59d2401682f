"""Pydantic schemas for decoded service responses.

Each query type names the response variant it expects through a
`ResponseShape` tag; the decoder never guesses the variant from the payload.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .constants import STATUS_OK


class ResponseShape(str, Enum):
    """Closed set of response variants."""

    READ = "read"
    CROSSWALK = "crosswalk"
    FACETS = "facets"
    SCHEMA = "schema"
    SUGGEST = "suggest"
    WRITE = "write"
    DIFFS = "diffs"
    RAW = "raw"


class Response(BaseModel):
    """Fields common to every response envelope."""

    status: str = Field(STATUS_OK, description="Status token reported by the service.")
    version: Optional[int] = Field(None, description="API version marker.")
    total_row_count: Optional[int] = Field(None, description="Rows matching the query, when requested.")
    included_row_count: Optional[int] = Field(None, description="Rows included in this response.")
    raw: str = Field("", repr=False, description="Raw response body.")

    @property
    def is_ok(self) -> bool:
        return self.status == STATUS_OK


class ReadResponse(Response):
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Returned rows.")

    def is_empty(self) -> bool:
        return not self.data

    def map_values(self, field: str) -> List[Any]:
        """Values of `field` across rows, skipping rows without it."""
        return [row[field] for row in self.data if field in row]

    def __len__(self) -> int:
        return len(self.data)


class Crosswalk(BaseModel):
    factual_id: str
    namespace: str
    namespace_id: Optional[str] = None
    url: Optional[str] = None


class CrosswalkResponse(Response):
    crosswalks: List[Crosswalk] = Field(default_factory=list)


class FacetResponse(Response):
    data: Dict[str, Dict[str, int]] = Field(
        default_factory=dict, description="Per field, the count of each distinct value."
    )


class ColumnSchema(BaseModel):
    name: str
    datatype: str
    description: Optional[str] = None
    label: Optional[str] = None
    faceted: bool = False
    sortable: bool = False


class SchemaResponse(Response):
    title: Optional[str] = None
    description: Optional[str] = None
    search_enabled: bool = False
    geo_enabled: bool = False
    column_schemas: List[ColumnSchema] = Field(default_factory=list)

    def get_column_schema(self, name: str) -> Optional[ColumnSchema]:
        for column in self.column_schemas:
            if column.name == name:
                return column
        return None


class SuggestResponse(Response):
    factual_id: Optional[str] = None
    new_entity: bool = False


class WriteResponse(Response):
    payload: Dict[str, Any] = Field(default_factory=dict, description="Write acknowledgement.")


class DiffsResponse(Response):
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Change records in order.")


class RawResponse(Response):
    body: str = ""


RESPONSE_TYPES = {
    ResponseShape.READ: ReadResponse,
    ResponseShape.CROSSWALK: CrosswalkResponse,
    ResponseShape.FACETS: FacetResponse,
    ResponseShape.SCHEMA: SchemaResponse,
    ResponseShape.SUGGEST: SuggestResponse,
    ResponseShape.WRITE: WriteResponse,
    ResponseShape.DIFFS: DiffsResponse,
    ResponseShape.RAW: RawResponse,
}
