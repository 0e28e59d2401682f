"""Facet (value histogram) query."""

from typing import Any, Dict, Optional

from ..exceptions import InvalidQueryError
from ..schema import ResponseShape
from ..utils import non_negative
from .query import Query


class Facet(Query):
    """Count distinct values of the selected fields over the filtered rows.

    Accepts every `Query` filter. Facet fields are given to the constructor
    or to `select`; `facet_limit` caps the values returned per field and
    `min_count` drops values seen fewer times.

    Example:
        Facet("region", "locality").search("Starbucks").facet_limit(20).min_count(100)
    """

    shape = ResponseShape.FACETS

    def __init__(self, *fields: str) -> None:
        super().__init__()
        self._min_count: Optional[int] = None
        if fields:
            self.only(*fields)

    def path(self, table: str) -> str:
        return f"t/{table}/facets"

    def select(self, *fields: str) -> "Facet":
        self.only(*fields)
        return self

    def facet_limit(self, limit: int) -> "Facet":
        self.limit(limit)
        return self

    def min_count(self, count: int) -> "Facet":
        self._min_count = non_negative("min_count", count)
        return self

    def computed_params(self) -> Dict[str, Any]:
        if not self._select and "select" not in self.overrides:
            raise InvalidQueryError("Facet requires at least one field to select")
        params = super().computed_params()
        params["min_count"] = self._min_count
        return params
