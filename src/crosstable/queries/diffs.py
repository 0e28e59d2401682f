"""Diffs query: changes to a table within a time window."""

from typing import Any, Dict, Optional

from ..exceptions import InvalidQueryError
from ..schema import ResponseShape
from .base import BaseQuery


class Diffs(BaseQuery):
    """Row changes between `start` and `end` (epoch milliseconds, `end` optional)."""

    shape = ResponseShape.DIFFS

    def __init__(self, start: int, end: Optional[int] = None) -> None:
        super().__init__()
        if end is not None and end < start:
            raise InvalidQueryError("Diffs window ends before it starts", start=start, end=end)
        self.start = start
        self.end = end

    def path(self, table: str) -> str:
        return f"t/{table}/diffs"

    def computed_params(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end}
