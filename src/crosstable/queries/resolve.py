"""Resolve query: match a partial entity description against a table."""

from typing import Any, Dict

from ..constants import WireParam
from ..schema import ResponseShape
from .base import BaseQuery


class ResolveQuery(BaseQuery):
    """Accumulate known attribute values; the service returns candidate rows."""

    shape = ResponseShape.READ

    def __init__(self) -> None:
        super().__init__()
        self._values: Dict[str, Any] = {}

    def path(self, table: str) -> str:
        return f"{table}/resolve"

    def add(self, key: str, value: Any) -> "ResolveQuery":
        self._values[key] = value
        return self

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def computed_params(self) -> Dict[str, Any]:
        return {WireParam.VALUES: dict(self._values) if self._values else None}
