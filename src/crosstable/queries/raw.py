"""Pass-through query carrying only raw parameters."""

from ..schema import ResponseShape
from .base import BaseQuery


class RawQuery(BaseQuery):
    """Query built only from `add_param` / `add_json_param`.

    `path` returns the resource path unchanged, so callers address the
    service directly (e.g. `t/places`). Responses are returned undecoded.
    """

    shape = ResponseShape.RAW

    def path(self, table: str) -> str:
        return table.lstrip("/")
