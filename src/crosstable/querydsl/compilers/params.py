"""Wire parameter serializer.

Turns a query's accumulated state into the ordered `name -> str` mapping sent
to the service. Raw overrides are merged last and always win.
"""

import json
from typing import TYPE_CHECKING, Any, Dict

from .base import BaseCompiler
from .utils import encode_value

if TYPE_CHECKING:
    from crosstable.queries.base import BaseQuery

__all__ = (
    "ParamSerializer",
    "param_serializer",
)


class ParamSerializer(BaseCompiler):
    """Serialize queries into wire parameter maps.

    Output is deterministic: keys follow the order the query emits them,
    JSON values use compact separators and keep insertion order.
    """

    def serialize(self, query: "BaseQuery") -> Dict[str, str]:
        """Return the wire parameters for `query`.

        Raises:
            InvalidQueryError: If the query's filter tree cannot be compiled
        """
        return self.to_wire(query)

    def to_wire(self, query: "BaseQuery") -> Dict[str, str]:
        params: Dict[str, str] = {}
        for name, value in query.computed_params().items():
            if value is None:
                continue
            params[name] = encode_value(value)
        params.update(query.overrides)
        return params

    def from_wire(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Decode JSON-valued parameters back into Python values.

        Values that are not valid JSON (plain search terms, comma lists) are
        returned unchanged.
        """
        decoded: Dict[str, Any] = {}
        for name, value in params.items():
            if isinstance(value, str):
                try:
                    decoded[name] = json.loads(value)
                except ValueError:
                    decoded[name] = value
            else:
                decoded[name] = value
        return decoded


param_serializer = ParamSerializer()
