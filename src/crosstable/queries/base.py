"""Base query class shared by every request type."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..querydsl.compilers import param_serializer
from ..querydsl.compilers.utils import dump_json, encode_value
from ..schema import ResponseShape
from ..types import Params


class BaseQuery(ABC):
    """Common state of all queries: the raw override bag, shape tag and HTTP method.

    Subclasses contribute their computed parameters through
    `computed_params`; `to_params` runs them through the serializer and merges
    the overrides last.
    """

    shape: ResponseShape = ResponseShape.READ
    method: str = "GET"

    def __init__(self) -> None:
        self.overrides: Dict[str, str] = {}

    @property
    def is_write(self) -> bool:
        return self.method != "GET"

    def add_param(self, name: str, value: Any) -> "BaseQuery":
        """Set a raw wire parameter; it wins over any computed value for `name`."""
        self.overrides[name] = encode_value(value)
        return self

    def add_json_param(self, name: str, value: Any) -> "BaseQuery":
        """Set a raw wire parameter, always JSON-encoding `value`."""
        self.overrides[name] = dump_json(value)
        return self

    @abstractmethod
    def path(self, table: str) -> str:
        """Resource path for this query against `table`."""
        raise NotImplementedError

    def computed_params(self) -> Dict[str, Any]:
        """Builder-computed parameters, in emission order. None values are skipped."""
        return {}

    def to_params(self) -> Params:
        return param_serializer.serialize(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.to_params()}>"
