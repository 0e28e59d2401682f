"""Row-level write requests: suggested edits and problem flags.

Writes are POSTed and cannot be queued for batched dispatch.
"""

from typing import Any, Dict, Optional

from ..constants import WireParam
from ..exceptions import InvalidQueryError
from ..schema import ResponseShape
from .base import BaseQuery


class Metadata:
    """Attribution attached to a write: who made it, why, and where it came from."""

    def __init__(
        self,
        user: str,
        comment: Optional[str] = None,
        reference: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        if not user:
            raise InvalidQueryError("Write metadata requires a user")
        self.user = user
        self._comment = comment
        self._reference = reference
        self._debug = debug

    def comment(self, comment: str) -> "Metadata":
        self._comment = comment
        return self

    def reference(self, reference: str) -> "Metadata":
        self._reference = reference
        return self

    def debug(self, debug: bool = True) -> "Metadata":
        """Ask the service to validate the write without applying it."""
        self._debug = debug
        return self

    def to_params(self) -> Dict[str, str]:
        params = {"user": self.user}
        if self._comment:
            params["comment"] = self._comment
        if self._reference:
            params["reference"] = self._reference
        if self._debug:
            params["debug"] = "true"
        return params


class WriteQuery(BaseQuery):
    method = "POST"
    action = ""

    def path(self, table: str, factual_id: Optional[str] = None) -> str:
        if factual_id:
            return f"t/{table}/{factual_id}/{self.action}"
        return f"t/{table}/{self.action}"


class Suggest(WriteQuery):
    """Suggest new values for an entity, or a new entity when no id is given."""

    shape = ResponseShape.SUGGEST
    action = "suggest"

    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self._values: Dict[str, Any] = dict(values or {})

    def set_value(self, field_name: str, value: Any) -> "Suggest":
        self._values[field_name] = value
        return self

    def make_blank(self, field_name: str) -> "Suggest":
        """Suggest that `field_name` be cleared."""
        self._values[field_name] = ""
        return self

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def computed_params(self) -> Dict[str, Any]:
        if not self._values and WireParam.VALUES not in self.overrides:
            raise InvalidQueryError("Suggest requires at least one value")
        return {WireParam.VALUES: dict(self._values) if self._values else None}


class Flag(WriteQuery):
    """Report a problem with an existing entity."""

    shape = ResponseShape.WRITE
    action = "flag"

    PROBLEMS = ("duplicate", "inaccurate", "inappropriate", "nonexistent", "spam", "other")

    def __init__(self, problem: str) -> None:
        super().__init__()
        if problem not in self.PROBLEMS:
            raise InvalidQueryError("Unknown flag problem", problem=problem, expected=self.PROBLEMS)
        self.problem = problem

    @classmethod
    def duplicate(cls) -> "Flag":
        return cls("duplicate")

    @classmethod
    def inaccurate(cls) -> "Flag":
        return cls("inaccurate")

    @classmethod
    def inappropriate(cls) -> "Flag":
        return cls("inappropriate")

    @classmethod
    def nonexistent(cls) -> "Flag":
        return cls("nonexistent")

    @classmethod
    def spam(cls) -> "Flag":
        return cls("spam")

    @classmethod
    def other(cls) -> "Flag":
        return cls("other")

    def computed_params(self) -> Dict[str, Any]:
        return {"problem": self.problem}
