"""Crosswalk query: links between an entity and its ids in other namespaces."""

from typing import Any, Dict, List, Optional

from ..querydsl.compilers.utils import join_list
from ..schema import ResponseShape
from ..utils import non_negative
from .base import BaseQuery


class CrosswalkQuery(BaseQuery):
    """Look up crosswalk links by entity id or by (namespace, namespace id)."""

    shape = ResponseShape.CROSSWALK

    def __init__(self) -> None:
        super().__init__()
        self._factual_id: Optional[str] = None
        self._namespace: Optional[str] = None
        self._namespace_id: Optional[str] = None
        self._only: List[str] = []
        self._limit: Optional[int] = None

    def path(self, table: str) -> str:
        return f"{table}/crosswalk"

    def factual_id(self, factual_id: str) -> "CrosswalkQuery":
        self._factual_id = factual_id
        return self

    def namespace(self, namespace: str) -> "CrosswalkQuery":
        self._namespace = namespace
        return self

    def namespace_id(self, namespace_id: str) -> "CrosswalkQuery":
        self._namespace_id = namespace_id
        return self

    def only(self, *namespaces: str) -> "CrosswalkQuery":
        """Restrict results to links in the given namespaces."""
        self._only.extend(n for n in namespaces if n not in self._only)
        return self

    def limit(self, limit: int) -> "CrosswalkQuery":
        self._limit = non_negative("limit", limit)
        return self

    def computed_params(self) -> Dict[str, Any]:
        return {
            "factual_id": self._factual_id,
            "namespace": self._namespace,
            "namespace_id": self._namespace_id,
            "only": join_list(self._only) or None,
            "limit": self._limit,
        }
