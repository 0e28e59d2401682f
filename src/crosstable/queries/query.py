"""Row read query builder.

`Query` accumulates one read request: the implicit top-level AND filter list,
geo circle, sort, paging, full-text search, field selection and the row-count
flag. Every mutator is fluent except the explicit combinators, which return
the group they append.

Typical usage:

    q = Query().field("country").equal("US")   # returns the Criterion
    q = Query().limit(5).offset(20).search("Fried Chicken")

    q = Query()
    q.field("region").in_("CA", "NM", "FL")
    q.or_(q.field("name").begins_with("Coffee"), q.field("name").begins_with("Star"))
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..constants import AND, WireParam
from ..exceptions import InvalidQueryError
from ..querydsl.compilers import filter_compiler
from ..querydsl.compilers.utils import join_list
from ..querydsl.criteria import (
    AddressCircle,
    Circle,
    Criterion,
    FieldFilter,
    FilterNode,
    GeoShape,
    LogicGroup,
    NodeLike,
    as_node,
    and_,
    or_,
    parse_geo,
)
from ..schema import ResponseShape
from ..utils import load_int, load_json, non_negative
from .base import BaseQuery

ASC = "asc"
DESC = "desc"


class Query(BaseQuery):
    """Fluent builder for table reads."""

    shape = ResponseShape.READ

    def __init__(self) -> None:
        super().__init__()
        self._filters: List[FilterNode] = []
        self._geo: Optional[GeoShape] = None
        self._sort: List[Tuple[str, str]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._search: Optional[str] = None
        self._select: List[str] = []
        self._include_count = False

    def path(self, table: str) -> str:
        return f"t/{table}"

    # -------------------
    # Filters
    # -------------------
    def field(self, name: str) -> FieldFilter:
        """Field helper whose operators append the built criterion to the top level."""
        return FieldFilter(name, sink=self.append_to_top_level)

    def append_to_top_level(self, node: NodeLike) -> "Query":
        self._filters.append(as_node(node))
        return self

    def and_(self, *nodes: Union[NodeLike, "Query"]) -> LogicGroup:
        """Append an explicit `$and` group over `nodes` and return it.

        Nodes already auto-appended to the top level (via `field(...)`) are
        moved into the group rather than duplicated. A query argument, such
        as the result of `q.within(circle)`, stands for its geo circle.
        """
        return self._combine(and_, nodes)

    def or_(self, *nodes: Union[NodeLike, "Query"]) -> LogicGroup:
        """Append an explicit `$or` group over `nodes` and return it."""
        return self._combine(or_, nodes)

    def _combine(
        self, factory: Callable[..., LogicGroup], nodes: Tuple[Union[NodeLike, "Query"], ...]
    ) -> LogicGroup:
        # the group is fully built before the top level is touched
        group = factory(*[self._geo_node(n) if isinstance(n, Query) else n for n in nodes])
        for child in group.children:
            self._detach(child)
        self._filters.append(group)
        return group

    @staticmethod
    def _geo_node(query: "Query") -> Criterion:
        if query.geo is None:
            raise InvalidQueryError("Query used as a filter node has no geo circle")
        return Criterion.geo(query.geo)

    def _detach(self, node: FilterNode) -> None:
        for i, existing in enumerate(self._filters):
            if existing is node:
                del self._filters[i]
                return

    @property
    def filters(self) -> Tuple[FilterNode, ...]:
        return tuple(self._filters)

    def filter_tree(self) -> Optional[LogicGroup]:
        """The top level as one `$and` group, or None when there are no filters.

        A top level holding a single `$and` group is that group itself.
        """
        if not self._filters:
            return None
        if len(self._filters) == 1 and isinstance(self._filters[0], LogicGroup):
            if self._filters[0].combinator == AND:
                return self._filters[0]
        return LogicGroup(AND, tuple(self._filters))

    # -------------------
    # Other parameters
    # -------------------
    def within(self, circle: Circle) -> "Query":
        """Restrict rows to a circle; replaces any earlier `within` or `near`."""
        self._geo = circle
        return self

    def near(self, address: str, meters: int) -> "Query":
        """Restrict rows to `meters` around a street address geocoded by the service.

        Replaces any earlier `within` or `near`.
        """
        if not isinstance(address, str) or not address.strip():
            raise InvalidQueryError("near requires a non-empty address", address=address)
        self._geo = AddressCircle(address, non_negative("meters", meters))
        return self

    def sort_asc(self, field_name: str) -> "Query":
        self._sort.append((field_name, ASC))
        return self

    def sort_desc(self, field_name: str) -> "Query":
        self._sort.append((field_name, DESC))
        return self

    def limit(self, limit: int) -> "Query":
        self._limit = non_negative("limit", limit)
        return self

    def offset(self, offset: int) -> "Query":
        self._offset = non_negative("offset", offset)
        return self

    def search(self, term: str) -> "Query":
        """Full-text search; the service decides how space/comma separated terms match."""
        self._search = term
        return self

    def only(self, *fields: str) -> "Query":
        """Restrict returned fields; no fields means all fields."""
        for name in fields:
            if name not in self._select:
                self._select.append(name)
        return self

    def include_row_count(self, include: bool = True) -> "Query":
        self._include_count = include
        return self

    @property
    def select_fields(self) -> Tuple[str, ...]:
        return tuple(self._select)

    @property
    def geo(self) -> Optional[GeoShape]:
        return self._geo

    @property
    def sort(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(self._sort)

    def computed_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            WireParam.FILTERS: filter_compiler.to_wire(self._filters),
            WireParam.GEO: self._geo.to_dict() if self._geo else None,
            WireParam.SORT: ",".join(f"{f}:{d}" for f, d in self._sort) or None,
            WireParam.LIMIT: self._limit,
            WireParam.OFFSET: self._offset,
            WireParam.SEARCH: self._search,
            WireParam.SELECT: join_list(self._select) or None,
            WireParam.INCLUDE_COUNT: True if self._include_count else None,
        }
        return params

    # -------------------
    # Rebuilding from wire parameters
    # -------------------
    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "Query":
        """Rebuild a query from its wire parameters.

        Parameters the builder does not model are kept as raw overrides.

        Raises:
            InvalidQueryError: If a modelled parameter cannot be parsed
        """
        query = cls()
        for name, value in params.items():
            if name == WireParam.FILTERS:
                for node in filter_compiler.from_wire(load_json(name, value)):
                    query.append_to_top_level(node)
            elif name == WireParam.GEO:
                query._geo = parse_geo(load_json(name, value))
            elif name == WireParam.SORT:
                for entry in str(value).split(","):
                    field_name, _, direction = entry.rpartition(":")
                    if direction not in (ASC, DESC) or not field_name:
                        raise InvalidQueryError("Malformed sort", sort=value)
                    query._sort.append((field_name, direction))
            elif name == WireParam.LIMIT:
                query.limit(load_int(name, value))
            elif name == WireParam.OFFSET:
                query.offset(load_int(name, value))
            elif name == WireParam.SEARCH:
                query.search(value)
            elif name == WireParam.SELECT:
                query.only(*[f for f in str(value).split(",") if f])
            elif name == WireParam.INCLUDE_COUNT:
                query.include_row_count(str(value).lower() == "true")
            else:
                query.overrides[name] = value
        return query

    def _state(self) -> Tuple[Any, ...]:
        return (
            self.filter_tree(),
            self._geo,
            tuple(self._sort),
            self._limit,
            self._offset,
            self._search,
            tuple(self._select),
            self._include_count,
            tuple(sorted(self.overrides.items())),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query) or type(other) is not type(self):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None  # type: ignore[assignment]
