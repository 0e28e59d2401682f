"""Filter tree nodes.

A filter tree is a sum of two node kinds:

- `Criterion`: a leaf comparing one field with one operator and a value
  (or a geo circle test, see `Criterion.geo`).
- `LogicGroup`: an `$and` / `$or` combinator over child nodes, which are
  criteria or further groups.

Nodes are immutable. The pure builders in this module (`build_criterion`,
`field`, `and_`, `or_`) never touch any query; `Query.field(...)` is the
side-effecting variant that also appends to a query's top level.

Typical usage:

- Leaf: `field("country").equal("US")`
- Nested: `or_(field("name").begins_with("Coffee"), field("name").begins_with("Star"))`
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..constants import AND, OR
from ..exceptions import InvalidQueryError


class Operator(str, Enum):
    """Comparison operators and their wire tokens."""

    EQUAL = "$eq"
    NOT_EQUAL = "$neq"
    BEGINS_WITH = "$bw"
    BEGINS_WITH_ANY = "$bwin"
    NOT_BEGINS_WITH = "$nbw"
    NOT_BEGINS_WITH_ANY = "$nbwin"
    CONTAINS = "$includes"
    NOT_CONTAINS = "$excludes"
    IN = "$in"
    NOT_IN = "$nin"
    GREATER_THAN = "$gt"
    LESS_THAN = "$lt"
    GREATER_THAN_OR_EQUAL = "$gte"
    LESS_THAN_OR_EQUAL = "$lte"
    BLANK = "$blank"
    SEARCH = "$search"
    WITHIN = "$within"

    @classmethod
    def from_token(cls, token: str) -> "Operator":
        try:
            return cls(token)
        except ValueError:
            raise InvalidQueryError("Unknown operator token", operator=token) from None


SEQUENCE_OPERATORS = frozenset(
    {Operator.IN, Operator.NOT_IN, Operator.BEGINS_WITH_ANY, Operator.NOT_BEGINS_WITH_ANY}
)

GEO_FIELD = "$geo"

# Values the service accepts inside a criterion.
JSON_SCALARS = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Circle:
    """Geo circle: center latitude/longitude plus a radius in meters."""

    latitude: float
    longitude: float
    meters: int

    def to_dict(self) -> Dict[str, Any]:
        return {"$circle": {"$center": [self.latitude, self.longitude], "$meters": self.meters}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Circle":
        try:
            circle = data["$circle"]
            lat, lng = circle["$center"]
            return cls(float(lat), float(lng), circle["$meters"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidQueryError("Malformed geo circle", geo=data) from e


@dataclass(frozen=True)
class AddressCircle:
    """Geo circle centred on a free-text address; the service geocodes the center."""

    address: str
    meters: int

    def to_dict(self) -> Dict[str, Any]:
        return {"$circle": {"$center": self.address, "$meters": self.meters}}


GeoShape = Union[Circle, AddressCircle]


def parse_geo(data: Any) -> GeoShape:
    """Rebuild a `Circle` or `AddressCircle` from its wire dict.

    Raises:
        InvalidQueryError: If `data` is not a geo circle
    """
    try:
        center = data["$circle"]["$center"]
    except (KeyError, TypeError) as e:
        raise InvalidQueryError("Malformed geo circle", geo=data) from e
    if isinstance(center, str):
        meters = data["$circle"].get("$meters")
        if not center or isinstance(meters, bool) or not isinstance(meters, int):
            raise InvalidQueryError("Malformed geo circle", geo=data)
        return AddressCircle(center, meters)
    return Circle.from_dict(data)


@dataclass(frozen=True)
class Criterion:
    """Leaf node: `field operator value`.

    Sequence values are stored as tuples so the node stays hashable and
    cannot be mutated after construction.
    """

    field: str
    operator: Operator
    value: Any = None

    @classmethod
    def geo(cls, circle: GeoShape) -> "Criterion":
        """Geo test usable inside explicit `and_` / `or_` groups.

        The remote service applies geo only through the `geo` parameter, so
        this node is accepted and serialized but has no filtering effect.
        """
        return cls(GEO_FIELD, Operator.WITHIN, circle)

    @property
    def is_geo(self) -> bool:
        return self.operator is Operator.WITHIN

    def validate(self) -> None:
        """Check operator/value arity.

        Values and sequence items must be JSON scalars (str, number, bool, None).

        Raises:
            InvalidQueryError: On an empty, scalar or nested value for a sequence
                operator, a non-scalar value for a scalar operator, or a
                non-boolean blank test.
        """
        if self.operator in SEQUENCE_OPERATORS:
            if (
                not isinstance(self.value, tuple)
                or not self.value
                or not all(isinstance(item, JSON_SCALARS) for item in self.value)
            ):
                raise InvalidQueryError(
                    "Operator requires a non-empty sequence value",
                    field=self.field,
                    operator=self.operator.value,
                    value=self.value,
                )
            return
        if self.operator is Operator.BLANK:
            if not isinstance(self.value, bool):
                raise InvalidQueryError(
                    "Blank test requires a boolean value", field=self.field, value=self.value
                )
            return
        if self.operator is Operator.WITHIN:
            if not isinstance(self.value, (Circle, AddressCircle)):
                raise InvalidQueryError("Geo test requires a circle", field=self.field, value=self.value)
            return
        if not isinstance(self.value, JSON_SCALARS):
            raise InvalidQueryError(
                "Operator requires a scalar value",
                field=self.field,
                operator=self.operator.value,
                value=self.value,
            )


@dataclass(frozen=True)
class LogicGroup:
    """Boolean combinator over child nodes; `combinator` is `$and` or `$or`."""

    combinator: str
    children: Tuple["FilterNode", ...] = ()

    def __post_init__(self) -> None:
        if self.combinator not in (AND, OR):
            raise InvalidQueryError("Unknown combinator", combinator=self.combinator)


FilterNode = Union[Criterion, LogicGroup]
NodeLike = Union[Criterion, LogicGroup, Circle, AddressCircle]


def _is_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, dict))


def _freeze(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        # sets have no order; sort so the wire form is stable
        try:
            return tuple(sorted(value))
        except TypeError:
            raise InvalidQueryError("Set values must be mutually comparable", value=value) from None
    if _is_collection(value):
        return tuple(value)
    return value


def as_node(node: NodeLike) -> FilterNode:
    if isinstance(node, (Circle, AddressCircle)):
        return Criterion.geo(node)
    if isinstance(node, (Criterion, LogicGroup)):
        return node
    raise InvalidQueryError("Not a filter node", node=node)


def build_criterion(field_name: str, operator: Union[Operator, str], value: Any = None) -> Criterion:
    """Create a detached criterion (no side effects)."""
    if not isinstance(operator, Operator):
        operator = Operator.from_token(operator)
    return Criterion(field_name, operator, _freeze(value))


def and_(*nodes: NodeLike) -> LogicGroup:
    """Return an `$and` group over `nodes`, preserving their order."""
    return LogicGroup(AND, tuple(as_node(n) for n in nodes))


def or_(*nodes: NodeLike) -> LogicGroup:
    """Return an `$or` group over `nodes`, preserving their order."""
    return LogicGroup(OR, tuple(as_node(n) for n in nodes))


def _values(values: Tuple[Any, ...]) -> Tuple[Any, ...]:
    # in_("CA", "NM"), in_(["CA", "NM"]) and in_({"CA", "NM"}) are equivalent
    if len(values) == 1 and _is_collection(values[0]):
        return _freeze(values[0])
    return tuple(values)


class FieldFilter:
    """Per-field operator helper.

    Every operator method builds a `Criterion` with `build_criterion`. When
    the helper is bound to a query (`Query.field`), the criterion is also
    handed to the query's top-level append hook. Unbound helpers
    (`field(...)`) only build.
    """

    def __init__(self, name: str, sink: Optional[Callable[[Criterion], Any]] = None) -> None:
        self.name = name
        self._sink = sink

    def _emit(self, operator: Operator, value: Any) -> Criterion:
        node = build_criterion(self.name, operator, value)
        if self._sink is not None:
            self._sink(node)
        return node

    def equal(self, value: Any) -> Criterion:
        return self._emit(Operator.EQUAL, value)

    def not_equal(self, value: Any) -> Criterion:
        return self._emit(Operator.NOT_EQUAL, value)

    def begins_with(self, prefix: str) -> Criterion:
        return self._emit(Operator.BEGINS_WITH, prefix)

    def begins_with_any(self, *prefixes: str) -> Criterion:
        return self._emit(Operator.BEGINS_WITH_ANY, _values(prefixes))

    def not_begins_with(self, prefix: str) -> Criterion:
        return self._emit(Operator.NOT_BEGINS_WITH, prefix)

    def not_begins_with_any(self, *prefixes: str) -> Criterion:
        return self._emit(Operator.NOT_BEGINS_WITH_ANY, _values(prefixes))

    def contains(self, value: Any) -> Criterion:
        return self._emit(Operator.CONTAINS, value)

    def not_contains(self, value: Any) -> Criterion:
        return self._emit(Operator.NOT_CONTAINS, value)

    def in_(self, *values: Any) -> Criterion:
        return self._emit(Operator.IN, _values(values))

    def not_in(self, *values: Any) -> Criterion:
        return self._emit(Operator.NOT_IN, _values(values))

    def greater_than(self, value: Any) -> Criterion:
        return self._emit(Operator.GREATER_THAN, value)

    def less_than(self, value: Any) -> Criterion:
        return self._emit(Operator.LESS_THAN, value)

    def greater_than_or_equal(self, value: Any) -> Criterion:
        return self._emit(Operator.GREATER_THAN_OR_EQUAL, value)

    def less_than_or_equal(self, value: Any) -> Criterion:
        return self._emit(Operator.LESS_THAN_OR_EQUAL, value)

    def is_blank(self) -> Criterion:
        return self._emit(Operator.BLANK, True)

    def is_not_blank(self) -> Criterion:
        return self._emit(Operator.BLANK, False)

    def search(self, term: str) -> Criterion:
        return self._emit(Operator.SEARCH, term)

    def __repr__(self) -> str:
        return f"<FieldFilter: {self.name}>"


def field(name: str) -> FieldFilter:
    """Return an unbound field helper whose operators build detached criteria."""
    return FieldFilter(name)
