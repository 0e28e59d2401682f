"""Filter tree compiler.

Transforms the top-level node list of a query into the `filters` wire object
and back.

Wire rules:
- A criterion becomes `{field: {operator: value}}`.
- A group becomes `{"$and": [...]}` / `{"$or": [...]}`; nesting is kept as built.
- Several top-level criteria on distinct fields flatten into one object.
- Anything else at the top level (a group, a geo test, a repeated field) is
  wrapped in one implicit `{"$and": [...]}` list.
"""

from typing import Any, Dict, List, Optional, Sequence

from crosstable.constants import AND, OR
from crosstable.exceptions import InvalidQueryError

from ..criteria import GEO_FIELD, Criterion, FilterNode, LogicGroup, Operator, build_criterion, parse_geo
from .base import BaseCompiler

__all__ = (
    "FilterCompiler",
    "filter_compiler",
)


class FilterCompiler(BaseCompiler):
    """Compile filter nodes to wire dicts and parse wire dicts back into nodes."""

    def to_wire(self, nodes: Sequence[FilterNode]) -> Optional[Dict[str, Any]]:
        """Compile the implicit top-level AND list.

        Returns:
            The wire object, or None when there are no nodes.

        Raises:
            InvalidQueryError: On an empty group or operator/value arity mismatch
        """
        if not nodes:
            return None
        if len(nodes) == 1:
            return self.compile_node(nodes[0])
        if self._can_flatten(nodes):
            flat: Dict[str, Any] = {}
            for node in nodes:
                flat.update(self.compile_node(node))
            return flat
        return {AND: [self.compile_node(n) for n in nodes]}

    def compile_node(self, node: FilterNode) -> Dict[str, Any]:
        """Recursively compile one node."""
        if isinstance(node, Criterion):
            node.validate()
            if node.is_geo:
                return {GEO_FIELD: node.value.to_dict()}
            value = list(node.value) if isinstance(node.value, tuple) else node.value
            return {node.field: {node.operator.value: value}}
        if isinstance(node, LogicGroup):
            if not node.children:
                raise InvalidQueryError("Logic group has no children", combinator=node.combinator)
            return {node.combinator: [self.compile_node(c) for c in node.children]}
        raise InvalidQueryError("Not a filter node", node=node)

    @staticmethod
    def _can_flatten(nodes: Sequence[FilterNode]) -> bool:
        seen = set()
        for node in nodes:
            if not isinstance(node, Criterion) or node.is_geo or node.field in seen:
                return False
            seen.add(node.field)
        return True

    # -------------------
    # Parsing
    # -------------------
    def from_wire(self, data: Any) -> List[FilterNode]:
        """Parse a `filters` wire object into a top-level node list.

        A top-level object whose only key is `$and` is the implicit AND list
        and is unwrapped into its elements.
        """
        if data is None:
            return []
        if not isinstance(data, dict):
            raise InvalidQueryError("Filters must be a JSON object", filters=data)
        if list(data.keys()) == [AND]:
            return [self.parse_node(item) for item in self._children(AND, data[AND])]
        return self._parse_entries(data)

    def parse_node(self, data: Any) -> FilterNode:
        """Parse one element of a group's child list."""
        if not isinstance(data, dict) or not data:
            raise InvalidQueryError("Filter node must be a non-empty JSON object", node=data)
        nodes = self._parse_entries(data)
        if len(nodes) == 1:
            return nodes[0]
        # Several keys in one element are an implicit AND.
        return LogicGroup(AND, tuple(nodes))

    def _parse_entries(self, data: Dict[str, Any]) -> List[FilterNode]:
        nodes: List[FilterNode] = []
        for key, expr in data.items():
            if key in (AND, OR):
                children = tuple(self.parse_node(c) for c in self._children(key, expr))
                nodes.append(LogicGroup(key, children))
            elif key == GEO_FIELD:
                nodes.append(Criterion.geo(parse_geo(expr)))
            else:
                if not isinstance(expr, dict) or not expr:
                    raise InvalidQueryError("Field filter must map operators to values", field=key, expr=expr)
                for token, value in expr.items():
                    nodes.append(build_criterion(key, Operator.from_token(token), value))
        return nodes

    @staticmethod
    def _children(key: str, value: Any) -> List[Any]:
        if not isinstance(value, list):
            raise InvalidQueryError("Combinator requires a list of nodes", combinator=key, value=value)
        return value


filter_compiler = FilterCompiler()
