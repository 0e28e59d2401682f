"""Query DSL module.

Exports the filter tree nodes and the pure builders used to compose them.
Wire representations are handled by the `compilers` subpackage.
"""

from .criteria import (
    AddressCircle,
    Circle,
    Criterion,
    FieldFilter,
    FilterNode,
    LogicGroup,
    Operator,
    and_,
    build_criterion,
    field,
    or_,
)

__all__ = (
    "AddressCircle",
    "Circle",
    "Criterion",
    "FieldFilter",
    "FilterNode",
    "LogicGroup",
    "Operator",
    "and_",
    "build_criterion",
    "field",
    "or_",
)
