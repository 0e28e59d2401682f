"""
This __init__.py file makes the crosstable directory a Python package
and exposes the client, query builders and filter DSL for easy access.
"""

from .batch import MultiResponse, RequestHandle, RequestQueue
from .client import Client
from .exceptions import ApiError, CrossTableError, DecodeError, InvalidQueryError, TransportError
from .queries import CrosswalkQuery, Diffs, Facet, Flag, Metadata, Query, RawQuery, ResolveQuery, Suggest
from .querydsl import AddressCircle, Circle, Criterion, LogicGroup, Operator, and_, field, or_
from .types import Params

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Query",
    "Facet",
    "CrosswalkQuery",
    "ResolveQuery",
    "Diffs",
    "Suggest",
    "Flag",
    "Metadata",
    "RawQuery",
    "Circle",
    "AddressCircle",
    "Criterion",
    "LogicGroup",
    "Operator",
    "and_",
    "or_",
    "field",
    "MultiResponse",
    "RequestHandle",
    "RequestQueue",
    "CrossTableError",
    "InvalidQueryError",
    "TransportError",
    "ApiError",
    "DecodeError",
    "Params",
]
