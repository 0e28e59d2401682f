"""Query builders for every request type the client can send."""

from .base import BaseQuery
from .crosswalk import CrosswalkQuery
from .diffs import Diffs
from .facet import Facet
from .query import Query
from .raw import RawQuery
from .resolve import ResolveQuery
from .write import Flag, Metadata, Suggest, WriteQuery

__all__ = (
    "BaseQuery",
    "CrosswalkQuery",
    "Diffs",
    "Facet",
    "Flag",
    "Metadata",
    "Query",
    "RawQuery",
    "ResolveQuery",
    "Suggest",
    "WriteQuery",
)
