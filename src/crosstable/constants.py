"""
Wire-level constants shared by the serializer, transport and decoder.
"""


class WireParam:
    FILTERS = "filters"
    GEO = "geo"
    SORT = "sort"
    LIMIT = "limit"
    OFFSET = "offset"
    SEARCH = "q"
    SELECT = "select"
    INCLUDE_COUNT = "include_count"
    VALUES = "values"


AND = "$and"
OR = "$or"

STATUS_OK = "ok"

# Compact separators keep serialized values byte-stable.
JSON_SEPARATORS = (",", ":")

MULTI_QUERY_PREFIX = "q"
MULTI_QUERIES_PARAM = "queries"
