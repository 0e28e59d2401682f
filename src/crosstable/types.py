"""Type aliases for crosstable package.

This module provides reusable type definitions to ensure consistency
across the codebase and improve code readability.
"""

from typing import Dict, Mapping, Sequence, Tuple

# Serialized wire parameters: name -> encoded value
Params = Dict[str, str]

# One sub-request of a multiplexed call
SubRequest = Tuple[str, Mapping[str, str]]
SubRequests = Sequence[SubRequest]
