"""Base compiler interface.

Defines the contract for compilers that translate between in-memory query
state and the wire format.
"""

from abc import ABC, abstractmethod
from typing import Any

__all__ = ("BaseCompiler",)


class BaseCompiler(ABC):
    """Abstract base class for wire compilers.

    Subclasses implement `to_wire` to produce the wire representation and
    `from_wire` to rebuild the in-memory form from it.
    """

    @abstractmethod
    def to_wire(self, state: Any) -> Any:
        """Convert in-memory state into its wire representation."""
        raise NotImplementedError

    @abstractmethod
    def from_wire(self, data: Any) -> Any:
        """Rebuild in-memory state from its wire representation."""
        raise NotImplementedError
