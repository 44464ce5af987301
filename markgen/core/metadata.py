"""
Metadata model for classes selected for generation.

These objects are a frozen snapshot of what discovery found. They hold
plain strings only, so templates never touch syntax trees or symbols.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class PropertyMetadata:
    """A single exposed property of a marked class."""

    name: str
    type: str


@dataclass(frozen=True)
class ClassMetadata:
    """Represents one marked class and its properties."""

    name: str
    namespace: str = ""
    properties: Tuple[PropertyMetadata, ...] = field(default_factory=tuple)

    @property
    def qualified_name(self) -> str:
        """Dotted name of the class, or the bare name for global sources."""
        if not self.namespace:
            return self.name
        return f"{self.namespace}.{self.name}"
