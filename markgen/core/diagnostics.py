"""
Diagnostic records reported by the generator.

A diagnostic replaces an artifact when a generation step fails. Each one
carries a stable code so hosts and tests can match on it without parsing
the message text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Severity(Enum):
    """Diagnostic severities."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Location:
    """Position of a diagnostic inside a source file."""

    path: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __str__(self) -> str:
        parts = [self.path]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static description shared by every diagnostic with the same code."""

    id: str
    title: str
    message_format: str
    category: str
    severity: Severity

    def create(self, *args: Any, location: Optional[Location] = None) -> "Diagnostic":
        """Create a diagnostic, interpolating ``args`` into the message format."""
        return Diagnostic(
            code=self.id,
            severity=self.severity,
            title=self.title,
            message=self.message_format.format(*args),
            category=self.category,
            location=location,
        )


@dataclass(frozen=True)
class Diagnostic:
    """A structured failure record reported instead of an artifact."""

    code: str
    severity: Severity
    title: str
    message: str
    category: str = "markgen"
    location: Optional[Location] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        text = f"{self.severity.value} {self.code}: {self.message}"
        if self.location is not None:
            return f"{self.location}: {text}"
        return text


TEMPLATE_RENDER_FAILED = DiagnosticDescriptor(
    id="RB0001",
    title="Template rendering failed",
    message_format="Failed to render template for {0}: {1}",
    category="markgen",
    severity=Severity.ERROR,
)

SOURCE_PARSE_FAILED = DiagnosticDescriptor(
    id="RB0002",
    title="Source file could not be parsed",
    message_format="Could not parse {0}: {1}",
    category="markgen",
    severity=Severity.ERROR,
)
