"""
Turns collected class metadata into generated sources.

Every item is rendered independently. A renderer failure produces a
diagnostic for that item only and never stops the rest of the pass.
"""

import hashlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ..logging_config import get_logger
from .diagnostics import TEMPLATE_RENDER_FAILED, Diagnostic
from .metadata import ClassMetadata

logger = get_logger(__name__)

Renderer = Callable[[ClassMetadata], str]

SOURCE_ENCODING = "utf-8"
CHECKSUM_ALGORITHM = "sha256"


@dataclass(frozen=True)
class GeneratedSource:
    """A generated file: its name, text and content hash."""

    hint_name: str
    text: str
    encoding: str = SOURCE_ENCODING
    checksum_algorithm: str = CHECKSUM_ALGORITHM

    @property
    def content(self) -> bytes:
        return self.text.encode(self.encoding)

    @property
    def checksum(self) -> str:
        return hashlib.new(self.checksum_algorithm, self.content).hexdigest()


class EmitResult:
    """Outcome of emitting a single class: a source or a diagnostic."""

    def __init__(
        self,
        metadata: ClassMetadata,
        source: Optional[GeneratedSource] = None,
        diagnostic: Optional[Diagnostic] = None,
    ):
        if (source is None) == (diagnostic is None):
            raise ValueError("EmitResult needs exactly one of source or diagnostic")
        self.metadata = metadata
        self.source = source
        self.diagnostic = diagnostic

    @property
    def success(self) -> bool:
        return self.source is not None

    @classmethod
    def error(cls, metadata: ClassMetadata, exception: Exception) -> "EmitResult":
        """Create a failed result for ``metadata``."""
        diagnostic = TEMPLATE_RENDER_FAILED.create(metadata.name, str(exception))
        return cls(metadata, diagnostic=diagnostic)

    def __repr__(self) -> str:
        outcome = self.source.hint_name if self.source else self.diagnostic.code
        return f"EmitResult({self.metadata.name!r}, {outcome!r})"


def hint_name_for(metadata: ClassMetadata, suffix: str = ".g", extension: str = ".py") -> str:
    """Name of the generated file for ``metadata``."""
    return f"{metadata.name}{suffix}{extension}"


class Emitter:
    """Renders metadata items into generated sources."""

    def __init__(
        self,
        renderer: Renderer,
        generated_suffix: str = ".g",
        file_extension: str = ".py",
        workers: int = 1,
    ):
        self.renderer = renderer
        self.generated_suffix = generated_suffix
        self.file_extension = file_extension
        self.workers = workers

    def emit(self, metadata: ClassMetadata) -> EmitResult:
        """Render one item. Never raises for renderer failures."""
        try:
            text = self.renderer(metadata)
            if not isinstance(text, str):
                raise TypeError(f"renderer returned {type(text).__name__}, expected str")
            text.encode(SOURCE_ENCODING)
        except Exception as e:
            logger.error("Failed to render template for %s: %s", metadata.name, e)
            return EmitResult.error(metadata, e)

        source = GeneratedSource(
            hint_name=hint_name_for(metadata, self.generated_suffix, self.file_extension),
            text=text,
        )
        logger.debug("Emitted %s (%s)", source.hint_name, source.checksum[:12])
        return EmitResult(metadata, source=source)

    def emit_all(self, items: Iterable[ClassMetadata]) -> List[EmitResult]:
        """Emit every item, returning results in input order."""
        items = list(items)
        if not items:
            return []

        if self.workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                return list(pool.map(self.emit, items))

        return [self.emit(item) for item in items]
