"""
Discovery of marked class declarations.

The marker check is purely textual: a decorator qualifies when the name it
references is spelled exactly like the marker. Any unrelated decorator that
happens to share the marker's name qualifies as well. ``MarkerSpec.strict``
additionally requires the decorator to resolve to the marker's module or to
a package that re-exports it.
"""

import ast
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from ..logging_config import get_logger
from .compilation import SemanticModel
from .metadata import ClassMetadata, PropertyMetadata

logger = get_logger(__name__)

DEFAULT_MARKER_NAME = "GenerateCode"
DEFAULT_MARKER_MODULE = "markgen.markers"


@dataclass(frozen=True)
class MarkerSpec:
    """Which decorator marks a class for generation."""

    name: str = DEFAULT_MARKER_NAME
    module: str = DEFAULT_MARKER_MODULE
    strict: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name

    @property
    def accepted_names(self) -> Tuple[str, ...]:
        """
        Qualified names a strict match may resolve to.

        Besides the defining module, each enclosing package may re-export
        the marker, so ``markgen.markers.GenerateCode`` is also accepted as
        ``markgen.GenerateCode``.
        """
        if not self.module:
            return (self.name,)
        parts = self.module.split(".")
        return tuple(
            f"{'.'.join(parts[:depth])}.{self.name}" for depth in range(len(parts), 0, -1)
        )


DEFAULT_MARKER = MarkerSpec()


def _referenced_name(decorator: ast.expr) -> ast.expr:
    """Return the expression naming the decorator, without call arguments."""
    if isinstance(decorator, ast.Call):
        return decorator.func
    return decorator


def marker_decorators(declaration: ast.ClassDef, marker_name: str) -> Iterator[ast.expr]:
    """Yield the decorators of ``declaration`` whose name equals ``marker_name``."""
    for decorator in declaration.decorator_list:
        referenced = _referenced_name(decorator)
        if ast.unparse(referenced) == marker_name:
            yield referenced


def has_marker(declaration: ast.ClassDef, marker_name: str = DEFAULT_MARKER_NAME) -> bool:
    """Check whether a class declaration carries the marker decorator."""
    return any(True for _ in marker_decorators(declaration, marker_name))


def inspect(
    declaration: ast.ClassDef,
    semantic_model: SemanticModel,
    marker: MarkerSpec = DEFAULT_MARKER,
    include_private: bool = False,
) -> Optional[ClassMetadata]:
    """
    Project a class declaration into metadata if it is marked.

    Args:
        declaration: Class declaration node
        semantic_model: Semantic model of the tree containing the declaration
        marker: Marker to look for
        include_private: Keep properties whose names start with an underscore

    Returns:
        ClassMetadata for marked classes, None otherwise
    """
    matches = list(marker_decorators(declaration, marker.name))
    if not matches:
        return None

    if marker.strict and not any(
        semantic_model.resolve_name(match) in marker.accepted_names for match in matches
    ):
        logger.debug(
            "Class %s uses a decorator named %s that does not resolve to %s",
            declaration.name,
            marker.name,
            marker.qualified_name,
        )
        return None

    symbol = semantic_model.get_declared_symbol(declaration)
    if symbol is None:
        logger.debug(
            "Skipping %s in %s: declaration has no resolvable symbol",
            declaration.name,
            semantic_model.tree.path,
        )
        return None

    properties = tuple(
        PropertyMetadata(name=prop.name, type=prop.type)
        for prop in symbol.properties
        if include_private or not prop.name.startswith("_")
    )

    logger.debug(
        "Discovered %s.%s with %d propert%s",
        symbol.namespace,
        symbol.name,
        len(properties),
        "y" if len(properties) == 1 else "ies",
    )
    return ClassMetadata(name=symbol.name, namespace=symbol.namespace, properties=properties)


def discover(
    candidates: Iterable[Tuple[ast.ClassDef, SemanticModel]],
    marker: MarkerSpec = DEFAULT_MARKER,
    include_private: bool = False,
) -> Iterator[Optional[ClassMetadata]]:
    """Run ``inspect`` over every candidate, yielding one result per candidate."""
    for declaration, semantic_model in candidates:
        yield inspect(declaration, semantic_model, marker, include_private)
