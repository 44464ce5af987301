"""
markgen

Generates a companion source file for every class marked with the
``GenerateCode`` decorator.
"""

from ._version import __version__
from .markers import GenerateCode
from .core import (
    ClassMetadata,
    PropertyMetadata,
    Compilation,
    Diagnostic,
    GeneratedSource,
    GeneratorConfig,
    GeneratorRunResult,
    SourceGenerator,
    generate_from_paths,
    load_config,
    write_sources,
)

__all__ = [
    "__version__",
    "GenerateCode",
    "ClassMetadata",
    "PropertyMetadata",
    "Compilation",
    "Diagnostic",
    "GeneratedSource",
    "GeneratorConfig",
    "GeneratorRunResult",
    "SourceGenerator",
    "generate_from_paths",
    "load_config",
    "write_sources",
]
