"""
Core code generation components.

Discovery, collection and emission of companion sources, plus the
compilation model, templates and configuration they run on.
"""

from .metadata import ClassMetadata, PropertyMetadata
from .diagnostics import (
    Diagnostic,
    DiagnosticDescriptor,
    Location,
    Severity,
    SOURCE_PARSE_FAILED,
    TEMPLATE_RENDER_FAILED,
)
from .compilation import (
    ClassSymbol,
    Compilation,
    PropertySymbol,
    SemanticModel,
    SourceFile,
    SyntaxTree,
)
from .discovery import MarkerSpec, discover, has_marker, inspect
from .collector import collect
from .templates import ClassTemplate, TemplateEngine, TemplateError
from .emitter import EmitResult, Emitter, GeneratedSource, hint_name_for
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .generator import (
    GeneratorError,
    GeneratorRunResult,
    SourceGenerator,
    generate_from_paths,
    write_sources,
)

__all__ = [
    # Metadata model
    "ClassMetadata",
    "PropertyMetadata",
    # Diagnostics
    "Diagnostic",
    "DiagnosticDescriptor",
    "Location",
    "Severity",
    "SOURCE_PARSE_FAILED",
    "TEMPLATE_RENDER_FAILED",
    # Compilation model
    "ClassSymbol",
    "Compilation",
    "PropertySymbol",
    "SemanticModel",
    "SourceFile",
    "SyntaxTree",
    # Pipeline stages
    "MarkerSpec",
    "discover",
    "has_marker",
    "inspect",
    "collect",
    "EmitResult",
    "Emitter",
    "GeneratedSource",
    "hint_name_for",
    # Template system
    "ClassTemplate",
    "TemplateEngine",
    "TemplateError",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Driver
    "GeneratorError",
    "GeneratorRunResult",
    "SourceGenerator",
    "generate_from_paths",
    "write_sources",
]
