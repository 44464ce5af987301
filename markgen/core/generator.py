"""
Source generator driver.

Runs one generation pass over a compilation: discovery of marked classes,
collection, then emission of one source (or one diagnostic) per class.
"""

import hashlib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..logging_config import get_logger
from .collector import collect
from .compilation import Compilation
from .config import GeneratorConfig, load_config
from .diagnostics import Diagnostic
from .discovery import discover
from .emitter import Emitter, GeneratedSource, Renderer
from .metadata import ClassMetadata
from .templates import ClassTemplate, TemplateEngine

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class GeneratorRunResult:
    """Container for the outcome of one generation pass."""

    def __init__(
        self,
        sources: List[GeneratedSource] = None,
        diagnostics: List[Diagnostic] = None,
        discovered: List[ClassMetadata] = None,
    ):
        """
        Initialize run result.

        Args:
            sources: Generated sources, in discovery order
            diagnostics: Compilation diagnostics followed by emission diagnostics
            discovered: Metadata of every marked class found in the pass
        """
        self.sources = sources or []
        self.diagnostics = diagnostics or []
        self.discovered = discovered or []

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    @property
    def metadata(self) -> Dict[str, Any]:
        """Summary counts for reporting."""
        return {
            "classes_discovered": len(self.discovered),
            "sources_generated": len(self.sources),
            "diagnostics": len(self.diagnostics),
            "errors": sum(1 for d in self.diagnostics if d.is_error),
        }

    def get_source(self, hint_name: str) -> Optional[GeneratedSource]:
        """Get a generated source by its hint name."""
        for source in self.sources:
            if source.hint_name == hint_name:
                return source
        return None


class SourceGenerator:
    """Generates one companion source per marked class of a compilation."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        renderer: Optional[Renderer] = None,
    ):
        """
        Initialize generator.

        Args:
            config: Generator configuration (defaults when omitted)
            renderer: Callable turning ClassMetadata into text. Defaults to
                the configured Jinja2 class template.
        """
        self.config = config or GeneratorConfig()
        self.renderer = renderer or self._create_renderer()
        self.emitter = Emitter(
            self.renderer,
            generated_suffix=self.config.generated_suffix,
            file_extension=self.config.file_extension,
            workers=self.config.workers,
        )

    def _create_renderer(self) -> Renderer:
        template_dir = Path(self.config.template_dir) if self.config.template_dir else None
        engine = TemplateEngine(template_dir)
        return ClassTemplate(engine, self.config.template_name, extra=self.config.custom)

    def discover(self, compilation: Compilation) -> List[ClassMetadata]:
        """Collect metadata for every marked class in ``compilation``."""
        return collect(
            discover(
                compilation.class_declarations(),
                marker=self.config.marker,
                include_private=self.config.include_private,
            )
        )

    def run(self, compilation: Compilation) -> GeneratorRunResult:
        """
        Run one generation pass.

        Args:
            compilation: Parsed sources to generate from

        Returns:
            GeneratorRunResult with generated sources and diagnostics
        """
        discovered = self.discover(compilation)
        diagnostics = list(compilation.diagnostics)

        if not discovered:
            logger.info("No classes marked with %s", self.config.marker_name)
            return GeneratorRunResult(diagnostics=diagnostics)

        sources = []
        for result in self.emitter.emit_all(discovered):
            if result.success:
                sources.append(result.source)
            else:
                diagnostics.append(result.diagnostic)

        logger.info(
            "Generated %d source(s) for %d marked class(es)", len(sources), len(discovered)
        )
        return GeneratorRunResult(sources, diagnostics, discovered)

    def run_paths(self, paths: Iterable[Union[str, Path]]) -> GeneratorRunResult:
        """Build a compilation from ``paths`` and run one pass over it."""
        compilation = Compilation.from_paths(
            paths,
            exclude=self.config.exclude,
            generated_pattern=self.config.generated_pattern,
        )
        return self.run(compilation)


def _file_checksum(path: Path, algorithm: str) -> Optional[str]:
    try:
        return hashlib.new(algorithm, path.read_bytes()).hexdigest()
    except OSError:
        return None


def write_sources(
    sources: Iterable[GeneratedSource], output_dir: Union[str, Path]
) -> List[Path]:
    """
    Write generated sources to ``output_dir``.

    Files whose content already matches the source checksum are left
    untouched.

    Returns:
        Paths that were written
    """
    output_path = Path(output_dir)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GeneratorError(f"Cannot create output directory {output_path}: {e}") from e

    written = []
    for source in sources:
        target = output_path / source.hint_name
        if target.exists() and _file_checksum(target, source.checksum_algorithm) == source.checksum:
            logger.debug("Unchanged: %s", target)
            continue
        try:
            target.write_bytes(source.content)
        except OSError as e:
            raise GeneratorError(f"Failed to write {target}: {e}") from e
        logger.info("Wrote %s", target)
        written.append(target)

    return written


def generate_from_paths(
    paths: Iterable[Union[str, Path]],
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
) -> GeneratorRunResult:
    """
    Generate companion sources for the marked classes under ``paths``.

    Args:
        paths: Python files or directories
        output_dir: Where to write sources; falls back to ``config.output_dir``.
            Nothing is written when both are unset.
        config: Configuration as GeneratorConfig, dict, or JSON file path

    Returns:
        GeneratorRunResult for the pass
    """
    if isinstance(config, GeneratorConfig):
        final_config = config
    elif isinstance(config, (str, Path)):
        final_config = load_config(config_file=config)
    elif isinstance(config, dict):
        final_config = load_config(custom_config=config)
    elif config is None:
        final_config = load_config()
    else:
        raise GeneratorError(f"Invalid config type: {type(config)}")

    result = SourceGenerator(final_config).run_paths(paths)

    target = output_dir or final_config.output_dir
    if target:
        write_sources(result.sources, target)

    return result
