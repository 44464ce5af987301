"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for code generation.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    select_autoescape,
)

from .._version import __version__
from .metadata import ClassMetadata

BUILTIN_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TEMPLATE_NAME = "class_template.py.j2"


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory of user templates, searched before the
                built-in templates
        """
        self.template_dir = Path(template_dir) if template_dir else None
        self._memory = DictLoader({})
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        loaders = [self._memory]
        if self.template_dir is not None:
            if not self.template_dir.is_dir():
                raise TemplateError(f"Template directory not found: {self.template_dir}")
            loaders.append(FileSystemLoader(str(self.template_dir)))
        loaders.append(FileSystemLoader(str(BUILTIN_TEMPLATE_DIR)))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        # Add custom filters for code generation
        self._env.filters["snake_case"] = self._snake_case_filter
        self._env.filters["camel_case"] = self._camel_case_filter
        self._env.filters["pascal_case"] = self._pascal_case_filter
        self._env.filters["indent"] = self._indent_filter
        self._env.filters["comment"] = self._comment_filter
        self._env.filters["py_literal"] = repr

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e

        try:
            return template.render(**context)
        except Exception as e:
            raise TemplateError(str(e)) from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template. In-memory templates take precedence over
        files with the same name.

        Args:
            name: Template name
            content: Template content
        """
        self._memory.mapping[name] = content

    def template_exists(self, name: str) -> bool:
        """Check if a template exists."""
        try:
            self._env.get_template(name)
        except TemplateNotFound:
            return False
        return True

    # Template filters for code generation

    def _snake_case_filter(self, value: str) -> str:
        """Convert string to snake_case."""
        # Split acronyms from words ("HTTPServer" -> "HTTP_Server")
        s1 = re.sub("([A-Z]+)([A-Z][a-z])", r"\1_\2", str(value))
        # Insert underscore before uppercase letters
        s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
        # Replace spaces and hyphens with underscores
        s3 = re.sub(r"[-\s]+", "_", s2)
        return s3.lower()

    def _camel_case_filter(self, value: str) -> str:
        """Convert string to camelCase."""
        snake = self._snake_case_filter(value)
        parts = snake.split("_")
        if not parts:
            return str(value)
        return parts[0].lower() + "".join(p.capitalize() for p in parts[1:])

    def _pascal_case_filter(self, value: str) -> str:
        """Convert string to PascalCase."""
        snake = self._snake_case_filter(value)
        parts = snake.split("_")
        return "".join(p.capitalize() for p in parts if p)

    def _indent_filter(self, value: str, spaces: int = 4) -> str:
        """Indent all lines in a string."""
        indent = " " * spaces
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else line for line in lines)

    def _comment_filter(self, value: str, style: str = "#") -> str:
        """Add comment markers to each line."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else line for line in lines)


class ClassTemplate:
    """Renders the companion source of one marked class."""

    def __init__(
        self,
        engine: Optional[TemplateEngine] = None,
        template_name: str = DEFAULT_TEMPLATE_NAME,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.engine = engine or TemplateEngine()
        self.template_name = template_name
        self.extra = dict(extra or {})

    def context(self, metadata: ClassMetadata) -> Dict[str, Any]:
        """Template variables for ``metadata``."""
        return {
            **self.extra,
            "model": metadata,
            "qualified_name": metadata.qualified_name,
            "properties": metadata.properties,
            "generator": {"name": "markgen", "version": __version__},
        }

    def render(self, metadata: ClassMetadata) -> str:
        return self.engine.render_template(self.template_name, self.context(metadata))

    __call__ = render

