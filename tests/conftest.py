from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

from markgen.core import ClassMetadata, Compilation, PropertyMetadata


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write dedented source files under tmp_path and return the root."""

    def _write(files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            target = tmp_path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def compile_sources() -> Callable[..., Compilation]:
    """Build an in-memory compilation from module name -> dedented source."""

    def _compile(**sources: str) -> Compilation:
        return Compilation.from_sources(
            {name.replace("__", "."): textwrap.dedent(text) for name, text in sources.items()}
        )

    return _compile


@pytest.fixture
def widget() -> ClassMetadata:
    return ClassMetadata(
        name="Widget",
        namespace="Shapes",
        properties=(PropertyMetadata("Id", "int"), PropertyMetadata("Label", "str")),
    )
