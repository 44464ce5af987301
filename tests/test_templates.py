"""Tests for markgen.core.templates."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest
from jinja2.exceptions import UndefinedError

from markgen.core import (
    ClassMetadata,
    ClassTemplate,
    PropertyMetadata,
    TemplateEngine,
    TemplateError,
)


def test_builtin_template_renders_widget(widget) -> None:
    text = ClassTemplate().render(widget)

    assert "Generated by markgen" in text
    assert "CLASS_NAME = 'Widget'" in text
    assert "NAMESPACE = 'Shapes'" in text
    assert "    'Id': 'int',\n    'Label': 'str',\n" in text
    assert "def widget_to_dict(instance: Any) -> dict[str, Any]:" in text
    assert "        'Label': instance.Label,\n" in text
    assert text.endswith("\n")
    ast.parse(text)


def test_builtin_template_handles_class_without_properties() -> None:
    text = ClassTemplate().render(ClassMetadata("Empty", "app"))

    assert "PROPERTIES: dict[str, str] = {}\n" in text
    assert "    return {}\n" in text
    ast.parse(text)


def test_builtin_template_renders_global_namespace() -> None:
    text = ClassTemplate().render(ClassMetadata("Loose"))

    assert "NAMESPACE = ''" in text
    assert "from Loose." in text


def test_template_output_is_deterministic(widget) -> None:
    template = ClassTemplate()

    assert template.render(widget) == ClassTemplate().render(widget)


def test_type_strings_are_quoted_safely() -> None:
    tricky = ClassMetadata(
        "Choice", "app", (PropertyMetadata("kind", "typing.Literal['a', \"b\"]"),)
    )
    namespace: dict = {}

    exec(compile(ClassTemplate().render(tricky), "Choice.g.py", "exec"), namespace)

    assert namespace["PROPERTIES"] == {"kind": "typing.Literal['a', \"b\"]"}
    assert namespace["CLASS_NAME"] == "Choice"


def test_user_template_dir_overrides_builtin(tmp_path: Path, widget) -> None:
    (tmp_path / "class_template.py.j2").write_text(
        "{{ model.name }} in {{ qualified_name }} ({{ team }})\n", encoding="utf-8"
    )
    engine = TemplateEngine(tmp_path)

    text = ClassTemplate(engine, extra={"team": "core"}).render(widget)

    assert text == "Widget in Shapes.Widget (core)\n"


def test_missing_template_raises_template_error(widget) -> None:
    with pytest.raises(TemplateError, match="Template not found"):
        ClassTemplate(template_name="nope.j2").render(widget)


def test_render_error_raises_template_error(widget) -> None:
    engine = TemplateEngine()
    engine.add_template("bad.j2", "{{ model.name.missing() }}")

    with pytest.raises(TemplateError) as excinfo:
        ClassTemplate(engine, "bad.j2").render(widget)

    assert str(excinfo.value) == "'str object' has no attribute 'missing'"
    assert isinstance(excinfo.value.__cause__, UndefinedError)


def test_missing_template_dir_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(TemplateError):
        TemplateEngine(tmp_path / "absent")


def test_case_filters() -> None:
    engine = TemplateEngine()

    rendered = engine.render_string(
        "{{ v | snake_case }} {{ v | camel_case }} {{ v | pascal_case }}",
        {"v": "HTTPServerConfig"},
    )

    assert rendered == "http_server_config httpServerConfig HttpServerConfig"
    assert engine.render_string("{{ '<a>' }}", {}) == "<a>"
    assert engine.template_exists("class_template.py.j2")
    assert not engine.template_exists("absent.j2")
