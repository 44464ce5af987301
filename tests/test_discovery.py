"""Tests for markgen.core.discovery and markgen.core.collector."""

from __future__ import annotations

import ast

import pytest

from markgen.core import (
    ClassMetadata,
    MarkerSpec,
    PropertyMetadata,
    collect,
    discover,
    has_marker,
    inspect,
)


def _inspect_all(compilation, **kwargs):
    return list(discover(compilation.class_declarations(), **kwargs))


def test_classes_without_marker_produce_nothing(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        from dataclasses import dataclass

        @dataclass
        class Plain:
            value: int

        class Bare:
            value: int
        """
    )

    assert _inspect_all(compilation) == [None, None]


def test_marked_class_is_projected_to_metadata(compile_sources) -> None:
    compilation = compile_sources(
        Shapes="""
        from markgen import GenerateCode

        @GenerateCode
        class Widget:
            Id: int
            Label: str
        """
    )

    (metadata,) = _inspect_all(compilation)

    assert metadata == ClassMetadata(
        name="Widget",
        namespace="Shapes",
        properties=(PropertyMetadata("Id", "int"), PropertyMetadata("Label", "str")),
    )
    assert metadata.qualified_name == "Shapes.Widget"


def test_call_form_of_marker_qualifies(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        @GenerateCode(ignored=True)
        class Widget:
            pass
        """
    )

    (metadata,) = _inspect_all(compilation)

    assert metadata is not None
    assert metadata.properties == ()


def test_attribute_access_spelling_does_not_match_bare_marker(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        import markgen

        @markgen.GenerateCode
        class Widget:
            pass
        """
    )

    assert _inspect_all(compilation) == [None]
    assert _inspect_all(compilation, marker=MarkerSpec(name="markgen.GenerateCode")) != [None]


def test_unrelated_decorator_with_marker_name_qualifies(compile_sources) -> None:
    # Known sharp edge: matching is textual, so a same-named decorator from
    # another module still marks the class.
    compilation = compile_sources(
        app="""
        from other.library import GenerateCode

        @GenerateCode
        class Impostor:
            value: int
        """
    )

    (metadata,) = _inspect_all(compilation)

    assert metadata is not None
    assert metadata.name == "Impostor"


def test_strict_marker_rejects_unrelated_decorator(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        from other.library import GenerateCode as OtherGenerate
        from markgen.markers import GenerateCode

        @OtherGenerate
        class NotMarked:
            pass

        @GenerateCode
        class Marked:
            pass
        """
    )
    strict = MarkerSpec(strict=True)

    results = _inspect_all(compilation, marker=strict)

    assert [r.name if r else None for r in results] == [None, "Marked"]

    impostor = compile_sources(
        app="""
        from other.library import GenerateCode

        @GenerateCode
        class Impostor:
            pass
        """
    )
    assert _inspect_all(impostor, marker=strict) == [None]


def test_strict_marker_accepts_package_reexport(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        from markgen import GenerateCode

        @GenerateCode
        class Widget:
            x: int
        """
    )

    (metadata,) = _inspect_all(compilation, marker=MarkerSpec(strict=True))

    assert metadata is not None
    assert metadata.name == "Widget"
    assert MarkerSpec().accepted_names == ("markgen.markers.GenerateCode", "markgen.GenerateCode")


def test_strict_marker_accepts_marker_defined_in_same_module(compile_sources) -> None:
    compilation = compile_sources(
        project__markers="""
        def Entity(cls):
            return cls

        @Entity
        class User:
            pass
        """
    )

    (metadata,) = _inspect_all(
        compilation, marker=MarkerSpec(name="Entity", module="project.markers", strict=True)
    )

    assert metadata is not None
    assert metadata.name == "User"


def test_unresolvable_class_is_skipped_silently(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        def factory():
            @GenerateCode
            class Local:
                value: int
            return Local
        """
    )

    assert _inspect_all(compilation) == [None]


def test_private_properties_are_excluded_unless_requested(compile_sources) -> None:
    compilation = compile_sources(
        app="""
        @GenerateCode
        class Account:
            owner: str
            _secret: str
        """
    )

    (public,) = _inspect_all(compilation)
    (everything,) = _inspect_all(compilation, include_private=True)

    assert [p.name for p in public.properties] == ["owner"]
    assert [p.name for p in everything.properties] == ["owner", "_secret"]


def test_property_order_is_stable_across_passes(compile_sources) -> None:
    source = """
    @GenerateCode
    class Wide:
        zeta: int
        alpha: str
        mid: float

        @property
        def beta(self) -> bool:
            return True
    """

    first = _inspect_all(compile_sources(app=source))
    second = _inspect_all(compile_sources(app=source))

    assert first == second
    assert [p.name for p in first[0].properties] == ["zeta", "alpha", "mid", "beta"]


def test_has_marker_checks_decorators_only() -> None:
    marked, unmarked, base = ast.parse(
        "@GenerateCode\nclass A: pass\n"
        "@other\nclass B: pass\n"
        "class C(GenerateCode): pass\n"
    ).body

    assert has_marker(marked)
    assert not has_marker(unmarked)
    assert not has_marker(base)
    assert has_marker(unmarked, "other")


def test_metadata_is_immutable(compile_sources) -> None:
    compilation = compile_sources(app="@GenerateCode\nclass A:\n    x: int\n")
    (metadata,) = _inspect_all(compilation)

    with pytest.raises(AttributeError):
        metadata.name = "B"
    assert isinstance(metadata.properties, tuple)


def test_inspect_accepts_single_declaration(compile_sources) -> None:
    compilation = compile_sources(app="@GenerateCode\nclass A:\n    x: int\n")
    declaration, model = next(compilation.class_declarations())

    metadata = inspect(declaration, model)

    assert metadata.properties == (PropertyMetadata("x", "int"),)


def test_collect_drops_absent_results_and_keeps_order() -> None:
    a = ClassMetadata("A")
    b = ClassMetadata("B")
    duplicate = ClassMetadata("A")

    assert collect([None, b, None, a, duplicate]) == [b, a, duplicate]
    assert collect([]) == []
    assert collect([None, None]) == []


def test_discovery_over_compilation_without_marked_classes(compile_sources) -> None:
    compilation = compile_sources(app="class A:\n    pass\n", other="x = 1\n")

    assert collect(_inspect_all(compilation)) == []
