"""Tests for markgen.cli."""

from __future__ import annotations

import json
from pathlib import Path

from markgen.cli import main

MODELS = """
from markgen import GenerateCode


@GenerateCode
class Widget:
    Id: int
    Label: str
"""


def test_generate_writes_files(write_tree, tmp_path: Path) -> None:
    root = write_tree({"src/Shapes.py": MODELS})
    out = tmp_path / "generated"

    exit_code = main(["generate", str(root / "src"), "--output", str(out)])

    assert exit_code == 0
    text = (out / "Widget.g.py").read_text(encoding="utf-8")
    assert "NAMESPACE = 'Shapes'" in text


def test_generate_dry_run_writes_nothing(write_tree, tmp_path: Path, capsys) -> None:
    root = write_tree({"src/Shapes.py": MODELS})

    exit_code = main(["generate", str(root / "src"), "--dry-run"])

    assert exit_code == 0
    assert "Widget.g.py" in capsys.readouterr().out
    assert not list((root / "src").glob("*.g.py"))


def test_generate_requires_output_or_dry_run(write_tree) -> None:
    root = write_tree({"src/Shapes.py": MODELS})

    assert main(["generate", str(root / "src")]) == 1


def test_generate_returns_error_code_for_diagnostics(write_tree, tmp_path: Path, capsys) -> None:
    root = write_tree({"src/Broken.py": "class Broken(:\n", "src/Shapes.py": MODELS})

    exit_code = main(["generate", str(root / "src"), "-o", str(tmp_path / "out")])

    assert exit_code == 1
    assert (tmp_path / "out" / "Widget.g.py").exists()
    assert "RB0002" in capsys.readouterr().out


def test_generate_reads_config_file(write_tree, tmp_path: Path) -> None:
    root = write_tree({"src/models.py": "@Entity\nclass User:\n    name: str\n"})
    config_file = tmp_path / "markgen.json"
    config_file.write_text(
        json.dumps({"marker_name": "Entity", "output_dir": str(tmp_path / "out")}),
        encoding="utf-8",
    )

    exit_code = main(["generate", str(root / "src"), "--config", str(config_file)])

    assert exit_code == 0
    assert (tmp_path / "out" / "User.g.py").exists()


def test_bad_config_file_fails_cleanly(write_tree, tmp_path: Path, capsys) -> None:
    root = write_tree({"src/Shapes.py": MODELS})
    config_file = tmp_path / "markgen.json"
    config_file.write_text("{broken", encoding="utf-8")

    exit_code = main(["generate", str(root / "src"), "--dry-run", "--config", str(config_file)])

    assert exit_code == 1
    assert "Invalid JSON" in capsys.readouterr().out


def test_wrongly_typed_config_value_fails_cleanly(write_tree, tmp_path: Path, capsys) -> None:
    root = write_tree({"src/Shapes.py": MODELS})
    config_file = tmp_path / "markgen.json"
    config_file.write_text(json.dumps({"generated_suffix": 3}), encoding="utf-8")

    exit_code = main(["generate", str(root / "src"), "--dry-run", "--config", str(config_file)])

    assert exit_code == 1
    assert "Invalid generated_suffix" in capsys.readouterr().out


def test_inspect_lists_marked_classes(write_tree, capsys) -> None:
    root = write_tree({"src/Shapes.py": MODELS})

    exit_code = main(["inspect", str(root / "src")])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Widget" in output
    assert "Label: str" in output


def test_inspect_reports_no_marked_classes(write_tree, capsys) -> None:
    root = write_tree({"src/plain.py": "class Plain:\n    pass\n"})

    exit_code = main(["inspect", str(root / "src")])

    assert exit_code == 0
    assert "No classes marked" in capsys.readouterr().out


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()
