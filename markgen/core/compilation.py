"""
Compilation model for the generator.

Parses Python sources with the ``ast`` module and answers the semantic
queries discovery needs: which symbol a class declaration binds, which
properties it declares, and how names used in annotations resolve through
the module's imports.
"""

import ast
import copy
import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from ..logging_config import get_logger
from .diagnostics import SOURCE_PARSE_FAILED, Diagnostic, Location

logger = get_logger(__name__)

PathLike = Union[str, Path]

ANY_TYPE = "typing.Any"

# Directories never worth scanning for marked classes
SKIPPED_DIRECTORIES = {"__pycache__", "node_modules", "venv", "site-packages"}

PROPERTY_DECORATORS = {
    "property",
    "builtins.property",
    "cached_property",
    "functools.cached_property",
}

NON_MEMBER_ANNOTATIONS = {
    "ClassVar",
    "typing.ClassVar",
    "InitVar",
    "dataclasses.InitVar",
}


@dataclass(frozen=True)
class SourceFile:
    """A single source text together with the module it defines."""

    path: str
    text: str
    module_name: str = ""
    is_package: bool = False


@dataclass(frozen=True)
class PropertySymbol:
    """A property member declared directly on a class."""

    name: str
    type: str


@dataclass(frozen=True)
class ClassSymbol:
    """Semantic view of a class declaration."""

    name: str
    namespace: str
    properties: Tuple[PropertySymbol, ...] = ()
    declaration: Optional[ast.ClassDef] = field(default=None, repr=False, compare=False)


class SyntaxTree:
    """Parsed module for one source file."""

    def __init__(self, source: SourceFile, root: ast.Module):
        self.source = source
        self.root = root

    @property
    def path(self) -> str:
        return self.source.path

    def class_declarations(self) -> Iterator[ast.ClassDef]:
        """Yield every class declaration in depth-first source order."""

        def visit(node: ast.AST) -> Iterator[ast.ClassDef]:
            for child in ast.iter_child_nodes(node):
                if isinstance(child, ast.ClassDef):
                    yield child
                yield from visit(child)

        yield from visit(self.root)

    def __repr__(self) -> str:
        return f"SyntaxTree({self.path!r})"


class _ImportQualifier(ast.NodeTransformer):
    """Rewrite imported names to the dotted path they were imported from."""

    def __init__(self, imports: Dict[str, str]):
        self.imports = imports

    def visit_Name(self, node: ast.Name) -> ast.AST:
        target = self.imports.get(node.id)
        if target is None:
            return node
        return ast.copy_location(ast.Name(id=target, ctx=node.ctx), node)


class SemanticModel:
    """Answers symbol queries for the declarations of one syntax tree."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree
        self.namespace = tree.source.module_name
        self._imports = self._collect_imports()
        self._top_level_names = self._collect_top_level_names()
        self._bindable: Dict[int, bool] = {}
        self._index_scopes(tree.root, inside_function=False)

    # Index construction

    def _package_name(self) -> str:
        if self.tree.source.is_package:
            return self.namespace
        return self.namespace.rpartition(".")[0]

    def _collect_imports(self) -> Dict[str, str]:
        imports: Dict[str, str] = {}
        for node in ast.walk(self.tree.root):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        imports.setdefault(alias.asname, alias.name)
                    else:
                        top = alias.name.split(".")[0]
                        imports.setdefault(top, top)
            elif isinstance(node, ast.ImportFrom):
                base = self._resolve_from_module(node)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    bound = alias.asname or alias.name
                    origin = f"{base}.{alias.name}" if base else alias.name
                    imports.setdefault(bound, origin)
        return imports

    def _resolve_from_module(self, node: ast.ImportFrom) -> str:
        if not node.level:
            return node.module or ""

        package_parts = self._package_name().split(".") if self._package_name() else []
        if node.level > 1:
            package_parts = package_parts[: len(package_parts) - (node.level - 1)]
        if node.module:
            package_parts.append(node.module)
        return ".".join(package_parts)

    def _collect_top_level_names(self) -> Set[str]:
        names = set()
        for node in self.tree.root.body:
            if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                names.add(node.name)
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        names.add(target.id)
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                names.add(node.target.id)
        return names

    def _index_scopes(self, node: ast.AST, inside_function: bool) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.ClassDef):
                self._bindable[id(child)] = not inside_function
                self._index_scopes(child, inside_function)
            elif isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)):
                self._index_scopes(child, True)
            else:
                self._index_scopes(child, inside_function)

    # Queries

    def get_declared_symbol(self, declaration: ast.ClassDef) -> Optional[ClassSymbol]:
        """
        Resolve a class declaration to its symbol.

        Returns None for classes that are not part of this tree or that live
        inside a function body and so have no importable name.
        """
        if not self._bindable.get(id(declaration), False):
            return None

        return ClassSymbol(
            name=declaration.name,
            namespace=self.namespace,
            properties=tuple(self._property_members(declaration)),
            declaration=declaration,
        )

    def resolve_name(self, expr: ast.expr) -> str:
        """Return the dotted name ``expr`` refers to, following imports."""
        root = expr
        while isinstance(root, ast.Attribute):
            root = root.value

        if isinstance(root, ast.Name) and root.id not in self._imports:
            if root.id in self._top_level_names and self.namespace:
                return f"{self.namespace}.{ast.unparse(expr)}"
            return ast.unparse(expr)

        return self.display_type(expr)

    def display_type(self, annotation: Optional[ast.expr]) -> str:
        """Render an annotation with imported names fully qualified."""
        if annotation is None:
            return ANY_TYPE

        if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
            try:
                parsed = ast.parse(annotation.value.strip(), mode="eval").body
            except SyntaxError:
                return annotation.value
            annotation = parsed

        qualified = _ImportQualifier(self._imports).visit(copy.deepcopy(annotation))
        return ast.unparse(qualified)

    def _property_members(self, declaration: ast.ClassDef) -> Iterator[PropertySymbol]:
        seen: Set[str] = set()

        for statement in declaration.body:
            member = self._as_property(statement)
            if member is None or member.name in seen:
                continue
            seen.add(member.name)
            yield member

    def _as_property(self, statement: ast.stmt) -> Optional[PropertySymbol]:
        if isinstance(statement, ast.AnnAssign):
            if not isinstance(statement.target, ast.Name):
                return None
            if self._is_non_member(statement.annotation):
                return None
            return PropertySymbol(
                name=statement.target.id,
                type=self.display_type(statement.annotation),
            )

        if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
            decorators = [self.display_type(d) for d in statement.decorator_list]
            if not any(d in PROPERTY_DECORATORS for d in decorators):
                return None
            return PropertySymbol(
                name=statement.name,
                type=self.display_type(statement.returns),
            )

        return None

    def _is_non_member(self, annotation: ast.expr) -> bool:
        target = annotation.value if isinstance(annotation, ast.Subscript) else annotation
        return self.display_type(target) in NON_MEMBER_ANNOTATIONS


class Compilation:
    """A set of parsed source files analysed together in one pass."""

    def __init__(
        self,
        sources: Iterable[SourceFile],
        diagnostics: Optional[Sequence[Diagnostic]] = None,
    ):
        self.syntax_trees: List[SyntaxTree] = []
        self.diagnostics: List[Diagnostic] = list(diagnostics or [])
        self._models: Dict[int, SemanticModel] = {}

        for source in sources:
            tree = self._parse(source)
            if tree is not None:
                self.syntax_trees.append(tree)

        logger.debug(
            "Compilation created with %d syntax tree(s), %d diagnostic(s)",
            len(self.syntax_trees),
            len(self.diagnostics),
        )

    def _parse(self, source: SourceFile) -> Optional[SyntaxTree]:
        try:
            root = ast.parse(source.text, filename=source.path)
        except SyntaxError as e:
            logger.warning("Skipping %s: %s (line %s)", source.path, e.msg, e.lineno)
            self.diagnostics.append(
                SOURCE_PARSE_FAILED.create(
                    source.path,
                    e.msg,
                    location=Location(source.path, e.lineno, e.offset),
                )
            )
            return None
        except ValueError as e:
            logger.warning("Skipping %s: %s", source.path, e)
            self.diagnostics.append(
                SOURCE_PARSE_FAILED.create(source.path, str(e), location=Location(source.path))
            )
            return None
        return SyntaxTree(source, root)

    @classmethod
    def from_sources(cls, sources: Dict[str, str]) -> "Compilation":
        """
        Build a compilation from in-memory sources.

        Args:
            sources: Mapping of module name to source text. An empty module
                name compiles the text in the global namespace.
        """
        files = []
        for module_name, text in sources.items():
            path = f"{module_name.replace('.', '/')}.py" if module_name else "<string>"
            files.append(SourceFile(path=path, text=text, module_name=module_name))
        return cls(files)

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[PathLike],
        exclude: Sequence[str] = (),
        generated_pattern: Optional[str] = None,
    ) -> "Compilation":
        """
        Build a compilation from files and directories on disk.

        Args:
            paths: Python files or directories to scan recursively
            exclude: Glob patterns matched against file names and relative paths
            generated_pattern: File name glob of previously generated output to skip

        Returns:
            Compilation over every readable file found
        """
        files: List[SourceFile] = []
        diagnostics: List[Diagnostic] = []
        seen: Set[Path] = set()

        for file_path, root in _iter_source_paths(paths, exclude, generated_pattern):
            resolved = file_path.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)

            try:
                text = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read %s: %s", file_path, e)
                diagnostics.append(
                    SOURCE_PARSE_FAILED.create(
                        str(file_path), str(e), location=Location(str(file_path))
                    )
                )
                continue

            module_name, is_package = module_name_for(file_path, root)
            files.append(
                SourceFile(
                    path=str(file_path),
                    text=text,
                    module_name=module_name,
                    is_package=is_package,
                )
            )

        return cls(files, diagnostics)

    def get_semantic_model(self, tree: SyntaxTree) -> SemanticModel:
        """Get (and cache) the semantic model for a syntax tree."""
        model = self._models.get(id(tree))
        if model is None:
            model = SemanticModel(tree)
            self._models[id(tree)] = model
        return model

    def class_declarations(self) -> Iterator[Tuple[ast.ClassDef, SemanticModel]]:
        """Yield each class declaration with the semantic model of its tree."""
        for tree in self.syntax_trees:
            model = self.get_semantic_model(tree)
            for declaration in tree.class_declarations():
                yield declaration, model


def package_root(directory: Path) -> Path:
    """Walk up out of package directories so module names stay importable."""
    root = directory
    while (root / "__init__.py").exists() and root.parent != root:
        root = root.parent
    return root


def module_name_for(file_path: Path, root: Path) -> Tuple[str, bool]:
    """
    Derive the dotted module name of ``file_path`` relative to ``root``.

    Returns:
        Tuple of (module name, whether the file is a package ``__init__``)
    """
    try:
        relative = file_path.relative_to(root)
    except ValueError:
        relative = Path(file_path.name)

    parts = list(relative.with_suffix("").parts)
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    if not parts:
        parts = [file_path.parent.name]
    return ".".join(parts), is_package


def _is_excluded(relative: str, name: str, exclude: Sequence[str]) -> bool:
    return any(
        fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(name, pattern)
        for pattern in exclude
    )


def _iter_source_paths(
    paths: Iterable[PathLike],
    exclude: Sequence[str],
    generated_pattern: Optional[str],
) -> Iterator[Tuple[Path, Path]]:
    for raw in paths:
        path = Path(raw)

        if path.is_file():
            if generated_pattern and fnmatch.fnmatch(path.name, generated_pattern):
                continue
            yield path, package_root(path.parent)
            continue

        if not path.is_dir():
            logger.warning("Path does not exist: %s", path)
            continue

        root = package_root(path)
        for candidate in sorted(path.rglob("*.py")):
            relative_parts = candidate.relative_to(path).parts
            if any(
                part.startswith(".") or part in SKIPPED_DIRECTORIES
                for part in relative_parts[:-1]
            ):
                continue
            if generated_pattern and fnmatch.fnmatch(candidate.name, generated_pattern):
                continue
            relative = candidate.relative_to(path).as_posix()
            if _is_excluded(relative, candidate.name, exclude):
                logger.debug("Excluded %s", relative)
                continue
            yield candidate, root
