"""Python source host: finds ``@auto_service`` classes with the stdlib ast module.

This is the symbol-resolution side of a build. It parses every module under a
source root once, indexes classes, imports and type aliases, and then answers
the processor's one question: which declarations carry the marker, what do
they declare, and what are their supertypes.

Name resolution follows Python scoping closely enough for declarations:
- a decorator on a nested class sees its enclosing class body
- otherwise module-level definitions, then imports, then builtins
- ``X[T]`` is a parameterised use of ``X``; string annotations are parsed
- ``Alias = X``, ``Alias: TypeAlias = X`` and ``type Alias = X`` are aliases

Names that leave the project (third-party interfaces) are split into package
and class names using the import statement that brought them in.
"""

import ast
import builtins
import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from autoservice.errors import SourceParseError
from autoservice.model import (
    OBJECT,
    Declaration,
    DeclarationKind,
    MarkerOccurrence,
    QualifiedName,
    SourceLocation,
    SourceUnit,
    TypeRef,
)
from autoservice.naming import closest_class
from autoservice.utils.constants import DEFAULT_MARKER_NAMES, MARKER_VALUE_ARGUMENT
from autoservice.utils.logging import logger

SKIP_DIRS = frozenset({
    "__pycache__",
    "venv",
    "env",
    "node_modules",
    "site-packages",
    "build",
    "dist",
})

BUILTIN_NAMES = frozenset(dir(builtins))

_TYPE_ALIAS_NODE = getattr(ast, "TypeAlias", None)


# ============================================================================
# Discovery
# ============================================================================

def module_name_for(relative: Path) -> str:
    """Dotted module name for a project-relative ``.py`` path.

    ``pkg/sub/mod.py`` -> ``pkg.sub.mod``, ``pkg/__init__.py`` -> ``pkg``.
    """
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def discover_sources(root: Path) -> list[SourceUnit]:
    """Every importable Python module below ``root``, sorted by path."""
    units = []
    for path in sorted(root.rglob("*.py")):
        relative = path.relative_to(root)
        if any(part.startswith(".") or part in SKIP_DIRS for part in relative.parts[:-1]):
            continue
        module = module_name_for(relative)
        if not module or not all(part.isidentifier() for part in module.split(".")):
            logger.debug(f"Skipping {relative.as_posix()}: not an importable module")
            continue
        units.append(SourceUnit(path=relative.as_posix(), module=module))
    return units


def module_statements(body: list[ast.stmt]) -> Iterable[ast.stmt]:
    """Statements executed at import time, including those under if/try blocks."""
    for node in body:
        yield node
        if isinstance(node, ast.If):
            yield from module_statements(node.body)
            yield from module_statements(node.orelse)
        elif isinstance(node, (ast.Try, getattr(ast, "TryStar", ast.Try))):
            yield from module_statements(node.body)
            for handler in node.handlers:
                yield from module_statements(handler.body)
            yield from module_statements(node.orelse)
            yield from module_statements(node.finalbody)


def dotted_name(node: ast.AST) -> str | None:
    """``a.b.c`` for Name/Attribute chains, None for anything else."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = dotted_name(node.value)
        return f"{base}.{node.attr}" if base else None
    return None


# ============================================================================
# Per-module index
# ============================================================================

@dataclass
class _Candidate:
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef
    path: tuple[str, ...]
    scope: tuple[str, ...]
    kind: DeclarationKind
    decorator: ast.expr


@dataclass
class _ModuleScan:
    unit: SourceUnit
    is_package: bool
    tree: ast.Module
    imports: dict[str, str] = field(default_factory=dict)
    imported_modules: set[str] = field(default_factory=set)
    defined: set[str] = field(default_factory=set)
    aliases: dict[str, ast.expr] = field(default_factory=dict)
    classes: dict[tuple[str, ...], ast.ClassDef] = field(default_factory=dict)
    candidates: list[_Candidate] = field(default_factory=list)

    @property
    def module(self) -> str:
        return self.unit.module

    def package_for_level(self, level: int) -> str:
        """Base package of a relative import with ``level`` leading dots."""
        parts = self.module.split(".")
        if not self.is_package:
            parts = parts[:-1]
        if level > 1:
            parts = parts[: len(parts) - (level - 1)]
        return ".".join(parts)


class PythonSourceResolver:
    """Resolver over all Python modules below a source root.

    Args:
        root: Source root; module names are relative to it
        marker_names: Fully qualified names that count as the marker
    """

    def __init__(self, root: str | Path, marker_names: Iterable[str] = DEFAULT_MARKER_NAMES):
        self.root = Path(root).resolve()
        self.marker_names = frozenset(marker_names)
        self._modules: dict[str, _ModuleScan] | None = None
        self._closures: dict[QualifiedName, frozenset[QualifiedName]] = {}

    @property
    def units(self) -> list[SourceUnit]:
        return sorted(scan.unit for scan in self._scan().values())

    def symbols_with_marker(self) -> list[MarkerOccurrence]:
        """Marker occurrences across the project, in path then line order."""
        occurrences = []
        for scan in sorted(self._scan().values(), key=lambda s: s.unit.path):
            for candidate in scan.candidates:
                occurrences.append(self._occurrence(scan, candidate))
        logger.debug(f"Found {len(occurrences)} marker occurrence(s) under {self.root}")
        return occurrences

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def _scan(self) -> dict[str, _ModuleScan]:
        if self._modules is None:
            modules = {}
            for unit in discover_sources(self.root):
                modules[unit.module] = self._index_module(unit)
            self._modules = modules
        return self._modules

    def _index_module(self, unit: SourceUnit) -> _ModuleScan:
        path = self.root / unit.path
        try:
            tree = ast.parse(path.read_bytes(), filename=unit.path)
        except (SyntaxError, ValueError) as e:
            raise SourceParseError(unit.path, e) from e

        scan = _ModuleScan(unit=unit, is_package=path.name == "__init__.py", tree=tree)
        self._index_imports(scan)
        self._index_definitions(scan)
        self._visit(scan, tree, scope=(), qual=(), local=False)
        return scan

    def _index_imports(self, scan: _ModuleScan) -> None:
        for node in module_statements(scan.tree.body):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        scan.imports[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".")[0]
                        scan.imports[head] = head
                    parts = alias.name.split(".")
                    for i in range(1, len(parts) + 1):
                        scan.imported_modules.add(".".join(parts[:i]))

            elif isinstance(node, ast.ImportFrom):
                module = node.module or ""
                if node.level:
                    base = scan.package_for_level(node.level)
                    module = f"{base}.{module}" if base and module else (base or module)
                if not module:
                    continue
                scan.imported_modules.add(module)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    scan.imports[alias.asname or alias.name] = f"{module}.{alias.name}"

    def _index_definitions(self, scan: _ModuleScan) -> None:
        """Top-level names and type aliases of a module."""
        for node in module_statements(scan.tree.body):
            if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                scan.defined.add(node.name)
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        scan.defined.add(target.id)
                        if len(node.targets) == 1 and _is_type_expr(node.value):
                            scan.aliases[target.id] = node.value
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                scan.defined.add(node.target.id)
                annotation = dotted_name(node.annotation) or ""
                if node.value is not None and annotation.split(".")[-1] == "TypeAlias":
                    scan.aliases[node.target.id] = node.value
            elif _TYPE_ALIAS_NODE is not None and isinstance(node, _TYPE_ALIAS_NODE):
                scan.defined.add(node.name.id)
                scan.aliases[node.name.id] = node.value

    def _visit(self, scan: _ModuleScan, node: ast.AST, scope, qual, local: bool) -> None:
        """Index classes and marker candidates below ``node``.

        ``scope`` is the class body a decorator is evaluated in, ``qual`` the
        qualified-name prefix of children.
        """
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.ClassDef):
                path = (*qual, child.name)
                kind = DeclarationKind.LOCAL_CLASS if local else DeclarationKind.CLASS
                if not local:
                    scan.classes[path] = child
                self._check_marker(scan, child, path, scope, kind)
                self._visit(scan, child, scope=scope if local else path, qual=path, local=local)

            elif isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                path = (*qual, child.name)
                self._check_marker(scan, child, path, scope, DeclarationKind.FUNCTION)
                self._visit(scan, child, scope=scope, qual=(*path, "<locals>"), local=True)

            else:
                self._visit(scan, child, scope=scope, qual=qual, local=local)

    def _check_marker(self, scan, node, path, scope, kind: DeclarationKind) -> None:
        for decorator in node.decorator_list:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            name = dotted_name(target)
            if name and self._absolute(scan, name, scope) in self.marker_names:
                scan.candidates.append(_Candidate(node, path, scope, kind, decorator))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _absolute(self, scan: _ModuleScan, dotted: str, scope: tuple[str, ...]) -> str:
        """Fully qualified dotted form of a name as written in ``scan``."""
        head, _, rest = dotted.partition(".")
        tail = f".{rest}" if rest else ""

        if scope and (*scope, head) in scan.classes:
            return ".".join((scan.module, *scope, head)) + tail
        if head in scan.defined:
            return f"{scan.module}.{dotted}"
        if head in scan.imports:
            return scan.imports[head] + tail
        if head in BUILTIN_NAMES:
            return f"builtins.{dotted}"
        return f"{scan.module}.{dotted}"

    def _type_ref(self, scan, expr: ast.AST, scope, seen=frozenset()) -> TypeRef | None:
        if isinstance(expr, ast.Subscript):
            base = self._type_ref(scan, expr.value, scope, seen)
            if base is None:
                return None
            elements = expr.slice.elts if isinstance(expr.slice, ast.Tuple) else [expr.slice]
            arguments = (self._type_ref(scan, e, scope, seen) for e in elements)
            return dataclasses.replace(base, arguments=tuple(a for a in arguments if a))

        if isinstance(expr, ast.Constant) and isinstance(expr.value, str):
            try:
                parsed = ast.parse(expr.value.strip(), mode="eval").body
            except SyntaxError:
                return None
            return self._type_ref(scan, parsed, scope, seen)

        name = dotted_name(expr)
        if name is None:
            return None
        return self._qualified(scan, self._absolute(scan, name, scope), seen)

    def _qualified(self, scan: _ModuleScan, absolute: str, seen) -> TypeRef:
        parts = absolute.split(".")
        modules = self._scan()

        for i in range(len(parts), 0, -1):
            module = ".".join(parts[:i])
            if module not in modules:
                continue
            target = modules[module]
            rest = tuple(parts[i:])
            if not rest:
                # A module is not a class
                return TypeRef(_split_tail(parts), is_class=False)

            if len(rest) == 1 and rest[0] in target.aliases:
                key = (module, rest[0])
                if key in seen:
                    return TypeRef(QualifiedName(module, rest), is_class=False)
                alias_of = self._type_ref(target, target.aliases[rest[0]], (), seen | {key})
                return TypeRef(
                    QualifiedName(module, rest), alias_of=alias_of, is_class=alias_of is not None
                )

            if rest[0] in target.imports and rest[:1] not in target.classes:
                # Re-exported by the module, e.g. a package __init__
                key = (module, rest[0])
                if key not in seen:
                    reexported = ".".join((target.imports[rest[0]], *rest[1:]))
                    return self._qualified(target, reexported, seen | {key})

            depth = 0
            while depth < len(rest) and rest[: depth + 1] in target.classes:
                depth += 1
            if depth == len(rest):
                return TypeRef(QualifiedName(module, rest))
            return TypeRef(QualifiedName(module, rest[: depth + 1]), is_class=False)

        known = scan.imported_modules | {"builtins"}
        for i in range(len(parts) - 1, 0, -1):
            package = ".".join(parts[:i])
            if package in known:
                return TypeRef(QualifiedName(package, tuple(parts[i:])))
        return TypeRef(_split_tail(parts))

    def _supertypes(self, scan: _ModuleScan, node: ast.ClassDef, path) -> frozenset[QualifiedName]:
        """Transitive supertype closure of a class, always including object."""
        key = QualifiedName(scan.module, path)
        if key in self._closures:
            return self._closures[key]
        self._closures[key] = frozenset({OBJECT})

        modules = self._scan()
        result = {OBJECT}
        for base in node.bases:
            ref = self._type_ref(scan, base, path[:-1])
            base_name = closest_class(ref) if ref is not None else None
            if base_name is None:
                continue
            result.add(base_name)

            owner = modules.get(base_name.package)
            if owner is not None and base_name.simple_names in owner.classes:
                result |= self._supertypes(
                    owner, owner.classes[base_name.simple_names], base_name.simple_names
                )

        self._closures[key] = frozenset(result)
        return self._closures[key]

    def _occurrence(self, scan: _ModuleScan, candidate: _Candidate) -> MarkerOccurrence:
        supertypes = frozenset()
        if isinstance(candidate.node, ast.ClassDef):
            supertypes = self._supertypes(scan, candidate.node, candidate.path)

        declaration = Declaration(
            name=QualifiedName(scan.module, candidate.path),
            kind=candidate.kind,
            source_unit=scan.unit,
            location=SourceLocation(scan.unit.path, candidate.node.lineno),
            supertypes=supertypes,
        )
        return MarkerOccurrence(declaration, self._arguments(scan, candidate))

    def _arguments(self, scan: _ModuleScan, candidate: _Candidate) -> dict | None:
        """Marker arguments; interfaces that do not resolve stay as raw ast nodes."""
        decorator = candidate.decorator
        if not isinstance(decorator, ast.Call):
            return None

        expressions = list(decorator.args)
        has_value = False
        for keyword in decorator.keywords:
            if keyword.arg != MARKER_VALUE_ARGUMENT:
                continue
            has_value = True
            value = keyword.value
            if isinstance(value, (ast.List, ast.Tuple, ast.Set)):
                expressions.extend(value.elts)
            else:
                expressions.append(value)

        if not expressions and not has_value and decorator.keywords:
            return {}

        interfaces = [
            self._type_ref(scan, expr, candidate.scope) or expr for expr in expressions
        ]
        return {MARKER_VALUE_ARGUMENT: interfaces}


def _is_type_expr(node: ast.AST) -> bool:
    return isinstance(node, (ast.Name, ast.Attribute, ast.Subscript))


def _split_tail(parts: list[str]) -> QualifiedName:
    """Fallback split: everything but the last segment is the package."""
    return QualifiedName(".".join(parts[:-1]), (parts[-1],))
