"""Core data model shared by the collector, the emitter and the hosts.

Declarations arrive here already resolved by a host (see
``autoservice.ast_extractors.python_source``); nothing in this module touches
source text or the filesystem.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any


@dataclass(frozen=True, order=True)
class QualifiedName:
    """A class identity split into its package and nested simple names.

    ``QualifiedName("pkg", ("Outer", "Inner"))`` is written ``pkg.Outer.Inner``
    in source and ``pkg.Outer$Inner`` in binary form.
    """

    package: str
    simple_names: tuple[str, ...]

    def __post_init__(self):
        if not self.simple_names or not all(self.simple_names):
            raise ValueError(f"QualifiedName needs at least one simple name: {self.simple_names!r}")

    @classmethod
    def from_dotted(cls, qualified: str, package: str = "") -> "QualifiedName":
        """Split a dotted name into package and simple names.

        Args:
            qualified: Source-level name, e.g. ``pkg.Outer.Inner``
            package: Package prefix of ``qualified``, e.g. ``pkg``

        Raises:
            ValueError: If ``qualified`` does not live inside ``package``
        """
        if package:
            prefix = f"{package}."
            if not qualified.startswith(prefix):
                raise ValueError(f"{qualified} is not inside package {package}")
            qualified = qualified[len(prefix):]
        return cls(package, tuple(qualified.split(".")))

    @property
    def simple_name(self) -> str:
        return self.simple_names[-1]

    @property
    def dotted(self) -> str:
        """Source-level name: ``pkg.Outer.Inner``."""
        names = ".".join(self.simple_names)
        return f"{self.package}.{names}" if self.package else names

    @property
    def binary(self) -> str:
        """Class-loader name: ``pkg.Outer$Inner``."""
        names = "$".join(self.simple_names)
        return f"{self.package}.{names}" if self.package else names

    def enclosing(self) -> "QualifiedName | None":
        """The directly enclosing class, or None for a top-level class."""
        if len(self.simple_names) == 1:
            return None
        return QualifiedName(self.package, self.simple_names[:-1])

    def nested(self, name: str) -> "QualifiedName":
        return QualifiedName(self.package, (*self.simple_names, name))

    def __str__(self) -> str:
        return self.dotted


OBJECT = QualifiedName("builtins", ("object",))


@dataclass(frozen=True, order=True)
class SourceUnit:
    """An originating compilation unit. Only used for dependency tracking."""

    path: str
    module: str = ""

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.path).name


@dataclass(frozen=True)
class SourceLocation:
    path: str
    line: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


class DeclarationKind(Enum):
    CLASS = "class"
    LOCAL_CLASS = "local class"
    ANONYMOUS_CLASS = "anonymous class"
    FUNCTION = "function"


@dataclass(frozen=True)
class TypeRef:
    """A type as written in a marker argument.

    Attributes:
        name: Resolved target of the reference
        arguments: Type arguments when used parameterised (``Iface[int]``)
        alias_of: Target when ``name`` is a type alias
        is_class: False when ``name`` is a non-class member of a class
    """

    name: QualifiedName
    arguments: tuple["TypeRef", ...] = ()
    alias_of: "TypeRef | None" = None
    is_class: bool = True


@dataclass(frozen=True)
class Declaration:
    """A declaration carrying the marker.

    ``supertypes`` is the full transitive supertype closure as resolved by
    the host.
    """

    name: QualifiedName
    kind: DeclarationKind
    source_unit: SourceUnit
    location: SourceLocation
    supertypes: frozenset[QualifiedName] = frozenset()

    @property
    def is_class(self) -> bool:
        return self.kind is not DeclarationKind.FUNCTION


@dataclass(frozen=True)
class MarkerOccurrence:
    """One marker usage: the decorated declaration plus the marker arguments.

    ``arguments`` is None when the marker was used without an argument list.
    """

    declaration: Declaration
    arguments: Mapping[str, Any] | None = field(default=None, compare=False)


class Grouping:
    """Round-scoped accumulator: interface binary name -> contributions.

    Each contribution is an ``(implementer binary name, SourceUnit)`` pair.
    Created empty at round start, filled by ``collect`` and emptied by
    ``emit``.
    """

    def __init__(self):
        self._providers: dict[str, set[tuple[str, SourceUnit]]] = {}

    def put(self, interface: str, implementer: str, source_unit: SourceUnit) -> None:
        self._providers.setdefault(interface, set()).add((implementer, source_unit))

    def keys(self) -> list[str]:
        return sorted(self._providers)

    def entries(self, interface: str) -> frozenset[tuple[str, SourceUnit]]:
        return frozenset(self._providers.get(interface, ()))

    def clear(self) -> None:
        self._providers.clear()

    def __contains__(self, interface: object) -> bool:
        return interface in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"Grouping({ {k: sorted(v) for k, v in sorted(self._providers.items())} })"


@dataclass(frozen=True)
class Dependencies:
    """Input dependency set declared for one output artifact."""

    aggregating: bool
    sources: tuple[SourceUnit, ...] = ()


@dataclass(frozen=True)
class Artifact:
    """One emitted manifest."""

    path: str
    interface: str
    implementers: tuple[str, ...]
    dependencies: Dependencies
    content: str
