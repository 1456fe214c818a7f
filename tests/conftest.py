"""Pytest configuration and fixtures."""
import textwrap
from pathlib import Path

import pytest
from loguru import logger

from autoservice.model import (
    Declaration,
    DeclarationKind,
    MarkerOccurrence,
    QualifiedName,
    SourceLocation,
    SourceUnit,
    TypeRef,
)


def qname(dotted: str) -> QualifiedName:
    """``pkg.mod:Outer.Inner`` -> QualifiedName("pkg.mod", ("Outer", "Inner"))."""
    package, _, names = dotted.rpartition(":")
    return QualifiedName(package, tuple(names.split(".")))


@pytest.fixture
def ref():
    """Build a TypeRef from ``package:Class.Nested`` notation."""

    def _ref(dotted: str, **kwargs) -> TypeRef:
        return TypeRef(qname(dotted), **kwargs)

    return _ref


@pytest.fixture
def declaration():
    """Build a Declaration; supertypes use the same ``package:Class`` notation."""

    def _declaration(
        dotted: str,
        *,
        kind: DeclarationKind = DeclarationKind.CLASS,
        unit: str | None = None,
        supertypes: tuple[str, ...] = (),
        line: int = 1,
    ) -> Declaration:
        name = qname(dotted)
        path = unit or f"{name.package.replace('.', '/')}.py"
        return Declaration(
            name=name,
            kind=kind,
            source_unit=SourceUnit(path=path, module=name.package),
            location=SourceLocation(path, line),
            supertypes=frozenset(qname(s) for s in supertypes),
        )

    return _declaration


@pytest.fixture
def occurrence(declaration, ref):
    """Marker occurrence declaring ``interfaces`` on ``dotted``."""

    def _occurrence(dotted: str, *interfaces: str, **kwargs) -> MarkerOccurrence:
        return MarkerOccurrence(
            declaration(dotted, **kwargs),
            {"value": [ref(i) for i in interfaces]},
        )

    return _occurrence


@pytest.fixture
def write_sources(tmp_path):
    """Write ``{relative path: source}`` below tmp_path/src and return that root."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "src"
        for relative, source in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        return root

    return _write


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
