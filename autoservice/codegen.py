"""Host artifact stores.

A code generator is the build system's side of emission: it hands out a
writable stream for a new artifact and remembers which source units the
artifact depends on. Two implementations ship here:

- FileSystemCodeGenerator writes under an output root with atomic replace
- InMemoryCodeGenerator keeps everything in a dict (dry runs, tests)
"""

import io
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Any, Protocol, TextIO

from autoservice.model import Dependencies
from autoservice.utils.logging import logger


class CodeGenerator(Protocol):
    """Output capability used by the emitter."""

    def create_artifact(
        self, dependencies: Dependencies, path: str
    ) -> AbstractContextManager[TextIO]:
        """Register a new artifact and return its content stream.

        ``dependencies.aggregating`` marks artifacts that must be regenerated
        whenever any contributing unit changes or a new unit appears.
        """
        ...


def _index_entry(dependencies: Dependencies) -> dict[str, Any]:
    return {
        "aggregating": dependencies.aggregating,
        "sources": [unit.path for unit in dependencies.sources],
    }


class InMemoryCodeGenerator:
    """Artifact store backed by a dict of path -> content."""

    def __init__(self):
        self.files: dict[str, str] = {}
        self.dependencies: dict[str, Dependencies] = {}

    @contextmanager
    def create_artifact(self, dependencies: Dependencies, path: str) -> Iterator[TextIO]:
        buffer = io.StringIO(newline="")
        yield buffer
        self.files[path] = buffer.getvalue()
        self.dependencies[path] = dependencies

    def dependency_index(self) -> dict[str, dict[str, Any]]:
        return {path: _index_entry(deps) for path, deps in sorted(self.dependencies.items())}


class FileSystemCodeGenerator:
    """Artifact store writing below ``output_root``.

    Each artifact is written to a ``.tmp`` sibling and renamed over the target
    only when the stream closes cleanly, so a failed write never leaves a
    truncated manifest behind.
    """

    def __init__(self, output_root: str | Path):
        self.output_root = Path(output_root).resolve()
        self._index: dict[str, dict[str, Any]] = {}

    def _target(self, path: str) -> Path:
        target = (self.output_root / path).resolve()
        if not target.is_relative_to(self.output_root):
            raise PermissionError(f"{path} escapes output root {self.output_root}")
        return target

    @contextmanager
    def create_artifact(self, dependencies: Dependencies, path: str) -> Iterator[TextIO]:
        target = self._target(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.with_name(target.name + ".tmp")

        try:
            with open(temp_path, "w", encoding="utf-8", newline="") as f:
                yield f
            temp_path.replace(target)
        except BaseException:
            if temp_path.exists():
                temp_path.unlink()
            raise

        self._index[path] = _index_entry(dependencies)
        logger.debug(f"Registered {path} with {len(dependencies.sources)} source(s)")

    def dependency_index(self) -> dict[str, dict[str, Any]]:
        """Artifacts written by this generator with their declared dependencies."""
        return dict(sorted(self._index.items()))

    def remove_obsolete(self, previous_index: dict[str, Any]) -> list[str]:
        """Delete artifacts of a previous run that were not regenerated.

        Returns:
            Paths that were removed
        """
        removed = []
        for path in sorted(previous_index):
            if path in self._index:
                continue
            target = self._target(path)
            if target.exists():
                target.unlink()
                removed.append(path)
                logger.info(f"Removed obsolete manifest {path}")
        return removed
