"""Emitter: writes one ServiceLoader manifest per grouped interface.

For each interface key:
- create ``META-INF/services/<interface>``
- list every implementer once, sorted by code point
- declare every contributing source unit as an aggregating dependency

The grouping is cleared afterwards so nothing leaks into the next round.
"""

from collections.abc import Callable, Iterable

from autoservice.codegen import CodeGenerator
from autoservice.errors import ArtifactWriteFailure
from autoservice.model import Artifact, Dependencies, Grouping
from autoservice.utils.constants import SERVICES_DIR

LINE_SEPARATOR = "\n"


def manifest_path(interface: str) -> str:
    """Artifact path for an interface binary name (no extension)."""
    return f"{SERVICES_DIR}/{interface}"


def render_manifest(implementers: Iterable[str]) -> str:
    """Manifest body: one name per line, each line terminated."""
    return "".join(f"{name}{LINE_SEPARATOR}" for name in implementers)


def emit(
    grouping: Grouping,
    code_generator: CodeGenerator,
    *,
    log: Callable[[str], None] | None = None,
) -> list[Artifact]:
    """Write every manifest of a completed grouping, then clear it.

    Args:
        grouping: Output of ``collect``
        code_generator: Host artifact store
        log: Diagnostic sink

    Returns:
        One Artifact per interface, in interface order

    Raises:
        ArtifactWriteFailure: If the host cannot create or write a manifest
    """
    log = log or (lambda message: None)
    artifacts: list[Artifact] = []

    try:
        for interface in grouping.keys():
            path = manifest_path(interface)
            log(f"Working on resource file: {path}")

            entries = grouping.entries(interface)
            implementers = tuple(sorted({name for name, _ in entries}))
            log(f"New service file contents: {list(implementers)}")

            sources = tuple(sorted({unit for _, unit in entries}))
            log(f"Originating files: {[unit.file_name for unit in sources]}")

            dependencies = Dependencies(aggregating=True, sources=sources)
            content = render_manifest(implementers)
            try:
                with code_generator.create_artifact(dependencies, path) as writer:
                    for name in implementers:
                        writer.write(name)
                        writer.write(LINE_SEPARATOR)
            except OSError as e:
                raise ArtifactWriteFailure(path, e) from e

            log(f"Wrote to: {path}")
            artifacts.append(
                Artifact(
                    path=path,
                    interface=interface,
                    implementers=implementers,
                    dependencies=dependencies,
                    content=content,
                )
            )
    finally:
        grouping.clear()

    return artifacts
