"""Console output for the autoservice commands.

Every command prints through the one themed console defined here; logs go to
stderr via loguru, so stdout only carries what the user asked to see.

Usage:
    from autoservice.pipeline.ui import console, render_artifacts

    render_artifacts(processor.process(resolver))
"""

import sys
from collections.abc import Iterable

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from autoservice.incremental import IncrementalPlan
from autoservice.model import Artifact

AUTOSERVICE_THEME = Theme({
    "warning": "bold yellow",
    "success": "bold green",
    "iface": "bold magenta",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(
    theme=AUTOSERVICE_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def render_artifacts(artifacts: Iterable[Artifact]) -> None:
    """One row per service interface: providers and contributing sources."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Interface", style="iface")
    table.add_column("Providers")
    table.add_column("Sources", style="dim")
    for artifact in artifacts:
        table.add_row(
            artifact.interface,
            "\n".join(artifact.implementers),
            "\n".join(unit.path for unit in artifact.dependencies.sources),
        )
    console.print(table)


def render_written(artifacts: Iterable[Artifact], removed: Iterable[str]) -> None:
    """List the manifests a generate run touched."""
    for artifact in artifacts:
        console.print(
            f"  [path]{artifact.path}[/path] "
            f"[dim]({len(artifact.implementers)} provider(s))[/dim]"
        )
    for path in removed:
        console.print(f"  [dim]removed {path}[/dim]")


def render_plan(pending: IncrementalPlan) -> None:
    """Table of moved sources and the manifests they invalidate."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("State")
    table.add_column("Path", style="path")
    for label, paths in (
        ("changed", pending.changed),
        ("added", pending.added),
        ("removed", pending.removed),
        ("stale", pending.stale_artifacts),
        ("missing", pending.missing_artifacts),
    ):
        for path in paths:
            table.add_row(label, path)
    if pending.options_changed:
        table.add_row("options", "verify or marker names differ from the last run")
    console.print(table)
