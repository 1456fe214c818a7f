"""Report whether generated manifests are stale."""

import sys

import click

from autoservice.utils.error_handler import handle_exceptions
from autoservice.utils.exit_codes import ExitCodes


@click.command()
@handle_exceptions
@click.option("--root", default=".", help="Project directory")
@click.option("--src", default=None, help="Source root to scan (default: paths.source_root)")
@click.option("--out", default=None, help="Generated-resources root (default: paths.output_dir)")
def status(root, src, out):
    """Compare sources against the last generate run.

    Lists changed, added and removed source files and the manifests that an
    incremental build would regenerate. Manifests are aggregating: any new or
    changed file makes all of them stale, because it may contribute a provider.

    Exit codes:
      0  Up to date
      3  Stale - run autoservice generate"""
    from autoservice.ast_extractors.python_source import discover_sources
    from autoservice.config_runtime import load_runtime_config, options_fingerprint, project_paths
    from autoservice.incremental import load_state, plan, snapshot
    from autoservice.pipeline.ui import print_success, print_warning, render_plan

    config = load_runtime_config(root)
    source_root, output_root, state_file = project_paths(config, root, src, out)
    if not source_root.is_dir():
        raise click.ClickException(f"Source root not found: {source_root}")

    pending = plan(
        load_state(state_file),
        snapshot(discover_sources(source_root), source_root),
        output_root,
        options_fingerprint(config),
    )
    if pending.is_up_to_date:
        print_success("Manifests are up to date")
        return

    render_plan(pending)
    print_warning(f"{ExitCodes.get_description(ExitCodes.STALE)} - run: autoservice generate")
    sys.exit(ExitCodes.STALE)
