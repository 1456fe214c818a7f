"""Generate META-INF/services manifests from @auto_service classes."""

import click

from autoservice.utils.error_handler import handle_exceptions


@click.command()
@handle_exceptions
@click.option("--root", default=".", help="Project directory (config and state live here)")
@click.option("--src", default=None, help="Source root to scan (default: paths.source_root)")
@click.option("--out", default=None, help="Generated-resources root (default: paths.output_dir)")
@click.option("--verify/--no-verify", default=None, help="Check providers implement their interfaces")
@click.option("--verbose", is_flag=True, default=False, help="Log every grouping decision")
@click.option("--incremental", is_flag=True, help="Skip the round when no source changed")
@click.option("--marker", "markers", multiple=True, help="Extra fully qualified marker name")
def generate(root, src, out, verify, verbose, incremental, markers):
    """Scan sources and write one manifest per service interface.

    Every class decorated with @auto_service(Interface, ...) is listed in
    META-INF/services/<interface binary name> under the output root, one
    provider per line, sorted. Nested classes use their binary form
    (pkg.mod.Outer$Inner).

    A round is all or nothing: a missing or empty interface list, a local
    class, or (with --verify) a provider that does not subclass its
    interface aborts the build before any manifest is touched.

    Examples:
      autoservice generate                       # Scan ., write build/generated/resources
      autoservice generate --src src --verify    # Check implementations too
      autoservice generate --incremental         # No-op when nothing changed

    Output:
      <out>/META-INF/services/<interface>   # Provider list
      .autoservice/state.json               # Dependency index for --incremental"""
    from autoservice.ast_extractors.python_source import PythonSourceResolver, discover_sources
    from autoservice.codegen import FileSystemCodeGenerator
    from autoservice.config_runtime import (
        load_runtime_config,
        options_fingerprint,
        processor_options,
        project_paths,
    )
    from autoservice.incremental import load_state, plan, save_state, snapshot
    from autoservice.pipeline.ui import print_success, render_written
    from autoservice.processor import ProcessorOptions, ServiceProcessor
    from autoservice.utils.logging import logger

    config = load_runtime_config(root)
    if verify is not None:
        config["options"]["verify"] = verify
    if verbose:
        config["options"]["verbose"] = True

    source_root, output_root, state_file = project_paths(config, root, src, out)
    if not source_root.is_dir():
        raise click.ClickException(f"Source root not found: {source_root}")

    previous = load_state(state_file)
    hashes = snapshot(discover_sources(source_root), source_root)
    fingerprint = options_fingerprint(config, markers)

    if incremental:
        pending = plan(previous, hashes, output_root, fingerprint)
        if pending.is_up_to_date:
            print_success("Manifests are up to date")
            return
        logger.info(
            f"Regenerating: {len(pending.changed)} changed, {len(pending.added)} added, "
            f"{len(pending.removed)} removed, {len(pending.stale_artifacts)} stale manifest(s)"
        )

    resolver = PythonSourceResolver(source_root, [*config["marker"]["names"], *markers])
    generator = FileSystemCodeGenerator(output_root)
    processor = ServiceProcessor(ProcessorOptions.from_mapping(processor_options(config)), generator)

    artifacts = processor.process(resolver)
    processor.finish()

    removed = generator.remove_obsolete(previous["artifacts"])
    save_state(state_file, generator.dependency_index(), hashes, fingerprint)

    render_written(artifacts, removed)
    print_success(f"Wrote {len(artifacts)} manifest(s) to {output_root}")
