"""Show the manifests a round would produce without writing anything."""

import click

from autoservice.utils.error_handler import handle_exceptions


@click.command()
@handle_exceptions
@click.option("--root", default=".", help="Project directory")
@click.option("--src", default=None, help="Source root to scan (default: paths.source_root)")
@click.option("--verify/--no-verify", default=None, help="Check providers implement their interfaces")
@click.option("--marker", "markers", multiple=True, help="Extra fully qualified marker name")
def inspect(root, src, verify, markers):
    """Dry-run a round and print the service grouping.

    Runs the same collection and validation as generate, but keeps the
    manifests in memory and prints one row per service interface with its
    providers and the source files it depends on.

    Examples:
      autoservice inspect
      autoservice inspect --src src --verify"""
    from autoservice.ast_extractors.python_source import PythonSourceResolver
    from autoservice.codegen import InMemoryCodeGenerator
    from autoservice.config_runtime import load_runtime_config, processor_options, project_paths
    from autoservice.pipeline.ui import print_header, print_warning, render_artifacts
    from autoservice.processor import ProcessorOptions, ServiceProcessor

    config = load_runtime_config(root)
    if verify is not None:
        config["options"]["verify"] = verify

    source_root, _, _ = project_paths(config, root, src)
    if not source_root.is_dir():
        raise click.ClickException(f"Source root not found: {source_root}")

    resolver = PythonSourceResolver(source_root, [*config["marker"]["names"], *markers])
    processor = ServiceProcessor(
        ProcessorOptions.from_mapping(processor_options(config)), InMemoryCodeGenerator()
    )
    artifacts = processor.process(resolver)
    processor.finish()

    if not artifacts:
        print_warning(f"No @auto_service classes found under {source_root}")
        return

    print_header("SERVICE MANIFESTS")
    render_artifacts(artifacts)
