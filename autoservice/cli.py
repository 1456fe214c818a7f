"""autoservice CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table

from autoservice import __version__
from autoservice.pipeline.ui import console
from autoservice.utils.logging import configure_logging


class VerboseGroup(click.Group):
    """Help system that lists registered commands by category."""

    COMMAND_CATEGORIES = {
        "BUILD": {
            "description": "Manifest generation",
            "commands": {
                "generate": "RUN: before packaging, or from the build system",
                "inspect": "USE: checking which providers a build would register",
            },
        },
        "INCREMENTAL": {
            "description": "Dependency tracking between builds",
            "commands": {
                "status": "USE: deciding whether manifests must be regenerated",
            },
        },
    }

    def format_commands(self, ctx, formatter):
        """Suppress click's flat listing; format_help prints the categories."""

    @staticmethod
    def _summary(cmd: click.Command) -> str:
        first_line = (cmd.help or "").split("\n")[0].strip()
        return first_line.split(".")[0] if "." in first_line[1:] else first_line

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for title, category in self.COMMAND_CATEGORIES.items():
            console.print(f"\n[bold cyan]{title}[/bold cyan]")
            console.print(f"[dim]{category['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=12)
            table.add_column("Description", style="white")
            table.add_column("When", style="dim", width=44)

            for name, hint in category["commands"].items():
                cmd = self.commands.get(name)
                if cmd is None or cmd.hidden:
                    continue
                table.add_row(name, self._summary(cmd), hint)

            console.print(table)

        console.print()
        console.rule()
        console.print("For detailed options: [cmd]autoservice <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="autoservice")
@click.help_option("-h", "--help")
@click.option("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR (default: AUTOSERVICE_LOG_LEVEL or INFO)")
@click.option("--log-json", is_flag=True, default=False, help="Emit NDJSON logs on stderr")
def cli(log_level, log_json):
    """autoservice - ServiceLoader manifests for @auto_service classes

    \b
    QUICK START:
      autoservice generate            # Write META-INF/services manifests
      autoservice inspect --verify    # Preview and check providers
      autoservice status              # Are manifests stale?"""
    if log_level or log_json:
        configure_logging(level=log_level, json_mode=log_json or None)


from autoservice.commands.generate import generate
from autoservice.commands.inspect import inspect
from autoservice.commands.status import status

cli.add_command(generate)
cli.add_command(inspect)
cli.add_command(status)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
