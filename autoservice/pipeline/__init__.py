"""Console presentation shared by the CLI commands."""
from .ui import (
    console,
    print_header,
    print_success,
    print_warning,
    render_artifacts,
    render_plan,
    render_written,
)

__all__ = [
    "console", "print_header", "print_warning", "print_success",
    "render_artifacts", "render_plan", "render_written",
]
