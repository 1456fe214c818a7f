"""Runtime side: read manifests back and import the listed providers."""

import importlib
from pathlib import Path

from autoservice.emitter import manifest_path


def read_manifest(text: str) -> list[str]:
    """Parse manifest text with the ServiceLoader file grammar.

    ``#`` starts a comment, blank lines are ignored and repeated names are
    listed once, first occurrence wins.
    """
    names: list[str] = []
    for line in text.splitlines():
        name = line.split("#", 1)[0].strip()
        if name and name not in names:
            names.append(name)
    return names


def load_services(interface: str, root: str | Path) -> list[str]:
    """Provider binary names registered for ``interface`` under ``root``.

    A missing manifest means no providers.
    """
    path = Path(root) / manifest_path(interface)
    if not path.exists():
        return []
    return read_manifest(path.read_text(encoding="utf-8"))


def import_binary_name(name: str) -> type:
    """Import a class from its binary name, e.g. ``pkg.mod.Outer$Inner``."""
    module_name, _, class_path = name.rpartition(".")
    if not module_name:
        raise ImportError(f"{name} has no module part")
    target = importlib.import_module(module_name)
    for part in class_path.split("$"):
        target = getattr(target, part)
    return target


def load_providers(interface: str, root: str | Path) -> list[type]:
    """Import every provider class registered for ``interface``."""
    return [import_binary_name(name) for name in load_services(interface, root)]
