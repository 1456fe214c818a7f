"""Incremental build bookkeeping for the filesystem host.

The core never holds state across rounds. This module is the host side: it
remembers which source units each manifest depended on last time and decides
whether a new round is needed at all.

State file layout (``.autoservice/state.json``)::

    {
      "artifacts": {"META-INF/services/pkg.Iface": {"aggregating": true,
                                                     "sources": ["pkg/a.py"]}},
      "sources": {"pkg/a.py": "<sha256>"},
      "options": {"markers": ["autoservice.auto_service"], "verify": false}
    }

Staleness rules:
- an aggregating artifact is stale if one of its sources changed or vanished,
  or if ANY unit in the project is new or changed (it may now contribute)
- a non-aggregating artifact is stale only if one of its own sources changed
  or vanished
- every artifact is stale when the recorded options differ from this build's
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from autoservice.model import SourceUnit
from autoservice.utils.helpers import compute_file_hash, load_json_file, save_json_file
from autoservice.utils.logging import logger


def empty_state() -> dict[str, Any]:
    return {"artifacts": {}, "sources": {}, "options": {}}


def load_state(path: Path) -> dict[str, Any]:
    """Load a previous state file; a missing or unreadable one means a clean build."""
    if not path.exists():
        return empty_state()
    try:
        data = load_json_file(path)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable state file {path}: {e}")
        return empty_state()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed state file {path}")
        return empty_state()

    state = empty_state()
    for section in state:
        if isinstance(data.get(section), dict):
            state[section] = data[section]
    return state


def save_state(
    path: Path,
    artifacts: dict[str, Any],
    sources: dict[str, str],
    options: dict[str, Any] | None = None,
) -> None:
    save_json_file({"artifacts": artifacts, "sources": sources, "options": options or {}}, path)


def snapshot(units: Iterable[SourceUnit], root: Path) -> dict[str, str]:
    """Content hash per source unit path."""
    return {unit.path: compute_file_hash(root / unit.path) for unit in sorted(units)}


@dataclass(frozen=True)
class IncrementalPlan:
    changed: tuple[str, ...]
    added: tuple[str, ...]
    removed: tuple[str, ...]
    stale_artifacts: tuple[str, ...]
    missing_artifacts: tuple[str, ...]
    options_changed: bool = False

    @property
    def is_up_to_date(self) -> bool:
        return not (
            self.changed or self.added or self.removed or self.missing_artifacts or self.options_changed
        )


def plan(
    previous_state: dict[str, Any],
    current_sources: dict[str, str],
    output_root: Path | None = None,
    options: dict[str, Any] | None = None,
) -> IncrementalPlan:
    """Compare the previous state against the current source hashes.

    Args:
        previous_state: Output of ``load_state``
        current_sources: Output of ``snapshot`` for this build
        output_root: If given, recorded artifacts missing on disk are reported
        options: If given, the round-affecting options of this build; a
            mismatch with the recorded ones makes every artifact stale

    Returns:
        The units that moved and the artifacts that must be regenerated
    """
    previous_sources: dict[str, str] = previous_state.get("sources", {})
    artifacts: dict[str, Any] = previous_state.get("artifacts", {})

    added = sorted(set(current_sources) - set(previous_sources))
    removed = sorted(set(previous_sources) - set(current_sources))
    changed = sorted(
        path
        for path in set(current_sources) & set(previous_sources)
        if current_sources[path] != previous_sources[path]
    )

    dirty = set(changed) | set(removed)
    anything_new = bool(added or changed)
    options_changed = options is not None and previous_state.get("options", {}) != options

    stale = []
    for path, entry in sorted(artifacts.items()):
        sources = set(entry.get("sources", []))
        if options_changed or sources & dirty or (entry.get("aggregating", False) and anything_new):
            stale.append(path)

    missing = []
    if output_root is not None:
        missing = [path for path in sorted(artifacts) if not (output_root / path).exists()]

    return IncrementalPlan(
        changed=tuple(changed),
        added=tuple(added),
        removed=tuple(removed),
        stale_artifacts=tuple(stale),
        missing_artifacts=tuple(missing),
        options_changed=options_changed,
    )
