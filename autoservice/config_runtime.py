"""Runtime configuration for autoservice - centralized configuration management."""

import copy
import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from autoservice.utils.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_MARKER_NAMES,
    ENV_STATE_DIR,
    OPTION_VERBOSE,
    OPTION_VERIFY,
    STATE_DIR_NAME,
    STATE_FILE_NAME,
)
from autoservice.utils.logging import logger

DEFAULTS = {
    "paths": {
        "source_root": ".",
        "output_dir": "./build/generated/resources",
        "state_dir": f"./{STATE_DIR_NAME}",
    },
    "options": {
        "verify": False,
        "verbose": False,
    },
    "marker": {
        "names": list(DEFAULT_MARKER_NAMES),
    },
}


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of its default."""
    if isinstance(default, bool):
        return raw.strip().lower() == "true"
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, list):
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


def state_dir(root: str | Path = ".", cfg: dict[str, Any] | None = None) -> Path:
    """State directory of the project at ``root``.

    Without a loaded config only the environment can move it, since the config
    file itself lives there.
    """
    if cfg is not None:
        return Path(root) / cfg["paths"]["state_dir"]
    return Path(root) / os.environ.get(ENV_STATE_DIR, DEFAULTS["paths"]["state_dir"])


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from <state dir>/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (AUTOSERVICE_<SECTION>_<KEY>)
    2. config.json in the state directory (.autoservice, or
       AUTOSERVICE_PATHS_STATE_DIR relative to root)
    3. Built-in defaults

    Args:
        root: Project directory to look for the config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = state_dir(root) / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"AUTOSERVICE_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except ValueError as e:
                    logger.warning(f"Invalid value for environment variable {env_var}: '{value}' - {e}")
                    logger.info(f"Using default value: {cfg[section][key]}")

    return cfg


def processor_options(cfg: dict[str, Any]) -> dict[str, str]:
    """Render the ``options`` section as host option strings."""
    return {
        OPTION_VERIFY: str(cfg["options"]["verify"]).lower(),
        OPTION_VERBOSE: str(cfg["options"]["verbose"]).lower(),
    }


def project_paths(
    cfg: dict[str, Any],
    root: str = ".",
    src: str | None = None,
    out: str | None = None,
) -> tuple[Path, Path, Path]:
    """Source root, output root and state file for a project.

    Configured paths are relative to ``root``; explicit arguments are used as
    given.
    """
    root_path = Path(root)
    source_root = Path(src) if src else root_path / cfg["paths"]["source_root"]
    output_root = Path(out) if out else root_path / cfg["paths"]["output_dir"]
    state_file = state_dir(root, cfg) / STATE_FILE_NAME
    return source_root, output_root, state_file


def options_fingerprint(cfg: dict[str, Any], extra_markers: Iterable[str] = ()) -> dict[str, Any]:
    """Options that change what a round produces, as recorded in the state file.

    ``verbose`` only affects logging and is left out.
    """
    return {
        "verify": bool(cfg["options"]["verify"]),
        "markers": sorted({*cfg["marker"]["names"], *extra_markers}),
    }
