"""Helper utility functions for autoservice."""

import hashlib
import json
from pathlib import Path
from typing import Any

from .logging import logger


def compute_file_hash(file_path: Path, chunk_size: int = 65536) -> str:
    """SHA256 hex digest of a source file, used to detect changed units."""
    digest = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def load_json_file(file_path: Path) -> dict[str, Any]:
    """
    Load and parse a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise


def save_json_file(data: dict[str, Any], file_path: Path) -> None:
    """
    Save data as JSON to file, creating parent directories.

    Keys are sorted so the file is stable across runs.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
