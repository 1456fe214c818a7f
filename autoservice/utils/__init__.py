"""autoservice utilities package."""

from .constants import ERROR_LOG_NAME, SERVICES_DIR, STATE_DIR_NAME, STATE_FILE_NAME
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .helpers import compute_file_hash, load_json_file, save_json_file
from .logging import logger

__all__ = [
    "STATE_DIR_NAME",
    "ERROR_LOG_NAME",
    "SERVICES_DIR",
    "STATE_FILE_NAME",
    "handle_exceptions",
    "ExitCodes",
    "compute_file_hash",
    "load_json_file",
    "save_json_file",
    "logger",
]
