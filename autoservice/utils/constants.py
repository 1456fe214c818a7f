"""Centralized constants for the autoservice utils package.

Single source of truth for paths and environment variable names used across
the processor, the code generators and the CLI.
"""

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Per-project state directory (config, dependency index, error log), relative
# to the project root unless AUTOSERVICE_PATHS_STATE_DIR relocates it
STATE_DIR_NAME = ".autoservice"

ERROR_LOG_NAME = "error.log"
STATE_FILE_NAME = "state.json"
CONFIG_FILE_NAME = "config.json"

# Manifests live under this prefix relative to the generated-resources root
SERVICES_DIR = "META-INF/services"

# ============================================================================
# PROCESSOR OPTIONS
# ============================================================================

OPTION_PREFIX = "autoservice"
OPTION_VERIFY = f"{OPTION_PREFIX}.verify"
OPTION_VERBOSE = f"{OPTION_PREFIX}.verbose"

# Argument name holding the interface list on a marker occurrence
MARKER_VALUE_ARGUMENT = "value"

DEFAULT_MARKER_NAMES = (
    "autoservice.auto_service",
    "autoservice.marker.auto_service",
)

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_LOG_LEVEL = "AUTOSERVICE_LOG_LEVEL"
ENV_LOG_JSON = "AUTOSERVICE_LOG_JSON"
ENV_LOG_FILE = "AUTOSERVICE_LOG_FILE"
ENV_REQUEST_ID = "AUTOSERVICE_REQUEST_ID"
ENV_STATE_DIR = "AUTOSERVICE_PATHS_STATE_DIR"
