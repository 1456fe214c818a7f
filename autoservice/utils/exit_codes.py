"""Centralized exit codes for the autoservice CLI."""


class ExitCodes:
    """Standard exit codes for autoservice CLI commands."""

    SUCCESS = 0

    # click.ClickException exits with 1
    ROUND_FAILED = 1

    STALE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - manifests are up to date",
            cls.ROUND_FAILED: "Round aborted - no manifests written",
            cls.STALE: "Manifests are stale and must be regenerated",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
