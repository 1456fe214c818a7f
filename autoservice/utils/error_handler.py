"""Centralized error handler for autoservice commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from autoservice.errors import ServiceProcessingError
from autoservice.utils.logging import logger

from .constants import ERROR_LOG_NAME


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that turns a failed round into one descriptive CLI error.

    Processing errors are user errors: the message alone is shown. Anything
    else is unexpected and its traceback is appended to the error log in the
    state directory of the command's ``--root`` project.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except ServiceProcessingError as e:
            logger.error("Command '{cmd}' failed: {err}", cmd=func.__name__, err=str(e))
            raise click.ClickException(str(e)) from e
        except Exception as e:
            from autoservice.config_runtime import load_runtime_config, state_dir

            root = kwargs.get("root") or "."
            log_dir = state_dir(root, load_runtime_config(root))
            log_dir.mkdir(parents=True, exist_ok=True)
            error_log = log_dir / ERROR_LOG_NAME

            error_type = type(e).__name__
            error_msg = str(e)
            tb = traceback.format_exc()

            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            with open(error_log, "a", encoding="utf-8") as f:
                f.write("\n" + "=" * 80 + "\n")
                f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                f.write("=" * 80 + "\n")
                f.write(f"{error_type}: {error_msg}\n\n")
                f.write(tb)
                f.write("=" * 80 + "\n\n")

            raise click.ClickException(
                f"{error_type}: {error_msg}\n\nFull traceback logged to: {error_log}"
            ) from e

    return wrapper
