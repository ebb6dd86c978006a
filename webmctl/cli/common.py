"""Shared CLI plumbing: exit codes and error handling."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, TypeVar

import click

from webmctl.core.exceptions import UploadError, WebmCtlError
from webmctl.core.output import print_error

F = TypeVar("F", bound=Callable[..., Any])


class ExitCode:
    """Process exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    UPLOAD_FAILED = 3
    USER_CANCELLED = 5


def exit_code_for(error: WebmCtlError) -> int:
    """Map an error to the exit code the CLI reports for it."""
    if isinstance(error, UploadError):
        return ExitCode.UPLOAD_FAILED
    return ExitCode.GENERAL_ERROR


def handle_errors(f: F) -> F:
    """Turn webmctl errors and Ctrl-C into a message and an exit code.

    Click's own usage errors pass through untouched.
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except click.ClickException:
            raise
        except WebmCtlError as e:
            print_error(str(e))
            sys.exit(exit_code_for(e))
        except KeyboardInterrupt:
            print_error("Interrupted")
            sys.exit(ExitCode.USER_CANCELLED)

    return wrapper  # type: ignore[return-value]
