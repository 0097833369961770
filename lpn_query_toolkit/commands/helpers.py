"""Shared command helpers and utilities."""

import sys
from typing import Callable, Optional

from rich import print as rprint

from lpn_query_toolkit.shared.exceptions import (
    ConfigurationException,
    NonRetryableException,
)
from lpn_query_toolkit.shared.results import Result


def handle_command_error(
    error: Exception, show_usage_fn: Optional[Callable[[], None]] = None
) -> None:
    """
    Standard error handling for commands.

    Args:
        error: The exception that occurred
        show_usage_fn: Optional function to display usage instructions
    """
    if isinstance(error, ConfigurationException):
        rprint(f"[red]Configuration error:[/red] {error.message}")
    elif isinstance(error, NonRetryableException):
        reason = type(error).__name__
        rprint(f"[red]Rejected ({reason}):[/red] {error.message}")
    elif isinstance(error, ValueError):
        rprint(f"[red]Error:[/red] {str(error)}")
    else:
        rprint(f"[red]Unexpected error:[/red] {str(error)}")

    if show_usage_fn:
        show_usage_fn()

    sys.exit(1)


def exit_on_failure(result: Result) -> None:
    """Print every error of a failed result and exit with status 1."""
    if result.success:
        return
    for error in result.errors:
        reason = error.reason or error.source
        rprint(f"[red]{reason}:[/red] {error.message}")
    sys.exit(1)
