"""
Standardized error handling and exit codes for the meta-composer CLI.

Every handler runs through run_handler(), which is the single action
boundary: errors are caught there, reported on stderr with the resource and
operation that failed, and turned into exit code 1. Payloads are echoed to
stdout only after the handler has returned successfully.
"""

import logging
from collections.abc import Callable
from enum import IntEnum

import typer
from rich.console import Console
from rich.markup import escape

from metacomposer.core.exceptions import MetaComposerError

err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Standard exit codes for meta-composer operations."""

    SUCCESS = 0
    """Operation completed successfully (also help and --version)."""

    GENERAL_ERROR = 1
    """Handler failure, unknown resource, or invalid command line."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message to stderr.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "openapi show: Endpoint with ID '9' not found. Valid IDs are 1-3.",
        ...     solution="meta-composer openapi list <uri>",
        ... )
    """
    err_console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        err_console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        err_console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def run_handler(
    resource: str,
    operation: str,
    handler: Callable[..., str],
    *args: object,
    solution: str | None = None,
) -> None:
    """
    Run a subcommand handler and print its payload.

    Args:
        resource: Resource module name, used as error context
        operation: Subcommand name, used as error context
        handler: Callable returning the complete payload
        *args: Arguments passed to handler
        solution: Hint shown when the handler fails

    Raises:
        typer.Exit: With GENERAL_ERROR when the handler raises
    """
    try:
        payload = handler(*args)
    except MetaComposerError as e:
        logger.debug("%s %s failed", resource, operation, exc_info=True)
        print_error(f"{resource} {operation}: {e}", solution=solution)
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e
    except Exception as e:
        logger.debug("Unexpected error in %s %s", resource, operation, exc_info=True)
        print_error(
            f"{resource} {operation}: {e}",
            reason=f"Unexpected {type(e).__name__}; run with --debug for the traceback",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    if payload:
        typer.echo(payload)


__all__ = [
    "ExitCode",
    "err_console",
    "print_error",
    "run_handler",
]
