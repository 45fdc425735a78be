"""
Composition root for the meta-composer CLI.

create_app() registers resource modules into a registry (failing fast on
duplicate names), builds the root Typer application, and lets each module
attach its own subcommands. Nothing is parsed until the returned app is
invoked.
"""

import logging
import os
import sys
from collections.abc import Iterable
from typing import Any

import click
import typer
import yaml
from typer.core import TyperGroup

from metacomposer import __version__
from metacomposer.cli.errors import ExitCode, run_handler
from metacomposer.core.config import load_layered_env
from metacomposer.core.registry import (
    ResourceModule,
    ResourceRegistry,
    get_command_metadata,
    load_metadata,
)

PROGRAM_NAME = "meta-composer"

# Help panel names for command grouping
PANEL_RESOURCES = "Resources"
PANEL_INDEX = "Discover"

logger = logging.getLogger(__name__)


class UnknownResourceError(click.UsageError):
    """Raised when the first command word names no registered resource."""

    exit_code = ExitCode.GENERAL_ERROR


class ResourceGroup(TyperGroup):
    """
    Root command group.

    Reports unknown top-level words as unknown resources (listing the
    registered ones) and makes every usage error exit with GENERAL_ERROR
    instead of Click's default of 2.
    """

    def resource_names(self) -> list[str]:
        """Names of the resource sub-apps, in registration order."""
        return [name for name, command in self.commands.items() if isinstance(command, click.Group)]

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if args and not args[0].startswith("-"):
                available = ", ".join(self.resource_names()) or "(none)"
                raise UnknownResourceError(
                    f"Unknown resource '{args[0]}'. Available resources: {available}",
                    ctx=ctx,
                ) from e
            raise

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.GENERAL_ERROR
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = ExitCode.GENERAL_ERROR
            raise


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging on stderr.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _env_debug() -> bool:
    return os.environ.get("META_COMPOSER_DEBUG", "").lower() not in ("", "0", "false")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(ExitCode.SUCCESS)


def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    A tool for composing and traversing arbitrary information.

    Every resource (API specifications, editor state, project
    dependencies) sits behind the same command shape:

        meta-composer <resource> <command> <arguments...>

    Use `meta-composer resources` to see every resource, its usage
    instructions and its commands.
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug or _env_debug())

    ctx.obj = {"debug": debug}

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(ExitCode.SUCCESS)


def resource_app(name: str) -> typer.Typer:
    """
    Build the sub-application for a resource from its meta.yaml entry.

    The description becomes the help text and the instructions the epilog.
    """
    metadata = get_command_metadata(name)
    return typer.Typer(
        name=name,
        help=metadata.description,
        epilog=metadata.instructions,
        no_args_is_help=False,
    )


def describe_resources(registry: ResourceRegistry) -> str:
    """YAML index of every registered resource and its commands."""
    metadata = load_metadata()
    entries = []
    for name in registry.list():
        module = registry.require(name)
        entry: dict[str, Any] = {"name": name}
        if name in metadata:
            entry["description"] = metadata[name].description
        if module.instructions:
            entry["instructions"] = module.instructions.strip()
        entry["commands"] = [
            {"usage": info.usage(name, PROGRAM_NAME), "description": info.description}
            for info in module.command_info()
        ]
        entries.append(entry)
    return yaml.safe_dump(entries, sort_keys=False, allow_unicode=True, width=100).strip()


def _resources_epilog(registry: ResourceRegistry) -> str:
    names = registry.list()
    if not names:
        return "No resources registered."
    return f"Available resources: {', '.join(names)}"


def create_app(
    modules: Iterable[ResourceModule],
    registry: ResourceRegistry | None = None,
) -> typer.Typer:
    """
    Register modules and assemble the command tree.

    Args:
        modules: Resource modules, in the order their commands should appear
        registry: Registry to populate (defaults to a fresh one)

    Returns:
        The root Typer application, ready to be invoked once

    Raises:
        DuplicateNameError: If two modules share a name; raised before any
            command is attached
    """
    if registry is None:
        registry = ResourceRegistry()

    for module in modules:
        registry.register(module)

    app = typer.Typer(
        name=PROGRAM_NAME,
        cls=ResourceGroup,
        invoke_without_command=True,
        add_completion=False,
        epilog=_resources_epilog(registry),
        context_settings={"help_option_names": ["--help", "-h"]},
    )
    app.callback(invoke_without_command=True)(main)

    @app.command(name="resources", rich_help_panel=PANEL_INDEX)
    def resources() -> None:
        """List every resource with its instructions and commands."""
        run_handler("resources", "list", describe_resources, registry)

    for module in registry.modules():
        logger.debug("Attaching commands for %s", module.name)
        module.register_commands(app)

    return app


__all__ = [
    "PANEL_RESOURCES",
    "PROGRAM_NAME",
    "ResourceGroup",
    "UnknownResourceError",
    "create_app",
    "describe_resources",
    "resource_app",
    "setup_logging",
]
