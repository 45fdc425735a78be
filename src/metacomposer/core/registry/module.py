"""
Resource module protocol and command descriptors.

Every resource type (API specs, editor state, project dependencies, ...)
implements the ResourceModule protocol. The CLI layer is polymorphic over
it: it only asks a module for its name and instructions and lets the
module attach its own subcommands.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import typer


@dataclass(frozen=True)
class CommandInfo:
    """
    Presentational description of one subcommand.

    Attributes:
        name: Subcommand name (e.g. 'show')
        description: One-line help text
        arguments: Positional argument placeholders, in order
    """

    name: str
    description: str
    arguments: tuple[str, ...] = field(default_factory=tuple)

    def usage(self, resource: str, program: str = "meta-composer") -> str:
        """
        Render the invocation line for this subcommand.

        Example:
            >>> CommandInfo("show", "Show an endpoint", ("uri", "id")).usage("openapi")
            'meta-composer openapi show <uri> <id>'
        """
        parts = [program, resource, self.name]
        parts.extend(f"<{arg}>" for arg in self.arguments)
        return " ".join(parts)


@runtime_checkable
class ResourceModule(Protocol):
    """
    Protocol for resource module implementations.

    Modules are responsible for:
    - Providing a stable unique name (registry key and CLI verb)
    - Optionally providing usage instructions shown in help output
    - Attaching their own subcommands to the shared application
    - Catching their own handler errors and exiting non-zero
    """

    @property
    def name(self) -> str:
        """Unique resource name, e.g. 'openapi'."""
        ...

    @property
    def instructions(self) -> str | None:
        """Free-form guidance on when and how to use this resource."""
        ...

    def register_commands(self, app: typer.Typer) -> None:
        """
        Attach this module's subcommands to the application.

        Args:
            app: The root Typer application
        """
        ...

    def command_info(self) -> list[CommandInfo]:
        """Describe the subcommands this module registers."""
        ...
