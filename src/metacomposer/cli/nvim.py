"""
meta-composer CLI - nvim resource.

Report the state of a running Neovim (version, mode, working directory,
buffers) by talking to it over msgpack-RPC.
"""

from typing import Annotated

import typer

from metacomposer.cli.app import PANEL_RESOURCES, resource_app
from metacomposer.cli.errors import run_handler
from metacomposer.core.config import load_config
from metacomposer.core.nvim import service as nvim_service
from metacomposer.core.registry import (
    CommandInfo,
    get_command_metadata,
    get_subcommand_description,
)

SocketOption = Annotated[
    str | None,
    typer.Option(
        "--socket",
        "-s",
        help="Neovim RPC address: a Unix socket path or host:port",
    ),
]


class NvimResource:
    """A running Neovim as a resource."""

    name = "nvim"

    @property
    def instructions(self) -> str | None:
        return get_command_metadata(self.name).instructions

    def command_info(self) -> list[CommandInfo]:
        return [
            CommandInfo("get-info", get_subcommand_description(self.name, "get-info")),
            CommandInfo("buffers", get_subcommand_description(self.name, "buffers")),
        ]

    def get_info(self, socket: str | None = None) -> str:
        config = load_config().nvim
        address = nvim_service.resolve_address(socket, config)
        return nvim_service.get_info(address, timeout=config.timeout)

    def buffers(self, socket: str | None = None) -> str:
        config = load_config().nvim
        address = nvim_service.resolve_address(socket, config)
        return nvim_service.get_buffers(address, timeout=config.timeout)

    def register_commands(self, app: typer.Typer) -> None:
        sub = resource_app(self.name)

        @sub.command(name="get-info", help=get_subcommand_description(self.name, "get-info"))
        def get_info_command(socket: SocketOption = None) -> None:
            run_handler(self.name, "get-info", self.get_info, socket)

        @sub.command(name="buffers", help=get_subcommand_description(self.name, "buffers"))
        def buffers_command(socket: SocketOption = None) -> None:
            run_handler(self.name, "buffers", self.buffers, socket)

        app.add_typer(sub, name=self.name, rich_help_panel=PANEL_RESOURCES)
