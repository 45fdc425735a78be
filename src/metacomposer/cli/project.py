"""
meta-composer CLI - project resource.

Show a project's scripts and where to find documentation for each of its
dependencies.
"""

from pathlib import Path

import typer

from metacomposer.cli.app import PANEL_RESOURCES, resource_app
from metacomposer.cli.errors import run_handler
from metacomposer.core.project import service as project_service
from metacomposer.core.registry import (
    CommandInfo,
    get_command_metadata,
    get_subcommand_description,
)


class ProjectResource:
    """The JavaScript project in the working directory as a resource."""

    name = "project"

    def __init__(self, project_dir: Path | None = None) -> None:
        self.project_dir = project_dir

    @property
    def instructions(self) -> str | None:
        return get_command_metadata(self.name).instructions

    def command_info(self) -> list[CommandInfo]:
        return [CommandInfo("get-info", get_subcommand_description(self.name, "get-info"))]

    def get_info(self) -> str:
        return project_service.get_info(self.project_dir or Path.cwd())

    def register_commands(self, app: typer.Typer) -> None:
        sub = resource_app(self.name)

        @sub.command(name="get-info", help=get_subcommand_description(self.name, "get-info"))
        def get_info_command() -> None:
            run_handler(self.name, "get-info", self.get_info)

        app.add_typer(sub, name=self.name, rich_help_panel=PANEL_RESOURCES)
