"""
meta-composer CLI - openapi resource.

Browse the endpoints of an OpenAPI document fetched from a URL or read
from a file.
"""

from typing import Annotated

import typer

from metacomposer.cli.app import PANEL_RESOURCES, resource_app
from metacomposer.cli.errors import run_handler
from metacomposer.core.config import load_config
from metacomposer.core.openapi import (
    find_endpoint,
    load_document,
    render_document_info,
    render_endpoint_details,
    render_endpoint_list,
)
from metacomposer.core.registry import (
    CommandInfo,
    get_command_metadata,
    get_subcommand_description,
)

UriArgument = Annotated[
    str,
    typer.Argument(help="URL, file:// URI or path of an OpenAPI document (JSON or YAML)"),
]


class OpenAPIResource:
    """OpenAPI specifications as a list/show resource."""

    name = "openapi"

    @property
    def instructions(self) -> str | None:
        return get_command_metadata(self.name).instructions

    def command_info(self) -> list[CommandInfo]:
        return [
            CommandInfo("list", get_subcommand_description(self.name, "list"), ("uri",)),
            CommandInfo("show", get_subcommand_description(self.name, "show"), ("uri", "id")),
            CommandInfo("info", get_subcommand_description(self.name, "info"), ("uri",)),
        ]

    def list(self, uri: str) -> str:
        document = load_document(uri, load_config().http)
        return render_endpoint_list(document)

    def show(self, uri: str, endpoint_id: str) -> str:
        document = load_document(uri, load_config().http)
        endpoint, operation = find_endpoint(document, endpoint_id)
        return render_endpoint_details(document, endpoint, operation)

    def info(self, uri: str) -> str:
        document = load_document(uri, load_config().http)
        return render_document_info(document)

    def register_commands(self, app: typer.Typer) -> None:
        sub = resource_app(self.name)

        @sub.command(name="list", help=get_subcommand_description(self.name, "list"))
        def list_endpoints(uri: UriArgument) -> None:
            run_handler(self.name, "list", self.list, uri)

        @sub.command(name="show", help=get_subcommand_description(self.name, "show"))
        def show_endpoint(
            uri: UriArgument,
            endpoint_id: Annotated[
                str,
                typer.Argument(metavar="ID", help="Endpoint number from `openapi list`"),
            ],
        ) -> None:
            run_handler(
                self.name,
                "show",
                self.show,
                uri,
                endpoint_id,
                solution=f"meta-composer openapi list {uri}",
            )

        @sub.command(name="info", help=get_subcommand_description(self.name, "info"))
        def document_info(uri: UriArgument) -> None:
            run_handler(self.name, "info", self.info, uri)

        app.add_typer(sub, name=self.name, rich_help_panel=PANEL_RESOURCES)
