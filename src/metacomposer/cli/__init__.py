"""
meta-composer CLI - Main application entry point.

This module constructs every resource module, registers them into the
process-wide registry and builds the Typer application from them.
"""

import sys

from metacomposer.cli.app import create_app
from metacomposer.cli.argv import preprocess_argv
from metacomposer.cli.nvim import NvimResource
from metacomposer.cli.openapi import OpenAPIResource
from metacomposer.cli.project import ProjectResource
from metacomposer.core.registry import ResourceModule, registry


def default_modules() -> list[ResourceModule]:
    """Every built-in resource module, in help-text order."""
    return [
        OpenAPIResource(),
        NvimResource(),
        ProjectResource(),
    ]


app = create_app(default_modules(), registry)


def cli_main() -> None:
    """
    Main CLI entry point.

    The argv preprocessor normalizes common patterns before Typer parses
    them (e.g. ``meta-composer -V``, ``meta-composer help openapi``,
    ``meta-composer openapi list spec.yaml --debug``).
    """
    sys.argv[1:] = preprocess_argv(sys.argv[1:])
    app()


__all__ = ["app", "cli_main", "default_modules"]
