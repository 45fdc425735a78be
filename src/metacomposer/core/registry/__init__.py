"""
Resource registry and module contract.

This package holds the process-wide registry, the ResourceModule protocol
every resource implements, and the meta.yaml help loader.
"""

from .metadata import (
    CommandMetadata,
    clear_metadata_cache,
    get_command_metadata,
    get_subcommand_description,
    load_metadata,
)
from .module import CommandInfo, ResourceModule
from .registry import ResourceRegistry, registry

__all__ = [
    # Contract
    "CommandInfo",
    "ResourceModule",
    # Registry
    "ResourceRegistry",
    "registry",
    # Metadata
    "CommandMetadata",
    "clear_metadata_cache",
    "get_command_metadata",
    "get_subcommand_description",
    "load_metadata",
]
