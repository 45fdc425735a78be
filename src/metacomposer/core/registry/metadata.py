"""
Command metadata loading.

Descriptions, instructions and subcommand help text live in meta.yaml,
shipped next to the package. Modules read their help from here instead of
hard-coding it.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from metacomposer.core.exceptions import MetadataError

META_FILE = Path(__file__).parent.parent.parent / "meta.yaml"

# Global cache to avoid re-reading meta.yaml for every module
_metadata_cache: dict[str, "CommandMetadata"] | None = None


class CommandMetadata(BaseModel):
    """Help text for one resource and its subcommands."""

    description: str = Field(description="One-line resource description")
    instructions: str | None = Field(
        default=None,
        description="Free-form usage guidance shown in help output",
    )
    commands: dict[str, str] = Field(
        default_factory=dict,
        description="Subcommand name to description",
    )


def load_metadata(path: Path | None = None) -> dict[str, CommandMetadata]:
    """
    Load and validate meta.yaml.

    Args:
        path: Alternate metadata file (defaults to the packaged meta.yaml)

    Returns:
        Mapping from resource name to its metadata

    Raises:
        MetadataError: If the file is missing, not YAML, or fails validation
    """
    global _metadata_cache

    if path is None and _metadata_cache is not None:
        return _metadata_cache

    meta_path = path or META_FILE
    try:
        raw = yaml.safe_load(meta_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MetadataError(f"meta.yaml not found at {meta_path}: {e}") from e
    except yaml.YAMLError as e:
        raise MetadataError(f"meta.yaml at {meta_path} is not valid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise MetadataError(f"meta.yaml at {meta_path} must be a mapping")

    try:
        metadata = {str(name): CommandMetadata(**entry) for name, entry in raw.items()}
    except (TypeError, ValidationError) as e:
        raise MetadataError(f"Invalid entry in meta.yaml: {e}") from e

    if path is None:
        _metadata_cache = metadata
    return metadata


def get_command_metadata(command_name: str) -> CommandMetadata:
    """
    Get metadata for a resource.

    Raises:
        MetadataError: If meta.yaml has no entry for command_name
    """
    metadata = load_metadata()
    if command_name not in metadata:
        raise MetadataError(f'Command "{command_name}" not found in meta.yaml')
    return metadata[command_name]


def get_subcommand_description(command_name: str, subcommand_name: str) -> str:
    """
    Get the description of one subcommand.

    Raises:
        MetadataError: If the resource or subcommand is missing
    """
    command_metadata = get_command_metadata(command_name)
    if subcommand_name not in command_metadata.commands:
        raise MetadataError(
            f'Subcommand "{subcommand_name}" not found for command "{command_name}" in meta.yaml'
        )
    return command_metadata.commands[subcommand_name]


def clear_metadata_cache() -> None:
    """Forget the cached meta.yaml contents."""
    global _metadata_cache
    _metadata_cache = None
