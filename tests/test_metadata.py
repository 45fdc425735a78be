"""
Tests for meta.yaml loading.
"""

import pytest

from metacomposer.core.exceptions import MetadataError
from metacomposer.core.registry import (
    CommandMetadata,
    get_command_metadata,
    get_subcommand_description,
    load_metadata,
)


class TestPackagedMetadata:
    """The shipped meta.yaml describes every built-in resource."""

    def test_all_resources_present(self):
        metadata = load_metadata()
        assert {"openapi", "nvim", "project"} <= set(metadata)

    @pytest.mark.parametrize(
        "resource,subcommands",
        [
            ("openapi", ["list", "show", "info"]),
            ("nvim", ["get-info", "buffers"]),
            ("project", ["get-info"]),
        ],
    )
    def test_subcommands_described(self, resource, subcommands):
        for subcommand in subcommands:
            assert get_subcommand_description(resource, subcommand)

    def test_instructions_present(self):
        for name in ("openapi", "nvim", "project"):
            assert get_command_metadata(name).instructions

    def test_cached(self):
        assert load_metadata() is load_metadata()


class TestMissingEntries:
    """Lookups of unknown names raise MetadataError."""

    def test_unknown_command(self):
        with pytest.raises(MetadataError, match='"lucid"'):
            get_command_metadata("lucid")

    def test_unknown_subcommand(self):
        with pytest.raises(MetadataError, match='"delete"'):
            get_subcommand_description("openapi", "delete")


class TestAlternateFile:
    """load_metadata(path) validates arbitrary files without caching them."""

    def test_valid_file(self, tmp_path):
        path = tmp_path / "meta.yaml"
        path.write_text(
            "demo:\n"
            "  description: Demo resource\n"
            "  commands:\n"
            "    run: Run it\n"
        )

        metadata = load_metadata(path)

        assert metadata == {
            "demo": CommandMetadata(description="Demo resource", commands={"run": "Run it"})
        }
        assert "demo" not in load_metadata()

    def test_missing_file(self, tmp_path):
        with pytest.raises(MetadataError, match="not found"):
            load_metadata(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "meta.yaml"
        path.write_text("demo: [unclosed\n")

        with pytest.raises(MetadataError, match="not valid YAML"):
            load_metadata(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "meta.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(MetadataError, match="must be a mapping"):
            load_metadata(path)

    def test_entry_without_description(self, tmp_path):
        path = tmp_path / "meta.yaml"
        path.write_text("demo:\n  commands: {}\n")

        with pytest.raises(MetadataError, match="Invalid entry"):
            load_metadata(path)
