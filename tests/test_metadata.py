"""Tests for the command metadata store."""

import json
from pathlib import Path

import pytest

from smart_commands.metadata import CommandMetadata, CommandMetadataStore, is_known_flag


@pytest.fixture
def metadata_dir(tmp_path: Path) -> Path:
    """Directory with one valid and one malformed metadata file."""
    (tmp_path / "tools.json").write_text(json.dumps({
        "commands": [
            {
                "base_command": "Terraform",
                "description": "Infrastructure as code",
                "subcommands": ["init", "plan", "apply", "destroy"],
                "flags": ["-auto-approve", "-var", "--help"],
            },
        ],
    }))
    (tmp_path / "broken.json").write_text("{not json")
    return tmp_path


class TestCommandMetadata:
    """Test metadata entries."""

    def test_normalizes_names(self) -> None:
        """Test base command and subcommands are lower-cased."""
        metadata = CommandMetadata("Docker", frozenset({"PS"}), frozenset({"-a"}))

        assert metadata.base_command == "docker"
        assert metadata.is_valid_subcommand("ps")
        assert metadata.is_valid_subcommand("Ps")

    def test_flag_with_value(self) -> None:
        """Test --name=value is checked by name."""
        metadata = CommandMetadata("docker", valid_flags=frozenset({"--name"}))

        assert metadata.is_valid_flag("--name=web")
        assert not metadata.is_valid_flag("--nme=web")

    def test_bundled_short_flags(self) -> None:
        """Test -it style bundles."""
        metadata = CommandMetadata("docker", valid_flags=frozenset({"-i", "-t", "-a"}))

        assert metadata.is_valid_flag("-it")
        assert metadata.is_valid_flag("-ait")
        assert not metadata.is_valid_flag("-iz")
        assert not metadata.is_valid_flag("--it")

    def test_has_subcommands(self) -> None:
        """Test commands without subcommand knowledge."""
        assert not CommandMetadata("ls", valid_flags=frozenset({"-l"})).has_subcommands


class TestCommandMetadataStore:
    """Test metadata lookup and loading."""

    def test_builtin_commands(self) -> None:
        """Test the built-in command set."""
        store = CommandMetadataStore()

        assert store.commands() == ["docker", "git", "kubectl", "npm"]
        assert "ps" in store.get_metadata("docker").valid_subcommands

    def test_case_insensitive_lookup(self) -> None:
        """Test lookups ignore case."""
        store = CommandMetadataStore()

        assert store.get_metadata("GIT") is store.get_metadata("git")
        assert store.has_metadata("Kubectl")
        assert "NPM" in store

    def test_missing_command(self) -> None:
        """Test unknown commands have no metadata."""
        store = CommandMetadataStore()

        assert store.get_metadata("ls") is None
        assert not store.has_metadata("ls")

    def test_load_directory(self, metadata_dir: Path) -> None:
        """Test JSON files extend the store and malformed files are skipped."""
        store = CommandMetadataStore(metadata_dir)

        terraform = store.get_metadata("terraform")
        assert terraform is not None
        assert terraform.is_valid_subcommand("plan")
        assert terraform.description == "Infrastructure as code"
        assert len(store) == 5

    def test_load_missing_directory(self, tmp_path: Path) -> None:
        """Test a missing directory loads nothing."""
        store = CommandMetadataStore(include_builtin=False)

        assert store.load_directory(tmp_path / "missing") == 0
        assert len(store) == 0

    def test_add_metadata_replaces(self) -> None:
        """Test later metadata replaces earlier entries."""
        store = CommandMetadataStore()
        store.add_metadata(CommandMetadata("git", frozenset({"status"})))

        assert store.get_metadata("git").valid_subcommands == frozenset({"status"})

    def test_from_entries(self) -> None:
        """Test building a store from plain entries only."""
        store = CommandMetadataStore.from_entries([
            {"base_command": "brew", "subcommands": ["install"], "flags": ["--cask"]},
        ])

        assert store.commands() == ["brew"]
        assert store.get_metadata("brew").is_valid_flag("--cask")


class TestIsKnownFlag:
    """Test the flag rule shared with the fallback table."""

    def test_rules(self) -> None:
        """Test names, values and short flag bundles."""
        known = frozenset({"-a", "-m", "--tail"})

        assert is_known_flag("-am", known)
        assert is_known_flag("--tail=10", known)
        assert not is_known_flag("-ax", known)
        assert not is_known_flag("--tial=10", known)
