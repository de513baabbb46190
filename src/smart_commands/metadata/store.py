"""Known-command metadata: valid subcommands and flags per base command."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)


def is_known_flag(flag: str, known_flags: frozenset[str]) -> bool:
    """Check a flag token, by name and as a bundle of short flags such as ``-it``."""
    name = flag.split("=", 1)[0]
    if name in known_flags:
        return True

    if not name.startswith("--") and len(name) > 2:
        return all(f"-{letter}" in known_flags for letter in name[1:])

    return False


@dataclass(frozen=True)
class CommandMetadata:
    """Valid subcommands and flags for one base command."""

    base_command: str
    valid_subcommands: frozenset[str] = field(default_factory=frozenset)
    valid_flags: frozenset[str] = field(default_factory=frozenset)
    description: str = ""

    def __post_init__(self) -> None:
        """Normalize names: lower-case command and subcommands, flags as given."""
        object.__setattr__(self, "base_command", self.base_command.lower())
        object.__setattr__(
            self, "valid_subcommands", frozenset(s.lower() for s in self.valid_subcommands)
        )
        object.__setattr__(self, "valid_flags", frozenset(self.valid_flags))

    @property
    def has_subcommands(self) -> bool:
        return bool(self.valid_subcommands)

    def is_valid_subcommand(self, subcommand: str) -> bool:
        return subcommand.lower() in self.valid_subcommands

    def is_valid_flag(self, flag: str) -> bool:
        """Check a flag token against the known flags.

        ``--name=value`` is checked by its name. A bundle of short flags such
        as ``-it`` is valid when every letter is a known short flag.
        """
        return is_known_flag(flag, self.valid_flags)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandMetadata:
        return cls(
            base_command=data["base_command"],
            valid_subcommands=frozenset(data.get("subcommands", [])),
            valid_flags=frozenset(data.get("flags", [])),
            description=data.get("description", ""),
        )


BUILTIN_METADATA = [
    {
        "base_command": "docker",
        "description": "Docker container management",
        "subcommands": [
            "ps", "run", "stop", "start", "restart", "rm", "rmi",
            "images", "exec", "logs", "build", "pull", "push",
            "inspect", "stats", "top", "attach", "commit", "cp",
            "create", "diff", "events", "export", "history",
            "import", "info", "kill", "load", "login", "logout",
            "pause", "port", "rename", "save", "search", "tag",
            "unpause", "update", "version", "wait", "network",
            "volume", "system", "compose", "container", "image",
        ],
        "flags": [
            "-a", "--all", "-q", "--quiet", "-s", "--size",
            "-f", "--filter", "-n", "--last", "-l", "--latest",
            "-v", "--volume", "-p", "--publish", "-d", "--detach",
            "-e", "--env", "-i", "--interactive", "-t", "--tty",
            "--rm", "--name", "--network", "-w", "--workdir",
            "-u", "--user", "-m", "--memory", "-c", "--cpu-shares",
            "--help", "--version", "--format", "--no-trunc",
        ],
    },
    {
        "base_command": "git",
        "description": "Version control system",
        "subcommands": [
            "add", "commit", "push", "pull", "clone", "status",
            "log", "diff", "branch", "checkout", "merge", "rebase",
            "reset", "revert", "tag", "fetch", "remote", "init",
            "config", "stash", "show", "rm", "mv", "restore",
            "switch", "cherry-pick", "bisect", "grep", "blame",
        ],
        "flags": [
            "-m", "--message", "-a", "--all", "-v", "--verbose",
            "-f", "--force", "-b", "--branch", "-d", "--delete",
            "-u", "--set-upstream", "-p", "--patch", "-n", "--dry-run",
            "--amend", "--author", "--date", "--hard", "--soft",
            "--mixed", "--cached", "--help", "--version",
        ],
    },
    {
        "base_command": "kubectl",
        "description": "Kubernetes cluster management",
        "subcommands": [
            "get", "describe", "create", "delete", "apply", "logs",
            "exec", "run", "expose", "scale", "rollout", "set",
            "edit", "label", "annotate", "config", "cluster-info",
            "top", "cordon", "drain", "taint", "attach", "port-forward",
            "proxy", "cp", "auth", "diff", "patch", "replace", "wait",
        ],
        "flags": [
            "-f", "--filename", "-n", "--namespace", "-l", "--selector",
            "-o", "--output", "-w", "--watch", "--all-namespaces",
            "-v", "--verbose", "--dry-run", "--force", "--grace-period",
            "--help", "--context", "--kubeconfig", "--replicas",
        ],
    },
    {
        "base_command": "npm",
        "description": "Node package manager",
        "subcommands": [
            "install", "i", "uninstall", "update", "run", "start",
            "test", "build", "init", "publish", "version", "search",
            "view", "list", "ls", "link", "audit", "outdated",
            "cache", "config", "docs", "repo", "help",
        ],
        "flags": [
            "-g", "--global", "-D", "--save-dev", "-S", "--save",
            "-E", "--save-exact", "-P", "--save-prod",
            "--dry-run", "--force", "--legacy-peer-deps",
            "--production", "--only", "--verbose", "--silent",
            "--help", "--version",
        ],
    },
]


class CommandMetadataStore:
    """Case-insensitive lookup of :class:`CommandMetadata` by base command."""

    def __init__(
        self,
        metadata_dir: str | Path | None = None,
        include_builtin: bool = True,
    ) -> None:
        """Initialize store.

        Args:
            metadata_dir: Directory of JSON metadata files to load
            include_builtin: Whether to start from the built-in command set
        """
        self.metadata_dir = Path(metadata_dir) if metadata_dir else None
        self._metadata: dict[str, CommandMetadata] = {}

        if include_builtin:
            self._load_builtin_metadata()
        if self.metadata_dir:
            self.load_directory(self.metadata_dir)

        logger.info(f"Initialized metadata for {len(self._metadata)} commands")

    def _load_builtin_metadata(self) -> None:
        for entry in BUILTIN_METADATA:
            self.add_metadata(CommandMetadata.from_dict(entry))

    def load_directory(self, metadata_dir: str | Path) -> int:
        """Load metadata from every ``*.json`` file in a directory.

        Each file holds ``{"commands": [{"base_command": ..., "subcommands":
        [...], "flags": [...], "description": ...}]}``. Entries replace
        existing metadata for the same base command.

        Returns:
            Number of commands loaded
        """
        metadata_dir = Path(metadata_dir)
        if not metadata_dir.exists():
            logger.warning(f"Metadata directory not found: {metadata_dir}")
            return 0

        loaded = 0
        for metadata_file in sorted(metadata_dir.glob("*.json")):
            try:
                with open(metadata_file) as f:
                    data = json.load(f)

                for entry in data.get("commands", []):
                    self.add_metadata(CommandMetadata.from_dict(entry))
                    loaded += 1
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to load metadata file {metadata_file}: {e}")

        return loaded

    def add_metadata(self, metadata: CommandMetadata) -> None:
        self._metadata[metadata.base_command] = metadata

    def get_metadata(self, base_command: str) -> CommandMetadata | None:
        return self._metadata.get(base_command.lower())

    def has_metadata(self, base_command: str) -> bool:
        return base_command.lower() in self._metadata

    def commands(self) -> list[str]:
        """Sorted names of all commands with metadata."""
        return sorted(self._metadata)

    def __len__(self) -> int:
        return len(self._metadata)

    def __contains__(self, base_command: str) -> bool:
        return self.has_metadata(base_command)

    @classmethod
    def from_entries(cls, entries: Iterable[dict[str, Any]]) -> CommandMetadataStore:
        """Build a store holding only the given metadata entries."""
        store = cls(include_builtin=False)
        for entry in entries:
            store.add_metadata(CommandMetadata.from_dict(entry))
        return store
