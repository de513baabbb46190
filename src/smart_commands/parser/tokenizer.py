"""Command line tokenizer and parser."""

from __future__ import annotations

import logging
import re

from .structure import ARGUMENT, FLAG, CommandStructure, ParseError

logger = logging.getLogger(__name__)

# Commands whose second token is a subcommand
SUBCOMMAND_COMMANDS = frozenset({
    "docker", "git", "kubectl", "npm", "cargo", "systemctl",
    "brew", "apt", "yum", "pip", "go", "mvn", "gradle",
})

# Single-quoted, double-quoted, flag-shaped (value may be quoted), plain
TOKEN_PATTERN = re.compile(
    r"""'([^']*)'|"([^"]*)"|(--?\w[\w-]*(?:=(?:'[^']*'|"[^"]*"|\S+))?)(?=\s|$)|(\S+)"""
)


def is_flag(token: str) -> bool:
    """Check if a token is flag-shaped (``-x``, ``--name``, ``--name=value``).

    A lone ``-`` is the conventional stdin placeholder and counts as an argument.
    """
    return token.startswith("-") and token != "-"


class CommandParser:
    """Splits raw command lines into :class:`CommandStructure` values."""

    def __init__(self, subcommand_commands: frozenset[str] | set[str] | None = None) -> None:
        """Initialize parser.

        Args:
            subcommand_commands: Base commands that take a subcommand
        """
        if subcommand_commands is None:
            subcommand_commands = SUBCOMMAND_COMMANDS
        self.subcommand_commands = frozenset(c.lower() for c in subcommand_commands)

    def tokenize(self, command: str) -> list[str]:
        """Tokenize a command string, honoring single and double quotes."""
        tokens = []
        for match in TOKEN_PATTERN.finditer(command):
            single, double, flag, plain = match.groups()
            if single is not None:
                tokens.append(single)
            elif double is not None:
                tokens.append(double)
            elif flag is not None:
                tokens.append(flag)
            else:
                tokens.append(plain)

        logger.debug(f"Tokenized {command!r} into: {tokens}")
        return tokens

    def expects_subcommand(self, base_command: str) -> bool:
        return base_command.lower() in self.subcommand_commands

    def parse(self, command: str | None) -> CommandStructure:
        """Parse a command string into a structured representation.

        Args:
            command: Raw command line

        Returns:
            Parsed command structure

        Raises:
            ParseError: If the command is empty or has no usable base command
        """
        if command is None or not command.strip():
            raise ParseError("Command cannot be empty")

        trimmed = command.strip()
        tokens = self.tokenize(trimmed)
        if not tokens or not tokens[0]:
            raise ParseError(f"No base command found in: {trimmed!r}")

        base_command = tokens[0]
        subcommand = None
        index = 1

        if self.expects_subcommand(base_command) and len(tokens) > 1 and not is_flag(tokens[1]):
            subcommand = tokens[1]
            index = 2

        flags = []
        arguments = []
        layout = []
        for token in tokens[index:]:
            if is_flag(token):
                flags.append(token)
                layout.append(FLAG)
            else:
                arguments.append(token)
                layout.append(ARGUMENT)

        structure = CommandStructure(
            raw_command=trimmed,
            base_command=base_command,
            subcommand=subcommand,
            flags=tuple(flags),
            arguments=tuple(arguments),
            layout=tuple(layout),
        )
        logger.debug(f"Parsed command: {trimmed!r} -> {structure!r}")
        return structure


_default_parser = CommandParser()


def parse(command: str | None) -> CommandStructure:
    """Parse with the default subcommand-aware command set."""
    return _default_parser.parse(command)
