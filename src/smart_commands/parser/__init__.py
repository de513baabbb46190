"""Command line tokenizing and structural model."""

from .structure import CommandStructure, ParseError
from .tokenizer import SUBCOMMAND_COMMANDS, CommandParser, is_flag, parse

__all__ = [
    "CommandStructure",
    "ParseError",
    "CommandParser",
    "SUBCOMMAND_COMMANDS",
    "is_flag",
    "parse",
]
