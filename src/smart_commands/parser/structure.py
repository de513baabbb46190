"""Structured representation of a parsed command line."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

FLAG = "flag"
ARGUMENT = "arg"


class ParseError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass(frozen=True)
class CommandStructure:
    """A command line split into its parts.

    Examples:
        ``docker ps -a``  -> base ``docker``, subcommand ``ps``, flags ``("-a",)``
        ``git commit -m 'msg'`` -> base ``git``, subcommand ``commit``,
        flags ``("-m",)``, arguments ``("msg",)``
        ``ls -la /home`` -> base ``ls``, flags ``("-la",)``, arguments ``("/home",)``
    """

    raw_command: str
    base_command: str
    subcommand: str | None = None
    flags: tuple[str, ...] = ()
    arguments: tuple[str, ...] = ()
    # Interleaving of flags and arguments as they appeared in the input
    layout: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.base_command:
            raise ParseError("Base command cannot be empty")

        object.__setattr__(self, "flags", tuple(self.flags))
        object.__setattr__(self, "arguments", tuple(self.arguments))

        if not self.layout:
            layout = (FLAG,) * len(self.flags) + (ARGUMENT,) * len(self.arguments)
            object.__setattr__(self, "layout", layout)
        elif (
            self.layout.count(FLAG) != len(self.flags)
            or self.layout.count(ARGUMENT) != len(self.arguments)
        ):
            raise ValueError("Layout does not match flags and arguments")

    @property
    def has_subcommand(self) -> bool:
        return bool(self.subcommand)

    @property
    def has_flags(self) -> bool:
        return bool(self.flags)

    @property
    def has_arguments(self) -> bool:
        return bool(self.arguments)

    def reconstruct(self) -> str:
        """Rebuild a command line from the parts.

        Arguments containing whitespace are wrapped in single quotes (double
        quotes when the argument itself holds a single quote).
        """
        parts = [self.base_command]
        if self.has_subcommand:
            parts.append(self.subcommand)

        flags = iter(self.flags)
        arguments = iter(self.arguments)
        for kind in self.layout:
            if kind == FLAG:
                parts.append(next(flags))
            else:
                parts.append(_quote(next(arguments)))

        return " ".join(parts)

    def with_base_command(self, base_command: str) -> CommandStructure:
        """Copy of this structure with a different base command."""
        return replace(self, base_command=base_command)

    def with_subcommand(self, subcommand: str | None) -> CommandStructure:
        """Copy of this structure with a different subcommand."""
        return replace(self, subcommand=subcommand)

    def with_flag_replaced(self, old: str, new: str) -> CommandStructure:
        """Copy of this structure with every occurrence of ``old`` flag replaced."""
        flags = tuple(new if flag == old else flag for flag in self.flags)
        return replace(self, flags=flags)

    def __str__(self) -> str:
        return self.reconstruct()


def _quote(argument: str) -> str:
    if not any(ch.isspace() for ch in argument) and argument:
        return argument
    if "'" in argument:
        return f'"{argument}"'
    return f"'{argument}'"
