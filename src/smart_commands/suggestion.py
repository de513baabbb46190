"""The engine's single output type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SuggestionType(Enum):
    """Kinds of verdict the engine can return."""

    VALID = "valid"
    CORRECTION = "correction"
    SMART_COMMAND = "smart_command"
    ERROR = "error"


@dataclass(frozen=True)
class Suggestion:
    """A verdict on a command line.

    Use the constructor classmethods; fields that do not apply to a kind are
    left as ``None``.
    """

    type: SuggestionType
    original: str | None = None
    suggestion: str | None = None
    message: str | None = None

    @classmethod
    def valid(cls, command: str) -> Suggestion:
        return cls(SuggestionType.VALID, original=command)

    @classmethod
    def correction(
        cls,
        original: str,
        corrected: str,
        explanation: str | None = None,
    ) -> Suggestion:
        if not corrected:
            raise ValueError("A correction needs a corrected command")
        return cls(
            SuggestionType.CORRECTION,
            original=original,
            suggestion=corrected,
            message=explanation or f"Did you mean: {corrected}?",
        )

    @classmethod
    def smart_command(cls, task: str, command: str) -> Suggestion:
        if not command:
            raise ValueError("A smart command needs a generated command")
        return cls(
            SuggestionType.SMART_COMMAND,
            original=task,
            suggestion=command,
            message=f"Suggested command: {command}",
        )

    @classmethod
    def error(cls, message: str) -> Suggestion:
        return cls(SuggestionType.ERROR, message=message)

    @property
    def is_valid(self) -> bool:
        return self.type == SuggestionType.VALID

    @property
    def is_correction(self) -> bool:
        return self.type == SuggestionType.CORRECTION

    @property
    def is_smart_command(self) -> bool:
        return self.type == SuggestionType.SMART_COMMAND

    @property
    def is_error(self) -> bool:
        return self.type == SuggestionType.ERROR

    def to_dict(self) -> dict[str, str | None]:
        return {
            "type": self.type.value,
            "original": self.original,
            "suggestion": self.suggestion,
            "message": self.message,
        }

    def __str__(self) -> str:
        if self.type == SuggestionType.VALID:
            return f"Command: {self.original}"
        if self.type == SuggestionType.CORRECTION:
            return f"Correction: '{self.original}' -> '{self.suggestion}'"
        if self.type == SuggestionType.SMART_COMMAND:
            return f"Smart Command: '{self.original}' -> '{self.suggestion}'"
        return f"Error: {self.message}"
