"""AI suggestion service client, prompts and reply parsing."""

from .client import AIServiceError, AITimeout, AIUnavailable, OllamaClient
from .response import (
    clean_command_text,
    extract_base_command,
    extract_subcommand,
    parse_validation_response,
    strip_code_fences,
)

__all__ = [
    "AIServiceError",
    "AITimeout",
    "AIUnavailable",
    "OllamaClient",
    "clean_command_text",
    "extract_base_command",
    "extract_subcommand",
    "parse_validation_response",
    "strip_code_fences",
]
