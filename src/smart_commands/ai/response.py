"""Cleaning and interpretation of AI service replies."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from smart_commands.suggestion import Suggestion

logger = logging.getLogger(__name__)

# ```bash\n ... ``` style blocks, inline ```sh cmd```, and any leftover fence
_FENCE_WITH_NEWLINE = re.compile(r"```[\w+-]*[ \t]*\r?\n")
_FENCE_WITH_LANG = re.compile(r"```(?:bash|sh|shell|zsh|console|json)\b[ \t]*")
_FENCE = re.compile(r"```")
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_INLINE_CODE = re.compile(r"`([^`]*)`")
_PREFIX = re.compile(r"^(?:Command:|Suggestion:|Here's the command:|Use:|Run:)\s*", re.IGNORECASE)
_JSON_STRING_FIELD = r'"{key}"\s*:\s*"((?:[^"\\]|\\.)*)"'


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and wrapping backticks."""
    cleaned = text.strip()
    cleaned = _FENCE_WITH_NEWLINE.sub("", cleaned)
    cleaned = _FENCE_WITH_LANG.sub("", cleaned)
    cleaned = _FENCE.sub("", cleaned)
    return cleaned.strip().strip("`").strip()


def clean_command_text(text: str | None) -> str:
    """Reduce a free-text reply to a single command line."""
    if not text:
        return ""

    cleaned = strip_code_fences(text)
    cleaned = _BOLD.sub(r"\1", cleaned)
    cleaned = _INLINE_CODE.sub(r"\1", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return _PREFIX.sub("", cleaned).strip().strip("`").strip()


def extract_base_command(response: str | None) -> str | None:
    """First word of a bare-token reply."""
    cleaned = clean_command_text(response)
    if not cleaned:
        return None
    return cleaned.split()[0].strip("'\"")


def extract_subcommand(response: str | None, base_command: str) -> str | None:
    """Subcommand from a bare-token reply, tolerating a repeated base command."""
    cleaned = clean_command_text(response)
    if not cleaned:
        return None

    words = cleaned.split()
    if len(words) > 1 and words[0].lower() == base_command.lower():
        words = words[1:]

    subcommand = words[0].strip("'\"")
    if subcommand.lower() == base_command.lower():
        return None
    return subcommand


def _load_fields(text: str) -> dict[str, Any]:
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        try:
            data = json.loads(text[start:end + 1])
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            logger.debug("Reply is not valid JSON, extracting fields by pattern")

    fields = {}
    for key in ("type", "suggestion", "message"):
        match = re.search(_JSON_STRING_FIELD.format(key=key), text, re.DOTALL)
        if match:
            fields[key] = match.group(1)
    return fields


def parse_validation_response(original: str, response: str | None) -> Suggestion:
    """Interpret a JSON validation reply.

    Anything that cannot be understood is treated as "command is valid".
    """
    if not response or not response.strip():
        logger.warning("AI returned empty response, command assumed valid")
        return Suggestion.valid(original)

    fields = _load_fields(strip_code_fences(response))
    verdict = fields.get("type")
    if not isinstance(verdict, str):
        logger.warning("Failed to parse type from response, command assumed valid")
        return Suggestion.valid(original)

    verdict = verdict.strip().upper()
    if verdict in ("CORRECTION", "SUGGESTION"):
        suggestion = fields.get("suggestion")
        message = fields.get("message")
        corrected = clean_command_text(suggestion) if isinstance(suggestion, str) else ""
        if corrected and corrected != original:
            logger.info(f"AI suggests {verdict.lower()}: {original} -> {corrected}")
            return Suggestion.correction(
                original,
                corrected,
                message if isinstance(message, str) and message else None,
            )
    elif verdict != "VALID":
        logger.warning(f"Unknown response type {verdict!r}, command assumed valid")

    return Suggestion.valid(original)
