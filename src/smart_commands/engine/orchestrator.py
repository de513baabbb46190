"""Validation engine: quick cache, structural validation, AI escalation."""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol

from smart_commands.ai.client import AIServiceError, OllamaClient
from smart_commands.ai.prompts import base_command_prompt, subcommand_prompt, validation_prompt
from smart_commands.ai.response import (
    extract_base_command,
    extract_subcommand,
    parse_validation_response,
)
from smart_commands.config import EngineConfig
from smart_commands.engine.breaker import BreakerState, CircuitBreaker
from smart_commands.metadata.store import CommandMetadata, CommandMetadataStore
from smart_commands.parser.structure import CommandStructure, ParseError
from smart_commands.parser.tokenizer import CommandParser
from smart_commands.suggestion import Suggestion
from smart_commands.validation.cache import QuickCorrectionCache, base_scope, subcommand_scope
from smart_commands.validation.fallback import FallbackValidator
from smart_commands.validation.structural import StructuralValidator

logger = logging.getLogger(__name__)

# sc "task description" / sc 'task description'
SMART_COMMAND_PATTERN = re.compile(r"""^sc\s+(?:"([^"]*)"|'([^']*)')\s*$""")

# Leading VAR=value assignment
ENV_ASSIGNMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")

AI_UNREACHABLE_MESSAGE = (
    "AI service is unreachable. Make sure Ollama is running and try again later."
)
SMART_COMMAND_FAILED_MESSAGE = (
    "Failed to generate command suggestion. Please try rephrasing your request."
)


class AIClient(Protocol):
    """What the engine needs from an AI suggestion service."""

    async def generate(self, raw_command: str, prompt: str) -> str | None: ...

    async def suggest_commands_for_task(self, task: str) -> str | None: ...


def should_skip_validation(command: str) -> bool:
    """Comments, path invocations and env assignments are never validated."""
    if command.startswith("#"):
        return True

    first_word = command.split(maxsplit=1)[0]
    return "/" in first_word or bool(ENV_ASSIGNMENT_PATTERN.match(first_word))


def extract_smart_task(command: str) -> str | None:
    """Task text of an ``sc "..."`` shorthand, or None."""
    match = SMART_COMMAND_PATTERN.match(command)
    if not match:
        return None
    single = match.group(2)
    return match.group(1) if single is None else single


class CommandEngine:
    """Resolves raw command lines into suggestions.

    Tiers run strictly in order and the first decisive one wins:

    1. Quick-correction cache of previously discovered typos
    2. Structural validation against command metadata
    3. One AI call, unless the circuit breaker is open
    4. Static fallback table when the AI is skipped or fails

    Expected failures never raise; every call returns a :class:`Suggestion`.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        metadata_store: CommandMetadataStore | None = None,
        ai_client: AIClient | None = None,
        parser: CommandParser | None = None,
        cache: QuickCorrectionCache | None = None,
        validator: StructuralValidator | None = None,
        fallback: FallbackValidator | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            config: Engine configuration (defaults used when omitted)
            metadata_store: Known command metadata
            ai_client: AI suggestion service client
            parser: Command line parser
            cache: Quick-correction cache
            validator: Structural validator
            fallback: Static fallback table
            breaker: Circuit breaker guarding the AI client
        """
        self.config = config or EngineConfig()
        self.metadata_store = metadata_store or CommandMetadataStore(self.config.metadata_dir)
        self.ai_client = ai_client or OllamaClient(self.config.ai)
        self.parser = parser or CommandParser()
        self.cache = cache or QuickCorrectionCache()
        self.validator = validator or StructuralValidator(
            max_edit_distance=self.config.max_edit_distance,
            distance_cache_size=self.config.distance_cache_size,
        )
        self.fallback = fallback or FallbackValidator(matcher=self.validator)
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=self.config.failure_threshold,
            reset_timeout=self.config.reset_timeout,
        )

    async def __aenter__(self) -> CommandEngine:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        close = getattr(self.ai_client, "aclose", None)
        if close is not None:
            await close()

    async def resolve(self, raw_command: str | None) -> Suggestion:
        """Validate a command line and return the best suggestion for it."""
        if raw_command is None or not raw_command.strip():
            return self.fallback.validate(raw_command)

        command = raw_command.strip()

        task = extract_smart_task(command)
        if task is not None:
            return await self.resolve_smart_command(task)

        if should_skip_validation(command):
            logger.debug(f"Skipping validation for: {command}")
            return Suggestion.valid(command)

        try:
            structure = self.parser.parse(command)
        except ParseError as e:
            logger.debug(f"Failed to parse command, using fallback: {e}")
            return self.fallback.validate(command)

        suggestion = self._quick_correction(structure)
        if suggestion is not None:
            return suggestion

        metadata = self.metadata_store.get_metadata(structure.base_command)
        suggestion = self.validator.validate(structure, metadata)
        if suggestion is not None:
            self._remember(structure, suggestion)
            return suggestion

        if not self.breaker.allow_request():
            logger.info(f"Circuit breaker open, using fallback for: {command}")
            return self._fallback(structure)

        try:
            suggestion = await self._escalate(structure, metadata)
        except AIServiceError as e:
            logger.warning(f"AI validation failed, using fallback: {e}")
            self.breaker.record_failure()
            return self._fallback(structure)
        except Exception as e:
            logger.error(f"Unexpected AI client error for {command!r}: {type(e).__name__} - {e}")
            self.breaker.record_failure()
            return self._fallback(structure)

        self.breaker.record_success()
        self._remember(structure, suggestion)
        return suggestion

    async def resolve_smart_command(self, task: str | None) -> Suggestion:
        """Turn a natural-language task description into a command."""
        if task is None or not task.strip():
            return Suggestion.error("Task description cannot be empty")

        task = task.strip()
        if not self.breaker.allow_request():
            logger.info("Circuit breaker open, smart command unavailable")
            return Suggestion.error(AI_UNREACHABLE_MESSAGE)

        try:
            command = await self.ai_client.suggest_commands_for_task(task)
        except AIServiceError as e:
            logger.warning(f"Smart command generation failed: {e}")
            self.breaker.record_failure()
            return Suggestion.error(AI_UNREACHABLE_MESSAGE)
        except Exception as e:
            logger.error(f"Unexpected AI client error for task {task!r}: {type(e).__name__} - {e}")
            self.breaker.record_failure()
            return Suggestion.error(AI_UNREACHABLE_MESSAGE)

        self.breaker.record_success()
        if not command:
            return Suggestion.error(SMART_COMMAND_FAILED_MESSAGE)
        return Suggestion.smart_command(task, command)

    def _quick_correction(self, structure: CommandStructure) -> Suggestion | None:
        corrected = structure

        base_fix = self.cache.lookup(base_scope(), structure.base_command)
        if base_fix:
            # A new base may change whether the next token is a subcommand
            corrected = self.parser.parse(structure.with_base_command(base_fix).reconstruct())

        if corrected.has_subcommand:
            scope = subcommand_scope(corrected.base_command)
            subcommand_fix = self.cache.lookup(scope, corrected.subcommand)
            if subcommand_fix:
                corrected = corrected.with_subcommand(subcommand_fix)

        corrected_command = corrected.reconstruct()
        if corrected_command == structure.reconstruct():
            return None

        logger.info(f"Quick correction: {structure.raw_command} -> {corrected_command}")
        return Suggestion.correction(structure.raw_command, corrected_command)

    async def _escalate(
        self,
        structure: CommandStructure,
        metadata: CommandMetadata | None,
    ) -> Suggestion:
        """Make exactly one AI call and interpret its reply."""
        command = structure.raw_command

        if metadata is None and not self.fallback.is_known_command(structure.base_command):
            reply = await self.ai_client.generate(command, base_command_prompt(structure))
            corrected = extract_base_command(reply)
            if corrected and corrected.lower() != structure.base_command.lower():
                corrected_command = structure.with_base_command(corrected).reconstruct()
                return Suggestion.correction(
                    command,
                    corrected_command,
                    f"Unknown command '{structure.base_command}'. "
                    f"Did you mean: {corrected_command}?",
                )
            return Suggestion.valid(command)

        if metadata is None and structure.has_subcommand:
            reply = await self.ai_client.generate(command, subcommand_prompt(structure))
            corrected = extract_subcommand(reply, structure.base_command)
            if corrected and corrected.lower() != structure.subcommand.lower():
                corrected_command = structure.with_subcommand(corrected).reconstruct()
                return Suggestion.correction(
                    command,
                    corrected_command,
                    f"Unknown subcommand '{structure.subcommand}' for "
                    f"'{structure.base_command}'. Did you mean: {corrected_command}?",
                )
            return Suggestion.valid(command)

        reply = await self.ai_client.generate(command, validation_prompt(command, structure))
        return parse_validation_response(command, reply)

    def _fallback(self, structure: CommandStructure) -> Suggestion:
        suggestion = self.fallback.validate(structure.raw_command)
        self._remember(structure, suggestion)
        return suggestion

    def _remember(self, structure: CommandStructure, suggestion: Suggestion) -> None:
        """Cache a correction that changed only the base command or only the subcommand."""
        if not suggestion.is_correction:
            return

        original = self.parser.tokenize(structure.raw_command)
        corrected = self.parser.tokenize(suggestion.suggestion)
        if len(original) != len(corrected):
            return

        changed = [i for i, (a, b) in enumerate(zip(original, corrected)) if a != b]
        if changed == [0]:
            self.cache.store(base_scope(), original[0], corrected[0])
        elif changed == [1] and structure.has_subcommand:
            scope = subcommand_scope(structure.base_command)
            self.cache.store(scope, original[1], corrected[1])

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_size(self) -> int:
        return self.cache.size()

    def breaker_state(self) -> BreakerState:
        return self.breaker.state()
