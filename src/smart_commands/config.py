"""Engine and AI client configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "SMART_COMMANDS_"

T = TypeVar("T", int, float)


@dataclass
class AIConfig:
    """Connection and generation settings for the AI suggestion service."""

    base_url: str = "http://localhost:11434"
    model: str = "qwen2.5-coder:3b"

    # Per attempt, in seconds
    timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 1.0

    # Generation options
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 500


@dataclass
class EngineConfig:
    """Configuration for the validation engine."""

    # Circuit breaker
    failure_threshold: int = 3
    reset_timeout: float = 60.0

    # Structural validation
    max_edit_distance: int = 2
    distance_cache_size: int = 5_000

    # Extra JSON command metadata
    metadata_dir: Path | None = None

    ai: AIConfig = field(default_factory=AIConfig)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a configuration from ``SMART_COMMANDS_*`` environment variables."""
        ai = AIConfig(
            base_url=os.getenv(f"{ENV_PREFIX}OLLAMA_URL", AIConfig.base_url),
            model=os.getenv(f"{ENV_PREFIX}MODEL", AIConfig.model),
            timeout=_env_number("TIMEOUT", AIConfig.timeout, float),
            max_retries=_env_number("MAX_RETRIES", AIConfig.max_retries, int),
        )

        metadata_dir = os.getenv(f"{ENV_PREFIX}METADATA_DIR")

        return cls(
            failure_threshold=_env_number("FAILURE_THRESHOLD", cls.failure_threshold, int),
            reset_timeout=_env_number("RESET_TIMEOUT", cls.reset_timeout, float),
            metadata_dir=Path(metadata_dir) if metadata_dir else None,
            ai=ai,
        )


def _env_number(name: str, default: T, convert: Callable[[str], T]) -> T:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or value == "":
        return default
    try:
        return convert(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_PREFIX}{name}={value!r}, using {default}")
        return default
