"""Smart Commands - typo detection and correction for shell commands."""

__version__ = "0.1.0"

# Core components - lazy imports to keep the CLI start-up light
def __getattr__(name: str):
    """Lazy import of the public classes."""
    if name == "CommandEngine":
        from smart_commands.engine.orchestrator import CommandEngine
        return CommandEngine
    elif name == "CircuitBreaker":
        from smart_commands.engine.breaker import CircuitBreaker
        return CircuitBreaker
    elif name == "CommandParser":
        from smart_commands.parser.tokenizer import CommandParser
        return CommandParser
    elif name == "CommandStructure":
        from smart_commands.parser.structure import CommandStructure
        return CommandStructure
    elif name == "CommandMetadataStore":
        from smart_commands.metadata.store import CommandMetadataStore
        return CommandMetadataStore
    elif name == "OllamaClient":
        from smart_commands.ai.client import OllamaClient
        return OllamaClient
    elif name == "Suggestion":
        from smart_commands.suggestion import Suggestion
        return Suggestion
    elif name == "EngineConfig":
        from smart_commands.config import EngineConfig
        return EngineConfig
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "CommandEngine",
    "CircuitBreaker",
    "CommandParser",
    "CommandStructure",
    "CommandMetadataStore",
    "OllamaClient",
    "Suggestion",
    "EngineConfig",
]
