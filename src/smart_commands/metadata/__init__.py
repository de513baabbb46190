"""Command metadata store."""

from .store import BUILTIN_METADATA, CommandMetadata, CommandMetadataStore, is_known_flag

__all__ = ["BUILTIN_METADATA", "CommandMetadata", "CommandMetadataStore", "is_known_flag"]
