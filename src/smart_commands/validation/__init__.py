"""Structural validation, quick-correction cache and static fallback table."""

from .cache import QuickCorrectionCache, base_scope, subcommand_scope
from .fallback import CommandKnowledge, FallbackValidator
from .structural import DistanceCache, StructuralValidator, is_transposition

__all__ = [
    "QuickCorrectionCache",
    "base_scope",
    "subcommand_scope",
    "CommandKnowledge",
    "FallbackValidator",
    "DistanceCache",
    "StructuralValidator",
    "is_transposition",
]
