"""Structural validation of subcommands and flags against known metadata."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from rapidfuzz.distance import Levenshtein

from smart_commands.metadata.store import CommandMetadata
from smart_commands.parser.structure import CommandStructure
from smart_commands.suggestion import Suggestion

logger = logging.getLogger(__name__)

MAX_EDIT_DISTANCE = 2
TRANSPOSITION_BONUS = 15
FIRST_CHAR_BONUS = 3
LAST_CHAR_BONUS = 2
LENGTH_PENALTY = 2
DISTANCE_CACHE_MAX_SIZE = 5_000

# Accepted by nearly every command; never reported as invalid
UNIVERSAL_FLAGS = frozenset({"-h", "--help", "-v", "--version", "-V", "--verbose"})


class DistanceCache:
    """Capacity-bounded memo of edit distances keyed by the unordered string pair.

    Once full, new results are computed but not stored.
    """

    def __init__(self, max_size: int = DISTANCE_CACHE_MAX_SIZE) -> None:
        self.max_size = max_size
        self._distances: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(a: str, b: str) -> tuple[str, str]:
        return (a, b) if a <= b else (b, a)

    def get(self, a: str, b: str) -> int | None:
        with self._lock:
            return self._distances.get(self.key(a, b))

    def put(self, a: str, b: str, distance: int) -> bool:
        with self._lock:
            if len(self._distances) >= self.max_size:
                return False
            self._distances.setdefault(self.key(a, b), distance)
            return True

    def clear(self) -> None:
        with self._lock:
            self._distances.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._distances)


def is_transposition(a: str, b: str) -> bool:
    """Check if two equal-length strings differ by one swapped adjacent pair."""
    if len(a) != len(b) or len(a) < 2:
        return False

    differences = [i for i, (x, y) in enumerate(zip(a, b)) if x != y]
    if len(differences) != 2:
        return False

    i, j = differences
    return j == i + 1 and a[i] == b[j] and a[j] == b[i]


class StructuralValidator:
    """Finds invalid subcommands and flags and proposes the closest valid one."""

    def __init__(
        self,
        max_edit_distance: int = MAX_EDIT_DISTANCE,
        distance_cache_size: int = DISTANCE_CACHE_MAX_SIZE,
        universal_flags: Iterable[str] | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            max_edit_distance: Largest edit distance still considered a typo
            distance_cache_size: Capacity of the edit-distance memo
            universal_flags: Flags accepted for every command
        """
        self.max_edit_distance = max_edit_distance
        self.distance_cache = DistanceCache(distance_cache_size)
        self.universal_flags = frozenset(
            UNIVERSAL_FLAGS if universal_flags is None else universal_flags
        )

    def validate(
        self,
        structure: CommandStructure,
        metadata: CommandMetadata | None,
    ) -> Suggestion | None:
        """Validate a parsed command against its metadata.

        Only the first issue is corrected; an invalid subcommand takes
        priority over flags.

        Returns:
            A correction, or None when there is no metadata, the command
            matches it, or no valid name is close enough
        """
        if metadata is None:
            return None

        if structure.has_subcommand:
            suggestion = self._validate_subcommand(structure, metadata)
            if suggestion is not None:
                return suggestion

        return self._validate_flags(structure, metadata)

    def _validate_subcommand(
        self,
        structure: CommandStructure,
        metadata: CommandMetadata,
    ) -> Suggestion | None:
        subcommand = structure.subcommand
        if not metadata.has_subcommands or metadata.is_valid_subcommand(subcommand):
            return None

        logger.info(f"Invalid subcommand detected: {structure.base_command} {subcommand}")

        corrected = self.find_closest_match(subcommand, metadata.valid_subcommands)
        if corrected is None:
            return None

        corrected_command = structure.with_subcommand(corrected).reconstruct()
        logger.info(f"Suggesting correction: {structure.raw_command} -> {corrected_command}")

        return Suggestion.correction(
            structure.raw_command,
            corrected_command,
            f"Unknown subcommand '{subcommand}' for '{structure.base_command}'. "
            f"Did you mean: {corrected_command}?",
        )

    def _validate_flags(
        self,
        structure: CommandStructure,
        metadata: CommandMetadata,
    ) -> Suggestion | None:
        for flag in structure.flags:
            if flag in self.universal_flags or metadata.is_valid_flag(flag):
                continue

            logger.info(f"Invalid flag detected: {flag} for command {structure.base_command}")
            name, sep, value = flag.partition("=")
            corrected = self.find_closest_match(name, metadata.valid_flags)
            if corrected is None:
                continue

            corrected_flag = f"{corrected}{sep}{value}"
            corrected_command = structure.with_flag_replaced(flag, corrected_flag).reconstruct()
            logger.info(
                f"Suggesting flag correction: {structure.raw_command} -> {corrected_command}"
            )
            return Suggestion.correction(
                structure.raw_command,
                corrected_command,
                f"Unknown flag '{flag}' for '{structure.base_command}'. "
                f"Did you mean: {corrected_command}?",
            )

        return None

    def find_closest_match(self, token: str, candidates: Iterable[str]) -> str | None:
        """Pick the lowest-scoring candidate within the edit-distance bound.

        Ties go to the lexicographically smallest candidate.
        """
        token_lower = token.lower()
        best: tuple[int, str] | None = None

        for candidate in sorted(candidates):
            candidate_lower = candidate.lower()
            distance = self.distance(token_lower, candidate_lower)
            if distance > self.max_edit_distance:
                continue

            score = self.score(token_lower, candidate_lower, distance)
            if best is None or (score, candidate) < best:
                best = (score, candidate)

        return best[1] if best else None

    def distance(self, a: str, b: str) -> int:
        """Bounded edit distance; anything beyond the bound is ``bound + 1``."""
        if a == b:
            return 0
        too_far = self.max_edit_distance + 1
        if abs(len(a) - len(b)) > self.max_edit_distance:
            return too_far

        cached = self.distance_cache.get(a, b)
        if cached is not None:
            return cached

        distance = Levenshtein.distance(a, b, score_cutoff=self.max_edit_distance)
        distance = min(distance, too_far)
        self.distance_cache.put(a, b, distance)
        return distance

    def score(self, a: str, b: str, distance: int | None = None) -> int:
        """Similarity score, lower is closer."""
        if distance is None:
            distance = self.distance(a, b)

        score = distance * 10
        if is_transposition(a, b):
            score -= TRANSPOSITION_BONUS
        if a and b and a[0] == b[0]:
            score -= FIRST_CHAR_BONUS
        if a and b and a[-1] == b[-1]:
            score -= LAST_CHAR_BONUS
        score += LENGTH_PENALTY * abs(len(a) - len(b))
        return score
