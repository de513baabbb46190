"""Memoization of previously discovered base-command and subcommand corrections."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)

BASE_SCOPE = "base"
SUBCOMMAND_SCOPE = "subcmd"


def base_scope() -> str:
    """Scope for base-command corrections (keys look like ``base:gti``)."""
    return BASE_SCOPE


def subcommand_scope(base_command: str) -> str:
    """Scope for subcommand corrections of one base command (``subcmd:docker:sp``)."""
    return f"{SUBCOMMAND_SCOPE}:{base_command.lower()}"


class QuickCorrectionCache:
    """Thread-safe map of ``scope:token`` keys to corrections.

    Only real corrections are stored: a correction equal to its token is
    rejected so a later metadata change can still be picked up. Entries are
    never evicted.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(scope: str, token: str) -> str:
        return f"{scope}:{token.lower()}"

    def lookup(self, scope: str, token: str) -> str | None:
        with self._lock:
            correction = self._entries.get(self.key(scope, token))

        if correction is not None:
            logger.debug(f"Quick cache hit: {scope} {token} -> {correction}")
        return correction

    def store(self, scope: str, token: str, correction: str) -> bool:
        """Remember a correction.

        Returns:
            True if stored, False for an empty or no-op correction
        """
        if not correction or correction.lower() == token.lower():
            return False

        with self._lock:
            self._entries[self.key(scope, token)] = correction
        logger.debug(f"Cached correction: {scope} {token} -> {correction}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Correction cache cleared")

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> dict[str, str]:
        """Snapshot of all cached corrections."""
        with self._lock:
            return dict(self._entries)

    def __len__(self) -> int:
        return self.size()
