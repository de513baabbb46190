"""Escalation engine and circuit breaker."""

from .breaker import BreakerState, CircuitBreaker
from .orchestrator import CommandEngine, extract_smart_task, should_skip_validation

__all__ = [
    "BreakerState",
    "CircuitBreaker",
    "CommandEngine",
    "extract_smart_task",
    "should_skip_validation",
]
