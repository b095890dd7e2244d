"""Result type for explicit error handling.

Stages of the release pipeline return ``Ok(value)`` or ``Err(error)`` instead
of raising, so that the orchestrator decides in one place how a failure ends
the run.

Usage:
    result = compute_next_version(current, "patch", "alpha", is_dev=False)
    if isinstance(result, Err):
        return result
    info = result.value
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Ok", "Err", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
