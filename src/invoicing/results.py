"""
Explicit success/failure values for validation flows.

Validation never raises: callers branch on ``result.ok`` and read either
``value`` or ``reason``.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    reason: E

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err[E]
