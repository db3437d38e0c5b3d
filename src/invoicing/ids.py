"""Unique-id providers for line items."""
import itertools
import uuid
from typing import Protocol


class IdProvider(Protocol):
    def __call__(self) -> str: ...


def uuid4_ids() -> str:
    """Default provider: random UUID4 text."""
    return str(uuid.uuid4())


class SequentialIds:
    """Deterministic provider yielding prefix-1, prefix-2, ..."""

    def __init__(self, prefix: str = "svc"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
