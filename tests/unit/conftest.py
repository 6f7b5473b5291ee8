"""Unit test fixtures (stub operations).

Provides scripted async operations for exercising retry paths without any
remote service.
"""

from typing import Any, Iterable

import pytest


class ScriptedOperation:
    """
    Zero-argument async callable that plays back a script.

    Each script entry is either an exception instance (raised) or a value
    (returned). The last entry repeats once the script is exhausted.
    """

    def __init__(self, outcomes: Iterable[Any]):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> Any:
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def scripted():
    """Factory: scripted(ConnectionError(), "ok") -> ScriptedOperation."""

    def factory(*outcomes: Any) -> ScriptedOperation:
        return ScriptedOperation(outcomes)

    return factory
