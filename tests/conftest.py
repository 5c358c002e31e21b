"""Shared fakes: a controllable clock, a scripted LLM, counter ids."""

import itertools

import pytest

from construct_engine.llm import NarrativeGateway
from construct_engine.models import QuestDefinition


class FakeClock:
    """Callable clock in seconds that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, *, minutes: float = 0) -> None:
        self.now += seconds + minutes * 60


class StubLLM:
    """Returns canned responses in order and records every call.

    Set `error` to make every call raise it. Once the canned responses run out
    it answers "<stage> text".
    """

    def __init__(self, responses=None, error: Exception | None = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, stage: str, prompt: str) -> str:
        self.calls.append((stage, prompt))
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return f"{stage} text"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub_llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def gateway(stub_llm) -> NarrativeGateway:
    return NarrativeGateway(stub_llm)


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: str(next(counter))


@pytest.fixture
def make_definition():
    """Build a QuestDefinition with sensible defaults for the fields a test ignores."""

    def _make(**fields) -> QuestDefinition:
        data = {
            "title": "Test Quest",
            "description": "A quest for testing.",
            "objectives": ["First", "Second", "Third"],
            "difficulty": "Medium",
            "type": "side",
            "rewards": ["Gold"],
        }
        data.update(fields)
        return QuestDefinition(**data)

    return _make
