from collections.abc import AsyncIterator

import pytest

from agentloop_core.config import AgentConfig
from agentloop_core.llm.types import (
    CompletionRequest,
    CompletionResponse,
    StreamEvent,
    TextDelta,
    TextTurn,
    ToolUseTurn,
    TurnComplete,
)
from agentloop_core.messages import ToolCall, ToolCallFragment


class MockCompletionClient:
    """Scripted completion client for testing.

    Buffered calls pop from ``responses``; streaming calls pop one event
    list from ``streams``. Every request is recorded with a snapshot of its
    messages.
    """

    def __init__(
        self,
        responses: list[CompletionResponse] | None = None,
        streams: list[list[StreamEvent]] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.streams = list(streams or [])
        self.requests: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request.model_copy(deep=True))
        return self.responses.pop(0)

    async def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        self.requests.append(request.model_copy(deep=True))
        for event in self.streams.pop(0):
            yield event


class RepeatingToolClient(MockCompletionClient):
    """A client whose model asks for the same tool on every round."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request.model_copy(deep=True))
        n = len(self.requests)
        return ToolUseTurn(
            text=f"thinking {n}",
            tool_calls=[ToolCall(id=f"call_{n}", name="lookup", arguments="{}")],
        )

    async def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        self.requests.append(request.model_copy(deep=True))
        n = len(self.requests)
        yield TextDelta(text=f"step {n} ")
        yield ToolCallFragment(id=f"call_{n}", name="lookup")
        yield ToolCallFragment(arguments="{}")
        yield TurnComplete(reason="tool_use")


class MockEmbedder:
    """Mock embedder for testing."""

    def __init__(self, dimensions: int = 8) -> None:
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> list[float]:
        """Return a deterministic bag-of-letters embedding."""
        vec = [0.0] * self._dimensions
        for ch in text.lower():
            if ch.isalpha():
                vec[ord(ch) % self._dimensions] += 1.0
        norm = sum(x * x for x in vec) ** 0.5 or 1.0
        return [x / norm for x in vec]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials and AGENTLOOP_ settings out of tests."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("AGENTLOOP_") or key.upper() == "OPENAI_API_KEY":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def agent_config() -> AgentConfig:
    """Config with a dummy key and no .env lookup."""
    return AgentConfig(_env_file=None, openai_api_key="sk-test")


@pytest.fixture
def text_client() -> MockCompletionClient:
    """A client that answers "Hi there" once."""
    return MockCompletionClient(responses=[TextTurn(text="Hi there")])


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder()
