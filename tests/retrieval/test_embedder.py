from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from agentloop_core.errors import UpstreamError
from agentloop_core.retrieval.embedder import OpenAIEmbedder


@pytest.fixture
def sdk() -> MagicMock:
    mock = MagicMock()
    mock.embeddings.create = AsyncMock()
    return mock


class TestOpenAIEmbedder:
    """Tests for OpenAIEmbedder with a faked SDK."""

    async def test_embed_batch_keeps_input_order(self, sdk: MagicMock) -> None:
        sdk.embeddings.create.return_value = SimpleNamespace(
            data=[
                SimpleNamespace(index=1, embedding=[0.0, 1.0]),
                SimpleNamespace(index=0, embedding=[1.0, 0.0]),
            ]
        )
        embedder = OpenAIEmbedder(dimensions=2, client=sdk)

        vectors = await embedder.embed_batch(["a", "b"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        sdk.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input=["a", "b"], dimensions=2
        )

    async def test_embed_single(self, sdk: MagicMock) -> None:
        sdk.embeddings.create.return_value = SimpleNamespace(
            data=[SimpleNamespace(index=0, embedding=[0.5, 0.5])]
        )
        embedder = OpenAIEmbedder(dimensions=2, client=sdk)

        assert await embedder.embed("a") == [0.5, 0.5]
        assert embedder.dimensions == 2

    async def test_empty_batch_skips_call(self, sdk: MagicMock) -> None:
        embedder = OpenAIEmbedder(client=sdk)

        assert await embedder.embed_batch([]) == []
        sdk.embeddings.create.assert_not_awaited()

    async def test_sdk_error_wrapped(self, sdk: MagicMock) -> None:
        sdk.embeddings.create.side_effect = openai.OpenAIError("boom")
        embedder = OpenAIEmbedder(client=sdk)

        with pytest.raises(UpstreamError, match="boom"):
            await embedder.embed("a")
