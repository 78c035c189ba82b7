import logging

from openai import AsyncOpenAI, OpenAIError

from agentloop_core.errors import UpstreamError

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embedder backed by the OpenAI embeddings endpoint.

    Pass ``client`` to share one ``AsyncOpenAI`` instance with the
    completion client.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._dimensions = dimensions
        self._client = client or AsyncOpenAI(api_key=api_key)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in one request, preserving input order."""
        if not texts:
            return []

        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=texts,
                dimensions=self._dimensions,
            )
        except OpenAIError as e:
            logger.error("OpenAI embedding failed: %s", e, exc_info=True)
            raise UpstreamError(
                f"OpenAI embedding call failed: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e

        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]
