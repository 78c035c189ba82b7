from typing import Protocol


class Retriever(Protocol):
    """Protocol for retrieval-augmented context.

    The agent calls the retriever with the raw user input and appends the
    returned text to the system prompt.
    """

    async def retrieve_and_combine_results(self, query: str) -> str:
        """Retrieve context relevant to a query as a single block of text."""
        ...


class Embedder(Protocol):
    """Protocol for embedding text into vectors."""

    @property
    def dimensions(self) -> int:
        """Return the dimensionality of the embedding vectors."""
        ...

    async def embed(self, text: str) -> list[float]:
        """Embed a single text string into a vector."""
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed multiple texts into vectors."""
        ...
