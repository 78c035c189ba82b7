"""LanceDB-backed retriever with hybrid (vector + full-text) search."""

import logging
from pathlib import Path
from typing import Any
from uuid import uuid4

import lancedb
import pyarrow as pa
from lancedb.rerankers import Reranker, RRFReranker
from pydantic import BaseModel

from agentloop_core.retrieval.protocol import Embedder

logger = logging.getLogger(__name__)


class RetrievedDocument(BaseModel):
    """A document returned by a retriever search."""

    id: str
    text: str
    source: str | None = None
    score: float = 0.0


class LanceDBRetriever:
    """Retriever over a LanceDB document table.

    Documents are embedded on insert. Queries run a hybrid search (vector
    similarity and full-text) and are reranked before the top ``limit``
    documents are returned. The reranker defaults to reciprocal rank
    fusion; pass any lancedb Reranker to override it.

    Example:
        ```python
        async with LanceDBRetriever(path=Path("kb"), embedder=OpenAIEmbedder()) as kb:
            await kb.add_texts(["Paris is the capital of France."])
            context = await kb.retrieve_and_combine_results("capital of France")
        ```
    """

    TABLE_NAME = "documents"

    def __init__(
        self,
        path: Path,
        embedder: Embedder,
        limit: int = 5,
        reranker: Reranker | None = None,
        separator: str = "\n\n",
    ) -> None:
        self._path = path
        self._embedder = embedder
        self._limit = limit
        self._reranker = reranker or RRFReranker()
        self._separator = separator
        self._db: lancedb.DBConnection | None = None
        self._table: lancedb.table.Table | None = None

    async def __aenter__(self) -> "LanceDBRetriever":
        await self.connect()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the database, creating the document table if needed."""
        self._path.mkdir(parents=True, exist_ok=True)
        self._db = lancedb.connect(str(self._path))

        schema = pa.schema(
            [
                pa.field("id", pa.string()),
                pa.field("text", pa.string()),
                pa.field("source", pa.string()),
                pa.field("vector", pa.list_(pa.float32(), self._embedder.dimensions)),
            ]
        )
        # exist_ok reopens a table created by an earlier connect
        self._table = self._db.create_table(self.TABLE_NAME, schema=schema, exist_ok=True)
        self._table.create_fts_index("text", replace=True)

    async def close(self) -> None:
        self._db = None
        self._table = None

    async def add_texts(
        self,
        texts: list[str],
        sources: list[str | None] | None = None,
    ) -> list[str]:
        """Embed and store documents.

        Args:
            texts: Document texts.
            sources: Optional source label per text (same length as texts).

        Returns:
            Ids of the stored documents, in input order.
        """
        if self._table is None:
            raise RuntimeError("Not connected")
        if sources is not None and len(sources) != len(texts):
            raise ValueError("sources must have the same length as texts")
        if not texts:
            return []

        vectors = await self._embedder.embed_batch(texts)
        labels = sources or [None] * len(texts)
        rows = [
            {"id": str(uuid4()), "text": text, "source": source, "vector": vector}
            for text, source, vector in zip(texts, labels, vectors)
        ]
        self._table.add(rows)
        logger.debug("add_texts count=%d", len(rows))
        return [row["id"] for row in rows]

    async def retrieve(self, query: str, limit: int | None = None) -> list[RetrievedDocument]:
        """Return the documents most relevant to ``query``, best first."""
        if self._table is None:
            raise RuntimeError("Not connected")

        query_vector = await self._embedder.embed(query)
        rows = (
            self._table.search(query_type="hybrid")
            .vector(query_vector)
            .text(query)
            .rerank(reranker=self._reranker)
            .limit(limit or self._limit)
            .to_list()
        )

        documents = [
            RetrievedDocument(
                id=row["id"],
                text=row["text"],
                source=row.get("source"),
                score=float(row.get("_relevance_score", row.get("_distance", 0.0))),
            )
            for row in rows
        ]
        logger.debug("retrieve query=%r results=%d", query, len(documents))
        return documents

    async def retrieve_and_combine_results(self, query: str) -> str:
        """Retrieve documents and join their texts into one context block."""
        documents = await self.retrieve(query)
        return self._separator.join(doc.text for doc in documents)
