"""Retrieval-augmented context for agents.

Any object with an async ``retrieve_and_combine_results(query) -> str``
method can be passed to an agent as its retriever. ``LanceDBRetriever`` is a
ready-made implementation over a local LanceDB table.
"""

from agentloop_core.retrieval.embedder import OpenAIEmbedder
from agentloop_core.retrieval.lance import LanceDBRetriever, RetrievedDocument
from agentloop_core.retrieval.protocol import Embedder, Retriever

__all__ = [
    "Retriever",
    "Embedder",
    "OpenAIEmbedder",
    "LanceDBRetriever",
    "RetrievedDocument",
]
