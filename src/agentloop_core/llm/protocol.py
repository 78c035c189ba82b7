from collections.abc import AsyncIterator
from typing import Protocol

from agentloop_core.llm.types import CompletionRequest, CompletionResponse, StreamEvent


class CompletionClient(Protocol):
    """Protocol for a remote chat-completion endpoint.

    Implementations raise ``UpstreamError`` for transport, quota and
    response-shape failures. They never retry.
    """

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a buffered completion."""
        ...

    def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        """Run an incremental completion, yielding events as they arrive.

        The final event of a well-formed stream is a ``TurnComplete``.
        """
        ...
