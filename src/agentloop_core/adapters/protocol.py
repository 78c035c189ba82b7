"""Protocol for history adapters."""

from typing import Any, Protocol, runtime_checkable

from agentloop_core.messages import Message


@runtime_checkable
class HistoryAdapter(Protocol):
    """Protocol for converting framework messages into agent history.

    Implementations convert framework-specific message types to the
    Message type accepted by ``OpenAIAgent.process_request``.
    """

    def convert(self, messages: list[Any]) -> list[Message]:
        """Convert a list of framework-specific messages, preserving order."""
        ...

    def convert_single(self, message: Any) -> Message:
        """Convert a single framework-specific message."""
        ...
