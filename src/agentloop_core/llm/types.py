"""Request, response and stream event types for completion clients."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from agentloop_core.messages import ToolCall, ToolCallFragment

FinishReason = Literal["stop", "tool_use"]


class CompletionRequest(BaseModel):
    """Everything a completion client needs for one completion.

    ``messages`` are wire messages as produced by the conversation assembler.
    """

    model: str
    messages: list[dict[str, Any]] = Field(default_factory=list)
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    stop: list[str] | None = None
    json_response: bool = False
    tools: list[dict[str, Any]] | None = None

    def with_messages(self, messages: list[dict[str, Any]]) -> "CompletionRequest":
        """Copy of this request carrying a snapshot of ``messages``."""
        return self.model_copy(update={"messages": list(messages)})


class TextTurn(BaseModel):
    """A completion that ended with plain text."""

    kind: Literal["text"] = "text"
    text: str


class ToolUseTurn(BaseModel):
    """A completion that asks for one or more tools to be run."""

    kind: Literal["tool_use"] = "tool_use"
    text: str = ""
    tool_calls: list[ToolCall]


CompletionResponse = TextTurn | ToolUseTurn


class TextDelta(BaseModel):
    """A piece of answer text."""

    kind: Literal["text_delta"] = "text_delta"
    text: str


class TurnComplete(BaseModel):
    """End of a streamed completion."""

    kind: Literal["turn_complete"] = "turn_complete"
    reason: FinishReason


StreamEvent = TextDelta | ToolCallFragment | TurnComplete
