from agentloop_core.llm.openai import OpenAICompletionClient
from agentloop_core.llm.protocol import CompletionClient
from agentloop_core.llm.types import (
    CompletionRequest,
    CompletionResponse,
    FinishReason,
    StreamEvent,
    TextDelta,
    TextTurn,
    ToolUseTurn,
    TurnComplete,
)

__all__ = [
    "CompletionClient",
    "OpenAICompletionClient",
    "CompletionRequest",
    "CompletionResponse",
    "FinishReason",
    "StreamEvent",
    "TextDelta",
    "TextTurn",
    "ToolUseTurn",
    "TurnComplete",
]
