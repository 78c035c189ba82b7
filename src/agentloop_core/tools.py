"""Tool definitions and tool handler plumbing."""

import inspect
import json
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from agentloop_core.messages import ToolCall, ToolResult


@runtime_checkable
class ToolHandler(Protocol):
    """Protocol for executing tool calls requested by the model.

    Implementations may be sync or async and may raise; failures are
    contained per tool call by the recursion controller.
    """

    def handle(self, tool_call: ToolCall, messages: list[dict[str, Any]]) -> Any:
        """Run one tool call.

        Args:
            tool_call: The assembled tool call.
            messages: Wire messages so far, including the assistant's
                tool-call announcement. Must not be mutated.

        Returns:
            A ToolResult, a string, or any JSON-serializable value.
        """
        ...


class ToolDefinition(BaseModel):
    """A function tool exposed to the model."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolConfig(BaseModel):
    """Tools offered to the model and the handler that runs them.

    Attributes:
        tools: Tool definitions, as ToolDefinition or raw OpenAI tool dicts.
        handler: A ToolHandler or a plain ``(tool_call, messages)`` callable.
        max_recursions: Tool rounds allowed per request. Falls back to the
            agent's ``tool_max_recursions`` when unset.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tools: list[ToolDefinition | dict[str, Any]] = Field(default_factory=list)
    handler: ToolHandler | Callable[..., Any] | None = None
    max_recursions: int | None = Field(default=None, ge=1)

    def tool_dicts(self) -> list[dict[str, Any]]:
        """Tool definitions in the OpenAI wire shape."""
        return [t.to_openai() if isinstance(t, ToolDefinition) else t for t in self.tools]


def to_tool_result(tool_call: ToolCall, value: Any) -> ToolResult:
    """Normalize a handler's return value into a ToolResult."""
    if isinstance(value, ToolResult):
        return value
    if isinstance(value, str):
        return ToolResult(tool_call_id=tool_call.id, content=value)
    return ToolResult(tool_call_id=tool_call.id, content=json.dumps(value, default=str))


async def invoke_handler(
    handler: ToolHandler | Callable[..., Any],
    tool_call: ToolCall,
    messages: list[dict[str, Any]],
) -> ToolResult:
    """Call a sync or async handler and normalize its result."""
    if isinstance(handler, ToolHandler):
        value = handler.handle(tool_call, messages)
    else:
        value = handler(tool_call, messages)
    if inspect.isawaitable(value):
        value = await value
    return to_tool_result(tool_call, value)
