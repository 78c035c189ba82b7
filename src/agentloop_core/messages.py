"""Internal message representation for AgentLoop.

These types are independent of the completion endpoint. The conversation
assembler flattens them into wire messages; adapters convert from
framework-specific formats (LangChain, etc.) to these types.
"""

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Role = Literal["system", "user", "assistant", "tool"]


class ContentBlock(BaseModel):
    """One part of a message: plain text or a structured payload."""

    text: str | None = None
    payload: dict[str, Any] | None = None


class Message(BaseModel):
    """A conversation message.

    Attributes:
        role: The role of the message sender (system, user, assistant, tool).
            Accepted in any case and stored lower-cased.
        content: Ordered content blocks. A plain string is accepted and
            wrapped into a single text block.
    """

    role: Role
    content: list[ContentBlock] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def _lower_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _wrap_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [{"text": value}]
        return value

    @property
    def text(self) -> str:
        """Text of the first text block, or an empty string."""
        for block in self.content:
            if block.text is not None:
                return block.text
        return ""


class ToolCall(BaseModel):
    """A fully assembled tool invocation requested by the model."""

    id: str
    name: str
    arguments: str = ""

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the JSON arguments. Empty arguments decode to ``{}``."""
        if not self.arguments.strip():
            return {}
        return json.loads(self.arguments)


class ToolCallFragment(BaseModel):
    """A partial tool call delivered while streaming.

    A fragment carrying an ``id`` opens a new call; fragments without one
    extend the most recently opened call.
    """

    id: str | None = None
    name: str | None = None
    arguments: str = ""


class ToolResult(BaseModel):
    """Output of a tool handler for one tool call."""

    tool_call_id: str
    content: str
    is_error: bool = False
