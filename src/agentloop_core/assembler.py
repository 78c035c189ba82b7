"""Conversion between internal messages and OpenAI-style wire messages.

Wire messages are plain dicts in the Chat Completions shape. The assembler
only ever appends: history order is the order the endpoint sees.
"""

from collections.abc import Sequence
from typing import Any

from agentloop_core.llm.types import ToolUseTurn
from agentloop_core.messages import Message, ToolResult

WireMessage = dict[str, Any]


class ConversationAssembler:
    """Builds and grows the outbound message sequence for one request.

    Usage:
        ```python
        assembler = ConversationAssembler()
        messages = assembler.to_wire_messages("You are helpful.", history, "Hello")
        assembler.append_assistant(messages, tool_use_turn)
        assembler.append_tool(messages, ToolResult(tool_call_id="c1", content="42"))
        ```
    """

    def to_wire_messages(
        self,
        system_prompt: str,
        history: Sequence[Message],
        user_input: str,
    ) -> list[WireMessage]:
        """Build the initial wire messages for a request.

        Args:
            system_prompt: Fully rendered system prompt.
            history: Prior conversation, oldest first.
            user_input: The new user text.

        Returns:
            A system message, one message per history entry, and the user
            message, in that order.
        """
        messages: list[WireMessage] = [{"role": "system", "content": system_prompt}]
        messages.extend(self.to_wire_message(msg) for msg in history)
        messages.append({"role": "user", "content": user_input})
        return messages

    def to_wire_message(self, message: Message) -> WireMessage:
        """Flatten one message: lower-cased role and its first text block."""
        return {"role": message.role.lower(), "content": message.text}

    def append_assistant(self, messages: list[WireMessage], turn: ToolUseTurn) -> None:
        """Append the assistant message announcing the turn's tool calls."""
        messages.append(
            {
                "role": "assistant",
                "content": turn.text or None,
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {"name": tc.name, "arguments": tc.arguments},
                    }
                    for tc in turn.tool_calls
                ],
            }
        )

    def append_tool(self, messages: list[WireMessage], result: ToolResult) -> None:
        """Append a tool-role message carrying one tool result."""
        messages.append(
            {
                "role": "tool",
                "tool_call_id": result.tool_call_id,
                "content": result.content,
            }
        )
