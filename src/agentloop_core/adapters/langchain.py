"""LangChain message adapter.

Converts LangChain messages (HumanMessage, AIMessage, ToolMessage, etc.)
into AgentLoop history messages.
"""

from typing import TYPE_CHECKING, Any

from agentloop_core.messages import ContentBlock, Message

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage


class LangChainAdapter:
    """Converts LangChain messages to agent history.

    Usage:
        ```python
        from langchain_core.messages import AIMessage, HumanMessage
        from agentloop_core.adapters.langchain import LangChainAdapter

        history = LangChainAdapter().convert([
            HumanMessage(content="What's the weather?"),
            AIMessage(content="Sunny."),
        ])
        response = await agent.process_request("And tomorrow?", "u1", "s1", history)
        ```
    """

    def convert(self, messages: list["BaseMessage"]) -> list[Message]:
        """Convert a list of LangChain messages.

        Args:
            messages: List of LangChain BaseMessage objects.

        Returns:
            List of Message objects in the same order.
        """
        return [self.convert_single(msg) for msg in messages]

    def convert_single(self, message: "BaseMessage") -> Message:
        """Convert a single LangChain message.

        Unknown message types are treated as user messages.
        """
        from langchain_core.messages import (
            AIMessage,
            SystemMessage,
            ToolMessage,
        )

        content = self._content_blocks(message.content)

        if isinstance(message, SystemMessage):
            return Message(role="system", content=content)
        if isinstance(message, AIMessage):
            return Message(role="assistant", content=content)
        if isinstance(message, ToolMessage):
            return Message(role="tool", content=content)
        return Message(role="user", content=content)

    def _content_blocks(self, content: str | list[Any]) -> list[ContentBlock]:
        """Split LangChain content into text and payload blocks.

        String parts and ``{"type": "text"}`` parts become text blocks; any
        other dict part (images, audio, ...) is kept as a payload.
        """
        if isinstance(content, str):
            return [ContentBlock(text=content)]

        blocks: list[ContentBlock] = []
        for part in content:
            if isinstance(part, str):
                blocks.append(ContentBlock(text=part))
            elif isinstance(part, dict) and part.get("type") == "text":
                blocks.append(ContentBlock(text=part.get("text", "")))
            elif isinstance(part, dict):
                blocks.append(ContentBlock(payload=part))
        return blocks
