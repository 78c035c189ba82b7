"""Adapters for converting framework-specific messages to agent history.

Available adapters:
    - LangChainAdapter: Converts LangChain messages (HumanMessage, AIMessage, etc.)

Usage:
    ```python
    from agentloop_core.adapters.langchain import LangChainAdapter
    from langchain_core.messages import HumanMessage, AIMessage

    adapter = LangChainAdapter()
    history = adapter.convert([
        HumanMessage(content="Hello"),
        AIMessage(content="Hi there!"),
    ])
    ```
"""

from agentloop_core.adapters.protocol import HistoryAdapter

__all__ = ["HistoryAdapter"]
