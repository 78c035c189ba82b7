"""OpenAIAgent - a single conversational agent over OpenAI Chat Completions.

Usage:
    ```python
    from agentloop_core import AgentConfig, OpenAIAgent

    agent = OpenAIAgent(
        name="Tech Agent",
        description="Answers questions about software.",
        config=AgentConfig(openai_api_key="sk-..."),
    )
    response = await agent.process_request("Hello", "user-1", "session-1", [])
    print(response.output.text)
    ```

Streaming:
    ```python
    agent = OpenAIAgent(..., config=AgentConfig(streaming=True))
    response = await agent.process_request("Hello", "user-1", "session-1", [])
    async for chunk in response.output:
        print(chunk, end="")
    ```
"""

import logging
import re
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from agentloop_core.assembler import ConversationAssembler, WireMessage
from agentloop_core.config import AgentConfig
from agentloop_core.errors import ConfigurationError
from agentloop_core.llm.openai import OpenAICompletionClient
from agentloop_core.llm.protocol import CompletionClient
from agentloop_core.llm.types import CompletionRequest
from agentloop_core.messages import ContentBlock, Message
from agentloop_core.prompt import (
    PromptComposer,
    TemplateVariables,
    default_prompt_template,
    with_context,
)
from agentloop_core.recursion import ToolRecursionController
from agentloop_core.retrieval.protocol import Retriever
from agentloop_core.tools import ToolConfig

logger = logging.getLogger(__name__)

# Models that accept response_format={"type": "json_object"}
JSON_MODE_MODELS: tuple[str, ...] = (
    "gpt-4.5-preview",
    "gpt-4.5-preview-2025-02-27",
    "o3-mini",
    "o3-mini-2025-1-3",
    "o1",
    "o1-2024-12-17",
    "gpt-4o-mini",
    "gpt-4o-mini-2024-07-18",
    "gpt-4o",
    "gpt-4o-2024-08-06",
)


def agent_id_from_name(name: str) -> str:
    """Derive a stable agent id: "Tech Agent!" -> "tech-agent"."""
    key = re.sub(r"[^a-zA-Z0-9\s-]", "", name)
    return re.sub(r"\s+", "-", key.strip()).lower()


class AgentProcessingResult(BaseModel):
    """Metadata describing how a request was processed."""

    user_input: str
    agent_id: str
    agent_name: str
    model_id: str
    user_id: str
    session_id: str
    additional_params: dict[str, Any] = Field(default_factory=dict)


@dataclass
class AgentResponse:
    """Result of ``OpenAIAgent.process_request``.

    ``output`` is an assistant Message when ``streaming`` is False and an
    async iterator of text chunks when it is True. The iterator is
    forward-only and cannot be restarted.
    """

    metadata: AgentProcessingResult
    output: Message | AsyncIterator[str]
    streaming: bool = False


class OpenAIAgent:
    """Conversational agent with prompt templating, retrieval and tool use.

    The agent holds only read-only configuration and collaborators, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        name: str,
        description: str,
        config: AgentConfig | None = None,
        client: CompletionClient | None = None,
        retriever: Retriever | None = None,
        tool_config: ToolConfig | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            name: Human-readable agent name; also used to derive ``id``.
            description: What the agent is for. Used by the default prompt.
            config: Agent settings. Read from the environment if not provided.
            client: Completion client. Defaults to an OpenAICompletionClient
                built from ``config.openai_api_key``.
            retriever: Optional retriever for context injection.
            tool_config: Optional tools and tool handler.

        Raises:
            ConfigurationError: No client and no API key, or JSON responses
                requested for a model that does not support them,
                or tools configured without a handler.
        """
        self._config = config or AgentConfig()
        self.name = name
        self.description = description
        self.id = agent_id_from_name(name)

        if client is None:
            if not self._config.openai_api_key:
                raise ConfigurationError("OpenAI API key or completion client is required")
            client = OpenAICompletionClient(
                api_key=self._config.openai_api_key,
                base_url=self._config.openai_base_url,
            )

        if self._config.format_response_as_json and self._config.model not in JSON_MODE_MODELS:
            raise ConfigurationError(f"model must be one of {', '.join(JSON_MODE_MODELS)}")
        if tool_config is not None and tool_config.tools and tool_config.handler is None:
            raise ConfigurationError("Tools are configured but no tool handler is set")

        self._client = client
        self._retriever = retriever
        self._tool_config = tool_config
        self._assembler = ConversationAssembler()
        self._controller = ToolRecursionController(
            client,
            tool_config=tool_config,
            max_recursions=self._config.tool_max_recursions,
            assembler=self._assembler,
        )

        self._prompt = PromptComposer(default_prompt_template(name, description))
        if self._config.custom_system_prompt:
            self.set_system_prompt(
                self._config.custom_system_prompt.template,
                self._config.custom_system_prompt.variables,
            )

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def streaming(self) -> bool:
        return self._config.streaming

    @property
    def system_prompt(self) -> str:
        """The rendered system prompt, without retrieved context."""
        return self._prompt.render()

    def set_system_prompt(
        self,
        template: str | None = None,
        variables: TemplateVariables | None = None,
    ) -> None:
        """Replace the prompt template and/or its variables."""
        self._prompt.set_template(template, variables)

    async def process_request(
        self,
        input_text: str,
        user_id: str,
        session_id: str,
        chat_history: Sequence[Message],
        additional_params: dict[str, Any] | None = None,
    ) -> AgentResponse:
        """Answer one user input.

        Args:
            input_text: The new user message.
            user_id: Caller's user id, echoed in the metadata.
            session_id: Caller's session id, echoed in the metadata.
            chat_history: Prior conversation, oldest first.
            additional_params: Extra parameters echoed in the metadata.

        Returns:
            AgentResponse with the assistant Message (buffered) or an async
            iterator of text chunks (streaming).

        Raises:
            ConfigurationError: The model requested a tool but no handler is set.
            UpstreamError: The completion endpoint failed.
        """
        system_prompt = self._prompt.render()
        if self._retriever is not None:
            retrieved = await self._retriever.retrieve_and_combine_results(input_text)
            system_prompt = with_context(system_prompt, retrieved)

        messages = self._assembler.to_wire_messages(system_prompt, chat_history, input_text)
        request = self._build_request(messages)

        metadata = AgentProcessingResult(
            user_input=input_text,
            agent_id=self.id,
            agent_name=self.name,
            model_id=self.model,
            user_id=user_id,
            session_id=session_id,
            additional_params=additional_params or {},
        )
        logger.debug(
            "process_request agent=%s session=%s history=%d streaming=%s",
            self.id,
            session_id,
            len(chat_history),
            self.streaming,
        )

        if self.streaming:
            return AgentResponse(
                metadata=metadata,
                output=self._controller.stream(request),
                streaming=True,
            )

        answer = await self._controller.run(request)
        return AgentResponse(
            metadata=metadata,
            output=Message(role="assistant", content=[ContentBlock(text=answer)]),
        )

    def _build_request(self, messages: list[WireMessage]) -> CompletionRequest:
        inference = self._config.inference
        return CompletionRequest(
            model=self.model,
            messages=messages,
            max_tokens=inference.max_tokens,
            temperature=inference.temperature,
            top_p=inference.top_p,
            stop=inference.stop_sequences,
            json_response=self._config.format_response_as_json,
            tools=self._tool_config.tool_dicts() if self._tool_config else None,
        )
