"""OpenAI Chat Completions implementation of CompletionClient."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from agentloop_core.errors import UpstreamError
from agentloop_core.llm.types import (
    CompletionRequest,
    CompletionResponse,
    StreamEvent,
    TextDelta,
    TextTurn,
    ToolUseTurn,
    TurnComplete,
)
from agentloop_core.messages import ToolCall, ToolCallFragment

logger = logging.getLogger(__name__)

# OpenAI finish_reason signalling that the model wants tools run
TOOL_CALLS_FINISH_REASON = "tool_calls"


def _upstream_error(err: OpenAIError) -> UpstreamError:
    return UpstreamError(
        f"OpenAI API call failed: {err}",
        status_code=getattr(err, "status_code", None),
    )


class OpenAICompletionClient:
    """Completion client backed by ``openai.AsyncOpenAI``.

    Example:
        ```python
        client = OpenAICompletionClient(api_key="sk-...")
        response = await client.complete(
            CompletionRequest(model="gpt-4o-mini", messages=[{"role": "user", "content": "Hi"}])
        )
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: OpenAI API key. Ignored when ``client`` is given.
            base_url: Optional endpoint override for OpenAI-compatible servers.
            client: A preconfigured ``AsyncOpenAI`` instance to reuse.
        """
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    def _build_kwargs(self, request: CompletionRequest, stream: bool) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": request.messages,
            "response_format": {
                "type": "json_object" if request.json_response else "text"
            },
        }
        # Unset parameters are omitted so the endpoint applies its defaults
        optional = {
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "top_p": request.top_p,
            "stop": request.stop,
            "tools": request.tools or None,
        }
        kwargs.update({k: v for k, v in optional.items() if v is not None})
        if stream:
            kwargs["stream"] = True
        return kwargs

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a buffered chat completion.

        Raises:
            UpstreamError: If the call fails or the response has no usable
                choice.
        """
        logger.debug(
            "complete model=%s messages=%d", request.model, len(request.messages)
        )
        try:
            completion = await self._client.chat.completions.create(
                **self._build_kwargs(request, stream=False)
            )
        except OpenAIError as e:
            logger.error("OpenAI completion failed: %s", e, exc_info=True)
            raise _upstream_error(e) from e

        if not completion.choices:
            raise UpstreamError("No choices returned from OpenAI API")

        message = completion.choices[0].message
        if message.tool_calls:
            return ToolUseTurn(
                text=message.content or "",
                tool_calls=[
                    ToolCall(
                        id=tc.id,
                        name=tc.function.name,
                        arguments=tc.function.arguments or "",
                    )
                    for tc in message.tool_calls
                ],
            )

        if not isinstance(message.content, str):
            raise UpstreamError("Unexpected response format from OpenAI API")
        return TextTurn(text=message.content)

    async def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        """Run a streamed chat completion.

        Each chunk is translated into zero or more events: tool-call
        fragments first, then answer text, then the turn completion when
        the chunk carries a finish reason.

        Raises:
            UpstreamError: If the call fails before or during streaming.
        """
        logger.debug(
            "stream model=%s messages=%d", request.model, len(request.messages)
        )
        try:
            response = await self._client.chat.completions.create(
                **self._build_kwargs(request, stream=True)
            )
            # Closes the HTTP response when the consumer stops early
            async with response:
                async for chunk in response:
                    if not chunk.choices:
                        continue
                    choice = chunk.choices[0]
                    delta = choice.delta

                    if delta is not None:
                        for tc in delta.tool_calls or []:
                            function = tc.function
                            yield ToolCallFragment(
                                id=tc.id or None,
                                name=function.name if function else None,
                                arguments=(function.arguments if function else None) or "",
                            )
                        if delta.content:
                            yield TextDelta(text=delta.content)

                    if choice.finish_reason:
                        reason = (
                            "tool_use"
                            if choice.finish_reason == TOOL_CALLS_FINISH_REASON
                            else "stop"
                        )
                        yield TurnComplete(reason=reason)
        except OpenAIError as e:
            logger.error("OpenAI stream failed: %s", e, exc_info=True)
            raise _upstream_error(e) from e
