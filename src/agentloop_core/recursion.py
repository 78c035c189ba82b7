"""Bounded tool-use loop shared by the buffered and streaming paths.

One request moves through these phases::

    AWAITING_MODEL --(text)--------> DONE
    AWAITING_MODEL --(tool use)----> EXECUTING_TOOLS
    EXECUTING_TOOLS --(budget left)-> AWAITING_MODEL
    EXECUTING_TOOLS --(budget 0)----> BUDGET_EXHAUSTED

Budget exhaustion is a normal way to finish: the caller gets whatever text
was produced so far.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from agentloop_core.accumulator import ToolCallAccumulator
from agentloop_core.assembler import ConversationAssembler
from agentloop_core.config import DEFAULT_TOOL_MAX_RECURSIONS
from agentloop_core.errors import ConfigurationError, ToolExecutionError, UpstreamError
from agentloop_core.llm.protocol import CompletionClient
from agentloop_core.llm.types import (
    CompletionRequest,
    TextDelta,
    TextTurn,
    ToolUseTurn,
    TurnComplete,
)
from agentloop_core.messages import ToolCall, ToolCallFragment, ToolResult
from agentloop_core.tools import ToolConfig, ToolHandler, invoke_handler

logger = logging.getLogger(__name__)


def _log_detached_round(task: "asyncio.Future[None]") -> None:
    """Report a tool round that failed after its consumer was cancelled."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Tool round failed after the stream was cancelled: %s",
            error,
            exc_info=error,
        )


class RecursionPhase(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    BUDGET_EXHAUSTED = "budget_exhausted"


class RecursionState(BaseModel):
    """Per-request state of the tool loop.

    Owns the growing wire-message sequence for the lifetime of one request.

    Attributes:
        remaining: Tool rounds still allowed.
        messages: Wire messages sent so far, plus the tool traffic appended
            by each round.
        phase: Current phase of the loop.
        text: Final answer (buffered) or all text yielded so far (streaming).
        rounds: Tool rounds executed.
    """

    remaining: int = Field(ge=0)
    messages: list[dict[str, Any]] = Field(default_factory=list)
    phase: RecursionPhase = RecursionPhase.AWAITING_MODEL
    text: str = ""
    rounds: int = 0

    @property
    def finished(self) -> bool:
        return self.phase in (RecursionPhase.DONE, RecursionPhase.BUDGET_EXHAUSTED)


class ToolRecursionController:
    """Drives completion -> tool execution -> completion until done.

    The controller holds only read-only collaborators and can be shared by
    concurrent requests; all per-request data lives in a RecursionState.

    Example:
        ```python
        controller = ToolRecursionController(client, tool_config=ToolConfig(
            tools=[ToolDefinition(name="clock")],
            handler=lambda call, messages: "12:00",
        ))
        answer = await controller.run(request)

        async for chunk in controller.stream(request):
            print(chunk, end="")
        ```
    """

    def __init__(
        self,
        client: CompletionClient,
        tool_config: ToolConfig | None = None,
        max_recursions: int = DEFAULT_TOOL_MAX_RECURSIONS,
        assembler: ConversationAssembler | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Completion client used for every round.
            tool_config: Tools and handler. Without a handler, any tool use
                requested by the model raises ConfigurationError.
            max_recursions: Default tool-round budget, overridden by
                ``tool_config.max_recursions`` when set.
            assembler: Assembler used to append tool traffic.

        Raises:
            ConfigurationError: The effective budget is below 1.
        """
        self._client = client
        self._handler: ToolHandler | Callable[..., Any] | None = (
            tool_config.handler if tool_config else None
        )
        self._max_recursions = (
            tool_config.max_recursions
            if tool_config and tool_config.max_recursions
            else max_recursions
        )
        if self._max_recursions < 1:
            raise ConfigurationError(
                f"max_recursions must be at least 1, got {self._max_recursions}"
            )
        self._assembler = assembler or ConversationAssembler()

    @property
    def max_recursions(self) -> int:
        return self._max_recursions

    def new_state(self, request: CompletionRequest) -> RecursionState:
        """Create the state for a request, seeded with its messages."""
        return RecursionState(
            remaining=self._max_recursions, messages=list(request.messages)
        )

    async def run(self, request: CompletionRequest) -> str:
        """Buffered mode: resolve all tool rounds and return the answer text."""
        state = await self.resolve(request)
        return state.text

    async def resolve(self, request: CompletionRequest) -> RecursionState:
        """Buffered mode, returning the full final state.

        Raises:
            ConfigurationError: The model asked for tools but no handler is set.
            UpstreamError: A completion failed.
        """
        state = self.new_state(request)

        while state.phase is RecursionPhase.AWAITING_MODEL:
            response = await self._client.complete(request.with_messages(state.messages))

            if isinstance(response, TextTurn):
                self._finish(state, response.text)
            elif isinstance(response, ToolUseTurn):
                state.text = response.text
                turn = ToolUseTurn(
                    text=response.text,
                    tool_calls=ToolCallAccumulator.from_calls(response.tool_calls),
                )
                await self._execute_round(state, turn)
            else:
                raise UpstreamError(f"Unexpected completion response: {response!r}")

        logger.debug(
            "resolve finished phase=%s rounds=%d", state.phase.value, state.rounds
        )
        return state

    async def stream(
        self,
        request: CompletionRequest,
        state: RecursionState | None = None,
    ) -> AsyncIterator[str]:
        """Streaming mode: yield answer text across all rounds.

        Tool-call fragments are accumulated internally and never yielded.
        Each tool round is spliced into the same iterator, so the consumer
        sees one continuous sequence of text chunks.

        Args:
            request: Request for the first round.
            state: Optional state to drive; lets the caller inspect the
                outcome after iteration. Created from ``request`` if omitted.

        Raises:
            ConfigurationError: The model asked for tools but no handler is set.
            UpstreamError: A completion failed.
        """
        if state is None:
            state = self.new_state(request)

        while state.phase is RecursionPhase.AWAITING_MODEL:
            accumulator = ToolCallAccumulator()
            round_text: list[str] = []
            tool_use = False

            events = self._client.stream(request.with_messages(state.messages))
            try:
                async for event in events:
                    if isinstance(event, TextDelta):
                        round_text.append(event.text)
                        state.text += event.text
                        yield event.text
                    elif isinstance(event, ToolCallFragment):
                        accumulator.add(event)
                    elif isinstance(event, TurnComplete):
                        tool_use = event.reason == "tool_use"
            finally:
                aclose = getattr(events, "aclose", None)
                if aclose is not None:
                    await aclose()

            if not tool_use:
                self._finish(state, "".join(round_text), keep_text=True)
                break

            turn = ToolUseTurn(text="".join(round_text), tool_calls=accumulator.finalize())
            # A cancelled consumer must not leave a half-written round behind
            round_task = asyncio.ensure_future(self._execute_round(state, turn))
            try:
                await asyncio.shield(round_task)
            except asyncio.CancelledError:
                round_task.add_done_callback(_log_detached_round)
                raise

        logger.debug(
            "stream finished phase=%s rounds=%d", state.phase.value, state.rounds
        )

    def _finish(self, state: RecursionState, text: str, keep_text: bool = False) -> None:
        state.messages.append({"role": "assistant", "content": text})
        if not keep_text:
            state.text = text
        state.phase = RecursionPhase.DONE

    async def _execute_round(self, state: RecursionState, turn: ToolUseTurn) -> None:
        if self._handler is None:
            raise ConfigurationError("Tool use requested but no tool handler is configured")
        if not turn.tool_calls:
            raise UpstreamError("Tool use signalled without any tool calls")

        state.phase = RecursionPhase.EXECUTING_TOOLS
        logger.debug(
            "tool round=%d calls=%s",
            state.rounds + 1,
            [tc.name for tc in turn.tool_calls],
        )

        self._assembler.append_assistant(state.messages, turn)
        results = [
            await self._run_tool(self._handler, call, list(state.messages))
            for call in turn.tool_calls
        ]
        for result in results:
            self._assembler.append_tool(state.messages, result)

        state.rounds += 1
        state.remaining = max(state.remaining - 1, 0)
        if state.remaining <= 0:
            logger.debug("tool recursion budget exhausted after %d rounds", state.rounds)
            state.phase = RecursionPhase.BUDGET_EXHAUSTED
        else:
            state.phase = RecursionPhase.AWAITING_MODEL

    async def _run_tool(
        self,
        handler: ToolHandler | Callable[..., Any],
        call: ToolCall,
        messages: list[dict[str, Any]],
    ) -> ToolResult:
        try:
            return await invoke_handler(handler, call, messages)
        except Exception as e:
            error = ToolExecutionError(call.name, call.id, str(e))
            logger.error("%s", error, exc_info=True)
            return ToolResult(
                tool_call_id=call.id,
                content=json.dumps({"is_error": True, "content": str(e)}),
                is_error=True,
            )
