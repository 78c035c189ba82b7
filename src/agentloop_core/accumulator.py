"""Reconstruction of tool calls from streamed fragments."""

import logging
from collections.abc import Iterable
from typing import Any

from agentloop_core.messages import ToolCall, ToolCallFragment

logger = logging.getLogger(__name__)


class ToolCallAccumulator:
    """Collects tool calls for one completion round.

    In fragment mode, a fragment with an ``id`` opens a new call and every
    fragment without one extends the last opened call. The upstream wire
    format delivers a call's fragments contiguously after its opening
    fragment, so earlier calls are never targeted again.

    Example:
        ```python
        acc = ToolCallAccumulator()
        acc.add(ToolCallFragment(id="call_1", name="lookup"))
        acc.add(ToolCallFragment(arguments='{"q": '))
        acc.add(ToolCallFragment(arguments='"x"}'))
        calls = acc.finalize()  # [ToolCall(id="call_1", name="lookup", arguments='{"q": "x"}')]
        ```
    """

    def __init__(self) -> None:
        self._calls: list[dict[str, str]] = []
        self._dropped = 0

    @classmethod
    def from_calls(cls, calls: Iterable[ToolCall | dict[str, Any]]) -> list[ToolCall]:
        """Whole-call mode: map a complete tool-call list to ToolCall records.

        Accepts ToolCall instances or OpenAI-shaped dicts
        (``{"id", "function": {"name", "arguments"}}``).
        """
        result: list[ToolCall] = []
        for call in calls:
            if isinstance(call, ToolCall):
                result.append(call)
                continue
            function = call.get("function") or {}
            result.append(
                ToolCall(
                    id=call.get("id", ""),
                    name=function.get("name", call.get("name", "")),
                    arguments=function.get("arguments", call.get("arguments", "")) or "",
                )
            )
        return result

    @property
    def pending(self) -> int:
        """Number of calls opened since the last finalize."""
        return len(self._calls)

    @property
    def dropped(self) -> int:
        """Number of argument chunks dropped because no call was open."""
        return self._dropped

    def add(self, fragment: ToolCallFragment) -> None:
        """Consume one fragment."""
        if fragment.id:
            self._calls.append(
                {
                    "id": fragment.id,
                    "name": fragment.name or "",
                    "arguments": fragment.arguments,
                }
            )
            return

        if not fragment.arguments and not fragment.name:
            return

        if not self._calls:
            # Nothing to attach the chunk to
            self._dropped += 1
            logger.warning(
                "Dropping tool-call fragment received before any call was opened: %r",
                fragment.arguments,
            )
            return

        last = self._calls[-1]
        if fragment.name:
            last["name"] += fragment.name
        last["arguments"] += fragment.arguments

    def finalize(self) -> list[ToolCall]:
        """Return the assembled calls in open order and reset the buffers."""
        calls = [ToolCall(**buf) for buf in self._calls]
        self._calls = []
        logger.debug("finalize tool_calls=%d", len(calls))
        return calls
