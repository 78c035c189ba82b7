from typing import Any

import pytest

from agentloop_core.messages import ToolCall, ToolResult
from agentloop_core.tools import (
    ToolConfig,
    ToolDefinition,
    ToolHandler,
    invoke_handler,
    to_tool_result,
)

CALL = ToolCall(id="call_1", name="weather", arguments='{"city": "Oslo"}')


class WeatherHandler:
    def handle(self, tool_call: ToolCall, messages: list[dict[str, Any]]) -> str:
        return f"sunny in {tool_call.parsed_arguments()['city']}"


class TestToolResultNormalization:
    def test_string(self) -> None:
        assert to_tool_result(CALL, "ok") == ToolResult(tool_call_id="call_1", content="ok")

    def test_json_value(self) -> None:
        assert to_tool_result(CALL, {"temp": 12}).content == '{"temp": 12}'

    def test_tool_result_passes_through(self) -> None:
        result = ToolResult(tool_call_id="other", content="x", is_error=True)

        assert to_tool_result(CALL, result) is result


class TestInvokeHandler:
    async def test_protocol_handler(self) -> None:
        handler = WeatherHandler()

        assert isinstance(handler, ToolHandler)
        result = await invoke_handler(handler, CALL, [])
        assert result.content == "sunny in Oslo"

    async def test_plain_callable(self) -> None:
        result = await invoke_handler(lambda call, messages: len(messages), CALL, [{}, {}])

        assert result.content == "2"

    async def test_async_callable(self) -> None:
        async def handler(call: ToolCall, messages: list[dict[str, Any]]) -> str:
            return call.name

        result = await invoke_handler(handler, CALL, [])

        assert result.content == "weather"

    async def test_errors_propagate(self) -> None:
        def handler(call: ToolCall, messages: list[dict[str, Any]]) -> str:
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await invoke_handler(handler, CALL, [])


class TestToolConfig:
    def test_tool_dicts_mixes_definitions_and_raw(self) -> None:
        raw = {"type": "function", "function": {"name": "raw_tool"}}
        config = ToolConfig(
            tools=[ToolDefinition(name="weather", parameters={"type": "object"}), raw],
        )

        assert config.tool_dicts() == [
            {
                "type": "function",
                "function": {
                    "name": "weather",
                    "description": "",
                    "parameters": {"type": "object"},
                },
            },
            raw,
        ]

    def test_accepts_protocol_handler(self) -> None:
        handler = WeatherHandler()

        assert ToolConfig(handler=handler).handler is handler

    def test_max_recursions_validation(self) -> None:
        with pytest.raises(ValueError):
            ToolConfig(max_recursions=0)
