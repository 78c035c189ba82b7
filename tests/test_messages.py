import pytest
from pydantic import ValidationError

from agentloop_core.messages import ContentBlock, Message, ToolCall, ToolResult


class TestMessage:
    """Test the internal Message model."""

    def test_text_is_first_text_block(self) -> None:
        msg = Message(
            role="user",
            content=[
                ContentBlock(payload={"type": "image_url", "url": "https://x/y.png"}),
                ContentBlock(text="first"),
                ContentBlock(text="second"),
            ],
        )

        assert msg.text == "first"

    def test_text_empty_without_text_blocks(self) -> None:
        msg = Message(role="user", content=[ContentBlock(payload={"k": "v"})])

        assert msg.text == ""

    def test_text_empty_without_content(self) -> None:
        assert Message(role="assistant").text == ""

    def test_role_is_lower_cased(self) -> None:
        assert Message(role="ASSISTANT", content="hi").role == "assistant"

    def test_string_content_wrapped(self) -> None:
        msg = Message(role="user", content="Hello")

        assert msg.content == [ContentBlock(text="Hello")]

    def test_dict_content_blocks(self) -> None:
        msg = Message(role="assistant", content=[{"text": "Hi there"}])

        assert msg == Message(role="assistant", content=[ContentBlock(text="Hi there")])

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(role="narrator", content="Once upon a time")


class TestToolCall:
    """Test ToolCall helpers."""

    def test_parsed_arguments(self) -> None:
        call = ToolCall(id="c1", name="weather", arguments='{"city": "Oslo"}')

        assert call.parsed_arguments() == {"city": "Oslo"}

    def test_parsed_arguments_empty(self) -> None:
        assert ToolCall(id="c1", name="clock").parsed_arguments() == {}

    def test_tool_result_defaults(self) -> None:
        result = ToolResult(tool_call_id="c1", content="ok")

        assert result.is_error is False
