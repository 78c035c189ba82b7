"""Error hierarchy for AgentLoop.

``ConfigurationError`` is raised before any network call and is never worth
retrying. ``UpstreamError`` wraps failures of the remote completion endpoint
and is surfaced as-is; retry policy belongs to the caller.
``ToolExecutionError`` never escapes a request: the controller turns it into
an error tool result.
"""


class AgentLoopError(Exception):
    """Base class for all AgentLoop errors."""


class ConfigurationError(AgentLoopError):
    """The agent is configured in a way that cannot serve the request."""


class UpstreamError(AgentLoopError):
    """The remote completion endpoint failed or returned an unexpected shape."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolExecutionError(AgentLoopError):
    """A tool handler failed for a single tool call."""

    def __init__(self, tool_name: str, tool_call_id: str, message: str) -> None:
        super().__init__(f'Tool "{tool_name}" ({tool_call_id}) failed: {message}')
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id
