from agentloop_core.accumulator import ToolCallAccumulator
from agentloop_core.agent import (
    JSON_MODE_MODELS,
    AgentProcessingResult,
    AgentResponse,
    OpenAIAgent,
)
from agentloop_core.assembler import ConversationAssembler
from agentloop_core.config import AgentConfig, InferenceConfig, SystemPromptConfig
from agentloop_core.errors import (
    AgentLoopError,
    ConfigurationError,
    ToolExecutionError,
    UpstreamError,
)
from agentloop_core.llm import (
    CompletionClient,
    CompletionRequest,
    OpenAICompletionClient,
    TextDelta,
    TextTurn,
    ToolUseTurn,
    TurnComplete,
)
from agentloop_core.messages import (
    ContentBlock,
    Message,
    ToolCall,
    ToolCallFragment,
    ToolResult,
)
from agentloop_core.prompt import PromptComposer, compose, with_context
from agentloop_core.recursion import (
    RecursionPhase,
    RecursionState,
    ToolRecursionController,
)
from agentloop_core.retrieval import (
    Embedder,
    LanceDBRetriever,
    OpenAIEmbedder,
    Retriever,
)
from agentloop_core.tools import ToolConfig, ToolDefinition, ToolHandler

__all__ = [
    # Agent
    "OpenAIAgent",
    "AgentResponse",
    "AgentProcessingResult",
    "JSON_MODE_MODELS",
    # Config
    "AgentConfig",
    "InferenceConfig",
    "SystemPromptConfig",
    # Errors
    "AgentLoopError",
    "ConfigurationError",
    "UpstreamError",
    "ToolExecutionError",
    # Messages
    "Message",
    "ContentBlock",
    "ToolCall",
    "ToolCallFragment",
    "ToolResult",
    # Prompt
    "PromptComposer",
    "compose",
    "with_context",
    # Conversation
    "ConversationAssembler",
    "ToolCallAccumulator",
    "ToolRecursionController",
    "RecursionPhase",
    "RecursionState",
    # Tools
    "ToolConfig",
    "ToolDefinition",
    "ToolHandler",
    # Completion clients
    "CompletionClient",
    "OpenAICompletionClient",
    "CompletionRequest",
    "TextTurn",
    "ToolUseTurn",
    "TextDelta",
    "TurnComplete",
    # Retrieval
    "Retriever",
    "Embedder",
    "OpenAIEmbedder",
    "LanceDBRetriever",
]
