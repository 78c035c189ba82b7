from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TOOL_MAX_RECURSIONS = 5


class InferenceConfig(BaseModel):
    """Sampling parameters passed through to the completion endpoint.

    Every field is optional; ``None`` means "let the endpoint decide".
    """

    model_config = ConfigDict(frozen=True)

    max_tokens: int | None = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    stop_sequences: list[str] | None = None


class SystemPromptConfig(BaseModel):
    """A custom system prompt template and its variables."""

    template: str
    variables: dict[str, str | list[str]] = Field(default_factory=dict)


class AgentConfig(BaseSettings):
    """Configuration for an OpenAIAgent.

    Settings can be provided via environment variables with AGENTLOOP_ prefix.
    Nested fields use a double underscore, e.g. AGENTLOOP_INFERENCE__TEMPERATURE.
    The API key is also read from the plain OPENAI_API_KEY variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENTLOOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials for the default OpenAI client (unused when a client is injected)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("agentloop_openai_api_key", "openai_api_key"),
    )
    openai_base_url: str | None = None

    model: str = DEFAULT_MODEL

    # Buffered vs incremental responses, fixed for the lifetime of an agent
    streaming: bool = False

    inference: InferenceConfig = Field(default_factory=InferenceConfig)

    # Ask the endpoint for a JSON object instead of free text
    format_response_as_json: bool = False

    custom_system_prompt: SystemPromptConfig | None = None

    # Default recursion budget when the tool config does not set one
    tool_max_recursions: int = Field(default=DEFAULT_TOOL_MAX_RECURSIONS, ge=1)
