from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JotConfig(BaseSettings):
    """Configuration for the jot agent.

    Settings can be provided via environment variables with JOT_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="JOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Model provider
    llm_provider: Literal["anthropic", "openai", "ollama"] = "anthropic"
    llm_model: str | None = None

    # Credentials (only the configured provider's are used)
    anthropic_api_key: str | None = None
    anthropic_auth_token: str | None = None
    openai_api_key: str | None = None

    # Ollama exposes an OpenAI-compatible endpoint
    ollama_base_url: str = "http://localhost:11434/v1"

    # Context budget for a whole request: system prompt + tools + history
    max_context_tokens: int = Field(default=100_000, ge=1)

    # Tool-calling loop
    max_tool_rounds: int = Field(default=10, ge=1, le=100)
    min_message_budget: int = Field(default=1000, ge=0)

    # Budget for stored history between turns (None = max_context_tokens)
    history_retention_tokens: int | None = Field(default=None, ge=1)

    # System prompt override (None = built-in default)
    system_prompt: str | None = None

    def get_api_key(self) -> str | None:
        """Get the API key for the configured provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key
        if self.llm_provider == "ollama":
            return "ollama"
        return self.anthropic_api_key

    def get_retention_tokens(self) -> int:
        """Get the token budget for stored conversation history."""
        return self.history_retention_tokens or self.max_context_tokens
