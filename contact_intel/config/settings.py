"""
Settings Management with Pydantic

Provides type-safe configuration management with:
- Environment variable support
- Validation
- Search, LLM and CRM collaborator configurations
"""

from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProviderType(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class LLMConfig(BaseSettings):
    """LLM provider configuration."""
    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        extra="ignore"
    )

    provider: LLMProviderType = LLMProviderType.OPENAI
    model_name: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_tokens: int = 4096
    timeout: int = 60

    # Per-task models
    extraction_model: str = "gpt-4o-mini"
    extraction_temperature: float = 0.1
    summary_model: str = "gpt-4o"
    summary_temperature: float = 0.3
    recommendation_model: str = "gpt-4o"
    recommendation_temperature: float = 0.7

    # API Keys (loaded from environment, overridden per user)
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")


class SearchConfig(BaseSettings):
    """Search provider configuration."""
    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        extra="ignore"
    )

    # Brave (broad web search)
    brave_endpoint: str = "https://api.search.brave.com/res/v1/web/search"
    brave_result_count: int = 20

    # Perplexity (AI-synthesized search)
    perplexity_endpoint: str = "https://api.perplexity.ai/chat/completions"
    perplexity_model: str = "sonar"
    perplexity_temperature: float = 0.2

    # No retries; a timed out call is a failed call
    timeout_seconds: float = 30.0


class CRMConfig(BaseSettings):
    """AmoCRM collaborator configuration."""
    model_config = SettingsConfigDict(
        env_prefix="AMOCRM_",
        extra="ignore"
    )

    base_domain: str = "amocrm.ru"
    timeout_seconds: float = 15.0


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Contact Intelligence"
    debug: bool = False
    log_level: str = "INFO"

    # Sub-configurations
    llm: LLMConfig = Field(default_factory=LLMConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    crm: CRMConfig = Field(default_factory=CRMConfig)

    # Contact intelligence specific
    default_search_systems: list[str] = Field(
        default_factory=lambda: ["brave", "perplexity"]
    )
    recommendation_count: int = 3
    max_social_posts: int = 3

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            llm=LLMConfig(),
            search=SearchConfig(),
            crm=CRMConfig()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
