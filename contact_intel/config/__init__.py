"""
Configuration Management

Centralized configuration for:
- LLM providers (OpenAI, Anthropic)
- Search providers (Brave, Perplexity)
- CRM collaborator (AmoCRM)
"""

from .settings import (
    Settings,
    LLMConfig,
    LLMProviderType,
    SearchConfig,
    CRMConfig,
    get_settings
)
from .providers import LLMProvider

__all__ = [
    "Settings",
    "LLMConfig",
    "LLMProviderType",
    "SearchConfig",
    "CRMConfig",
    "get_settings",
    "LLMProvider"
]
