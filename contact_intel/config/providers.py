"""
LLM Provider Factory

Provides a unified interface for:
- Chat models from multiple providers (OpenAI, Anthropic)
- Per-user credentials and per-task model selection
- JSON-mode chat models with pydantic-validated structured output
"""

from typing import Optional

from pydantic import SecretStr

from .settings import (
    LLMConfig,
    LLMProviderType,
    get_settings
)


class LLMProvider:
    """
    Factory for chat models using LangChain.

    Supports:
    - OpenAI (GPT-4o, GPT-4o-mini)
    - Anthropic (Claude)

    Credentials are owned by the calling user, so a provider is usually
    derived per call with ``for_credential``.
    """

    def __init__(self, config: LLMConfig = None):
        self.config = config or get_settings().llm
        self._chat_model = None

    def for_credential(
        self,
        api_key: str,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> "LLMProvider":
        """Derive a provider bound to a user's API key and a task model."""
        update = {}
        if self.config.provider == LLMProviderType.ANTHROPIC:
            update["anthropic_api_key"] = SecretStr(api_key)
        else:
            update["openai_api_key"] = SecretStr(api_key)
        if model_name:
            update["model_name"] = model_name
        if temperature is not None:
            update["temperature"] = temperature

        return LLMProvider(self.config.model_copy(update=update))

    def get_chat_model(self):
        """Get chat model instance (lazy initialization)."""
        if self._chat_model is None:
            self._chat_model = self._create_chat_model()
        return self._chat_model

    def with_json_output(self):
        """
        Get chat model constrained to emit a single JSON object.

        OpenAI supports this natively through ``response_format``; other
        providers rely on the prompt instructions alone.
        """
        chat = self.get_chat_model()

        if self.config.provider == LLMProviderType.OPENAI:
            return chat.bind(response_format={"type": "json_object"})
        return chat

    def with_structured_output(self, schema):
        """
        Get a runnable that answers with a validated ``schema`` instance.

        The JSON-mode chat model is piped into a PydanticOutputParser, which
        also accepts fenced JSON. Malformed or mismatching answers raise
        ``OutputParserException``.
        """
        from langchain_core.output_parsers import PydanticOutputParser

        parser = PydanticOutputParser(pydantic_object=schema)
        return self.with_json_output() | parser

    def _create_chat_model(self):
        """Create chat model based on provider configuration."""
        provider = self.config.provider

        if provider == LLMProviderType.OPENAI:
            return self._create_openai_chat()
        elif provider == LLMProviderType.ANTHROPIC:
            return self._create_anthropic_chat()
        else:
            raise ValueError(f"Unsupported LLM provider: {provider}")

    def _create_openai_chat(self):
        """Create OpenAI Chat model."""
        try:
            from langchain_openai import ChatOpenAI

            api_key = self.config.openai_api_key
            if api_key:
                api_key = api_key.get_secret_value()

            return ChatOpenAI(
                model=self.config.model_name,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                api_key=api_key,
                timeout=self.config.timeout,
                max_retries=0
            )
        except ImportError:
            raise ImportError("Install langchain-openai: pip install langchain-openai")

    def _create_anthropic_chat(self):
        """Create Anthropic Chat model."""
        try:
            from langchain_anthropic import ChatAnthropic

            api_key = self.config.anthropic_api_key
            if api_key:
                api_key = api_key.get_secret_value()

            return ChatAnthropic(
                model=self.config.model_name or "claude-3-5-sonnet-20241022",
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                api_key=api_key,
                timeout=self.config.timeout,
                max_retries=0
            )
        except ImportError:
            raise ImportError("Install langchain-anthropic: pip install langchain-anthropic")
