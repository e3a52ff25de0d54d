"""Pytest configuration and fixtures."""

import json

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from contact_intel.config.providers import LLMProvider
from contact_intel.config.settings import LLMConfig, Settings
from contact_intel.core.entities import Contact
from contact_intel.core.stores import (
    Credentials,
    InMemoryContactRepository,
    InMemoryCredentialStore,
    InMemoryPreferenceStore,
    Preferences
)


USER_ID = "user-1"

BRAVE_HOST = "api.search.brave.com"
PERPLEXITY_HOST = "api.perplexity.ai"


class FakeLLMProvider(LLMProvider):
    """LLMProvider whose every task shares one scripted chat model."""

    def __init__(self, responses=None, model=None):
        super().__init__(LLMConfig())
        self._chat_model = model if model is not None else FakeListChatModel(responses=responses or ["{}"])
        self.bound = []

    def for_credential(self, api_key, model_name=None, temperature=None):
        self.bound.append((api_key, model_name, temperature))
        return self

    def with_json_output(self):
        return self.get_chat_model()


class RecordingTransport:
    """httpx.MockTransport wrapper that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


def brave_payload(results):
    return {"type": "search", "web": {"results": results}}


def perplexity_payload(content):
    return {
        "id": "cmpl-1",
        "model": "sonar",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


def perplexity_json(**fields):
    return perplexity_payload(json.dumps(fields, ensure_ascii=False))


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def repository():
    return InMemoryContactRepository()


@pytest.fixture
def credentials():
    return Credentials(
        brave_api_key="brave-key",
        perplexity_api_key="pplx-key",
        openai_api_key=None
    )


@pytest.fixture
def credential_store(credentials):
    return InMemoryCredentialStore({USER_ID: credentials})


@pytest.fixture
def preference_store():
    return InMemoryPreferenceStore({USER_ID: Preferences(search_systems=["brave", "perplexity"])})


@pytest.fixture
def contact(repository):
    """A stored contact with a known company."""
    return repository.upsert_contact(
        Contact(user_id=USER_ID, crm_id="1001", name="Иван Петров", company="Яндекс")
    )
