"""Tests for recommendation generation."""

import json
from uuid import uuid4

import pytest
from langchain_core.runnables import RunnableLambda

from contact_intel.core.entities import CollectedData, SocialPost
from contact_intel.core.errors import ConfigurationError, NotFoundError, RecommendationError
from contact_intel.core.stores import Preferences
from contact_intel.use_cases.playbook import DEFAULT_PLAYBOOK, resolve_playbook
from contact_intel.use_cases.recommendations import RecommendationGenerator, prompt_variables
from tests.conftest import USER_ID, FakeLLMProvider


def recommendation(title):
    return {
        "title": title,
        "description": "Описание решения.",
        "rationale": "Подходит по отрасли.",
        "benefits": "Окупаемость за 6 месяцев.",
    }


THREE = json.dumps({"recommendations": [recommendation(t) for t in ("BI", "CRM", "ЭДО")]})


@pytest.fixture
def openai_credential_store(credential_store):
    credentials = credential_store.get_credentials(USER_ID)
    credentials.openai_api_key = "sk-user"
    credential_store.set_credentials(USER_ID, credentials)
    return credential_store


@pytest.fixture
def enriched_contact(repository, contact):
    return repository.save_collected_data(
        contact.id,
        USER_ID,
        CollectedData(
            industry="Информационные технологии",
            revenue="800 млрд руб",
            social_posts=[SocialPost(content="Запустили ИИ"), SocialPost(content="Наняли 100 инженеров")]
        )
    )


def capturing_model(prompts, answer=THREE):
    def respond(prompt_value):
        prompts.append(prompt_value.to_string())
        return answer
    return RunnableLambda(respond)


def test_resolve_playbook():
    assert resolve_playbook(None) == DEFAULT_PLAYBOOK
    assert resolve_playbook("   ") == DEFAULT_PLAYBOOK
    assert resolve_playbook("Мой справочник") == "Мой справочник"


def test_prompt_variables_placeholders(contact):
    variables = prompt_variables(contact, DEFAULT_PLAYBOOK, 3)

    assert variables["company"] == "Яндекс"
    assert variables["industry"] == "Не указана"
    assert variables["employees"] == "Не указано"
    assert variables["posts"] == "Нет данных"


class TestRecommendationGenerator:
    """Tests for RecommendationGenerator.generate."""

    def test_three_complete_recommendations(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        provider = FakeLLMProvider(responses=[THREE])
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store, llm_provider=provider, settings=settings
        )

        recommendations = generator.generate(enriched_contact.id, USER_ID)

        assert [r.title for r in recommendations] == ["BI", "CRM", "ЭДО"]
        assert all(r.description and r.rationale and r.benefits for r in recommendations)
        stored = repository.get_contact(enriched_contact.id, USER_ID)
        assert [r.title for r in stored.recommendations] == ["BI", "CRM", "ЭДО"]
        assert provider.bound == [("sk-user", "gpt-4o", 0.7)]

    def test_retail_contact_with_single_entry_playbook(
        self, repository, openai_credential_store, preference_store, settings, contact
    ):
        repository.save_collected_data(
            contact.id, USER_ID, CollectedData(industry="retail", employees="1000")
        )
        preference_store.set_preferences(
            USER_ID, Preferences(playbook="1. CRM система - управление продажами и клиентами")
        )
        prompts = []
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(model=capturing_model(prompts)), settings=settings
        )

        recommendations = generator.generate(contact.id, USER_ID)

        assert len(recommendations) == 3
        for rec in recommendations:
            assert rec.title and rec.description and rec.rationale and rec.benefits
        assert "Отрасль: retail" in prompts[0]
        assert "Количество сотрудников: 1000" in prompts[0]
        assert "1. CRM система - управление продажами и клиентами" in prompts[0]

    def test_prompt_carries_facts_and_default_playbook(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        prompts = []
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(model=capturing_model(prompts)), settings=settings
        )

        generator.generate(enriched_contact.id, USER_ID)

        prompt = prompts[0]
        assert "Отрасль: Информационные технологии" in prompt
        assert "Выручка: 800 млрд руб" in prompt
        assert "Запустили ИИ; Наняли 100 инженеров" in prompt
        assert "CRM система для B2B продаж" in prompt

    def test_user_playbook_and_model_override(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        preference_store.set_preferences(USER_ID, Preferences(playbook="Продукт {X}: аналитика"))
        prompts = []
        provider = FakeLLMProvider(model=capturing_model(prompts))
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store, llm_provider=provider, settings=settings
        )

        generator.generate(enriched_contact.id, USER_ID, model="gpt-4o-mini")

        assert "Продукт {X}: аналитика" in prompts[0]
        assert "CRM система для B2B продаж" not in prompts[0]
        assert provider.bound[0][1] == "gpt-4o-mini"

    def test_wrong_count_is_rejected(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        two = json.dumps({"recommendations": [recommendation("BI"), recommendation("CRM")]})
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(responses=[two]), settings=settings
        )

        with pytest.raises(RecommendationError):
            generator.generate(enriched_contact.id, USER_ID)
        assert repository.get_contact(enriched_contact.id, USER_ID).recommendations is None

    def test_incomplete_item_is_rejected(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        items = [recommendation("BI"), recommendation("CRM"), {**recommendation("ЭДО"), "benefits": " "}]
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(responses=[json.dumps({"recommendations": items})]),
            settings=settings
        )

        with pytest.raises(RecommendationError):
            generator.generate(enriched_contact.id, USER_ID)

    def test_malformed_json_is_rejected(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(responses=["Вот ваши рекомендации"]), settings=settings
        )

        with pytest.raises(RecommendationError):
            generator.generate(enriched_contact.id, USER_ID)

    def test_model_failure_is_wrapped(
        self, repository, openai_credential_store, preference_store, settings, enriched_contact
    ):
        def unavailable(_):
            raise RuntimeError("rate limited")

        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(model=RunnableLambda(unavailable)), settings=settings
        )

        with pytest.raises(RecommendationError) as exc_info:
            generator.generate(enriched_contact.id, USER_ID)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_requires_model_credential(
        self, repository, credential_store, preference_store, settings, contact
    ):
        generator = RecommendationGenerator(
            repository, credential_store, preference_store,
            llm_provider=FakeLLMProvider(), settings=settings
        )

        with pytest.raises(ConfigurationError):
            generator.generate(contact.id, USER_ID)

    def test_unknown_contact(self, repository, openai_credential_store, preference_store, settings):
        generator = RecommendationGenerator(
            repository, openai_credential_store, preference_store,
            llm_provider=FakeLLMProvider(), settings=settings
        )

        with pytest.raises(NotFoundError):
            generator.generate(uuid4(), USER_ID)
