"""
Use Case 2: Personalized Product Recommendations

Turns the collected company and contact facts plus the user's product
playbook into exactly three product recommendations, using one JSON-mode
model call.

Flow:
1. Load the contact and the user's generative-model credential
2. Resolve the playbook (user's own or the built-in default)
3. Build the prompt from collected facts
4. Call the model once and validate the answer
5. Replace the stored recommendations
"""

from typing import Optional
from uuid import UUID
import logging

from langchain_core.exceptions import OutputParserException

from ..config.providers import LLMProvider
from ..config.settings import Settings, get_settings
from ..core.entities import CollectedData, Contact, Recommendation
from ..core.errors import ConfigurationError, NotFoundError, RecommendationError
from ..core.stores import ContactRepository, CredentialStore, PreferenceStore
from ..layers.intelligence.schemas import RecommendationSet
from .playbook import resolve_playbook

logger = logging.getLogger(__name__)


RECOMMENDATION_TEMPLATE = """Ты - эксперт по B2B продажам. На основе следующей информации создай {count} персонализированные рекомендации продуктов для продажи:

СПРАВОЧНИК ПРОДУКТОВ:
{playbook}

ИНФОРМАЦИЯ О КОМПАНИИ:
- Название: {company}
- Отрасль: {industry}
- Выручка: {revenue}
- Количество сотрудников: {employees}
- Основные продукты: {products}

ИНФОРМАЦИЯ О КОНТАКТЕ:
- Имя: {name}
- Должность: {job_title}
- Последние публикации: {posts}

Для каждой рекомендации укажи:
1. Название продукта/решения
2. Краткое описание (2-3 предложения)
3. Почему это подходит именно этому клиенту
4. Потенциальную выгоду или ROI

Ответь в формате JSON:
{{
  "recommendations": [
    {{
      "title": "Название продукта",
      "description": "Описание решения",
      "rationale": "Почему подходит клиенту",
      "benefits": "Потенциальные выгоды"
    }}
  ]
}}"""


def prompt_variables(contact: Contact, playbook: str, count: int) -> dict:
    """Template inputs, with the localized placeholders for missing facts."""
    data = contact.collected_data or CollectedData()
    posts = "; ".join(post.content for post in data.social_posts or [])

    return {
        "count": count,
        "playbook": playbook,
        "company": contact.company or "Не указана",
        "industry": data.industry or "Не указана",
        "revenue": data.revenue or "Не указана",
        "employees": data.employees or "Не указано",
        "products": data.products or "Не указаны",
        "name": contact.name,
        "job_title": contact.position or data.job_title or "Не указана",
        "posts": posts or "Нет данных",
    }


class RecommendationGenerator:
    """
    Generates and stores recommendations for one contact at a time.

    The model answer must contain exactly ``settings.recommendation_count``
    complete recommendations; anything else is rejected.
    """

    def __init__(
        self,
        repository: ContactRepository,
        credential_store: CredentialStore,
        preference_store: PreferenceStore,
        llm_provider: LLMProvider = None,
        settings: Settings = None
    ):
        self._settings = settings or get_settings()
        self._repository = repository
        self._credentials = credential_store
        self._preferences = preference_store
        self._provider = llm_provider

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = LLMProvider(self._settings.llm)
        return self._provider

    def _create_chain(self, api_key: str, model: Optional[str]):
        from langchain_core.prompts import ChatPromptTemplate

        base = self._get_provider()
        provider = base.for_credential(
            api_key,
            model or base.config.recommendation_model,
            base.config.recommendation_temperature
        )
        prompt = ChatPromptTemplate.from_messages([("human", RECOMMENDATION_TEMPLATE)])
        return prompt | provider.with_structured_output(RecommendationSet)

    def generate(self, contact_id: UUID, user_id: str, model: str = None) -> list[Recommendation]:
        """
        Generate recommendations for a contact and persist them.

        Raises:
            NotFoundError: the contact does not exist for this user
            ConfigurationError: no generative-model credential
            RecommendationError: the model call failed or its answer is invalid
        """
        contact = self._repository.get_contact(contact_id, user_id)
        if contact is None:
            raise NotFoundError(f"Contact {contact_id} not found")

        credentials = self._credentials.get_credentials(user_id)
        if not credentials.openai_api_key:
            raise ConfigurationError("OpenAI API key not configured")

        preferences = self._preferences.get_preferences(user_id)
        count = self._settings.recommendation_count
        variables = prompt_variables(contact, resolve_playbook(preferences.playbook), count)

        try:
            parsed = self._create_chain(credentials.openai_api_key, model).invoke(variables)
        except OutputParserException as e:
            logger.error("Invalid recommendation output for contact %s: %s", contact_id, e)
            raise RecommendationError(f"Failed to generate recommendations: {e}") from e
        except Exception as e:
            logger.exception("Recommendation model call failed for contact %s", contact_id)
            raise RecommendationError("Failed to generate recommendations") from e

        if len(parsed.recommendations) != count:
            raise RecommendationError(
                f"Expected {count} recommendations, model returned {len(parsed.recommendations)}"
            )

        recommendations = [item.to_entity() for item in parsed.recommendations]
        self._repository.save_recommendations(contact_id, user_id, recommendations)
        logger.info("Stored %d recommendations for contact %s", len(recommendations), contact_id)
        return recommendations
