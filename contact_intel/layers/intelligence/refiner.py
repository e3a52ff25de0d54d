"""
Structured Refiner - LangChain-based extraction from search evidence

Converts provider evidence into strict structured fields and short
summaries using:
- LangChain prompt templates and LCEL chains
- JSON-mode chat models for extraction
- Pydantic validation of every structured answer

The refiner is optional. Callers keep their provider-derived values when a
call fails or returns malformed JSON.
"""

from enum import Enum
from typing import Any, Dict, Optional
import logging

from langchain_core.exceptions import OutputParserException
from pydantic import BaseModel

from ...config.providers import LLMProvider
from ...core.errors import ExtractionParseError
from .schemas import CompanyFacts, ContactFacts

logger = logging.getLogger(__name__)


class RefinerTask(str, Enum):
    """Generative steps run over collected evidence."""
    COMPANY_FACTS = "company_facts"
    CONTACT_FACTS = "contact_facts"
    COMPANY_SUMMARY = "company_summary"
    CONTACT_SUMMARY = "contact_summary"


# =============================================================================
# Prompt Templates
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = """Ты - аналитик данных о компаниях. Ты извлекаешь факты только из переданных результатов поиска и отвечаешь строго одним JSON-объектом без пояснений."""

SUMMARY_SYSTEM_PROMPT = """Ты - аналитик B2B продаж. Ты пишешь краткие деловые саммари на русском языке только по переданным результатам поиска."""


COMPANY_FACTS_TEMPLATE = """Извлеки структурированную информацию о компании "{company_name}" из результатов поиска:

{evidence}

Верни ответ строго в JSON формате:
{{
  "industry": "точная отрасль деятельности",
  "revenue": "выручка с цифрами и валютой",
  "employees": 50000,
  "products": ["продукт 1", "продукт 2", "продукт 3"]
}}

ПРИМЕРЫ ПРАВИЛЬНЫХ ЗНАЧЕНИЙ:
- revenue: "500 млрд руб", "1,2 трлн руб", "$50 billion", null
- employees: 50000, 120000, 75000, null
- products: ["Поисковая система", "Маркетплейс", "Такси"]

КРИТИЧЕСКИ ВАЖНЫЕ ТРЕБОВАНИЯ:
- Если информации нет, ставь null
- Для выручки: ищи ТОЛЬКО ЧИСЛА с валютой. Если точных цифр нет - ставь null
- Для сотрудников: ищи ТОЛЬКО ЧИСТЫЕ ЧИСЛА. Если точного числа нет - ставь null
- Для отрасли: одно точное название ("Информационные технологии", "Финансовые услуги")
- Для продуктов: список основных направлений без лишних слов
- НЕ извлекай фрагменты текста или неполные фразы
- НЕ путай разные типы данных между собой"""


CONTACT_FACTS_TEMPLATE = """Извлеки структурированную информацию о контакте "{contact_name}" из компании "{company_name}" из результатов поиска:

{evidence}

Верни ответ строго в JSON формате:
{{
  "jobTitle": "точная должность контакта",
  "socialPosts": [
    {{
      "platform": "название платформы",
      "date": "дата публикации",
      "content": "содержание поста"
    }}
  ]
}}

Требования:
- Если информации нет, ставь null
- Для должности используй точное название позиции
- Для социальных постов найди максимум 3 последние публикации
- Даты в формате DD.MM.YYYY
- НЕ извлекай фрагменты текста или неполные фразы"""


COMPANY_SUMMARY_TEMPLATE = """Создай краткое саммари данных о компании {company_name} на основе результатов поиска:

{evidence}

Саммари должно быть структурированным и включать:
- Отрасль деятельности
- Финансовые показатели
- Размер компании
- Ключевые продукты/услуги

Ответь коротким текстом на русском языке (максимум 150 слов)."""


CONTACT_SUMMARY_TEMPLATE = """Создай краткое резюме данных о контакте {contact_name} из компании {company_name} на основе результатов поиска:

{evidence}

Резюме должно включать:
- Текущую должность
- Профессиональную активность
- Ключевые темы публикаций

Ответь коротким текстом на русском языке (максимум 100 слов)."""


class StructuredRefiner:
    """
    Generative extraction over provider evidence for one user.

    Features:
    - Strict JSON extraction for company and contact facts
    - Free-text company and contact summaries
    - Per-task model and temperature from ``LLMConfig``
    """

    TASK_CONFIG: Dict[RefinerTask, Dict[str, Any]] = {
        RefinerTask.COMPANY_FACTS: {
            "schema": CompanyFacts,
            "system_prompt": EXTRACTION_SYSTEM_PROMPT,
            "user_template": COMPANY_FACTS_TEMPLATE,
            "model": "extraction",
        },
        RefinerTask.CONTACT_FACTS: {
            "schema": ContactFacts,
            "system_prompt": EXTRACTION_SYSTEM_PROMPT,
            "user_template": CONTACT_FACTS_TEMPLATE,
            "model": "extraction",
        },
        RefinerTask.COMPANY_SUMMARY: {
            "schema": None,
            "system_prompt": SUMMARY_SYSTEM_PROMPT,
            "user_template": COMPANY_SUMMARY_TEMPLATE,
            "model": "summary",
        },
        RefinerTask.CONTACT_SUMMARY: {
            "schema": None,
            "system_prompt": SUMMARY_SYSTEM_PROMPT,
            "user_template": CONTACT_SUMMARY_TEMPLATE,
            "model": "summary",
        },
    }

    def __init__(self, api_key: str, llm_provider: LLMProvider = None):
        """
        Initialize the refiner.

        Args:
            api_key: The user's generative-model credential
            llm_provider: LLMProvider instance (optional, will create default)
        """
        self._api_key = api_key
        self._provider = llm_provider
        self._chains: Dict[RefinerTask, Any] = {}

    def _get_provider(self) -> LLMProvider:
        """Lazy load LLM provider."""
        if self._provider is None:
            self._provider = LLMProvider()
        return self._provider

    def _get_chain(self, task: RefinerTask):
        if task not in self._chains:
            self._chains[task] = self._create_chain(task)
        return self._chains[task]

    def _create_chain(self, task: RefinerTask):
        """
        Create the LCEL chain for a task.

        Fact tasks end in the provider's structured output and return a
        schema instance; summary tasks end in plain text.
        """
        from langchain_core.output_parsers import StrOutputParser
        from langchain_core.prompts import ChatPromptTemplate

        config = self.TASK_CONFIG[task]
        base = self._get_provider()
        llm_config = base.config
        if config["model"] == "extraction":
            model, temperature = llm_config.extraction_model, llm_config.extraction_temperature
        else:
            model, temperature = llm_config.summary_model, llm_config.summary_temperature

        provider = base.for_credential(self._api_key, model, temperature)
        if config["schema"]:
            answer = provider.with_structured_output(config["schema"])
        else:
            answer = provider.get_chat_model() | StrOutputParser()

        prompt = ChatPromptTemplate.from_messages([
            ("system", config["system_prompt"]),
            ("human", config["user_template"])
        ])

        return prompt | answer

    def _run(self, task: RefinerTask, **input_vars):
        chain = self._get_chain(task)
        return chain.invoke(input_vars)

    def _run_structured(self, task: RefinerTask, **input_vars) -> BaseModel:
        schema = self.TASK_CONFIG[task]["schema"]
        try:
            return self._run(task, **input_vars)
        except OutputParserException as e:
            raise ExtractionParseError(
                f"Model output does not match {schema.__name__}: {e}",
                raw_output=e.llm_output or ""
            ) from e

    def refine_company(self, evidence: str, company_name: str) -> CompanyFacts:
        """
        Extract company facts from the evidence bundle.

        Raises:
            ExtractionParseError: the model answer is not valid JSON
        """
        facts = self._run_structured(
            RefinerTask.COMPANY_FACTS, evidence=evidence, company_name=company_name
        )
        logger.info("Refined company facts for %r: %s", company_name, sorted(facts.to_fields()))
        return facts

    def refine_contact(self, evidence: str, contact_name: str, company_name: str) -> ContactFacts:
        """
        Extract contact facts from the evidence bundle.

        Raises:
            ExtractionParseError: the model answer is not valid JSON
        """
        facts = self._run_structured(
            RefinerTask.CONTACT_FACTS,
            evidence=evidence,
            contact_name=contact_name,
            company_name=company_name
        )
        logger.info("Refined contact facts for %r: %s", contact_name, sorted(facts.to_fields()))
        return facts

    def summarize_company(self, evidence: str, company_name: str) -> Optional[str]:
        text = self._run(RefinerTask.COMPANY_SUMMARY, evidence=evidence, company_name=company_name)
        return text.strip() or None

    def summarize_contact(self, evidence: str, contact_name: str, company_name: str) -> Optional[str]:
        text = self._run(
            RefinerTask.CONTACT_SUMMARY,
            evidence=evidence,
            contact_name=contact_name,
            company_name=company_name
        )
        return text.strip() or None
