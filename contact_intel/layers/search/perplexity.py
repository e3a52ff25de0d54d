"""
Perplexity adapter (AI-synthesized search).

Asks a generative search backend to answer the query with structured
company/contact facts. The answer is parsed as JSON first and falls back to
pattern extraction when the model answers in prose.
"""

import logging

import httpx
from langchain_core.utils.json import parse_json_markdown

from ...core.entities import ProviderResult, RawPayload, SearchService
from ..extraction.patterns import extract_fields
from .base import SearchAdapter

logger = logging.getLogger(__name__)


PERPLEXITY_SYSTEM_PROMPT = """Ты - эксперт по анализу компаний. Извлеки структурированную информацию из поискового запроса и верни в JSON формате.

Используй ключи: "industry", "revenue", "employees", "products", "jobTitle", "socialPosts" (список объектов с ключами "platform", "date", "content"), "companySummary", "contactSummary".
Если информации нет, ставь null."""


def answer_text(data: dict) -> str:
    """Text of the first completion choice, or an empty string."""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


class PerplexitySearchAdapter(SearchAdapter):
    """Adapter for the Perplexity chat completions API."""

    @property
    def service(self) -> SearchService:
        return SearchService.PERPLEXITY

    def _execute(self, query: str, credential: str, client: httpx.Client) -> ProviderResult:
        response = client.post(
            self.config.perplexity_endpoint,
            headers={
                "Authorization": f"Bearer {credential}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.config.perplexity_model,
                "messages": [
                    {"role": "system", "content": PERPLEXITY_SYSTEM_PROMPT},
                    {"role": "user", "content": query},
                ],
                "temperature": self.config.perplexity_temperature,
                "return_related_questions": False,
            },
        )
        data = self._check_response(response)

        return self.parse_content(answer_text(data), RawPayload.from_json(data))

    def parse_content(self, content: str, raw_response: RawPayload = None) -> ProviderResult:
        """Structured JSON first, label patterns as the fallback."""
        if not content.strip():
            logger.info("Perplexity returned an empty answer")
            return ProviderResult(raw_response=raw_response)

        try:
            parsed = parse_json_markdown(content)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return ProviderResult.from_mapping(
                parsed, raw_response=raw_response, source_text=content
            )

        logger.debug("Perplexity answer is not a JSON object, falling back to pattern extraction")
        fields = extract_fields(content)
        return ProviderResult(
            industry=fields.industry,
            revenue=fields.revenue,
            employees=fields.employees,
            products=fields.products,
            job_title=fields.job_title,
            source_text=content,
            raw_response=raw_response
        )
