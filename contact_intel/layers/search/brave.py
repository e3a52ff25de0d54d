"""
Brave Search adapter (broad web search).

Concatenates the title, description and snippet of every web result and
runs pattern extraction over the lowercased text. The original text is
kept on the result as refiner evidence. Social posts come from
results hosted on social platforms.
"""

import logging

import httpx

from ...core.entities import ProviderResult, RawPayload, SearchService
from ..extraction.patterns import extract_fields, extract_social_posts
from .base import SearchAdapter

logger = logging.getLogger(__name__)


def combine_result_text(results: list) -> str:
    parts = []
    for item in results:
        if not isinstance(item, dict):
            continue
        parts.append(
            f"{item.get('title') or ''} {item.get('description') or ''} {item.get('snippet') or ''}"
        )
    return " ".join(parts)


class BraveSearchAdapter(SearchAdapter):
    """Adapter for the Brave web search API."""

    @property
    def service(self) -> SearchService:
        return SearchService.BRAVE

    def _execute(self, query: str, credential: str, client: httpx.Client) -> ProviderResult:
        response = client.get(
            self.config.brave_endpoint,
            params={"q": query, "count": self.config.brave_result_count},
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": credential,
            },
        )
        data = self._check_response(response)

        results = (data.get("web") or {}).get("results") or []
        return self.parse_results(results, RawPayload.from_json(data))

    def parse_results(self, results: list, raw_response: RawPayload = None) -> ProviderResult:
        """Turn Brave web results into a structured guess."""
        if not results:
            logger.info("Brave search returned no web results")
            return ProviderResult(raw_response=raw_response)

        text = combine_result_text(results)
        fields = extract_fields(text.lower())

        return ProviderResult(
            industry=fields.industry,
            revenue=fields.revenue,
            employees=fields.employees,
            products=fields.products,
            job_title=fields.job_title,
            social_posts=extract_social_posts(results) or None,
            source_text=text,
            raw_response=raw_response
        )
