"""
Search Adapters - Common contract for external search providers

Each adapter wraps one external query API and returns a ProviderResult
carrying a best-effort structured guess plus the verbatim raw payload.

Key design principles:
- One network call per search, bounded by a timeout
- No internal retries
- Transport and HTTP failures are logged and returned as None; the caller
  records them in the audit trail
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

import httpx

from ...config.settings import SearchConfig, get_settings
from ...core.entities import ProviderResult, SearchService
from ...core.errors import ProviderCallError

logger = logging.getLogger(__name__)


class SearchAdapter(ABC):
    """
    Abstract base class for search provider adapters.

    Subclasses implement ``_execute``, which performs the call and raises
    ``ProviderCallError`` (or lets ``httpx.HTTPError`` escape) on failure.
    """

    def __init__(self, config: SearchConfig = None, client: httpx.Client = None):
        self.config = config or get_settings().search
        self._client = client

    @property
    @abstractmethod
    def service(self) -> SearchService:
        """The provider this adapter talks to."""
        pass

    @abstractmethod
    def _execute(self, query: str, credential: str, client: httpx.Client) -> ProviderResult:
        pass

    def search(self, query: str, credential: str) -> Optional[ProviderResult]:
        """Run one query; None on transport or HTTP failure."""
        try:
            if self._client is not None:
                return self._execute(query, credential, self._client)

            with httpx.Client(timeout=httpx.Timeout(self.config.timeout_seconds)) as client:
                return self._execute(query, credential, client)

        except ProviderCallError as e:
            logger.warning("%s search failed for %r: %s", self.service.label, query, e)
        except httpx.HTTPError as e:
            logger.warning(
                "%s search failed for %r: %s",
                self.service.label, query, str(e) or type(e).__name__
            )
        return None

    def _check_response(self, response: httpx.Response) -> dict:
        """Decode a JSON response, raising ProviderCallError on failure."""
        if response.status_code >= 400:
            raise ProviderCallError(
                self.service.value,
                f"HTTP {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError:
            raise ProviderCallError(self.service.value, "response is not valid JSON")
        if not isinstance(data, dict):
            raise ProviderCallError(self.service.value, "unexpected response shape")
        return data
