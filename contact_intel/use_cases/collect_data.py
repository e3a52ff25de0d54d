"""
Use Case 1: Contact Data Collection

Enriches one contact with company and contact facts gathered from external
search providers, merged under source precedence and optionally refined by
a generative model.

Flow:
1. Resolve the company name (contact record, then CRM)
2. Company search across enabled providers
3. Company refinement (structured facts + summary)
4. Contact search across enabled providers
5. Contact refinement (structured facts + summary)
6. Persist the collected data in one replace

Provider failures never fail the run; each attempt leaves exactly one
audit record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4
import logging

from ..config.providers import LLMProvider
from ..config.settings import Settings, get_settings
from ..core.entities import (
    CollectedData,
    Contact,
    ProviderResult,
    QueryRecord,
    QueryStatus,
    SearchService
)
from ..core.errors import CollectionError, ConfigurationError, NotFoundError
from ..core.precedence import (
    COMPANY_FIELDS,
    CONTACT_FIELDS,
    apply_refinement,
    merge_provider_results
)
from ..core.stores import (
    ContactRepository,
    CredentialStore,
    Credentials,
    CRMDirectory,
    PreferenceStore
)
from ..layers.intelligence.refiner import StructuredRefiner
from ..layers.search import BraveSearchAdapter, PerplexitySearchAdapter, SearchAdapter

logger = logging.getLogger(__name__)


COMPANY_QUERY_TEMPLATE = "{company} отрасль выручка доходы сотрудники основные продукты финансовые результаты"
CONTACT_QUERY_TEMPLATE = "{name} должность в {company} 3 последние публикации в соц сетях"

FAILED_SEARCH_MESSAGE = "Поиск не выполнен - проверьте API ключ или квоту"


class CollectionPhase(Enum):
    RESOLVE_COMPANY_NAME = "resolve_company_name"
    COMPANY_SEARCH = "company_search"
    COMPANY_REFINE = "company_refine"
    CONTACT_SEARCH = "contact_search"
    CONTACT_REFINE = "contact_refine"
    PERSIST = "persist"


@dataclass
class CollectionRun:
    """State of one collection run, kept for observability."""
    id: UUID = field(default_factory=uuid4)
    contact_id: Optional[UUID] = None
    user_id: str = ""
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    company_name: Optional[str] = None
    enabled_services: list = field(default_factory=list)  # List of SearchService

    executed_phases: list = field(default_factory=list)  # List of CollectionPhase
    skipped_phases: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    collected_data: CollectedData = field(default_factory=CollectedData)
    contact: Optional[Contact] = None

    def executed(self, phase: CollectionPhase) -> None:
        self.executed_phases.append(phase)

    def skipped(self, phase: CollectionPhase, reason: str) -> None:
        logger.info("Skipping %s for contact %s: %s", phase.value, self.contact_id, reason)
        self.skipped_phases.append(phase)

    def warn(self, message: str) -> None:
        logger.warning("Contact %s: %s", self.contact_id, message)
        self.warnings.append(message)


def enabled_services(preferences_systems: list, credentials: Credentials) -> list:
    """Preferred providers that also have a credential, in call order."""
    wanted = set(preferences_systems or [])
    return [
        service for service in SearchService
        if service.value in wanted and credentials.for_service(service)
    ]


def build_evidence(results: list) -> str:
    """One entry per successful provider: ``<label>: <guess and provider text>``."""
    return "\n\n".join(
        f"{service.label}: {result.evidence_text()}"
        for service, result in results
    )


class CollectDataUseCase:
    """
    Implements the data collection use case.

    All collaborators are injected; search adapters default to the Brave
    and Perplexity HTTP adapters.
    """

    def __init__(
        self,
        repository: ContactRepository,
        credential_store: CredentialStore,
        preference_store: PreferenceStore,
        crm_directory: CRMDirectory = None,
        adapters: dict = None,
        llm_provider: LLMProvider = None,
        settings: Settings = None
    ):
        self._settings = settings or get_settings()
        self._repository = repository
        self._credentials = credential_store
        self._preferences = preference_store
        self._crm = crm_directory
        self._llm_provider = llm_provider

        self._adapters: dict[SearchService, SearchAdapter] = adapters or {
            SearchService.BRAVE: BraveSearchAdapter(self._settings.search),
            SearchService.PERPLEXITY: PerplexitySearchAdapter(self._settings.search),
        }

    def collect_data(self, contact_id: UUID, user_id: str) -> Contact:
        """
        Collect and persist enrichment data for a contact.

        Raises:
            NotFoundError: the contact does not exist for this user
            ConfigurationError: no enabled provider has a credential
            CollectionError: any other unexpected failure
        """
        return self.run(contact_id, user_id).contact

    def run(self, contact_id: UUID, user_id: str) -> CollectionRun:
        """Same as ``collect_data`` but returns the full run record."""
        run = CollectionRun(contact_id=contact_id, user_id=user_id)

        try:
            self._execute(run)
        except (ConfigurationError, NotFoundError, CollectionError):
            raise
        except Exception as e:
            logger.exception("Data collection failed for contact %s (user %s)", contact_id, user_id)
            raise CollectionError(f"Failed to collect data for contact {contact_id}") from e

        run.completed_at = datetime.now()
        logger.info(
            "Collected data for contact %s: %d queries, fields=%s, skipped=%s",
            contact_id,
            len(run.collected_data.search_queries),
            sorted(run.collected_data.present_fields()),
            [phase.value for phase in run.skipped_phases]
        )
        return run

    def _execute(self, run: CollectionRun) -> None:
        contact = self._repository.get_contact(run.contact_id, run.user_id)
        if contact is None:
            raise NotFoundError(f"Contact {run.contact_id} not found")

        credentials = self._credentials.get_credentials(run.user_id)
        preferences = self._preferences.get_preferences(run.user_id)
        run.enabled_services = enabled_services(preferences.search_systems, credentials)
        if not run.enabled_services:
            raise ConfigurationError("No search API keys configured")

        refiner = None
        if credentials.openai_api_key:
            refiner = StructuredRefiner(credentials.openai_api_key, self._llm_provider)

        run.company_name = self._resolve_company_name(run, contact)
        data = run.collected_data

        if not run.company_name:
            for phase in (
                CollectionPhase.COMPANY_SEARCH,
                CollectionPhase.COMPANY_REFINE,
                CollectionPhase.CONTACT_SEARCH,
                CollectionPhase.CONTACT_REFINE,
            ):
                run.skipped(phase, "company name unknown")
        else:
            company_results = self._search_phase(
                run,
                CollectionPhase.COMPANY_SEARCH,
                COMPANY_QUERY_TEMPLATE.format(company=run.company_name),
                credentials
            )
            merge_provider_results(data, company_results, COMPANY_FIELDS)
            self._refine_company(run, refiner, company_results)

            if not contact.name:
                run.skipped(CollectionPhase.CONTACT_SEARCH, "contact has no name")
                run.skipped(CollectionPhase.CONTACT_REFINE, "contact has no name")
            else:
                contact_results = self._search_phase(
                    run,
                    CollectionPhase.CONTACT_SEARCH,
                    CONTACT_QUERY_TEMPLATE.format(name=contact.name, company=run.company_name),
                    credentials
                )
                merge_provider_results(data, contact_results, CONTACT_FIELDS)
                self._refine_contact(run, refiner, contact_results, contact.name)

        run.contact = self._repository.save_collected_data(run.contact_id, run.user_id, data)
        run.executed(CollectionPhase.PERSIST)

    def _resolve_company_name(self, run: CollectionRun, contact: Contact) -> Optional[str]:
        run.executed(CollectionPhase.RESOLVE_COMPANY_NAME)
        if contact.company:
            return contact.company
        if self._crm is None:
            return None

        try:
            return self._crm.get_company_name(contact) or None
        except Exception as e:
            logger.warning("CRM company lookup failed for contact %s: %s", contact.id, e)
            return None

    def _search_phase(
        self,
        run: CollectionRun,
        phase: CollectionPhase,
        query: str,
        credentials: Credentials
    ) -> list:
        """Invoke each enabled provider once; returns successful (service, result) pairs."""
        run.executed(phase)
        results = []

        for service in run.enabled_services:
            adapter = self._adapters.get(service)
            result, error = None, None

            if adapter is None:
                error = f"no adapter registered for {service.value}"
            else:
                try:
                    result = adapter.search(query, credentials.for_service(service))
                except Exception as e:
                    logger.warning("%s search raised for %r: %s", service.label, query, e)
                    error = str(e) or type(e).__name__

            run.collected_data.record_query(self._audit_record(service, query, result, error))
            if result is not None:
                results.append((service, result))

        return results

    @staticmethod
    def _audit_record(
        service: SearchService,
        query: str,
        result: Optional[ProviderResult],
        error: Optional[str]
    ) -> QueryRecord:
        if result is None:
            return QueryRecord(
                service=service,
                query=query,
                response=f"Ошибка: {error}" if error else FAILED_SEARCH_MESSAGE,
                full_response=None,
                status=QueryStatus.FAILED
            )
        return QueryRecord(
            service=service,
            query=query,
            response=result.response_text(),
            full_response=result.raw_response,
            status=QueryStatus.OK
        )

    def _refine_company(self, run: CollectionRun, refiner: Optional[StructuredRefiner], results: list) -> None:
        phase = CollectionPhase.COMPANY_REFINE
        if refiner is None:
            run.skipped(phase, "no generative model credential")
            return
        if not results:
            run.skipped(phase, "no successful company search")
            return

        run.executed(phase)
        evidence = build_evidence(results)
        data = run.collected_data

        try:
            facts = refiner.refine_company(evidence, run.company_name)
            apply_refinement(data, facts.to_fields(), COMPANY_FIELDS)
        except Exception as e:
            run.warn(f"company refinement failed: {e}")

        try:
            summary = refiner.summarize_company(evidence, run.company_name)
            apply_refinement(data, {"company_summary": summary}, COMPANY_FIELDS)
        except Exception as e:
            run.warn(f"company summary failed: {e}")

    def _refine_contact(
        self,
        run: CollectionRun,
        refiner: Optional[StructuredRefiner],
        results: list,
        contact_name: str
    ) -> None:
        phase = CollectionPhase.CONTACT_REFINE
        if refiner is None:
            run.skipped(phase, "no generative model credential")
            return
        if not results:
            run.skipped(phase, "no successful contact search")
            return

        run.executed(phase)
        evidence = build_evidence(results)
        data = run.collected_data

        try:
            facts = refiner.refine_contact(evidence, contact_name, run.company_name)
            apply_refinement(
                data,
                facts.to_fields(max_posts=self._settings.max_social_posts),
                CONTACT_FIELDS
            )
        except Exception as e:
            run.warn(f"contact refinement failed: {e}")

        try:
            summary = refiner.summarize_contact(evidence, contact_name, run.company_name)
            apply_refinement(data, {"contact_summary": summary}, CONTACT_FIELDS)
        except Exception as e:
            run.warn(f"contact summary failed: {e}")
