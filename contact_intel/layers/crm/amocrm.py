"""
AmoCRM Collaborator - Contact sync and company lookup

Transforms raw AmoCRM contacts into Contact records and resolves company
names for the collection pipeline.

Key design principles:
- The CRM stays the source of truth for contact identity
- Raw CRM payloads are preserved on the contact for later lookups
- Sync refreshes identity fields and never discards collected data
"""

from typing import Optional
import logging

import httpx

from ...config.settings import CRMConfig, get_settings
from ...core.entities import Contact
from ...core.errors import CollectionError, ConfigurationError, ProviderCallError
from ...core.stores import ContactRepository, CredentialStore, CRMDirectory, Credentials

logger = logging.getLogger(__name__)


# field type -> accepted field codes / localized field names
FIELD_MAPPING = {
    "PHONE": ["PHONE", "Телефон"],
    "EMAIL": ["EMAIL", "Email"],
    "POSITION": ["POSITION", "Должность"],
    "COMPANY": ["COMPANY", "Компания"],
}

DEFAULT_STATUS = "Активный"


def extract_contact_field(raw: dict, field_type: str) -> Optional[str]:
    """First value of the custom field matching ``field_type``."""
    terms = FIELD_MAPPING.get(field_type, [field_type])

    for custom_field in raw.get("custom_fields_values") or []:
        code = custom_field.get("field_code")
        name = custom_field.get("field_name") or ""
        if any(code == term or term in name for term in terms):
            values = custom_field.get("values") or []
            if values and values[0].get("value") not in (None, ""):
                return str(values[0]["value"])
            return None
    return None


def embedded_company(raw: dict) -> Optional[dict]:
    """The first company embedded in a raw contact, if any."""
    companies = (raw.get("_embedded") or {}).get("companies") or []
    if companies and isinstance(companies[0], dict):
        return companies[0]
    return None


class AmoCRMClient:
    """Minimal AmoCRM v4 API client (bearer-token auth)."""

    def __init__(
        self,
        subdomain: str,
        api_key: str,
        config: CRMConfig = None,
        client: httpx.Client = None
    ):
        self.config = config or get_settings().crm
        self.base_url = f"https://{subdomain}.{self.config.base_domain}/api/v4"
        self._api_key = api_key
        self._client = client

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        config: CRMConfig = None,
        client: httpx.Client = None
    ) -> Optional["AmoCRMClient"]:
        if not credentials.amocrm_api_key or not credentials.amocrm_subdomain:
            return None
        return cls(credentials.amocrm_subdomain, credentials.amocrm_api_key, config, client)

    def _get(self, path: str, params: dict = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.base_url}{path}"

        try:
            if self._client is not None:
                response = self._client.get(url, params=params, headers=headers)
            else:
                with httpx.Client(timeout=httpx.Timeout(self.config.timeout_seconds)) as client:
                    response = client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderCallError("amocrm", str(e) or type(e).__name__)

        if response.status_code >= 400:
            raise ProviderCallError("amocrm", f"HTTP {response.status_code} for {path}")
        # AmoCRM answers 204 with no body for empty collections
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise ProviderCallError("amocrm", f"invalid JSON for {path}")

    def list_contacts(self) -> list[dict]:
        data = self._get("/contacts", params={"with": "companies"})
        return (data.get("_embedded") or {}).get("contacts") or []

    def get_company(self, company_id) -> dict:
        return self._get(f"/companies/{company_id}")


class AmoCRMContactMapper:
    """
    Maps raw AmoCRM contacts onto Contact records.

    Extracts:
    - Identity (CRM id, name)
    - Email, phone and position custom fields
    - Company name (resolved by the caller)
    """

    def validate(self, raw: dict) -> tuple[bool, list[str]]:
        errors = []
        if raw.get("id") in (None, ""):
            errors.append("Missing required field: id")
        if not (raw.get("name") or raw.get("first_name") or raw.get("last_name")):
            errors.append("Missing required field: name")
        return (len(errors) == 0, errors)

    def to_contact(self, raw: dict, user_id: str, company_name: Optional[str] = None) -> Contact:
        is_valid, errors = self.validate(raw)
        if not is_valid:
            raise ValueError(f"Invalid AmoCRM contact: {errors}")

        name = raw.get("name") or f"{raw.get('first_name') or ''} {raw.get('last_name') or ''}".strip()

        return Contact(
            user_id=user_id,
            crm_id=str(raw["id"]),
            name=name,
            email=extract_contact_field(raw, "EMAIL"),
            phone=extract_contact_field(raw, "PHONE"),
            position=extract_contact_field(raw, "POSITION"),
            company=company_name or extract_contact_field(raw, "COMPANY"),
            status=DEFAULT_STATUS,
            crm_data=raw
        )


def resolve_embedded_company_name(client: AmoCRMClient, raw: dict) -> Optional[str]:
    """Name of the embedded company, fetching the company when unnamed."""
    company = embedded_company(raw)
    if company is None:
        return None
    if company.get("name"):
        return company["name"]
    if company.get("id") is None:
        return None

    try:
        name = client.get_company(company["id"]).get("name")
    except ProviderCallError as e:
        logger.warning("Failed to fetch AmoCRM company %s: %s", company["id"], e)
        return None

    if name:
        logger.info("Fetched company name %r for AmoCRM contact %s", name, raw.get("id"))
    return name or None


class AmoCRMDirectory(CRMDirectory):
    """CRM directory backed by the user's AmoCRM account."""

    def __init__(
        self,
        credential_store: CredentialStore,
        config: CRMConfig = None,
        client: httpx.Client = None
    ):
        self._credentials = credential_store
        self._config = config
        self._client = client

    def get_company_name(self, contact: Contact) -> Optional[str]:
        credentials = self._credentials.get_credentials(contact.user_id)
        client = AmoCRMClient.from_credentials(credentials, self._config, self._client)
        if client is None:
            logger.info("AmoCRM credentials missing; cannot resolve company for contact %s", contact.id)
            return None

        return resolve_embedded_company_name(client, contact.crm_data or {})


class ContactSyncService:
    """
    Refreshes a user's contacts from AmoCRM.

    Contacts are matched by CRM id; existing collected data and
    recommendations are kept.
    """

    def __init__(
        self,
        repository: ContactRepository,
        credential_store: CredentialStore,
        config: CRMConfig = None,
        client: httpx.Client = None
    ):
        self._repository = repository
        self._credentials = credential_store
        self._config = config
        self._client = client
        self._mapper = AmoCRMContactMapper()

    def sync(self, user_id: str) -> list[Contact]:
        credentials = self._credentials.get_credentials(user_id)
        client = AmoCRMClient.from_credentials(credentials, self._config, self._client)
        if client is None:
            raise ConfigurationError("AmoCRM credentials not configured")

        try:
            raw_contacts = client.list_contacts()
        except ProviderCallError as e:
            logger.error("Failed to fetch contacts from AmoCRM for user %s: %s", user_id, e)
            raise CollectionError("Failed to fetch contacts from AmoCRM") from e

        synced = []
        for raw in raw_contacts:
            is_valid, errors = self._mapper.validate(raw)
            if not is_valid:
                logger.warning("Skipping AmoCRM contact %s: %s", raw.get("id"), errors)
                continue

            company_name = resolve_embedded_company_name(client, raw)
            contact = self._mapper.to_contact(raw, user_id, company_name)

            existing = self._repository.find_by_crm_id(contact.crm_id, user_id)
            if existing is not None:
                contact.id = existing.id
                contact.collected_data = existing.collected_data
                contact.recommendations = existing.recommendations

            synced.append(self._repository.upsert_contact(contact))

        logger.info("Synced %d AmoCRM contacts for user %s", len(synced), user_id)
        return synced
