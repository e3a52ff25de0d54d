"""
Collaborator Interfaces - CRM, Credentials, Preferences, Persistence

The collection core reaches every external system through the narrow
interfaces below. In-memory implementations back tests and the demo;
in production these would be backed by the application's database and
secret storage.
"""

from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
from uuid import UUID
import threading

from .entities import CollectedData, Contact, SearchService
from .errors import NotFoundError


@dataclass
class Credentials:
    """Per-user API credentials, as opaque strings."""
    brave_api_key: Optional[str] = None
    perplexity_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    amocrm_api_key: Optional[str] = None
    amocrm_subdomain: Optional[str] = None

    def for_service(self, service: SearchService) -> Optional[str]:
        if service == SearchService.BRAVE:
            return self.brave_api_key or None
        if service == SearchService.PERPLEXITY:
            return self.perplexity_api_key or None
        return None


@dataclass
class Preferences:
    """Per-user collection preferences."""
    search_systems: list = field(default_factory=lambda: ["brave", "perplexity"])
    playbook: Optional[str] = None


class CRMDirectory(ABC):
    """Company lookup against the CRM of record."""

    @abstractmethod
    def get_company_name(self, contact: Contact) -> Optional[str]:
        """Resolve the contact's company name, or None when unknown."""
        pass


class CredentialStore(ABC):

    @abstractmethod
    def get_credentials(self, user_id: str) -> Credentials:
        pass


class PreferenceStore(ABC):

    @abstractmethod
    def get_preferences(self, user_id: str) -> Preferences:
        pass


class ContactRepository(ABC):
    """
    Contact persistence.

    ``save_collected_data`` and ``save_recommendations`` replace the stored
    value in full and return the updated contact.
    """

    @abstractmethod
    def get_contact(self, contact_id: UUID, user_id: str) -> Optional[Contact]:
        pass

    @abstractmethod
    def find_by_crm_id(self, crm_id: str, user_id: str) -> Optional[Contact]:
        pass

    @abstractmethod
    def upsert_contact(self, contact: Contact) -> Contact:
        pass

    @abstractmethod
    def save_collected_data(
        self,
        contact_id: UUID,
        user_id: str,
        collected_data: CollectedData
    ) -> Contact:
        pass

    @abstractmethod
    def save_recommendations(
        self,
        contact_id: UUID,
        user_id: str,
        recommendations: list
    ) -> Contact:
        pass


class InMemoryCredentialStore(CredentialStore):
    """Thread-safe credential store; callers get and give copies."""

    def __init__(self, credentials: dict = None):
        self._credentials: dict[str, Credentials] = dict(credentials or {})
        self._lock = threading.Lock()

    def set_credentials(self, user_id: str, credentials: Credentials) -> None:
        with self._lock:
            self._credentials[user_id] = replace(credentials)

    def get_credentials(self, user_id: str) -> Credentials:
        with self._lock:
            return replace(self._credentials.get(user_id) or Credentials())


class InMemoryPreferenceStore(PreferenceStore):
    """Thread-safe preference store; callers get and give copies."""

    def __init__(self, preferences: dict = None):
        self._preferences: dict[str, Preferences] = dict(preferences or {})
        self._lock = threading.Lock()

    def set_preferences(self, user_id: str, preferences: Preferences) -> None:
        with self._lock:
            self._preferences[user_id] = deepcopy(preferences)

    def get_preferences(self, user_id: str) -> Preferences:
        with self._lock:
            return deepcopy(self._preferences.get(user_id) or Preferences())


class InMemoryContactRepository(ContactRepository):
    """
    Thread-safe contact store.

    Contacts are keyed by id and scoped by owner; callers always receive
    copies, so a partially built record is never observable.
    """

    def __init__(self):
        self._contacts: dict[UUID, Contact] = {}
        self._lock = threading.Lock()

    def get_contact(self, contact_id: UUID, user_id: str) -> Optional[Contact]:
        with self._lock:
            contact = self._contacts.get(contact_id)
            if contact is None or contact.user_id != user_id:
                return None
            return deepcopy(contact)

    def find_by_crm_id(self, crm_id: str, user_id: str) -> Optional[Contact]:
        with self._lock:
            for contact in self._contacts.values():
                if contact.crm_id == crm_id and contact.user_id == user_id:
                    return deepcopy(contact)
        return None

    def upsert_contact(self, contact: Contact) -> Contact:
        with self._lock:
            contact = deepcopy(contact)
            contact.last_updated = datetime.now()
            self._contacts[contact.id] = contact
            return deepcopy(contact)

    def save_collected_data(
        self,
        contact_id: UUID,
        user_id: str,
        collected_data: CollectedData
    ) -> Contact:
        return self._replace(contact_id, user_id, collected_data=deepcopy(collected_data))

    def save_recommendations(
        self,
        contact_id: UUID,
        user_id: str,
        recommendations: list
    ) -> Contact:
        return self._replace(contact_id, user_id, recommendations=deepcopy(list(recommendations)))

    def _replace(self, contact_id: UUID, user_id: str, **changes) -> Contact:
        with self._lock:
            contact = self._contacts.get(contact_id)
            if contact is None or contact.user_id != user_id:
                raise NotFoundError(f"Contact {contact_id} not found")

            updated = replace(contact, last_updated=datetime.now(), **changes)
            self._contacts[contact_id] = updated
            return deepcopy(updated)
