"""
Error taxonomy for the contact intelligence core.

Errors that reach the caller carry a user-readable message. Per-call provider
failures never leave the search layer; they become failed audit records.
"""


class ContactIntelError(Exception):
    """Base class for all contact intelligence errors."""


class ConfigurationError(ContactIntelError):
    """No usable provider or credential. User-fixable."""


class NotFoundError(ContactIntelError):
    """Unknown contact, or a contact not owned by the caller."""


class ProviderCallError(ContactIntelError):
    """Transport or HTTP failure of a single provider call."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service


class ExtractionParseError(ContactIntelError):
    """Malformed JSON from a generative extraction step."""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class CollectionError(ContactIntelError):
    """Unexpected failure while collecting data for a contact."""


class RecommendationError(CollectionError):
    """Recommendations could not be produced."""
