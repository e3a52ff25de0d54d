"""
Core domain model for contact intelligence.

- Entities: contacts, collected data, audit records, recommendations
- Source precedence used when merging provider output
- Collaborator interfaces and in-memory implementations
- Error taxonomy
"""

from .entities import (
    CollectedData,
    Contact,
    ProviderResult,
    QueryRecord,
    QueryStatus,
    RawPayload,
    Recommendation,
    SearchService,
    SocialPost
)
from .errors import (
    CollectionError,
    ConfigurationError,
    ContactIntelError,
    ExtractionParseError,
    NotFoundError,
    ProviderCallError,
    RecommendationError
)

__all__ = [
    "CollectedData",
    "Contact",
    "ProviderResult",
    "QueryRecord",
    "QueryStatus",
    "RawPayload",
    "Recommendation",
    "SearchService",
    "SocialPost",
    "CollectionError",
    "ConfigurationError",
    "ContactIntelError",
    "ExtractionParseError",
    "NotFoundError",
    "ProviderCallError",
    "RecommendationError"
]
