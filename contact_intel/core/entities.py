"""
Core Entities - Contact Intelligence Record

This module defines the entities the collection pipeline reads and writes.
The CRM remains the source of truth for contact identity; the collected
data and recommendations are snapshots owned by each contact.

Entities:
- Contact: CRM contact owned by a user, carrying collected data
- CollectedData: merged enrichment record with its search audit trail
- QueryRecord: one audited provider invocation
- ProviderResult: transient output of a single provider call
- Recommendation: one generated sales recommendation
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4
import json


class SearchService(Enum):
    """
    External search providers.

    Declaration order is call order within a phase; later members outrank
    earlier ones when merging.
    """
    BRAVE = "brave"
    PERPLEXITY = "perplexity"

    @property
    def label(self) -> str:
        return {
            SearchService.BRAVE: "Brave Search",
            SearchService.PERPLEXITY: "Perplexity",
        }[self]


class QueryStatus(Enum):
    """Outcome of an audited provider invocation."""
    OK = "ok"
    FAILED = "failed"


def clean_text(value: Any) -> Optional[str]:
    """Normalize a scalar to stripped text, or None when empty."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def clean_products(value: Any) -> Optional[str]:
    """Products arrive as text or as a list of names."""
    if isinstance(value, (list, tuple)):
        items = [clean_text(item) for item in value]
        joined = ", ".join(item for item in items if item)
        return joined or None
    return clean_text(value)


@dataclass
class RawPayload:
    """Opaque provider payload kept for audit, with its declared encoding."""
    content: str = ""
    encoding: str = "application/json"

    def to_dict(self) -> dict:
        return {"content": self.content, "encoding": self.encoding}

    @classmethod
    def from_dict(cls, data: dict) -> "RawPayload":
        return cls(
            content=data.get("content", ""),
            encoding=data.get("encoding", "application/json")
        )

    @classmethod
    def from_json(cls, data: Any) -> "RawPayload":
        return cls(content=json.dumps(data, ensure_ascii=False, indent=2))


@dataclass
class SocialPost:
    """A public post attributed to a contact."""
    platform: str = "Social Media"
    date: str = ""
    content: str = ""

    def to_dict(self) -> dict:
        return {"platform": self.platform, "date": self.date, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> Optional["SocialPost"]:
        """Build a post from loose JSON; posts without content are dropped."""
        if not isinstance(data, dict):
            return None
        content = clean_text(data.get("content"))
        if not content:
            return None
        return cls(
            platform=clean_text(data.get("platform")) or "Social Media",
            date=clean_text(data.get("date")) or "",
            content=content
        )


def clean_posts(value: Any) -> Optional[list]:
    if not isinstance(value, list):
        return None
    posts = [SocialPost.from_dict(item) for item in value]
    posts = [post for post in posts if post is not None]
    return posts or None


@dataclass
class ProviderResult:
    """
    Output of one provider call.

    Consumed by the orchestrator immediately; only its text projection
    (``response_text``) survives in the audit trail. ``source_text`` keeps
    the text the provider actually returned, for the refiner.
    """
    industry: Optional[str] = None
    revenue: Optional[str] = None
    employees: Optional[str] = None
    products: Optional[str] = None
    job_title: Optional[str] = None
    social_posts: Optional[list] = None  # List of SocialPost
    company_summary: Optional[str] = None
    contact_summary: Optional[str] = None

    source_text: Optional[str] = None
    raw_response: Optional[RawPayload] = None

    @classmethod
    def from_mapping(
        cls, data: dict, raw_response: RawPayload = None, source_text: str = None
    ) -> "ProviderResult":
        """Map loosely-typed JSON (camelCase or snake_case keys) onto a result."""
        def pick(*keys):
            for key in keys:
                if data.get(key) not in (None, ""):
                    return data[key]
            return None

        return cls(
            industry=clean_text(pick("industry")),
            revenue=clean_text(pick("revenue")),
            employees=clean_text(pick("employees")),
            products=clean_products(pick("products")),
            job_title=clean_text(pick("jobTitle", "job_title")),
            social_posts=clean_posts(pick("socialPosts", "social_posts")),
            company_summary=clean_text(pick("companySummary", "company_summary")),
            contact_summary=clean_text(pick("contactSummary", "contact_summary")),
            source_text=source_text,
            raw_response=raw_response
        )

    def to_dict(self) -> dict:
        """Structured projection without the raw payload; empty fields omitted."""
        data = {
            "industry": self.industry,
            "revenue": self.revenue,
            "employees": self.employees,
            "products": self.products,
            "jobTitle": self.job_title,
            "socialPosts": [p.to_dict() for p in self.social_posts] if self.social_posts else None,
            "companySummary": self.company_summary,
            "contactSummary": self.contact_summary,
        }
        return {key: value for key, value in data.items() if value is not None}

    def response_text(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def evidence_text(self) -> str:
        """Structured guess followed by the provider's own text."""
        if not self.source_text:
            return self.response_text()
        return f"{self.response_text()}\n{self.source_text}"


@dataclass
class QueryRecord:
    """One audited provider invocation, successful or not."""
    service: SearchService = SearchService.BRAVE
    query: str = ""
    response: str = ""
    full_response: Optional[RawPayload] = None
    timestamp: datetime = field(default_factory=datetime.now)
    status: QueryStatus = QueryStatus.OK

    @property
    def succeeded(self) -> bool:
        return self.status == QueryStatus.OK

    def to_dict(self) -> dict:
        return {
            "service": self.service.value,
            "query": self.query,
            "response": self.response,
            "fullResponse": self.full_response.to_dict() if self.full_response else None,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QueryRecord":
        full = data.get("fullResponse")
        return cls(
            service=SearchService(data.get("service", "brave")),
            query=data.get("query", ""),
            response=data.get("response", ""),
            full_response=RawPayload.from_dict(full) if full else None,
            timestamp=datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.now(),
            status=QueryStatus(data.get("status", "ok"))
        )


@dataclass
class CollectedData:
    """
    Enrichment snapshot for one contact.

    ``search_queries`` is append-only and holds exactly one record per
    provider invocation attempted during the run, in call order.
    """
    industry: Optional[str] = None
    revenue: Optional[str] = None
    employees: Optional[str] = None
    products: Optional[str] = None
    job_title: Optional[str] = None
    social_posts: Optional[list] = None  # List of SocialPost
    company_summary: Optional[str] = None
    contact_summary: Optional[str] = None

    search_queries: list = field(default_factory=list)  # List of QueryRecord

    def record_query(self, record: QueryRecord) -> None:
        self.search_queries.append(record)

    def present_fields(self) -> set:
        """Names of the optional fields that currently hold a value."""
        return {
            name for name in (
                "industry", "revenue", "employees", "products", "job_title",
                "social_posts", "company_summary", "contact_summary"
            )
            if getattr(self, name)
        }

    def to_dict(self) -> dict:
        """Convert to the persisted (camelCase) representation."""
        return {
            "industry": self.industry,
            "revenue": self.revenue,
            "employees": self.employees,
            "products": self.products,
            "jobTitle": self.job_title,
            "socialPosts": [p.to_dict() for p in self.social_posts] if self.social_posts else None,
            "companySummary": self.company_summary,
            "contactSummary": self.contact_summary,
            "searchQueries": [q.to_dict() for q in self.search_queries]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CollectedData":
        return cls(
            industry=data.get("industry"),
            revenue=data.get("revenue"),
            employees=clean_text(data.get("employees")),
            products=clean_products(data.get("products")),
            job_title=data.get("jobTitle"),
            social_posts=clean_posts(data.get("socialPosts")),
            company_summary=data.get("companySummary"),
            contact_summary=data.get("contactSummary"),
            search_queries=[QueryRecord.from_dict(q) for q in data.get("searchQueries") or []]
        )


@dataclass
class Recommendation:
    """A single product recommendation for a contact."""
    title: str = ""
    description: str = ""
    rationale: str = ""
    benefits: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "rationale": self.rationale,
            "benefits": self.benefits
        }


@dataclass
class Contact:
    """
    A CRM contact owned by a single user.

    Identity fields are refreshed from the CRM; ``collected_data`` and
    ``recommendations`` are replaced wholesale by the pipeline.
    """
    id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    crm_id: str = ""
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    company: Optional[str] = None
    status: Optional[str] = None

    # Raw CRM payload; holds the embedded company reference
    crm_data: dict = field(default_factory=dict)

    collected_data: Optional[CollectedData] = None
    recommendations: Optional[list] = None  # List of Recommendation
    last_updated: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if isinstance(self.id, str):
            self.id = UUID(self.id)
