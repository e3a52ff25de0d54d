"""
Pydantic Schemas for Structured LLM Outputs

These schemas define the expected output structure for each generative
step, enabling validated responses. Field validators enforce the extraction
contract: unknown values are null, counts are pure numbers, revenue carries
a currency, and blank fragments never survive.
"""

from typing import List, Optional
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core.entities import Recommendation, SocialPost, clean_products, clean_text


_DIGIT = re.compile(r"\d")
_CURRENCY = re.compile(
    r"(руб|₽|\$|€|£|usd|eur|rub|gbp|cny|юан|долл|евро|dollar|euro)",
    re.IGNORECASE
)
_COUNT = re.compile(r"\d+")


# =============================================================================
# Company Extraction Schemas
# =============================================================================

class CompanyFacts(BaseModel):
    """Structured company facts extracted from search evidence."""
    industry: Optional[str] = Field(
        description="Single precise industry name",
        default=None
    )
    revenue: Optional[str] = Field(
        description="Revenue figure with currency, e.g. '500 млрд руб' or '$50 billion'",
        default=None
    )
    employees: Optional[int] = Field(
        description="Exact employee headcount as a plain number",
        default=None
    )
    products: Optional[List[str]] = Field(
        description="Main products or business lines",
        default=None
    )

    @field_validator("industry", mode="before")
    @classmethod
    def _text_or_null(cls, value):
        return clean_text(value)

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue_with_currency(cls, value):
        text = clean_text(value)
        if text and _DIGIT.search(text) and _CURRENCY.search(text):
            return text
        return None

    @field_validator("employees", mode="before")
    @classmethod
    def _pure_count(cls, value):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value if value >= 0 else None
        if isinstance(value, float):
            return int(value) if value.is_integer() and value >= 0 else None
        if isinstance(value, str):
            digits = re.sub(r"[\s,]", "", value)
            if _COUNT.fullmatch(digits):
                return int(digits)
        return None

    @field_validator("products", mode="before")
    @classmethod
    def _product_list(cls, value):
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return None
        items = [clean_text(item) for item in value]
        items = [item for item in items if item]
        return items or None

    def to_fields(self) -> dict:
        """Values keyed by CollectedData attribute; absent values omitted."""
        fields = {
            "industry": self.industry,
            "revenue": self.revenue,
            "employees": str(self.employees) if self.employees is not None else None,
            "products": clean_products(self.products),
        }
        return {key: value for key, value in fields.items() if value is not None}


# =============================================================================
# Contact Extraction Schemas
# =============================================================================

class SocialPostItem(BaseModel):
    """A public post found for the contact."""
    platform: Optional[str] = Field(description="Platform name", default=None)
    date: Optional[str] = Field(description="Publication date, DD.MM.YYYY", default=None)
    content: Optional[str] = Field(description="Post text", default=None)

    @field_validator("platform", "date", "content", mode="before")
    @classmethod
    def _text_or_null(cls, value):
        return clean_text(value)


class ContactFacts(BaseModel):
    """Structured contact facts extracted from search evidence."""
    model_config = ConfigDict(populate_by_name=True)

    job_title: Optional[str] = Field(
        description="Exact current job title",
        default=None,
        alias="jobTitle"
    )
    social_posts: Optional[List[SocialPostItem]] = Field(
        description="Up to three most recent public posts",
        default=None,
        alias="socialPosts"
    )

    @field_validator("job_title", mode="before")
    @classmethod
    def _text_or_null(cls, value):
        return clean_text(value)

    @field_validator("social_posts", mode="before")
    @classmethod
    def _post_list(cls, value):
        if not isinstance(value, list):
            return None
        return [item for item in value if isinstance(item, dict)] or None

    def to_fields(self, max_posts: int = 3) -> dict:
        posts = [
            SocialPost.from_dict(item.model_dump())
            for item in self.social_posts or []
        ]
        posts = [post for post in posts if post is not None][:max_posts]

        fields = {
            "job_title": self.job_title,
            "social_posts": posts or None,
        }
        return {key: value for key, value in fields.items() if value is not None}


# =============================================================================
# Recommendation Schemas
# =============================================================================

class RecommendationItem(BaseModel):
    """A single product recommendation."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(description="Product or solution name", min_length=1)
    description: str = Field(description="Short description, 2-3 sentences", min_length=1)
    rationale: str = Field(description="Why it fits this client", min_length=1)
    benefits: str = Field(description="Expected benefit or ROI", min_length=1)

    @field_validator("title", "description", "rationale", "benefits", mode="before")
    @classmethod
    def _join_lists(cls, value):
        if isinstance(value, list):
            return "; ".join(str(item) for item in value if item)
        return value

    def to_entity(self) -> Recommendation:
        return Recommendation(
            title=self.title,
            description=self.description,
            rationale=self.rationale,
            benefits=self.benefits
        )


class RecommendationSet(BaseModel):
    """Structured output for recommendation generation."""
    recommendations: List[RecommendationItem] = Field(
        description="Personalized product recommendations"
    )
