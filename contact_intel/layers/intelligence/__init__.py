"""
Intelligence Layer - Generative extraction over search evidence

- Structured refinement of company and contact facts (strict JSON)
- Company and contact summaries
- Pydantic schemas validating every structured model answer
"""

from .schemas import (
    CompanyFacts,
    ContactFacts,
    SocialPostItem,
    RecommendationItem,
    RecommendationSet
)
from .refiner import (
    RefinerTask,
    StructuredRefiner
)

__all__ = [
    "CompanyFacts",
    "ContactFacts",
    "SocialPostItem",
    "RecommendationItem",
    "RecommendationSet",
    "RefinerTask",
    "StructuredRefiner"
]
