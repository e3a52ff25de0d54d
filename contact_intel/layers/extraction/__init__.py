"""
Pattern-based extraction of business facts from raw search text.
"""

from .patterns import (
    ExtractedFields,
    extract_fields,
    extract_social_posts,
    social_platform
)

__all__ = [
    "ExtractedFields",
    "extract_fields",
    "extract_social_posts",
    "social_platform"
]
