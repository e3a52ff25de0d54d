"""
Pattern Extraction - Label-based fact extraction from search text

Pulls best-effort company and contact facts out of noisy free text when no
generative extraction is available:
- Ordered label patterns per field (first matching pattern wins)
- Fields are independent; a miss on one never blocks another
- Social posts are picked from result items hosted on social platforms

Every function here is pure and never raises on malformed input.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
from urllib.parse import urlparse
import re

from ...core.entities import SocialPost


# Captured value runs up to the next sentence or list delimiter
_VALUE = r"[:\s]*(?P<value>[^.,\n]*)"


def _label(pattern: str) -> re.Pattern:
    """Whole-word label; inflected forms are spelled out in ``pattern``."""
    return re.compile(r"\b(?:" + pattern + r")\b" + _VALUE, re.IGNORECASE)


INDUSTRY_PATTERNS = [
    _label(r"отрасл[ьи]"),
    _label(r"сфер[аеы]"),
    _label(r"индустри[яи]"),
    _label(r"industry"),
    _label(r"sector"),
]

REVENUE_PATTERNS = [
    _label(r"выручк[аиу]"),
    _label(r"доход[ыа]?"),
    _label(r"оборот"),
    _label(r"revenue"),
    _label(r"turnover"),
]

EMPLOYEE_PATTERNS = [
    _label(r"сотрудник(?:ов|и|а)?"),
    _label(r"персонал"),
    _label(r"штат"),
    _label(r"employees"),
    _label(r"headcount"),
]

PRODUCT_PATTERNS = [
    _label(r"продукт(?:ы|а|ов)?"),
    _label(r"услуг[аи]?"),
    _label(r"решени[еяй]"),
    _label(r"products"),
    _label(r"services"),
]

JOB_TITLE_PATTERNS = [
    _label(r"должность"),
    _label(r"позиция"),
    _label(r"директор"),
    _label(r"job title"),
    _label(r"position"),
]

# host suffix -> platform name; None means a generic social host
SOCIAL_PLATFORMS = {
    "linkedin.com": "LinkedIn",
    "facebook.com": "Facebook",
    "twitter.com": "Twitter",
    "x.com": "Twitter",
    "vk.com": "VK",
    "instagram.com": None,
    "t.me": None,
}
DEFAULT_PLATFORM = "Social Media"
MAX_SOCIAL_POSTS = 3


@dataclass
class ExtractedFields:
    """Best-effort values for the text-derived fields."""
    industry: Optional[str] = None
    revenue: Optional[str] = None
    employees: Optional[str] = None
    products: Optional[str] = None
    job_title: Optional[str] = None


def first_match(text: str, patterns: list) -> Optional[str]:
    """Return the value captured by the first pattern that matches."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            value = match.group("value").strip()
            if value:
                return value
    return None


def extract_fields(text: str) -> ExtractedFields:
    """
    Extract company and contact facts from a text blob.

    Example:
        >>> extract_fields("Отрасль: ИТ. Выручка: 500 млрд руб.").revenue
        '500 млрд руб'
    """
    if not text or not isinstance(text, str):
        return ExtractedFields()

    return ExtractedFields(
        industry=first_match(text, INDUSTRY_PATTERNS),
        revenue=first_match(text, REVENUE_PATTERNS),
        employees=first_match(text, EMPLOYEE_PATTERNS),
        products=first_match(text, PRODUCT_PATTERNS),
        job_title=first_match(text, JOB_TITLE_PATTERNS),
    )


def social_platform(url: str) -> Optional[str]:
    """
    Platform name for a social URL.

    Returns None for non-social hosts and ``DEFAULT_PLATFORM`` for social
    hosts without a dedicated name.
    """
    try:
        host = (urlparse(url).hostname or "").lower()
    except (TypeError, ValueError):
        return None

    for domain, name in SOCIAL_PLATFORMS.items():
        if host == domain or host.endswith("." + domain):
            return name or DEFAULT_PLATFORM
    return None


def extract_social_posts(items: list, today: date = None) -> list[SocialPost]:
    """
    Pick up to three social posts from search result items.

    Items keep their input order. Each post is dated with the collection
    date since result items carry no reliable publication date.
    """
    stamp = (today or date.today()).strftime("%d.%m.%Y")
    posts = []

    for item in items or []:
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        if not isinstance(url, str):
            continue
        platform = social_platform(url)
        if platform is None:
            continue

        posts.append(SocialPost(
            platform=platform,
            date=stamp,
            content=item.get("description") or item.get("title") or ""
        ))
        if len(posts) == MAX_SOCIAL_POSTS:
            break

    return posts
