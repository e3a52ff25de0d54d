"""
Search provider adapters.

- Brave: broad web search, pattern-extracted
- Perplexity: AI-synthesized search, JSON with pattern fallback
"""

from .base import SearchAdapter
from .brave import BraveSearchAdapter
from .perplexity import PerplexitySearchAdapter

__all__ = [
    "SearchAdapter",
    "BraveSearchAdapter",
    "PerplexitySearchAdapter"
]
