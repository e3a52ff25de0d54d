"""
Source precedence for merging collected facts.

Ranking, lowest to highest: Brave search < Perplexity < structured refiner.
A higher-ranked source wins a field whenever it supplies a non-empty value;
an empty value never overwrites anything. Merges are resolved by provider
identity, not by arrival order.
"""

from typing import Iterable, Optional

from .entities import CollectedData, ProviderResult, SearchService


COMPANY_FIELDS = ("industry", "revenue", "employees", "products", "company_summary")
CONTACT_FIELDS = ("job_title", "social_posts", "contact_summary")

PROVIDER_RANK = {service: rank for rank, service in enumerate(SearchService)}


def is_present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def resolve_field(candidates: Iterable[tuple]) -> Optional[object]:
    """
    Pick the value of the highest-ranked source with a present value.

    ``candidates`` is an iterable of ``(rank, value)`` pairs.
    """
    best_rank, best_value = None, None
    for rank, value in candidates:
        if not is_present(value):
            continue
        if best_rank is None or rank > best_rank:
            best_rank, best_value = rank, value
    return best_value


def merge_provider_results(
    record: CollectedData,
    results: list,
    fields: tuple
) -> CollectedData:
    """
    Merge tagged provider results into ``record`` for the given fields.

    ``results`` holds ``(SearchService, ProviderResult)`` pairs in any order.
    Fields no provider fills keep their current value.
    """
    for name in fields:
        winner = resolve_field(
            (PROVIDER_RANK[service], getattr(result, name))
            for service, result in results
        )
        if winner is not None:
            setattr(record, name, winner)
    return record


def apply_refinement(record: CollectedData, refined: dict, fields: tuple) -> CollectedData:
    """Overlay refiner output; only present values override."""
    for name in fields:
        value = refined.get(name)
        if is_present(value):
            setattr(record, name, value)
    return record
