"""
Use Cases

1. Contact data collection: search, merge and refine company and
   contact facts
2. Product recommendations grounded on collected facts and the playbook
"""

from .collect_data import CollectDataUseCase, CollectionPhase, CollectionRun
from .playbook import DEFAULT_PLAYBOOK, resolve_playbook
from .recommendations import RecommendationGenerator

__all__ = [
    "CollectDataUseCase",
    "CollectionPhase",
    "CollectionRun",
    "DEFAULT_PLAYBOOK",
    "resolve_playbook",
    "RecommendationGenerator"
]
