"""
CRM collaborator: AmoCRM contact sync and company lookup.
"""

from .amocrm import (
    AmoCRMClient,
    AmoCRMContactMapper,
    AmoCRMDirectory,
    ContactSyncService,
    extract_contact_field
)

__all__ = [
    "AmoCRMClient",
    "AmoCRMContactMapper",
    "AmoCRMDirectory",
    "ContactSyncService",
    "extract_contact_field"
]
