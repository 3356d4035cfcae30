# docresolver/file_access/classifier.py
"""
Provider classifier.

Maps a content provider authority to the kind of fallback handling it
gets. Unknown authorities are OTHER and only ever go through the generic,
non-converting strategies.
"""
from enum import Enum
from typing import Dict

from docresolver.config import settings
from docresolver.monitoring.logger import log


class ProviderKind(str, Enum):
    EXTERNAL_STORAGE = "external_storage"
    LEGACY_DOWNLOADS = "legacy_downloads"
    OTHER = "other"


# Registry of known authorities
AUTHORITY_REGISTRY: Dict[str, ProviderKind] = {
    settings.EXTERNAL_STORAGE_AUTHORITY: ProviderKind.EXTERNAL_STORAGE,
    settings.DOWNLOADS_AUTHORITY: ProviderKind.LEGACY_DOWNLOADS,
}


def register_authority(authority: str, kind: ProviderKind) -> None:
    """
    Register an authority under a provider kind.

    Args:
        authority: Content provider authority
        kind: ProviderKind the authority should be handled as

    Raises:
        ValueError: If kind is not a ProviderKind
    """
    if not isinstance(kind, ProviderKind):
        raise ValueError(f"Provider kind must be a ProviderKind, got {kind!r}")

    AUTHORITY_REGISTRY[authority] = kind
    log("INFO", f"Registered authority {authority} as {kind.value}", module="classifier")


def classify(authority: str) -> ProviderKind:
    return AUTHORITY_REGISTRY.get(authority, ProviderKind.OTHER)


def list_authorities() -> Dict[str, ProviderKind]:
    return dict(AUTHORITY_REGISTRY)
