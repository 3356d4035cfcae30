"""
Document access layer.

Resolves provider-specific document identifiers into listable, readable
documents:
- Identifier parsing and provider classification
- Encoding conversion (legacy downloads -> external storage)
- Grant matching
- Multi-strategy parent resolution and directory listing
"""

from docresolver.file_access.base import (
    Children,
    DocumentProviderService,
    ListingMode,
    NotResolvable,
    Parent,
)
from docresolver.file_access.identifiers import DocumentIdentifier, parse, to_string
from docresolver.file_access.registry import get_document_service
from docresolver.file_access.resolver import DocumentResolver

__all__ = [
    "Children",
    "DocumentIdentifier",
    "DocumentProviderService",
    "DocumentResolver",
    "ListingMode",
    "NotResolvable",
    "Parent",
    "get_document_service",
    "parse",
    "to_string",
]
