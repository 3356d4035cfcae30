# docresolver/file_access/grants.py
"""
Grant matcher.

A grant is a persisted, revocable authorization rooted at a tree-form
identifier. It covers its root and everything nested under it, where
"nested" follows the provider's own path-segment semantics.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from docresolver.file_access.converter import path_segments
from docresolver.file_access.identifiers import DocumentIdentifier


@dataclass(frozen=True)
class Grant:
    """Persisted authorization covering a directory tree."""
    root: DocumentIdentifier
    granted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def covers(grant: Grant, requested: DocumentIdentifier) -> bool:
    root = grant.root
    if not root.is_tree_form or root.authority != requested.authority:
        return False

    if root.encoded_id == requested.encoded_id:
        return True

    root_view = path_segments(root)
    requested_view = path_segments(requested)
    # Encodings that do not nest only match exactly
    if root_view is None or requested_view is None:
        return False

    root_prefix, root_segments = root_view
    requested_prefix, requested_segments = requested_view
    if root_prefix != requested_prefix:
        return False

    return requested_segments[:len(root_segments)] == root_segments


def find_covering(requested: DocumentIdentifier, grants: Iterable[Grant]) -> Optional[Grant]:
    """
    Find the most specific grant covering an identifier.

    Args:
        requested: Identifier access is needed for
        grants: Currently persisted grants

    Returns:
        Covering grant with the longest root, or None
    """
    best: Optional[Grant] = None
    best_depth = -1

    for grant in grants:
        if not covers(grant, requested):
            continue
        view = path_segments(grant.root)
        depth = len(view[1]) if view is not None else len(grant.root.encoded_id)
        if depth > best_depth:
            best, best_depth = grant, depth

    return best
