# docresolver/file_access/converter.py
"""
Identifier converter.

Pure conversions between identifier encodings:

- tree form <-> document form
- legacy downloads encoding -> external storage encoding
- raw device path <-> encoded identifier

This is the only module that looks inside an encoded id, and only for the
two known provider kinds. External storage ids look like
``primary:Download/report.json``; legacy downloads ids are either
``raw:/storage/emulated/0/Download/report.json`` or a bare downloads root
marker such as ``msf:downloads``.
"""
from typing import Optional, Tuple

from docresolver.config import settings
from docresolver.file_access.classifier import ProviderKind, classify
from docresolver.file_access.errors import ConversionUnsupported
from docresolver.file_access.identifiers import DocumentIdentifier

RAW_PREFIX = "raw:"
DOWNLOADS_ROOT_MARKERS = ("downloads", "msf:downloads")
DOWNLOAD_SEGMENTS = ("Download", "Downloads")
STORAGE_MOUNT = "/storage"

PathView = Tuple[str, Tuple[str, ...]]


def tree_to_document(identifier: DocumentIdentifier) -> Optional[DocumentIdentifier]:
    if not identifier.is_tree_form:
        return None
    return DocumentIdentifier(identifier.authority, identifier.encoded_id, is_tree_form=False)


def document_to_tree(identifier: DocumentIdentifier) -> Optional[DocumentIdentifier]:
    if identifier.is_tree_form:
        return identifier
    if not identifier.encoded_id:
        return None
    return DocumentIdentifier(identifier.authority, identifier.encoded_id, is_tree_form=True)


def _split_path(path: str) -> Tuple[str, ...]:
    return tuple(part for part in path.split("/") if part)


def _shared_root() -> str:
    return settings.SHARED_STORAGE_ROOT.rstrip("/")


def is_downloads_root_marker(encoded_id: str) -> bool:
    return encoded_id in DOWNLOADS_ROOT_MARKERS or encoded_id.endswith(":downloads")


def raw_path_of(identifier: DocumentIdentifier) -> Optional[str]:
    """Absolute path carried by a legacy downloads ``raw:`` id, else None."""
    if classify(identifier.authority) != ProviderKind.LEGACY_DOWNLOADS:
        return None
    if not identifier.encoded_id.startswith(RAW_PREFIX + "/"):
        return None
    return identifier.encoded_id[len(RAW_PREFIX):]


def raw_identifier(path: str, tree: bool = False) -> DocumentIdentifier:
    return DocumentIdentifier(settings.DOWNLOADS_AUTHORITY, RAW_PREFIX + path, is_tree_form=tree)


def external_storage_identifier(
    relative_path: str,
    volume: Optional[str] = None,
    tree: bool = False
) -> DocumentIdentifier:
    volume = volume or settings.PRIMARY_VOLUME
    return DocumentIdentifier(
        settings.EXTERNAL_STORAGE_AUTHORITY,
        f"{volume}:{relative_path}",
        is_tree_form=tree,
    )


def _relative_to_shared_root(path: str) -> Optional[str]:
    root = _shared_root()
    if path == root:
        return ""
    if path.startswith(root + "/"):
        return "/".join(_split_path(path[len(root):]))
    return None


def _rebase_on_download_segment(path: str) -> Optional[str]:
    segments = _split_path(path)
    for index, segment in enumerate(segments):
        if segment in DOWNLOAD_SEGMENTS:
            return "/".join((settings.DOWNLOAD_FOLDER_NAME,) + segments[index + 1:])
    return None


def legacy_downloads_to_external_storage(identifier: DocumentIdentifier) -> DocumentIdentifier:
    """
    Re-encode a legacy downloads identifier under the external storage provider.

    Identifiers of any other provider kind are returned unchanged.

    Args:
        identifier: Identifier to convert

    Returns:
        External storage identifier with the same tree flag

    Raises:
        ConversionUnsupported: If the legacy sub-format is not recognized or
            the raw path has no shared-storage or Download anchor
    """
    if classify(identifier.authority) != ProviderKind.LEGACY_DOWNLOADS:
        return identifier

    encoded_id = identifier.encoded_id
    path = raw_path_of(identifier)

    if path is not None:
        relative = _relative_to_shared_root(path)
        if relative is None:
            relative = _rebase_on_download_segment(path)
        if relative is None:
            raise ConversionUnsupported(f"No shared storage anchor in raw path: {path}")
    elif is_downloads_root_marker(encoded_id):
        relative = settings.DOWNLOAD_FOLDER_NAME
    else:
        raise ConversionUnsupported(f"Unknown downloads id format: {encoded_id}")

    return external_storage_identifier(relative, tree=identifier.is_tree_form)


def path_segments(identifier: DocumentIdentifier) -> Optional[PathView]:
    """
    Path-segment view of a nested encoding.

    Returns:
        (prefix, segments) such as ("primary:", ("Download", "sub")) or
        ("raw:", ("storage", "emulated", "0")); None when the encoding
        does not nest.
    """
    kind = classify(identifier.authority)

    if kind == ProviderKind.EXTERNAL_STORAGE:
        volume, sep, relative = identifier.encoded_id.partition(":")
        if not sep or not volume:
            return None
        return volume + ":", _split_path(relative)

    if kind == ProviderKind.LEGACY_DOWNLOADS:
        path = raw_path_of(identifier)
        if path is None:
            return None
        return RAW_PREFIX, _split_path(path)

    return None


def join_segments(prefix: str, segments: Tuple[str, ...]) -> str:
    if prefix == RAW_PREFIX:
        return prefix + "/" + "/".join(segments)
    return prefix + "/".join(segments)


def child_encoded_id(identifier: DocumentIdentifier, name: str) -> Optional[str]:
    view = path_segments(identifier)
    if view is None:
        return None
    prefix, segments = view
    return join_segments(prefix, segments + (name,))


def parent_encoded_id(identifier: DocumentIdentifier) -> Optional[str]:
    view = path_segments(identifier)
    if view is None:
        return None
    prefix, segments = view
    if not segments:
        return None
    return join_segments(prefix, segments[:-1])


def filesystem_path_of(identifier: DocumentIdentifier) -> Optional[str]:
    """Device path backing an identifier, when one can be derived."""
    kind = classify(identifier.authority)

    if kind == ProviderKind.LEGACY_DOWNLOADS:
        path = raw_path_of(identifier)
        if path is not None:
            return path
        if is_downloads_root_marker(identifier.encoded_id):
            return f"{_shared_root()}/{settings.DOWNLOAD_FOLDER_NAME}"
        return None

    if kind == ProviderKind.EXTERNAL_STORAGE:
        view = path_segments(identifier)
        if view is None:
            return None
        volume = view[0][:-1]
        if volume == settings.PRIMARY_VOLUME:
            base = _shared_root()
        else:
            base = f"{STORAGE_MOUNT}/{volume}"
        return "/".join((base,) + view[1])

    return None


def identifier_for_path(
    authority: str,
    path: str,
    tree: bool = False
) -> Optional[DocumentIdentifier]:
    """Encode a device path under the given authority's scheme."""
    kind = classify(authority)

    if kind == ProviderKind.LEGACY_DOWNLOADS:
        return raw_identifier(path, tree=tree)

    if kind == ProviderKind.EXTERNAL_STORAGE:
        relative = _relative_to_shared_root(path)
        if relative is not None:
            return external_storage_identifier(relative, tree=tree)
        segments = _split_path(path)
        if len(segments) >= 2 and "/" + segments[0] == STORAGE_MOUNT:
            return external_storage_identifier("/".join(segments[2:]), volume=segments[1], tree=tree)

    return None
