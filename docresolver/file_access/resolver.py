# docresolver/file_access/resolver.py
"""
Resolution engine.

Answers two questions for any document identifier: "what is its parent
directory?" and "what files does this directory hold?". Each question is
answered by an ordered chain of strategies; the first strategy that
produces an answer wins and a failing strategy only moves the chain on.

Parent strategies:
    1. convert legacy downloads ids to external storage and retry
    2. native parent lookup through the provider service
    3. string derivation for nested encodings (drop the last segment)

Listing strategies:
    a. walk down from a broader covering grant
    b. native provider listing
    c. metadata index query by path prefix (legacy downloads)
    d. raw filesystem listing
"""
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from docresolver.config import settings
from docresolver.file_access.base import (
    Children,
    DocumentProviderService,
    ListingMode,
    NotResolvable,
    Parent,
)
from docresolver.file_access.classifier import ProviderKind, classify
from docresolver.file_access.converter import (
    document_to_tree,
    filesystem_path_of,
    identifier_for_path,
    is_downloads_root_marker,
    join_segments,
    legacy_downloads_to_external_storage,
    parent_encoded_id,
    path_segments,
    raw_identifier,
)
from docresolver.file_access.enumerator import TreeEnumerator
from docresolver.file_access.errors import ConversionUnsupported, DocumentNotFound
from docresolver.file_access.filesystem import FileSystemAccess
from docresolver.file_access.grants import find_covering
from docresolver.file_access.identifiers import DocumentIdentifier, build_tree_identifier
from docresolver.monitoring.logger import log

# First API level on which the downloads root refuses listing
DOWNLOADS_ROOT_RESTRICTED_API = 30

ListingStrategy = Callable[[DocumentIdentifier, ListingMode], Awaitable[Optional[List[DocumentIdentifier]]]]


class DocumentResolver:
    """
    Multi-strategy resolver over a DocumentProviderService.

    The resolver keeps no provider state between calls: grants are
    re-read and identifiers re-classified on every call.
    """

    def __init__(
        self,
        service: DocumentProviderService,
        filesystem: Optional[FileSystemAccess] = None,
        platform_api_level: Optional[int] = None
    ):
        self.service = service
        if filesystem is None and settings.FILESYSTEM_FALLBACK_ENABLED:
            filesystem = FileSystemAccess()
        self.filesystem = filesystem
        self.platform_api_level = platform_api_level or settings.PLATFORM_API_LEVEL
        self.enumerator = TreeEnumerator(service)

    async def get_parent(self, identifier: DocumentIdentifier) -> Union[Parent, NotResolvable]:
        """
        Resolve the containing directory of a document.

        Args:
            identifier: Document identifier

        Returns:
            Parent with a tree-form identifier, or NotResolvable
        """
        kind = classify(identifier.authority)

        if kind == ProviderKind.LEGACY_DOWNLOADS:
            try:
                converted = legacy_downloads_to_external_storage(identifier)
            except ConversionUnsupported as exc:
                log("WARNING", f"Could not convert downloads id, using original: {exc}", module="resolver")
            else:
                log("INFO", f"Converted {identifier} to {converted}", module="resolver")
                # Converted ids are external storage, so this re-enters once
                result = await self.get_parent(converted)
                if isinstance(result, Parent):
                    return result

        try:
            parent = await self.service.get_parent(identifier)
            if parent is not None and await self.service.exists(parent):
                log("INFO", f"Native parent for {identifier}: {parent}", module="resolver")
                return Parent(document_to_tree(parent) or parent)
            log("WARNING", f"Provider exposes no parent for {identifier}", module="resolver")
        except Exception as exc:
            log("WARNING", f"Native parent lookup failed for {identifier}: {exc}", module="resolver")

        if kind in (ProviderKind.LEGACY_DOWNLOADS, ProviderKind.EXTERNAL_STORAGE):
            parent_id = parent_encoded_id(identifier)
            if parent_id is not None:
                # Existence is checked by whoever dereferences it
                return Parent(build_tree_identifier(identifier.authority, parent_id))

        return NotResolvable(f"No parent strategy succeeded for {identifier}")

    async def list_children(
        self,
        identifier: DocumentIdentifier,
        mode: ListingMode = ListingMode.FLAT
    ) -> Union[Children, NotResolvable]:
        """
        List the files of a directory.

        Flat mode returns direct file children only; recursive mode returns
        every file of the tree. Directories are never returned.

        Args:
            identifier: Directory identifier (document form is upgraded)
            mode: ListingMode.FLAT or ListingMode.RECURSIVE

        Returns:
            Children, or NotResolvable when no strategy could answer
        """
        target = document_to_tree(identifier)
        if target is None:
            return NotResolvable(f"Cannot address {identifier} as a directory")

        answered = False
        for name, strategy in self._listing_strategies():
            try:
                found = await strategy(target, mode)
            except Exception as exc:
                log("WARNING", f"Listing strategy '{name}' failed for {target}: {exc}", module="resolver")
                continue

            if found is None:
                continue
            answered = True
            if found:
                log("INFO", f"Listing strategy '{name}' found {len(found)} files in {target}",
                    module="resolver")
                return Children(tuple(found))
            log("DEBUG", f"Listing strategy '{name}' returned nothing for {target}", module="resolver")

        if answered:
            return Children(())
        return NotResolvable(f"No listing strategy could read {target}")

    async def list_siblings(self, identifier: DocumentIdentifier) -> Union[Children, NotResolvable]:
        """
        List the files next to a picked document.

        Directory identifiers are listed directly.
        """
        try:
            is_directory = identifier.is_tree_form or await self.service.is_directory(identifier)
        except Exception as exc:
            log("WARNING", f"Directory check failed for {identifier}: {exc}", module="resolver")
            is_directory = False

        if is_directory:
            return await self.list_children(identifier, ListingMode.FLAT)

        parent = await self.get_parent(identifier)
        if isinstance(parent, NotResolvable):
            log("WARNING", f"Parent not resolvable for {identifier}; tree access required",
                module="resolver")
            return parent

        return await self.list_children(parent.identifier, ListingMode.FLAT)

    async def read(self, identifier: DocumentIdentifier) -> bytes:
        """
        Read a document, trying the converted identifier first.

        Raises:
            DocumentNotFound: If no candidate could be read
        """
        candidates = [identifier]
        if classify(identifier.authority) == ProviderKind.LEGACY_DOWNLOADS:
            try:
                candidates.insert(0, legacy_downloads_to_external_storage(identifier))
            except ConversionUnsupported:
                pass

        last_exc: Optional[Exception] = None
        for candidate in candidates:
            try:
                return await self.service.open_read(candidate)
            except Exception as exc:
                log("WARNING", f"Read failed for {candidate}: {exc}", module="resolver")
                last_exc = exc

        path = filesystem_path_of(identifier)
        if self.filesystem is not None and path is not None:
            try:
                return await self.filesystem.read(path)
            except Exception as exc:
                log("WARNING", f"Filesystem read failed for {path}: {exc}", module="resolver")
                last_exc = exc

        raise DocumentNotFound(f"Failed to read {identifier}") from last_exc

    def _listing_strategies(self) -> List[Tuple[str, ListingStrategy]]:
        return [
            ("grant_descent", self._list_via_grant),
            ("native", self._list_native),
            ("metadata_index", self._list_via_index),
            ("filesystem", self._list_via_filesystem),
        ]

    async def _collect(self, directory: DocumentIdentifier, mode: ListingMode) -> List[DocumentIdentifier]:
        if mode == ListingMode.RECURSIVE:
            return await self.enumerator.enumerate(directory)

        files = []
        for child in await self.service.list_children(directory):
            try:
                if not await self.service.is_directory(child):
                    files.append(child)
            except Exception as exc:
                log("WARNING", f"Error processing {child}: {exc}", module="resolver")
        return files

    async def _list_via_grant(
        self,
        target: DocumentIdentifier,
        mode: ListingMode
    ) -> Optional[List[DocumentIdentifier]]:
        grant = find_covering(target, await self.service.list_grants())
        if grant is None or grant.root == target:
            return None

        log("INFO", f"Using broader grant {grant.root} for {target}", module="resolver")
        directory = await self._descend(grant.root, target)
        if directory is None:
            return None
        return await self._collect(directory, mode)

    async def _descend(
        self,
        root: DocumentIdentifier,
        target: DocumentIdentifier
    ) -> Optional[DocumentIdentifier]:
        """Walk from a grant root down to target, one path segment per level."""
        root_view = path_segments(root)
        target_view = path_segments(target)
        if root_view is None or target_view is None:
            return None

        prefix, target_segments = target_view
        current = root
        for depth in range(len(root_view[1]) + 1, len(target_segments) + 1):
            wanted = target_segments[:depth]
            step = None
            for child in await self.service.list_children(current):
                view = path_segments(child)
                if view is not None and view[1] == wanted and await self.service.is_directory(child):
                    step = child
                    break
            if step is None:
                log("WARNING", f"Subfolder {join_segments(prefix, wanted)} not found under {current}",
                    module="resolver")
                return None
            current = step
        return current

    def _is_restricted_downloads_root(self, target: DocumentIdentifier) -> bool:
        if self.platform_api_level < DOWNLOADS_ROOT_RESTRICTED_API:
            return False
        if classify(target.authority) != ProviderKind.LEGACY_DOWNLOADS:
            return False
        if is_downloads_root_marker(target.encoded_id):
            return True
        root = settings.SHARED_STORAGE_ROOT.rstrip("/")
        return filesystem_path_of(target) == f"{root}/{settings.DOWNLOAD_FOLDER_NAME}"

    async def _list_native(
        self,
        target: DocumentIdentifier,
        mode: ListingMode
    ) -> Optional[List[DocumentIdentifier]]:
        if self._is_restricted_downloads_root(target):
            log("WARNING", f"Downloads root listing restricted on API {self.platform_api_level}",
                module="resolver")
            return None
        if not await self.service.is_directory(target):
            return None
        return await self._collect(target, mode)

    async def _list_via_index(
        self,
        target: DocumentIdentifier,
        mode: ListingMode
    ) -> Optional[List[DocumentIdentifier]]:
        if classify(target.authority) != ProviderKind.LEGACY_DOWNLOADS:
            return None
        path = filesystem_path_of(target)
        if path is None:
            return None

        directory = path.rstrip("/")
        files = []
        for hit in await self.service.query_by_path_prefix(directory):
            # Verify the file is actually in the target directory
            if not hit.startswith(directory + "/"):
                continue
            if mode == ListingMode.FLAT and hit.rfind("/") != len(directory):
                continue
            files.append(raw_identifier(hit))
        return files

    async def _list_via_filesystem(
        self,
        target: DocumentIdentifier,
        mode: ListingMode
    ) -> Optional[List[DocumentIdentifier]]:
        if self.filesystem is None:
            return None
        path = filesystem_path_of(target)
        if path is None or not await self.filesystem.is_dir(path):
            return None

        if mode == ListingMode.RECURSIVE:
            paths = await self.filesystem.walk_files(path)
        else:
            paths = await self.filesystem.list_files(path)

        files = []
        for file_path in paths:
            child = identifier_for_path(target.authority, file_path)
            if child is not None:
                files.append(child)
        return files
