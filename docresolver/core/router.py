# docresolver/core/router.py
"""
RequestRouter for the document resolution layer.
Routes typed bridge requests to the resolver and returns a Response.
"""
import traceback
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from docresolver.core.picker import PickerBridge
from docresolver.core.requests import (
    FindCoveringGrant,
    GetFileUri,
    ListGrants,
    PersistGrant,
    PickDirectory,
    PickDocument,
    ReadFileContent,
    Request,
    RequestDirectoryAccess,
    ResolveChildrenFlat,
    ResolveChildrenRecursive,
    ResolveParent,
    Response,
)
from docresolver.file_access.base import Children, ListingMode, Parent
from docresolver.file_access.errors import ParseError, ResolutionError
from docresolver.file_access.filesystem import FileSystemAccess
from docresolver.file_access.grants import find_covering
from docresolver.file_access.identifiers import is_content_uri, parse, to_string
from docresolver.file_access.resolver import DocumentResolver
from docresolver.monitoring.context import set_request_context
from docresolver.monitoring.errors import record_error
from docresolver.monitoring.logger import log

FILE_SCHEME = "file://"

# Message prefix per request type when a handler fails
FAILURE_MESSAGES: Dict[type, str] = {
    ResolveChildrenFlat: "Failed to get files",
    ResolveChildrenRecursive: "Failed to list files",
    ResolveParent: "Failed to get parent directory",
    ListGrants: "Failed to check permissions",
    FindCoveringGrant: "Failed to find covering grant",
    ReadFileContent: "Failed to read file",
    GetFileUri: "Failed to get URI",
    PersistGrant: "Failed to persist grant",
    PickDocument: "Failed to pick file",
    PickDirectory: "Failed to pick directory",
    RequestDirectoryAccess: "Failed to request directory access",
}


class RequestRouter:
    """Dispatches bridge requests to their handlers."""

    def __init__(
        self,
        resolver: DocumentResolver,
        filesystem: Optional[FileSystemAccess] = None,
        picker: Optional[PickerBridge] = None
    ):
        self.resolver = resolver
        self.service = resolver.service
        self.filesystem = filesystem or resolver.filesystem
        self.picker = picker
        # Registry of request handlers, one per request type
        self.handlers: Dict[type, Callable[[Any], Awaitable[Any]]] = {
            ResolveChildrenFlat: self._resolve_children_flat,
            ResolveChildrenRecursive: self._resolve_children_recursive,
            ResolveParent: self._resolve_parent,
            ListGrants: self._list_grants,
            FindCoveringGrant: self._find_covering_grant,
            ReadFileContent: self._read_file_content,
            GetFileUri: self._get_file_uri,
            PersistGrant: self._persist_grant,
            PickDocument: self._pick_document,
            PickDirectory: self._pick_directory,
            RequestDirectoryAccess: self._request_directory_access,
        }

    async def dispatch(self, request: Request) -> Response:
        """
        Route a request to its handler.

        Args:
            request: Typed bridge request

        Returns:
            Response with the handler payload, or an error
        """
        request_type = type(request)
        request_id = str(uuid4())
        set_request_context(request_id=request_id, operation=request_type.__name__)

        handler = self.handlers.get(request_type)
        if handler is None:
            log("WARNING", f"Unsupported request: {request_type.__name__}", module="router")
            return Response.error(f"Unsupported request: {request_type.__name__}", error_code="NOT_IMPLEMENTED")

        log("INFO", f"Request started: {request_type.__name__}", module="router")
        try:
            payload = await handler(request)
        except Exception as exc:
            message = f"{FAILURE_MESSAGES.get(request_type, 'Request failed')}: {exc}"
            record_error(
                "router",
                handler.__name__,
                message,
                details={"request": repr(request)},
                stacktrace=traceback.format_exc(),
                request_id=request_id,
            )
            return Response.error(message)

        log("INFO", f"Request completed: {request_type.__name__}", module="router")
        return Response.ok(payload)

    def _require_filesystem(self) -> FileSystemAccess:
        if self.filesystem is None:
            raise ResolutionError("Filesystem access is not configured")
        return self.filesystem

    def _require_picker(self) -> PickerBridge:
        if self.picker is None:
            raise ResolutionError("Picker is not configured")
        return self.picker

    async def _resolve_children_flat(self, request: ResolveChildrenFlat) -> List[str]:
        if not is_content_uri(request.identifier):
            return await self._list_path_siblings(request.identifier)

        result = await self.resolver.list_siblings(parse(request.identifier))
        if isinstance(result, Children):
            return [to_string(identifier) for identifier in result.identifiers]
        log("WARNING", f"No files resolvable for {request.identifier}: {result.reason}", module="router")
        return []

    async def _list_path_siblings(self, raw_path: str) -> List[str]:
        """Sibling files of a plain device path (e.g. a cached copy)."""
        filesystem = self._require_filesystem()
        path = raw_path[len(FILE_SCHEME):] if raw_path.startswith(FILE_SCHEME) else raw_path

        if not await filesystem.exists(path):
            log("ERROR", f"File does not exist: {path}", module="router")
            return []

        parent = str(Path(path).parent)
        if parent == path or not await filesystem.is_dir(parent):
            # No parent directory, return just this file
            return [path]

        return await filesystem.list_files(parent)

    async def _resolve_children_recursive(self, request: ResolveChildrenRecursive) -> List[str]:
        result = await self.resolver.list_children(parse(request.identifier), ListingMode.RECURSIVE)
        if isinstance(result, Children):
            return [to_string(identifier) for identifier in result.identifiers]
        log("WARNING", f"Tree not listable: {result.reason}", module="router")
        return []

    async def _resolve_parent(self, request: ResolveParent) -> Optional[str]:
        result = await self.resolver.get_parent(parse(request.identifier))
        if isinstance(result, Parent):
            return to_string(result.identifier)
        return None

    async def _list_grants(self, request: ListGrants) -> List[str]:
        grants = await self.service.list_grants()
        log("INFO", f"Found {len(grants)} persisted grants", module="router")
        return [to_string(grant.root) for grant in grants]

    async def _find_covering_grant(self, request: FindCoveringGrant) -> Optional[str]:
        try:
            requested = parse(request.identifier)
            grant = find_covering(requested, await self.service.list_grants())
        except ParseError as exc:
            log("WARNING", f"Cannot match grants for malformed identifier: {exc}", module="router")
            return None
        except Exception as exc:
            log("ERROR", f"Error finding matching grant: {exc}", module="router")
            return None
        return to_string(grant.root) if grant is not None else None

    async def _read_file_content(self, request: ReadFileContent) -> str:
        if is_content_uri(request.identifier):
            data = await self.resolver.read(parse(request.identifier))
        else:
            path = request.identifier
            if path.startswith(FILE_SCHEME):
                path = path[len(FILE_SCHEME):]
            data = await self._require_filesystem().read(path)
        return data.decode("utf-8")

    async def _get_file_uri(self, request: GetFileUri) -> str:
        # URIs and plain paths are handed back as given
        return request.path

    async def _persist_grant(self, request: PersistGrant) -> str:
        grant = await self.service.persist_grant(parse(request.identifier))
        return to_string(grant.root)

    async def _pick_document(self, request: PickDocument) -> str:
        return to_string(await self._require_picker().pick_document())

    async def _pick_directory(self, request: PickDirectory) -> str:
        return to_string(await self._require_picker().pick_directory())

    async def _request_directory_access(self, request: RequestDirectoryAccess) -> str:
        picker = self._require_picker()
        return to_string(await picker.request_directory_access(parse(request.identifier)))
