# docresolver/file_access/localfs_provider.py
"""
Local filesystem document provider service.

Serves external storage (``primary:...``) and legacy downloads
(``raw:/...`` and the downloads root marker) identifiers from a mirrored
device tree on the local filesystem. Useful on a workstation, in tests,
and on any host where the shared storage volume is mounted as a
directory.
"""
import os
import traceback
from typing import Any, Dict, List, Optional

import structlog

from docresolver.file_access.base import DocumentProviderService
from docresolver.file_access.converter import (
    child_encoded_id,
    filesystem_path_of,
    identifier_for_path,
    parent_encoded_id,
)
from docresolver.file_access.errors import DocumentNotFound, PermissionDenied
from docresolver.file_access.filesystem import FileSystemAccess
from docresolver.file_access.grants import Grant
from docresolver.file_access.identifiers import DocumentIdentifier

logger = structlog.get_logger()


class LocalDocumentProvider(DocumentProviderService):
    """
    Document provider backed by a local directory tree.

    Config schema:
    {
        "base_path": "/path/to/device/mirror",  # Optional, default "/"
        "expose_parents": false,  # Optional, answer native parent lookups
        "restricted_paths": ["/storage/emulated/0/Download"],  # Optional, listing refused
        "index_enabled": true  # Optional, answer metadata index queries
    }
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.filesystem = FileSystemAccess({"base_path": self.config.get("base_path")})
        self.expose_parents = self.config.get("expose_parents", False)
        self.restricted_paths = {
            path.rstrip("/") for path in self.config.get("restricted_paths", [])
        }
        self.index_enabled = self.config.get("index_enabled", True)
        self._grants: List[Grant] = []

        logger.info(
            "local_provider_initialized",
            base_path=str(self.filesystem.base_path),
            expose_parents=self.expose_parents,
            restricted=len(self.restricted_paths)
        )

    def _device_path(self, identifier: DocumentIdentifier) -> str:
        path = filesystem_path_of(identifier)
        if path is None:
            raise DocumentNotFound(f"Unsupported identifier for local provider: {identifier}")
        return path

    def _is_restricted(self, path: str) -> bool:
        return path.rstrip("/") in self.restricted_paths

    async def exists(self, identifier: DocumentIdentifier) -> bool:
        try:
            return await self.filesystem.exists(self._device_path(identifier))
        except DocumentNotFound:
            return False

    async def is_directory(self, identifier: DocumentIdentifier) -> bool:
        try:
            return await self.filesystem.is_dir(self._device_path(identifier))
        except DocumentNotFound:
            return False

    async def can_read(self, identifier: DocumentIdentifier) -> bool:
        try:
            path = self._device_path(identifier)
        except DocumentNotFound:
            return False
        if self._is_restricted(path):
            return False
        return await self.filesystem.exists(path) and self.filesystem.can_read(path)

    async def list_children(self, identifier: DocumentIdentifier) -> List[DocumentIdentifier]:
        path = self._device_path(identifier)

        if self._is_restricted(path):
            logger.warning("listing_restricted", path=path)
            raise PermissionDenied(f"Listing not permitted: {identifier}")

        if not await self.filesystem.exists(path):
            raise DocumentNotFound(f"Directory not found: {identifier}")

        children = []
        for entry in await self.filesystem.list_dir(path):
            child_id = child_encoded_id(identifier, entry.rsplit("/", 1)[-1])
            if child_id is not None:
                children.append(DocumentIdentifier(identifier.authority, child_id))
                continue
            # Root markers don't nest, encode the device path instead
            child = identifier_for_path(identifier.authority, entry)
            if child is not None:
                children.append(child)

        logger.debug("children_listed", path=path, count=len(children))
        return children

    async def get_parent(self, identifier: DocumentIdentifier) -> Optional[DocumentIdentifier]:
        if not self.expose_parents:
            return None
        parent_id = parent_encoded_id(identifier)
        if parent_id is None:
            return None
        return DocumentIdentifier(identifier.authority, parent_id)

    async def open_read(self, identifier: DocumentIdentifier) -> bytes:
        path = self._device_path(identifier)
        if not await self.filesystem.exists(path):
            raise DocumentNotFound(f"File does not exist: {identifier}")
        if not self.filesystem.can_read(path):
            raise PermissionDenied(f"Read not permitted: {identifier}")
        return await self.filesystem.read(path)

    async def query_by_path_prefix(self, prefix: str) -> List[str]:
        if not self.index_enabled:
            return []
        hits = await self.filesystem.walk_files(prefix)
        logger.debug("index_queried", prefix=prefix, hits=len(hits))
        return hits

    async def persist_grant(self, identifier: DocumentIdentifier) -> Grant:
        if not await self.exists(identifier):
            raise PermissionDenied(f"Cannot persist access to missing document: {identifier}")

        self._grants = [grant for grant in self._grants if grant.root != identifier]
        grant = Grant(root=identifier)
        self._grants.append(grant)

        logger.info("grant_persisted", root=identifier.encoded_id, tree=identifier.is_tree_form)
        return grant

    async def revoke_grant(self, identifier: DocumentIdentifier) -> bool:
        before = len(self._grants)
        self._grants = [grant for grant in self._grants if grant.root != identifier]
        revoked = len(self._grants) < before
        if revoked:
            logger.info("grant_revoked", root=identifier.encoded_id)
        return revoked

    async def list_grants(self) -> List[Grant]:
        return list(self._grants)

    async def health_check(self) -> Dict[str, Any]:
        """
        Check provider health.

        Verifies:
        - Base path exists
        - Base path is readable
        """
        base_path = self.filesystem.base_path
        checks = {
            "base_path_exists": False,
            "base_path_readable": False,
        }

        try:
            if base_path.exists():
                checks["base_path_exists"] = True
                if os.access(base_path, os.R_OK):
                    checks["base_path_readable"] = True

            healthy = checks["base_path_exists"] and checks["base_path_readable"]

            if healthy:
                message = "Local provider healthy"
            else:
                issues = []
                if not checks["base_path_exists"]:
                    issues.append("base path doesn't exist")
                if not checks["base_path_readable"]:
                    issues.append("no read access")
                message = "Local provider unhealthy: " + ", ".join(issues)

            return {
                "healthy": healthy,
                "service": "local",
                "message": message,
                "details": {
                    "base_path": str(base_path),
                    "checks": checks,
                    "grants": len(self._grants),
                }
            }

        except Exception as exc:
            return {
                "healthy": False,
                "service": "local",
                "message": f"Health check failed: {exc}",
                "details": {
                    "error": str(exc),
                    "traceback": traceback.format_exc(),
                    "checks": checks
                }
            }
