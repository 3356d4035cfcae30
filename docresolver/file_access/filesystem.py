# docresolver/file_access/filesystem.py
"""
Raw filesystem access for device paths.

Device paths (``/storage/emulated/0/Download/...``) are resolved under a
configurable base directory, so the same code serves a real device root
("/") and a mirrored tree on a workstation or in tests.
"""
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from docresolver.config import settings
from docresolver.monitoring.logger import log


class FileSystemAccess:
    """
    Device-path filesystem accessor.

    Config schema:
    {
        "base_path": "/",  # Optional, directory device paths are rooted at
    }
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.base_path = Path(config.get("base_path") or settings.FILESYSTEM_BASE_PATH or "/").resolve()

        log("INFO", f"FileSystemAccess initialized with base_path={self.base_path}",
            module="filesystem")

    def _resolve_path(self, device_path: str) -> Path:
        """Resolve a device path to a local path within base_path."""
        resolved = (self.base_path / device_path.lstrip("/")).resolve()

        # Security check: ensure resolved path is within base_path
        try:
            resolved.relative_to(self.base_path)
        except ValueError:
            raise PermissionError(f"Access denied: path '{device_path}' is outside base_path")

        return resolved

    def to_device_path(self, local_path: Path) -> str:
        relative = local_path.relative_to(self.base_path)
        return "/" + relative.as_posix() if relative.parts else "/"

    async def exists(self, device_path: str) -> bool:
        try:
            return await aiofiles.os.path.exists(self._resolve_path(device_path))
        except PermissionError:
            return False

    async def is_dir(self, device_path: str) -> bool:
        try:
            return await aiofiles.os.path.isdir(self._resolve_path(device_path))
        except PermissionError:
            return False

    async def is_file(self, device_path: str) -> bool:
        try:
            return await aiofiles.os.path.isfile(self._resolve_path(device_path))
        except PermissionError:
            return False

    def can_read(self, device_path: str) -> bool:
        try:
            return os.access(self._resolve_path(device_path), os.R_OK)
        except PermissionError:
            return False

    async def list_dir(self, device_path: str) -> List[str]:
        """
        List entries of a directory.

        Args:
            device_path: Directory device path

        Returns:
            Device paths of all entries, sorted by name

        Raises:
            FileNotFoundError: If directory doesn't exist
            NotADirectoryError: If path is not a directory
        """
        resolved_dir = self._resolve_path(device_path)

        if not await aiofiles.os.path.exists(resolved_dir):
            raise FileNotFoundError(f"Directory not found: {device_path}")

        if not await aiofiles.os.path.isdir(resolved_dir):
            raise NotADirectoryError(f"Not a directory: {device_path}")

        names = sorted(await aiofiles.os.listdir(resolved_dir))
        return [self.to_device_path(resolved_dir / name) for name in names]

    async def list_files(self, device_path: str) -> List[str]:
        """List direct child files of a directory."""
        files = []
        for entry in await self.list_dir(device_path):
            if await self.is_file(entry):
                files.append(entry)
            else:
                log("DEBUG", f"Skipping non-file: {entry}", module="filesystem")
        return files

    async def walk_files(self, device_path: str) -> List[str]:
        """
        List files under a directory recursively.

        Unreadable subdirectories are skipped.
        """
        files: List[str] = []
        try:
            entries = await self.list_dir(device_path)
        except OSError as exc:
            log("WARNING", f"Cannot list {device_path}: {exc}", module="filesystem")
            return files

        for entry in entries:
            if await self.is_dir(entry):
                files.extend(await self.walk_files(entry))
            elif await self.is_file(entry):
                files.append(entry)
        return files

    async def read(self, device_path: str) -> bytes:
        resolved_path = self._resolve_path(device_path)

        if not await aiofiles.os.path.exists(resolved_path):
            raise FileNotFoundError(f"File does not exist: {device_path}")

        async with aiofiles.open(resolved_path, "rb") as f:
            return await f.read()
