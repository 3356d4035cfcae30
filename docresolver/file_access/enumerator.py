# docresolver/file_access/enumerator.py
"""
Recursive tree enumerator.

Walks a directory depth-first and collects file identifiers. A subtree
that cannot be read is skipped; the walk itself never fails. The provider
hierarchy is acyclic by contract, so no visited set is kept.
"""
from typing import List

from docresolver.file_access.base import DocumentProviderService
from docresolver.file_access.identifiers import DocumentIdentifier
from docresolver.monitoring.logger import log


class TreeEnumerator:
    """Depth-first file collector over a DocumentProviderService."""

    def __init__(self, service: DocumentProviderService):
        self.service = service

    async def enumerate(self, root: DocumentIdentifier) -> List[DocumentIdentifier]:
        """
        Collect every file under a directory.

        Args:
            root: Directory identifier

        Returns:
            File identifiers in provider order, depth-first
        """
        files: List[DocumentIdentifier] = []
        await self._walk(root, files)
        log("INFO", f"Enumerated {len(files)} files under {root}", module="enumerator")
        return files

    async def _walk(self, directory: DocumentIdentifier, files: List[DocumentIdentifier]) -> None:
        try:
            if not await self.service.can_read(directory):
                log("WARNING", f"Cannot read directory: {directory}", module="enumerator")
                return
            children = await self.service.list_children(directory)
        except Exception as exc:
            log("WARNING", f"Skipping subtree {directory}: {exc}", module="enumerator")
            return

        for child in children:
            try:
                if await self.service.is_directory(child):
                    await self._walk(child, files)
                else:
                    files.append(child)
            except Exception as exc:
                # Continue with next item
                log("WARNING", f"Error processing {child}: {exc}", module="enumerator")
