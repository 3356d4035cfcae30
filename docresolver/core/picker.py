# docresolver/core/picker.py
"""
Picker launch/result bookkeeping.

Each launch gets a correlation token and a future. The platform layer
reports the picked URI (or a dismissal) back with that token; nothing is
kept in mutable "pending result" slots shared between launches.
"""
import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional, Tuple
from uuid import uuid4

from docresolver.config import settings
from docresolver.file_access.base import DocumentProviderService
from docresolver.file_access.classifier import ProviderKind, classify
from docresolver.file_access.converter import (
    external_storage_identifier,
    legacy_downloads_to_external_storage,
    tree_to_document,
)
from docresolver.file_access.errors import ConversionUnsupported
from docresolver.file_access.identifiers import DocumentIdentifier, parse
from docresolver.monitoring.logger import log


class PickerMode(str, Enum):
    SINGLE_DOCUMENT = "single_document"
    TREE = "tree"


class PickerCancelled(Exception):
    """User dismissed the picker or it returned nothing."""


class PickerBusy(Exception):
    """A picker of the same mode is already outstanding."""


class PickerLauncher(ABC):
    """Starts the platform picker UI."""

    @abstractmethod
    async def launch(
        self,
        token: str,
        mode: PickerMode,
        initial: Optional[DocumentIdentifier] = None
    ) -> None:
        """
        Launch a picker.

        The result must be reported to PickerBridge.deliver or
        PickerBridge.cancel with the same token.

        Args:
            token: Correlation token for this launch
            mode: Single document or directory tree
            initial: Location the picker should open at, if supported
        """
        pass


class PickerBridge:
    """Correlates picker launches with their results."""

    def __init__(self, launcher: PickerLauncher, service: DocumentProviderService):
        self.launcher = launcher
        self.service = service
        self._pending: Dict[PickerMode, Tuple[str, asyncio.Future]] = {}

    def has_pending(self, mode: PickerMode) -> bool:
        return mode in self._pending

    async def pick_document(self) -> DocumentIdentifier:
        """
        Let the user pick a single document.

        The picker opens at the external storage Download folder. Legacy
        downloads results are re-encoded under external storage when
        possible, and read access is persisted best-effort.
        """
        initial = external_storage_identifier(settings.DOWNLOAD_FOLDER_NAME)
        identifier = parse(await self._pick(PickerMode.SINGLE_DOCUMENT, initial))

        if classify(identifier.authority) == ProviderKind.LEGACY_DOWNLOADS:
            try:
                identifier = legacy_downloads_to_external_storage(identifier)
            except ConversionUnsupported as exc:
                log("WARNING", f"Could not convert picked document, using original: {exc}",
                    module="picker")

        await self._persist(identifier)
        return identifier

    async def pick_directory(self, initial: Optional[DocumentIdentifier] = None) -> DocumentIdentifier:
        identifier = parse(await self._pick(PickerMode.TREE, initial))
        await self._persist(identifier)
        return identifier

    async def request_directory_access(self, identifier: DocumentIdentifier) -> DocumentIdentifier:
        """Open a tree picker positioned at a specific directory."""
        # Pickers navigate with document-form identifiers
        initial = tree_to_document(identifier) or identifier
        log("INFO", f"Requesting directory access for {initial}", module="picker")
        return await self.pick_directory(initial)

    def deliver(self, token: str, raw_uri: Optional[str]) -> bool:
        """
        Report a picker result.

        Returns:
            True if the token matched an outstanding launch
        """
        if not raw_uri:
            return self.cancel(token)

        future = self._find(token)
        if future is None:
            log("WARNING", f"Picker result for unknown token {token}", module="picker")
            return False
        if not future.done():
            future.set_result(raw_uri)
        return True

    def cancel(self, token: str) -> bool:
        future = self._find(token)
        if future is None:
            log("WARNING", f"Picker cancellation for unknown token {token}", module="picker")
            return False
        if not future.done():
            future.set_exception(PickerCancelled("Picker cancelled"))
        return True

    def _find(self, token: str) -> Optional[asyncio.Future]:
        for pending_token, future in self._pending.values():
            if pending_token == token:
                return future
        return None

    async def _pick(self, mode: PickerMode, initial: Optional[DocumentIdentifier]) -> str:
        if mode in self._pending:
            raise PickerBusy(f"A {mode.value} picker is already open")

        token = uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[mode] = (token, future)
        try:
            log("INFO", f"Launching {mode.value} picker", module="picker", token=token)
            await self.launcher.launch(token, mode, initial)
            return await future
        finally:
            self._pending.pop(mode, None)

    async def _persist(self, identifier: DocumentIdentifier) -> None:
        try:
            await self.service.persist_grant(identifier)
        except Exception as exc:
            # Some documents don't support persistable access
            log("WARNING", f"Could not persist access to {identifier}: {exc}", module="picker")
