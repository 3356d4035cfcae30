# docresolver/file_access/base.py
"""
Base interface for document provider services.

The resolver never touches storage directly: every existence check,
listing, read and grant lookup goes through a DocumentProviderService.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from docresolver.file_access.grants import Grant
from docresolver.file_access.identifiers import DocumentIdentifier


class ListingMode(str, Enum):
    FLAT = "flat"
    RECURSIVE = "recursive"


@dataclass(frozen=True)
class Parent:
    """Containing directory of a document."""
    identifier: DocumentIdentifier


@dataclass(frozen=True)
class Children:
    """File identifiers of a directory, in provider order."""
    identifiers: Tuple[DocumentIdentifier, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NotResolvable:
    """Every strategy was exhausted without an answer."""
    reason: str = ""


class DocumentProviderService(ABC):
    """
    Abstract base class for document provider services.

    All methods are async; implementations may block on platform I/O.
    Failures are reported with FileNotFoundError / PermissionError (or the
    DocumentNotFound / PermissionDenied subclasses).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize service with configuration.

        Args:
            config: Service-specific configuration
        """
        self.config = config or {}
        self.service_name = self.__class__.__name__

    @abstractmethod
    async def exists(self, identifier: DocumentIdentifier) -> bool:
        pass

    @abstractmethod
    async def is_directory(self, identifier: DocumentIdentifier) -> bool:
        pass

    async def can_read(self, identifier: DocumentIdentifier) -> bool:
        """
        Check read capability.

        Default implementation treats every existing document as readable.
        """
        return await self.exists(identifier)

    @abstractmethod
    async def list_children(self, identifier: DocumentIdentifier) -> List[DocumentIdentifier]:
        """
        List direct children of a directory.

        Args:
            identifier: Directory identifier

        Returns:
            Child identifiers (files and directories) in provider order

        Raises:
            FileNotFoundError: If the directory doesn't exist
            PermissionError: If listing is refused
        """
        pass

    @abstractmethod
    async def get_parent(self, identifier: DocumentIdentifier) -> Optional[DocumentIdentifier]:
        """
        Native structural parent lookup.

        Returns:
            Parent identifier, or None if the provider does not expose one
        """
        pass

    @abstractmethod
    async def open_read(self, identifier: DocumentIdentifier) -> bytes:
        """
        Read document contents as bytes.

        Raises:
            FileNotFoundError: If the document doesn't exist
            PermissionError: If access denied
        """
        pass

    @abstractmethod
    async def query_by_path_prefix(self, prefix: str) -> List[str]:
        """
        Query the metadata index for files under an absolute path prefix.

        Args:
            prefix: Absolute device path of a directory

        Returns:
            Absolute device paths of indexed files under the prefix
        """
        pass

    @abstractmethod
    async def persist_grant(self, identifier: DocumentIdentifier) -> Grant:
        """
        Persist read access for an identifier returned by a picker.

        Raises:
            PermissionError: If the identifier cannot be persisted
        """
        pass

    @abstractmethod
    async def list_grants(self) -> List[Grant]:
        pass

    async def health_check(self) -> Dict[str, Any]:
        """
        Check service health.

        Returns:
            Dict with health check results:
            {
                "healthy": bool,
                "service": str,
                "message": str,
                "details": {...}
            }
        """
        return {
            "healthy": True,
            "service": self.service_name,
            "message": f"{self.service_name} reachable",
            "details": {},
        }

    async def stream_read(
        self,
        identifier: DocumentIdentifier,
        chunk_size: int = 8192
    ) -> AsyncIterator[bytes]:
        """
        Stream read a document in chunks.

        Default implementation reads the entire document and yields it.
        Services may override for true streaming.

        Args:
            identifier: Document identifier
            chunk_size: Size of chunks to read

        Yields:
            Bytes chunks
        """
        data = await self.open_read(identifier)
        for i in range(0, len(data), chunk_size):
            yield data[i:i + chunk_size]

    def __repr__(self) -> str:
        return f"<{self.service_name} config={self.config}>"
