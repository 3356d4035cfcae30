from typing import Dict, List, Optional, Set

import pytest

from docresolver.config import settings
from docresolver.file_access.base import DocumentProviderService
from docresolver.file_access.grants import Grant
from docresolver.file_access.identifiers import DocumentIdentifier


class FakeDocumentService(DocumentProviderService):
    """In-memory provider service with failure injection."""

    def __init__(self):
        super().__init__({})
        self.nodes: Dict[DocumentIdentifier, dict] = {}
        self.parents: Dict[DocumentIdentifier, DocumentIdentifier] = {}
        self.grants: List[Grant] = []
        self.index: List[str] = []
        self.unreadable: Set[DocumentIdentifier] = set()
        self.failing: Set[DocumentIdentifier] = set()
        self.list_calls: List[DocumentIdentifier] = []

    def add_dir(self, identifier, parent=None):
        self.nodes[identifier] = {"dir": True, "children": [], "content": b""}
        if parent is not None:
            self.nodes[parent]["children"].append(identifier)
        return identifier

    def add_file(self, identifier, parent=None, content=b""):
        self.nodes[identifier] = {"dir": False, "children": [], "content": content}
        if parent is not None:
            self.nodes[parent]["children"].append(identifier)
        return identifier

    def grant(self, identifier):
        self.grants.append(Grant(root=identifier))

    async def exists(self, identifier):
        return identifier in self.nodes

    async def is_directory(self, identifier):
        node = self.nodes.get(identifier)
        return bool(node and node["dir"])

    async def can_read(self, identifier):
        return identifier in self.nodes and identifier not in self.unreadable

    async def list_children(self, identifier):
        self.list_calls.append(identifier)
        if identifier in self.failing:
            raise PermissionError(f"Listing refused: {identifier}")
        node = self.nodes.get(identifier)
        if node is None or not node["dir"]:
            raise FileNotFoundError(f"Not a directory: {identifier}")
        return list(node["children"])

    async def get_parent(self, identifier) -> Optional[DocumentIdentifier]:
        return self.parents.get(identifier)

    async def open_read(self, identifier):
        node = self.nodes.get(identifier)
        if node is None or node["dir"]:
            raise FileNotFoundError(f"No such document: {identifier}")
        return node["content"]

    async def query_by_path_prefix(self, prefix):
        return [path for path in self.index if path.startswith(prefix)]

    async def persist_grant(self, identifier):
        grant = Grant(root=identifier)
        self.grants.append(grant)
        return grant

    async def list_grants(self):
        return list(self.grants)


@pytest.fixture(autouse=True)
def empty_device_root(tmp_path_factory, monkeypatch):
    """Point the default filesystem fallback at an empty directory, not the host root."""
    root = tmp_path_factory.mktemp("device-root")
    monkeypatch.setattr(settings, "FILESYSTEM_BASE_PATH", str(root))
    return root


@pytest.fixture
def service():
    return FakeDocumentService()


@pytest.fixture
def device_tree(tmp_path):
    """Mirror of a device's shared storage under tmp_path."""
    root = tmp_path / "storage" / "emulated" / "0"
    download = root / "Download"
    (download / "sub").mkdir(parents=True)
    (root / "Pictures").mkdir(parents=True)
    (download / "report.json").write_text('{"ok": true}', encoding="utf-8")
    (download / "notes.txt").write_text("notes", encoding="utf-8")
    (download / "sub" / "inner.json").write_text("{}", encoding="utf-8")
    (root / "Pictures" / "photo.png").write_bytes(b"\x89PNG")
    return tmp_path
