# docresolver/core/requests.py
"""
Request and response types for the bridge layer.

Requests form a closed set of frozen dataclasses; the router keeps one
handler per request type.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Request:
    """Base class for bridge requests."""


@dataclass(frozen=True)
class ResolveChildrenFlat(Request):
    """Files next to a picked document (or directly in a directory)."""
    identifier: str


@dataclass(frozen=True)
class ResolveChildrenRecursive(Request):
    """Every file under a tree identifier."""
    identifier: str


@dataclass(frozen=True)
class ResolveParent(Request):
    identifier: str


@dataclass(frozen=True)
class ListGrants(Request):
    pass


@dataclass(frozen=True)
class FindCoveringGrant(Request):
    identifier: str


@dataclass(frozen=True)
class ReadFileContent(Request):
    """Read a document or device path as UTF-8 text."""
    identifier: str


@dataclass(frozen=True)
class GetFileUri(Request):
    path: str


@dataclass(frozen=True)
class PersistGrant(Request):
    identifier: str


@dataclass(frozen=True)
class PickDocument(Request):
    pass


@dataclass(frozen=True)
class PickDirectory(Request):
    pass


@dataclass(frozen=True)
class RequestDirectoryAccess(Request):
    identifier: str


@dataclass
class Response:
    """Result of a bridge request."""
    success: bool
    payload: Any = None
    error_code: Optional[str] = None
    message: str = ""

    @classmethod
    def ok(cls, payload: Any = None) -> "Response":
        return cls(success=True, payload=payload)

    @classmethod
    def error(cls, message: str, error_code: str = "ERROR") -> "Response":
        return cls(success=False, error_code=error_code, message=message)


# Operation names used on the wire
OPERATIONS: Dict[str, type] = {
    "resolveChildrenFlat": ResolveChildrenFlat,
    "resolveChildrenRecursive": ResolveChildrenRecursive,
    "resolveParent": ResolveParent,
    "listGrants": ListGrants,
    "findCoveringGrant": FindCoveringGrant,
    "readFileContent": ReadFileContent,
    "getFileUri": GetFileUri,
    "persistGrant": PersistGrant,
    "pickDocument": PickDocument,
    "pickDirectory": PickDirectory,
    "requestDirectoryAccess": RequestDirectoryAccess,
}

# Wire argument carrying the identifier for each request type
_ARGUMENT_NAMES: Dict[type, str] = {
    ResolveChildrenFlat: "identifier",
    ResolveChildrenRecursive: "identifier",
    ResolveParent: "identifier",
    FindCoveringGrant: "identifier",
    ReadFileContent: "identifier",
    GetFileUri: "path",
    PersistGrant: "identifier",
    RequestDirectoryAccess: "identifier",
}


def build_request(operation: str, arguments: Optional[Dict[str, Any]] = None) -> Request:
    """
    Build a typed request from a wire operation name and arguments.

    Raises:
        ValueError: If the operation is unknown or its argument is missing
    """
    request_type = OPERATIONS.get(operation)
    if request_type is None:
        raise ValueError(f"Unknown operation: '{operation}'. Available operations: {list(OPERATIONS)}")

    argument = _ARGUMENT_NAMES.get(request_type)
    if argument is None:
        return request_type()

    value = (arguments or {}).get(argument)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{operation} requires a non-empty '{argument}' argument")
    return request_type(value)
