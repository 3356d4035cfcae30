# docresolver/file_access/identifiers.py
"""
Identifier model.

Two identifier shapes are understood:

    content://<authority>/document/<encoded id>   (single document)
    content://<authority>/tree/<encoded id>       (directory tree grant)

The encoded id is opaque outside the converter; it is percent-encoded on
the wire the same way the platform URI encoder does it.
"""
from dataclasses import dataclass
from urllib.parse import quote, unquote

from docresolver.file_access.errors import ParseError

CONTENT_SCHEME = "content://"
DOCUMENT_SEGMENT = "document"
TREE_SEGMENT = "tree"

# Characters the platform encoder leaves literal besides the unreserved set
_LITERAL_CHARS = "!'()*"


@dataclass(frozen=True, eq=False)
class DocumentIdentifier:
    """Provider-specific document identifier.

    Equality and hashing only consider authority and encoded id; the same
    document addressed in tree form or document form compares equal.
    """
    authority: str
    encoded_id: str
    is_tree_form: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentIdentifier):
            return NotImplemented
        return self.authority == other.authority and self.encoded_id == other.encoded_id

    def __hash__(self) -> int:
        return hash((self.authority, self.encoded_id))

    def __str__(self) -> str:
        return to_string(self)


def build_document_identifier(authority: str, encoded_id: str) -> DocumentIdentifier:
    return DocumentIdentifier(authority=authority, encoded_id=encoded_id, is_tree_form=False)


def build_tree_identifier(authority: str, encoded_id: str) -> DocumentIdentifier:
    return DocumentIdentifier(authority=authority, encoded_id=encoded_id, is_tree_form=True)


def is_content_uri(raw: str) -> bool:
    return bool(raw) and raw.startswith(CONTENT_SCHEME)


def parse(raw: str) -> DocumentIdentifier:
    """
    Parse an identifier string.

    Args:
        raw: Identifier string in document or tree form

    Returns:
        DocumentIdentifier

    Raises:
        ParseError: If the string has no authority or an unknown path shape
    """
    if not is_content_uri(raw):
        raise ParseError(f"Not a content identifier: {raw!r}")

    authority, sep, path = raw[len(CONTENT_SCHEME):].partition("/")
    if not authority or not sep:
        raise ParseError(f"Identifier has no authority segment: {raw!r}")

    shape, sep, encoded = path.partition("/")
    if shape == TREE_SEGMENT:
        is_tree = True
    elif shape == DOCUMENT_SEGMENT:
        is_tree = False
    else:
        raise ParseError(f"Unrecognized identifier shape '{shape}': {raw!r}")

    if is_tree and f"/{DOCUMENT_SEGMENT}/" in encoded:
        raise ParseError(f"Combined tree/document identifier shape is not supported: {raw!r}")
    if not sep or not encoded or "/" in encoded:
        raise ParseError(f"Identifier has no single encoded id segment: {raw!r}")

    return DocumentIdentifier(
        authority=authority,
        encoded_id=unquote(encoded),
        is_tree_form=is_tree,
    )


def to_string(identifier: DocumentIdentifier) -> str:
    shape = TREE_SEGMENT if identifier.is_tree_form else DOCUMENT_SEGMENT
    encoded = quote(identifier.encoded_id, safe=_LITERAL_CHARS)
    return f"{CONTENT_SCHEME}{identifier.authority}/{shape}/{encoded}"
