# docresolver/file_access/errors.py
"""
Error taxonomy for identifier resolution.

Strategy-level failures are caught by the resolver and downgraded to
"try the next strategy". Only ParseError is surfaced immediately.
"""


class ResolutionError(Exception):
    """Base class for document resolution errors."""


class ParseError(ResolutionError, ValueError):
    """Identifier string is malformed."""


class DocumentNotFound(ResolutionError, FileNotFoundError):
    """Identifier does not exist according to the provider."""


class PermissionDenied(ResolutionError, PermissionError):
    """Provider refused access to the identifier."""


class ConversionUnsupported(ResolutionError):
    """Encoded id sub-format is not recognized by the converter."""
