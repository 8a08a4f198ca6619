"""Exception hierarchy for letter dataset ingestion, querying and storage.

Every message is safe to show to the person who triggered the failure.
"""

from __future__ import annotations


class LetterEaseError(Exception):
    """Base exception for all dashboard failures."""


class ConfigError(LetterEaseError):
    """Raised for invalid runtime configuration."""


class ReadError(LetterEaseError):
    """Raised when a workbook or the stored document cannot be read or written."""


class ParseError(LetterEaseError):
    """Raised when a workbook (or stored payload) is not in the expected format."""


class EmptyResultError(LetterEaseError):
    """Raised by callers when an upload produced no valid records."""


class AuthorizationError(LetterEaseError):
    """Raised when a write or delete carries the wrong shared secret."""


class NotFoundError(LetterEaseError):
    """Raised when no dataset is stored or a requested year has no data."""
