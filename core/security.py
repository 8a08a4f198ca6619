"""Shared-secret check guarding dataset writes and deletes."""

from __future__ import annotations

import hmac
from typing import Optional

from core.errors import AuthorizationError


def credentials_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison. An unset secret never matches."""
    if not expected or provided is None:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_credential(provided: Optional[str], expected: Optional[str]) -> None:
    if not credentials_match(provided, expected):
        raise AuthorizationError("Unauthorized")
