"""Unit tests for the shared-secret check."""

from __future__ import annotations

import pytest

from core.errors import AuthorizationError
from core.security import credentials_match, require_credential


def test_credentials_match_exact_secret_only() -> None:
    assert credentials_match("s3cret", "s3cret")
    assert not credentials_match("s3cret ", "s3cret")
    assert not credentials_match("S3CRET", "s3cret")
    assert not credentials_match(None, "s3cret")


def test_unset_secret_never_matches() -> None:
    assert not credentials_match("", "")
    assert not credentials_match("anything", None)


def test_require_credential_raises_on_mismatch() -> None:
    require_credential("s3cret", "s3cret")

    with pytest.raises(AuthorizationError, match="Unauthorized"):
        require_credential("wrong", "s3cret")
