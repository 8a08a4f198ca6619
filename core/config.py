"""Runtime configuration.

All environment parsing happens here; the API and the Streamlit app consume a
`Settings` object instead of reading the environment themselves.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from core.errors import ConfigError


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_STORE_PATH = PROJECT_ROOT / "data" / "letterease_data.json"
DEFAULT_ALLOWED_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")
STORE_BACKENDS = ("file", "memory")


@dataclass(frozen=True)
class Settings:
    """Validated runtime configuration.

    Attributes:
        admin_password: Shared secret for uploads and deletes. ``None`` rejects every write.
        store_backend: ``"file"`` or ``"memory"``.
        store_path: JSON document location for the file backend.
        allowed_origins: CORS origins for the API.
        log_level: Name of the root logging level.
    """

    admin_password: Optional[str] = None
    store_backend: str = "file"
    store_path: Path = DEFAULT_STORE_PATH
    allowed_origins: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_ORIGINS)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``LETTEREASE_*`` environment variables.

        Raises:
            ConfigError: If a value is present but invalid.
        """
        password = os.getenv("LETTEREASE_ADMIN_PASSWORD") or None
        backend = os.getenv("LETTEREASE_STORE", "file").strip().lower()
        if backend not in STORE_BACKENDS:
            raise ConfigError(
                f"Invalid LETTEREASE_STORE value '{backend}': expected one of {', '.join(STORE_BACKENDS)}."
            )
        store_path = Path(os.getenv("LETTEREASE_STORE_PATH", str(DEFAULT_STORE_PATH))).expanduser()
        return cls(
            admin_password=password,
            store_backend=backend,
            store_path=store_path,
            allowed_origins=_parse_origins(os.getenv("LETTEREASE_ALLOWED_ORIGINS")),
            log_level=_parse_log_level(os.getenv("LETTEREASE_LOG_LEVEL", "INFO")),
        )

    @property
    def writes_enabled(self) -> bool:
        return bool(self.admin_password)


def _parse_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None or not raw.strip():
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Invalid LETTEREASE_LOG_LEVEL value '{raw}'. Use DEBUG, INFO, WARNING or ERROR.")
    return level
