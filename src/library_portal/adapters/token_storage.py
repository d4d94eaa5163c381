"""Durable storage for the session token."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

TOKEN_STORAGE_KEY = "token"

_logger = logging.getLogger(__name__)


class TokenStorage(Protocol):
    """Persistence interface for the opaque session token."""

    def load(self) -> str | None:
        """Return the persisted token, if present."""

    def save(self, token: str) -> None:
        """Persist the token."""

    def clear(self) -> None:
        """Remove the persisted token."""


@dataclass
class FileTokenStorage(TokenStorage):
    """Stores the token as JSON under a well-known key in a local file."""

    path: Path

    def load(self) -> str | None:
        """Return the stored token; unreadable files count as absent."""
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable token file at %s", self.path)
            return None
        token = payload.get(TOKEN_STORAGE_KEY) if isinstance(payload, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({TOKEN_STORAGE_KEY: token}), encoding="utf-8"
        )

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
