"""Credential providers injected into the client."""

from __future__ import annotations

from typing import Protocol

from genstudio.config import Settings


class CredentialProvider(Protocol):
    """Supplies the bearer token for backend requests."""

    def get_token(self) -> str | None: ...


class StaticCredentials:
    """Fixed token, mostly for tests and scripts."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token


class SettingsCredentials:
    """Reads the token from loaded settings on every request."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get_token(self) -> str | None:
        token = (self._settings.api_token or "").strip()
        return token or None
