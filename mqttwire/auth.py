"""Pluggable authentication providers and a registry to select them by name."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AuthError(Exception):
    """Raised when authentication fails."""


class Authenticator(ABC):
    """A provider that checks a client's identity and credentials."""

    @abstractmethod
    def authenticate(self, user_id: str, credentials: Any) -> None:
        """Raise AuthError if the credentials are not accepted."""


class MockAuthenticator(Authenticator):
    """An authenticator that always succeeds or always fails."""

    def __init__(self, succeed: bool) -> None:
        self.succeed = succeed

    def authenticate(self, user_id: str, credentials: Any) -> None:
        """Accept everything when set to succeed, reject everything otherwise."""
        if not self.succeed:
            raise AuthError("auth: Authentication failure")


_providers: dict[str, Authenticator] = {}


def register(name: str, provider: Authenticator) -> None:
    """Register provider under name; a name may be registered only once."""
    if provider is None:
        raise ValueError("auth: register provider is None")
    if name in _providers:
        raise ValueError(f"auth: register called twice for provider {name}")
    _providers[name] = provider


def unregister(name: str) -> None:
    """Remove the provider registered under name, if any."""
    _providers.pop(name, None)


class AuthManager:
    """Authenticates clients through a provider chosen by name."""

    def __init__(self, provider_name: str) -> None:
        try:
            self._provider = _providers[provider_name]
        except KeyError:
            raise LookupError(f"auth: unknown provider {provider_name!r}") from None

    def authenticate(self, user_id: str, credentials: Any) -> None:
        """Delegate to the selected provider."""
        self._provider.authenticate(user_id, credentials)


register("mockSuccess", MockAuthenticator(True))
register("mockFailure", MockAuthenticator(False))