"""Contracts and shared error types for the Weibo auth package."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .models import GrantResult, NormalizedProfile


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class HandshakeError(ProviderError):
    """Authorization-code exchange or token refresh failed."""


class OAuth2RequestError(ProviderError):
    """An authenticated API call could not be completed.

    Covers network failures, non-2xx statuses and Weibo error bodies
    (`{"error": ..., "error_code": ...}`).
    """

    def __init__(
        self,
        description: str,
        *,
        status_code: int = 502,
        error: str = "request_failed",
        error_code: int | None = None,
        data: Any = None,
    ):
        super().__init__(error, description, status_code=status_code)
        self.error_code = error_code
        self.data = data


class ProfileFetchError(ProviderError):
    """Wraps a transport/provider failure while fetching the user profile."""

    def __init__(self, description: str, cause: BaseException | None = None):
        status_code = cause.status_code if isinstance(cause, ProviderError) else 502
        super().__init__("profile_fetch_failed", description, status_code=status_code)
        self.cause = cause


class MalformedResponseError(ProviderError):
    """A Weibo response could not be parsed or did not have the expected shape."""

    def __init__(self, description: str, *, endpoint: str):
        super().__init__("malformed_response", description, status_code=502)
        self.endpoint = endpoint


class AuthenticationFailed(ProviderError):
    """The verify callback rejected the authenticated identity."""

    def __init__(self, description: str = "User rejected by verify callback"):
        super().__init__("access_denied", description, status_code=401)


class UnknownStrategyError(KeyError):
    """No strategy is registered under the requested provider name."""


@runtime_checkable
class OAuth2Transport(Protocol):
    """What a strategy needs from its OAuth2 client."""

    def authorization_url(
        self,
        *,
        state: str,
        scopes: Sequence[str] | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """Construct the provider authorize URL."""

    async def exchange_code(self, *, code: str) -> GrantResult:
        """Exchange an authorization code for provider tokens."""

    async def refresh_token(self, *, refresh_token: str) -> GrantResult:
        """Refresh provider tokens."""

    async def get(self, url: str, access_token: str) -> str:
        """Perform an authenticated GET and return the raw body."""


@runtime_checkable
class IdentityStrategy(Protocol):
    """Interface host applications depend on for any identity provider."""

    provider_name: str

    def authorization_url(
        self,
        *,
        state: str,
        scopes: Sequence[str] | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """Return the URL the user agent should be redirected to."""

    async def authenticate(self, *, code: str, request: Any = None) -> Any:
        """Complete the handshake and return the verified user."""

    async def user_profile(self, access_token: str) -> NormalizedProfile:
        """Fetch and normalize the profile for an access token."""


__all__ = [
    "AuthenticationFailed",
    "HandshakeError",
    "IdentityStrategy",
    "MalformedResponseError",
    "OAuth2RequestError",
    "OAuth2Transport",
    "ProfileFetchError",
    "ProviderError",
    "UnknownStrategyError",
]
