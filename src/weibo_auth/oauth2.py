"""OAuth2 client used by the Weibo strategy.

A thin composition layer over Authlib's httpx-based `AsyncOAuth2Client`. It
owns nothing Weibo-specific beyond the configured endpoints: the
authorization-code exchange, refresh and bearer-authenticated GETs are all
Authlib's. This module only maps their outcomes onto the package's error types.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from .contracts import HandshakeError, OAuth2RequestError
from .models import GrantResult, WeiboAuthConfigModel

logger = logging.getLogger(__name__)


class OAuth2Client:
    """Generic OAuth2 client bound to one provider configuration."""

    def __init__(self, config: WeiboAuthConfigModel, *, provider_name: str = "weibo"):
        self.config = config
        self.provider_name = provider_name

    def authorization_url(
        self,
        *,
        state: str,
        scopes: Sequence[str] | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        scope = self.config.scope_separator.join(scopes) if scopes else self.config.scope
        return prepare_grant_uri(
            self.config.auth_url,
            client_id=self.config.client_id,
            response_type="code",
            redirect_uri=self.config.callback_url,
            scope=scope,
            state=state,
            **dict(extra_params or {}),
        )

    async def exchange_code(self, *, code: str) -> GrantResult:
        return await self._fetch_token(context="exchange_code", code=code)

    async def refresh_token(self, *, refresh_token: str) -> GrantResult:
        token = await self._fetch_token(
            context="refresh_token",
            grant_type="refresh_token",
            refresh_token=refresh_token,
        )
        if token.refresh_token is None:
            # Weibo does not rotate refresh tokens; keep the one we were given.
            token = token.model_copy(update={"refresh_token": refresh_token})
        return token

    async def get(self, url: str, access_token: str) -> str:
        """Perform an authenticated GET and return the body text.

        Weibo expects the token as the `access_token` query parameter, so the
        Authlib client places it in the URI rather than a header.
        """
        endpoint = _endpoint_name(url)
        try:
            async with self._create_client(
                token={"access_token": access_token, "token_type": "bearer"},
                token_placement="uri",
            ) as client:
                resp = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning(
                "Weibo API request failed",
                extra={"provider": self.provider_name, "endpoint": endpoint, "error": str(exc)},
            )
            raise OAuth2RequestError(f"Request to {endpoint} failed: {exc}") from exc

        body = resp.text
        error = _extract_error(body)
        if resp.status_code < 200 or resp.status_code >= 300 or error is not None:
            error_code = error.get("error_code") if error else None
            logger.warning(
                "Weibo API returned an error",
                extra={
                    "provider": self.provider_name,
                    "endpoint": endpoint,
                    "status_code": resp.status_code,
                    "provider_error": error_code,
                },
            )
            message = error.get("error") if error else None
            raise OAuth2RequestError(
                message or f"{endpoint} returned HTTP {resp.status_code}",
                status_code=resp.status_code if resp.status_code >= 400 else 502,
                error_code=error_code if isinstance(error_code, int) else None,
                data=error if error is not None else body,
            )
        return body

    # ── helpers ──────────────────────────────────────────────────────────────
    def _create_client(self, **kwargs: Any) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            **kwargs,
        )

    async def _fetch_token(self, *, context: str, **params: Any) -> GrantResult:
        try:
            async with self._create_client(
                redirect_uri=self.config.callback_url,
                token_endpoint_auth_method="client_secret_post",
            ) as client:
                token = await client.fetch_token(self.config.token_url, **params)
        except OAuthError as exc:
            logger.warning(
                "Weibo token endpoint returned OAuth error",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "context": context,
                    "provider_error": exc.error,
                },
            )
            raise HandshakeError(
                exc.error or "invalid_grant",
                exc.description or "Weibo token request failed",
                status_code=400,
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Weibo token endpoint returned non-200",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "context": context,
                    "status_code": exc.response.status_code,
                },
            )
            raise HandshakeError(
                "invalid_grant",
                "Weibo token request failed",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Weibo token request could not be completed",
                extra={"provider": self.provider_name, "endpoint": "token", "context": context},
            )
            raise HandshakeError(
                "invalid_grant",
                "Invalid token response payload",
                status_code=502,
            ) from exc

        return self._parse_token(token)

    def _parse_token(self, token: Mapping[str, Any]) -> GrantResult:
        access_token = token.get("access_token")
        if not access_token:
            raise HandshakeError("invalid_grant", "No access_token in response", status_code=400)

        expires_at = token.get("expires_at")
        expires_in = token.get("expires_in")
        if expires_at is None and expires_in is not None:
            expires_at = time.time() + float(expires_in)

        scope = token.get("scope")
        uid = token.get("uid")
        return GrantResult(
            access_token=str(access_token),
            refresh_token=token.get("refresh_token"),
            expires_at=float(expires_at) if expires_at is not None else None,
            uid=str(uid) if uid is not None else None,
            scopes_granted=(
                scope.split(self.config.scope_separator)
                if isinstance(scope, str) and scope
                else None
            ),
            token_type=token.get("token_type") or "Bearer",
            raw=dict(token),
        )


def _endpoint_name(url: str) -> str:
    path = httpx.URL(url).path
    return path.rsplit("/2/", 1)[-1] or path


def _extract_error(body: str) -> dict[str, Any] | None:
    """Best-effort detection of a Weibo error document."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if isinstance(payload, dict) and ("error_code" in payload or "error" in payload):
        return payload
    return None


__all__ = ["OAuth2Client"]
