"""Weibo identity strategy.

Authenticates users against Weibo with the OAuth 2.0 authorization-code flow
and normalizes the Weibo profile for the host application.

The host supplies a ``verify`` callback which receives ``access_token``,
``refresh_token`` and the :class:`NormalizedProfile`, and returns the
application user (or ``None``/``False`` to reject the login):

    strategy = WeiboStrategy(
        {
            "client_id": "app key",
            "client_secret": "app secret",
            "callback_url": "https://www.example.net/auth/weibo/callback",
        },
        verify=lambda access_token, refresh_token, profile: users.find_or_create(profile),
    )
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Annotated, Any

import httpx
from pydantic import ConfigDict, StrictInt, StringConstraints, ValidationError

from .contracts import (
    AuthenticationFailed,
    MalformedResponseError,
    OAuth2RequestError,
    OAuth2Transport,
    ProfileFetchError,
)
from .models import (
    AuthBaseModel,
    GrantResult,
    NormalizedProfile,
    ProfileName,
    ProfileValue,
    WeiboAuthConfigModel,
)
from .oauth2 import OAuth2Client

logger = logging.getLogger(__name__)

WEIBO_API_URL = "https://api.weibo.com/2"
UID_URL = f"{WEIBO_API_URL}/account/get_uid.json"
USER_SHOW_URL = f"{WEIBO_API_URL}/users/show.json"
EMAIL_URL = f"{WEIBO_API_URL}/account/profile/email.json"
PROFILE_BASE_URL = "http://weibo.com/"

# Email endpoint statuses meaning "the app lacks the email permission".
_EMAIL_NOT_PERMITTED = {401, 403}

# Sync or async; called as verify([request,] access_token, refresh_token, profile).
VerifyCallback = Callable[..., Any]


class _WeiboUidResponse(AuthBaseModel):
    """`account/get_uid` response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Weibo UIDs are numeric; bools and free-form strings are rejected.
    uid: StrictInt | Annotated[str, StringConstraints(pattern=r"^\d+$")]


class _WeiboUserResponse(AuthBaseModel):
    """Minimal `users/show` response used to normalize the profile."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int | str
    name: str
    screen_name: str
    gender: str | None = None
    profile_url: str = ""
    profile_image_url: str | None = None


class _WeiboEmailResponse(AuthBaseModel):
    """`account/profile/email` response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    email: str | None = None


class WeiboStrategy:
    """Weibo OAuth2 strategy built on a composed OAuth2 client."""

    provider_name = "weibo"

    def __init__(
        self,
        config: WeiboAuthConfigModel | Mapping[str, Any],
        verify: VerifyCallback,
        *,
        oauth2: OAuth2Transport | None = None,
        pass_request: bool = False,
    ):
        if not isinstance(config, WeiboAuthConfigModel):
            config = WeiboAuthConfigModel.model_validate(dict(config))
        self.config = config
        self._verify = verify
        self._pass_request = pass_request
        self._oauth2 = oauth2 or OAuth2Client(config, provider_name=self.provider_name)

    @property
    def oauth2(self) -> OAuth2Transport:
        return self._oauth2

    def authorization_url(
        self,
        *,
        state: str,
        scopes: Sequence[str] | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        return self._oauth2.authorization_url(state=state, scopes=scopes, extra_params=extra_params)

    async def authenticate(self, *, code: str, request: Any = None) -> Any:
        """Exchange ``code`` for tokens, load the profile and run ``verify``.

        Returns whatever ``verify`` returns. Handshake, fetch and parse errors
        propagate as :class:`ProviderError` subclasses; errors raised by
        ``verify`` propagate unchanged.
        """
        grant: GrantResult = await self._oauth2.exchange_code(code=code)
        profile = await self.user_profile(grant.access_token)

        args: tuple[Any, ...] = (grant.access_token, grant.refresh_token, profile)
        if self._pass_request:
            args = (request, *args)
        user = self._verify(*args)
        if inspect.isawaitable(user):
            user = await user

        if user is None or user is False:
            logger.info(
                "authenticate: verify callback rejected user",
                extra={"provider": self.provider_name, "user_id": profile.id},
            )
            raise AuthenticationFailed()
        logger.info(
            "authenticate: user verified",
            extra={"provider": self.provider_name, "user_id": profile.id},
        )
        return user

    async def user_profile(self, access_token: str) -> NormalizedProfile:
        """Retrieve the Weibo profile for ``access_token``.

        The UID lookup comes first; the `users/show` and email lookups both
        depend only on the UID and token, so they are issued together.
        """
        try:
            uid_body = await self._oauth2.get(UID_URL, access_token)
        except OAuth2RequestError as exc:
            raise ProfileFetchError("failed to fetch user profile", exc) from exc

        uid = _parse(_WeiboUidResponse, uid_body, endpoint="account/get_uid").uid
        logger.debug("user_profile: resolved uid", extra={"provider": self.provider_name})

        show_url = str(httpx.URL(USER_SHOW_URL, params={"uid": str(uid)}))
        tasks = [
            asyncio.ensure_future(self._get_or_wrap(show_url, access_token)),
            asyncio.ensure_future(self._fetch_email(access_token)),
        ]
        try:
            user_body, email_body = await asyncio.gather(*tasks)
        except Exception:
            # One lookup failed; stop the other before surfacing the error.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        user_json = _load_object(user_body, endpoint="users/show")
        user = _validate(_WeiboUserResponse, user_json, endpoint="users/show")

        email: str | None = None
        if email_body is not None:
            email = _parse(_WeiboEmailResponse, email_body, endpoint="account/profile/email").email

        return NormalizedProfile(
            provider=self.provider_name,
            id=str(user.id),
            username=user.name,
            display_name=user.screen_name,
            # Weibo profiles have no family/given name split.
            name=ProfileName(),
            gender=user.gender,
            profile_url=PROFILE_BASE_URL + user.profile_url,
            emails=[ProfileValue(value=email)] if email else [],
            photos=[ProfileValue(value=user.profile_image_url)] if user.profile_image_url else [],
            raw=user_body,
            raw_json=user_json,
            raw_email=email_body,
        )

    # ── helpers ──────────────────────────────────────────────────────────────
    async def _get_or_wrap(self, url: str, access_token: str) -> str:
        try:
            return await self._oauth2.get(url, access_token)
        except OAuth2RequestError as exc:
            raise ProfileFetchError("failed to fetch user profile", exc) from exc

    async def _fetch_email(self, access_token: str) -> str | None:
        try:
            return await self._oauth2.get(EMAIL_URL, access_token)
        except OAuth2RequestError as exc:
            if exc.status_code in _EMAIL_NOT_PERMITTED:
                logger.warning(
                    "Weibo email endpoint refused; continuing without email",
                    extra={
                        "provider": self.provider_name,
                        "endpoint": "account/profile/email",
                        "status_code": exc.status_code,
                        "provider_error": exc.error_code,
                    },
                )
                return None
            raise ProfileFetchError("failed to fetch user email", exc) from exc


def _load_object(body: str, *, endpoint: str) -> dict[str, Any]:
    try:
        payload = json.loads(body)
    except ValueError as exc:
        logger.warning(
            "Weibo endpoint returned invalid JSON",
            extra={"provider": "weibo", "endpoint": endpoint},
        )
        raise MalformedResponseError(
            f"Weibo {endpoint} response was not valid JSON", endpoint=endpoint
        ) from exc
    if not isinstance(payload, dict):
        logger.warning(
            "Weibo endpoint returned non-object JSON",
            extra={"provider": "weibo", "endpoint": endpoint},
        )
        raise MalformedResponseError(
            f"Weibo {endpoint} response was not a JSON object", endpoint=endpoint
        )
    return payload


def _validate(model: type[Any], payload: dict[str, Any], *, endpoint: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Weibo {endpoint} response was invalid", endpoint=endpoint
        ) from exc


def _parse(model: type[Any], body: str, *, endpoint: str) -> Any:
    return _validate(model, _load_object(body, endpoint=endpoint), endpoint=endpoint)


__all__ = ["EMAIL_URL", "UID_URL", "USER_SHOW_URL", "VerifyCallback", "WeiboStrategy"]
