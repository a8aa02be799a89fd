"""Pydantic models for the Weibo auth package.

These types cover provider configuration, token grants and the normalized
profile handed to verify callbacks.

## Security-relevant configuration fields

- `callback_url`: where Weibo redirects after authorization; must match the
  redirect URI registered for the Weibo app.
- `scope`: affects which permissions are requested from Weibo. The email
  endpoint only answers when the app has been granted the email permission.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

WEIBO_AUTH_URL = "https://api.weibo.com/oauth2/authorize"
WEIBO_TOKEN_URL = "https://api.weibo.com/oauth2/access_token"
DEFAULT_SCOPE_SEPARATOR = ","

_FIELD_DEFAULTS = {
    "auth_url": WEIBO_AUTH_URL,
    "token_url": WEIBO_TOKEN_URL,
    "scope_separator": DEFAULT_SCOPE_SEPARATOR,
}


class AuthBaseModel(BaseModel):
    """Base model for all models in this package.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable so they can be shared across requests
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class WeiboAuthConfigModel(AuthBaseModel):
    """Weibo OAuth provider configuration.

    `client_id` is the Weibo app key and `client_secret` the app secret.
    Endpoint URLs and the scope separator fall back to the fixed Weibo values
    when they are absent; explicit values are used verbatim.
    """

    client_id: str
    client_secret: str
    callback_url: str
    auth_url: str = WEIBO_AUTH_URL
    token_url: str = WEIBO_TOKEN_URL
    scope_separator: str = DEFAULT_SCOPE_SEPARATOR
    scope: str | None = None

    @field_validator("auth_url", "token_url", "scope_separator", mode="before")
    @classmethod
    def _default_when_missing(cls, value: Any, info: ValidationInfo) -> Any:
        # An explicit None counts as absent.
        if value is None:
            return _FIELD_DEFAULTS[info.field_name]
        return value


class GrantResult(AuthBaseModel):
    """Result of exchanging or refreshing a grant with Weibo."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None
    uid: str | None = None
    scopes_granted: list[str] | None = None
    token_type: str = "Bearer"
    raw: dict[str, Any] | None = None


class ProfileValue(AuthBaseModel):
    """Single entry of a profile's `emails` or `photos` sequence."""

    value: str


class ProfileName(AuthBaseModel):
    """Name parts; Weibo has no family/given name split so these stay empty."""

    family_name: str | None = None
    given_name: str | None = None
    middle_name: str | None = None


class NormalizedProfile(AuthBaseModel):
    """Provider-neutral user profile built from Weibo responses."""

    provider: str = "weibo"
    id: str
    username: str
    display_name: str
    name: ProfileName = Field(default_factory=ProfileName)
    gender: str | None = None
    profile_url: str
    emails: list[ProfileValue] = Field(default_factory=list)
    photos: list[ProfileValue] = Field(default_factory=list)
    raw: str  # users/show body as received
    raw_json: dict[str, Any]
    raw_email: str | None = None  # email body as received

    @property
    def email(self) -> str | None:
        return self.emails[0].value if self.emails else None

    def to_passport_dict(self) -> dict[str, Any]:
        """Render the camelCase profile shape generic auth middleware expects."""
        return {
            "provider": self.provider,
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "name": self.name.model_dump(exclude_none=True),
            "gender": self.gender,
            "profileUrl": self.profile_url,
            "emails": [item.model_dump() for item in self.emails],
            "photos": [item.model_dump() for item in self.photos],
            "_raw": self.raw,
            "_json": dict(self.raw_json),
        }
