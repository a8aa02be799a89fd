"""Weibo OAuth 2.0 identity strategy.

Authenticates users against Weibo by delegating the authorization-code
handshake to an Authlib OAuth2 client, then loads the user's UID, profile and
email and normalizes them into a provider-neutral profile.

## Quick Example

```python
from weibo_auth import StrategyRegistry, WeiboStrategy

async def verify(access_token, refresh_token, profile):
    return await users.find_or_create(weibo_id=profile.id, email=profile.email)

registry = StrategyRegistry()
registry.register(
    WeiboStrategy(
        {
            "client_id": "app key",
            "client_secret": "app secret",
            "callback_url": "https://www.example.net/auth/weibo/callback",
        },
        verify,
    )
)

# Redirect the user agent:
url = registry.get("weibo").authorization_url(state=state)
# On callback:
user = await registry.get("weibo").authenticate(code=code)
```
"""

from .config import load_weibo_config, resolve_env_var
from .contracts import (
    AuthenticationFailed,
    HandshakeError,
    IdentityStrategy,
    MalformedResponseError,
    OAuth2RequestError,
    OAuth2Transport,
    ProfileFetchError,
    ProviderError,
    UnknownStrategyError,
)
from .models import (
    GrantResult,
    NormalizedProfile,
    ProfileName,
    ProfileValue,
    WeiboAuthConfigModel,
)
from .oauth2 import OAuth2Client
from .registry import StrategyRegistry
from .strategy import WeiboStrategy

__all__ = [
    "AuthenticationFailed",
    "GrantResult",
    "HandshakeError",
    "IdentityStrategy",
    "MalformedResponseError",
    "NormalizedProfile",
    "OAuth2Client",
    "OAuth2RequestError",
    "OAuth2Transport",
    "ProfileFetchError",
    "ProfileName",
    "ProfileValue",
    "ProviderError",
    "StrategyRegistry",
    "UnknownStrategyError",
    "WeiboAuthConfigModel",
    "WeiboStrategy",
    "load_weibo_config",
    "resolve_env_var",
]
