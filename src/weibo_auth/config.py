"""Building Weibo provider configuration from mappings and the environment."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any

from .models import WeiboAuthConfigModel

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

ENV_PREFIX = "WEIBO_"
_ENV_FIELDS = {
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "callback_url": "CALLBACK_URL",
    "auth_url": "AUTH_URL",
    "token_url": "TOKEN_URL",
    "scope": "SCOPE",
    "scope_separator": "SCOPE_SEPARATOR",
}


def resolve_env_var(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Resolve environment variable references in a string.

    Args:
        value: String potentially containing ${ENV_VAR} references
        environ: Environment to resolve against (defaults to os.environ)

    Returns:
        String with all environment variables resolved

    Raises:
        ValueError: If an environment variable is not set
    """
    env = os.environ if environ is None else environ
    matches = ENV_VAR_PATTERN.findall(value)
    if not matches:
        return value

    result = value
    for env_var in matches:
        if env_var not in env:
            raise ValueError(f"Environment variable {env_var} is not set")
        result = result.replace(f"${{{env_var}}}", env[env_var])

    return result


def load_weibo_config(
    data: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> WeiboAuthConfigModel:
    """Build a validated Weibo configuration.

    With ``data``, string values may reference ``${ENV_VAR}``s. Without it,
    fields are read from ``WEIBO_CLIENT_ID``, ``WEIBO_CLIENT_SECRET``,
    ``WEIBO_CALLBACK_URL`` and the optional ``WEIBO_AUTH_URL``,
    ``WEIBO_TOKEN_URL``, ``WEIBO_SCOPE`` and ``WEIBO_SCOPE_SEPARATOR``.
    Absent optional fields fall back to the Weibo defaults.
    """
    env = os.environ if environ is None else environ
    if data is None:
        values: dict[str, Any] = {
            field: env[ENV_PREFIX + suffix]
            for field, suffix in _ENV_FIELDS.items()
            if ENV_PREFIX + suffix in env
        }
    else:
        values = {
            key: resolve_env_var(value, env) if isinstance(value, str) else value
            for key, value in data.items()
        }
    return WeiboAuthConfigModel.model_validate(values)
