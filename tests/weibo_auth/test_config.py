import pytest
from pydantic import ValidationError

from weibo_auth.config import load_weibo_config, resolve_env_var
from weibo_auth.models import WEIBO_AUTH_URL, WEIBO_TOKEN_URL, WeiboAuthConfigModel


def test_config_defaults_apply_when_fields_absent() -> None:
    config = WeiboAuthConfigModel(
        client_id="cid", client_secret="secret", callback_url="https://cb"
    )
    assert config.auth_url == WEIBO_AUTH_URL
    assert config.token_url == WEIBO_TOKEN_URL
    assert config.scope_separator == ","
    assert config.scope is None


def test_config_explicit_none_counts_as_absent() -> None:
    config = WeiboAuthConfigModel.model_validate(
        {
            "client_id": "cid",
            "client_secret": "secret",
            "callback_url": "https://cb",
            "auth_url": None,
            "token_url": None,
            "scope_separator": None,
        }
    )
    assert config.auth_url == WEIBO_AUTH_URL
    assert config.token_url == WEIBO_TOKEN_URL
    assert config.scope_separator == ","


def test_config_rejects_unknown_fields_and_is_frozen() -> None:
    with pytest.raises(ValidationError):
        WeiboAuthConfigModel.model_validate(
            {"client_id": "cid", "client_secret": "s", "callback_url": "https://cb", "foo": 1}
        )
    config = WeiboAuthConfigModel(client_id="cid", client_secret="s", callback_url="https://cb")
    with pytest.raises(ValidationError):
        config.client_id = "other"  # type: ignore[misc]


def test_resolve_env_var() -> None:
    env = {"APP_KEY": "123456"}
    assert resolve_env_var("${APP_KEY}", env) == "123456"
    assert resolve_env_var("key-${APP_KEY}-x", env) == "key-123456-x"
    assert resolve_env_var("plain", env) == "plain"
    with pytest.raises(ValueError, match="MISSING"):
        resolve_env_var("${MISSING}", env)


def test_load_weibo_config_from_mapping_resolves_references() -> None:
    config = load_weibo_config(
        {
            "client_id": "${WEIBO_KEY}",
            "client_secret": "${WEIBO_SECRET}",
            "callback_url": "https://example.net/auth/weibo/callback",
        },
        environ={"WEIBO_KEY": "k", "WEIBO_SECRET": "s"},
    )
    assert config.client_id == "k"
    assert config.client_secret == "s"
    assert config.token_url == WEIBO_TOKEN_URL


def test_load_weibo_config_from_environment() -> None:
    config = load_weibo_config(
        environ={
            "WEIBO_CLIENT_ID": "k",
            "WEIBO_CLIENT_SECRET": "s",
            "WEIBO_CALLBACK_URL": "https://cb",
            "WEIBO_SCOPE": "email",
            "WEIBO_TOKEN_URL": "https://idp.test/token",
        }
    )
    assert config.client_id == "k"
    assert config.scope == "email"
    assert config.token_url == "https://idp.test/token"
    assert config.auth_url == WEIBO_AUTH_URL


def test_load_weibo_config_missing_credentials_fails() -> None:
    with pytest.raises(ValidationError):
        load_weibo_config(environ={"WEIBO_CLIENT_ID": "k"})
