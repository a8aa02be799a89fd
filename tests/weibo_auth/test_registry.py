import pytest

from weibo_auth.contracts import IdentityStrategy, UnknownStrategyError
from weibo_auth.registry import StrategyRegistry
from weibo_auth.strategy import WeiboStrategy
from tests.weibo_auth.weibo_testkit import FakeOAuth2Transport


def _strategy() -> WeiboStrategy:
    return WeiboStrategy(
        {"client_id": "cid", "client_secret": "secret", "callback_url": "https://cb"},
        lambda *args: None,
        oauth2=FakeOAuth2Transport(),
    )


def test_weibo_strategy_satisfies_identity_strategy_protocol() -> None:
    assert isinstance(_strategy(), IdentityStrategy)


def test_register_uses_provider_name_by_default() -> None:
    registry = StrategyRegistry()
    strategy = _strategy()

    assert registry.register(strategy) == "weibo"
    assert "weibo" in registry
    assert registry.get("weibo") is strategy
    assert registry.names() == ["weibo"]
    assert len(registry) == 1


def test_register_under_explicit_name() -> None:
    registry = StrategyRegistry()
    registry.register(_strategy(), name="weibo-mobile")

    assert "weibo" not in registry
    assert registry.get("weibo-mobile").provider_name == "weibo"


def test_register_replaces_existing_entry() -> None:
    registry = StrategyRegistry()
    first, second = _strategy(), _strategy()
    registry.register(first)
    registry.register(second)

    assert registry.get("weibo") is second
    assert len(registry) == 1


def test_get_unknown_name_raises() -> None:
    registry = StrategyRegistry()
    with pytest.raises(UnknownStrategyError):
        registry.get("weibo")


def test_unregister() -> None:
    registry = StrategyRegistry()
    registry.register(_strategy())
    registry.unregister("weibo")

    assert "weibo" not in registry
    with pytest.raises(UnknownStrategyError):
        registry.unregister("weibo")
