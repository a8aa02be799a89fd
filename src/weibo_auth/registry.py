"""Explicit name-to-strategy registry for host applications."""

from __future__ import annotations

import logging

from .contracts import IdentityStrategy, UnknownStrategyError

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Holds the strategies a host application routes requests to by name.

    Strategies never register themselves; the host's wiring code does:

        registry = StrategyRegistry()
        registry.register(WeiboStrategy(config, verify))
        strategy = registry.get("weibo")
    """

    def __init__(self) -> None:
        self._strategies: dict[str, IdentityStrategy] = {}

    def register(self, strategy: IdentityStrategy, name: str | None = None) -> str:
        """Register ``strategy`` under ``name`` (its provider name by default).

        Re-registering a name replaces the previous strategy.
        """
        key = name or strategy.provider_name
        if not key:
            raise ValueError("Strategy must have a name")
        if key in self._strategies:
            logger.info("Replacing registered strategy", extra={"provider": key})
        self._strategies[key] = strategy
        return key

    def unregister(self, name: str) -> None:
        if self._strategies.pop(name, None) is None:
            raise UnknownStrategyError(name)

    def get(self, name: str) -> IdentityStrategy:
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name) from None

    def names(self) -> list[str]:
        return sorted(self._strategies)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)
