from __future__ import annotations

from typing import Iterable

from jlink_runner.providers.api import ToolProvider, check_provider


class ToolProviderRegistry:
    """
    Ordered collection of tool providers. Lookup returns the first available match.
    """

    def __init__(self, providers: Iterable[ToolProvider]) -> None:
        self._providers = [check_provider(p) for p in providers]

    @property
    def providers(self) -> list[ToolProvider]:
        return list(self._providers)

    def find_first(self, name: str) -> ToolProvider | None:
        for provider in self._providers:
            if provider.name != name:
                continue
            ok, _reason = provider.is_available()
            if ok:
                return provider
        return None

    def unavailable_reasons(self, name: str) -> list[str]:
        reasons: list[str] = []
        for provider in self._providers:
            if provider.name != name:
                continue
            ok, reason = provider.is_available()
            if not ok:
                reasons.append(f"{provider.__class__.__name__}: {reason or 'unknown reason'}")
        return reasons
