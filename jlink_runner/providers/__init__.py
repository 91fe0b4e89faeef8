"""
Tool providers: named tools that run with output written to caller-supplied streams.

Providers are loaded at runtime and looked up by name.
"""

from jlink_runner.providers.api import ToolProvider, check_provider
from jlink_runner.providers.loader import ProviderLoadResult, load_providers
from jlink_runner.providers.registry import ToolProviderRegistry

__all__ = ["ToolProvider", "ToolProviderRegistry", "ProviderLoadResult", "check_provider", "load_providers"]
