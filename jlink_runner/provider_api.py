"""
Stable SDK for external tool providers.

A provider file placed in a providers directory imports from here only:

    from jlink_runner.provider_api import JdkToolProvider

    PROVIDER = JdkToolProvider(name="jlink")

Anything else under ``jlink_runner`` is internal.
"""

from __future__ import annotations

from jlink_runner.providers.api import ToolProvider, check_provider
from jlink_runner.providers.builtin import JdkToolProvider
from jlink_runner.util import RunResult, executable_name, sh_join

__all__ = [
    "ToolProvider",
    "check_provider",
    "JdkToolProvider",
    "RunResult",
    "executable_name",
    "sh_join",
]
