"""
Loading of tool providers from plugin directories.

A provider file is a plain ``*.py`` module defining ``PROVIDER`` or
``get_provider()``. Directory providers are placed ahead of the built-in JDK
lookup, so a provider named ``jlink`` replaces the JDK found on PATH.
"""

from __future__ import annotations

import importlib.util
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from jlink_runner.providers.api import ToolProvider, check_provider
from jlink_runner.providers.builtin import builtin_providers
from jlink_runner.util import split_env_paths, xdg_config_home

PROVIDERS_DIRS_ENV = "JLINK_RUNNER_PROVIDERS_DIRS"


@dataclass(frozen=True)
class ProviderLoadResult:
    providers: list[ToolProvider]
    errors: list[str]
    # "<tool> from <file>" for every directory provider that shadows a built-in one.
    overrides: list[str] = field(default_factory=list)


def discover_provider_dirs(explicit: Sequence[Path] = ()) -> list[Path]:
    """Explicit dirs, then $JLINK_RUNNER_PROVIDERS_DIRS, then the XDG providers dir if present."""
    dirs = list(explicit)
    dirs.extend(split_env_paths(os.environ.get(PROVIDERS_DIRS_ENV, "")))
    user_dir = xdg_config_home() / "jlink-runner" / "providers"
    if user_dir.is_dir():
        dirs.append(user_dir)
    return list(dict.fromkeys(d.expanduser().absolute() for d in dirs))


def _provider_from_file(py_file: Path) -> ToolProvider:
    module_name = f"jlink_runner_provider_{py_file.stem}_{abs(hash(str(py_file)))}"
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        raise ImportError("not a loadable module")
    mod = importlib.util.module_from_spec(spec)
    # dataclasses may consult sys.modules[__module__] while processing annotations.
    sys.modules[module_name] = mod
    try:
        spec.loader.exec_module(mod)
    except Exception:
        sys.modules.pop(module_name, None)
        raise

    provider = getattr(mod, "PROVIDER", None)
    if provider is None:
        get_provider = getattr(mod, "get_provider", None)
        if not callable(get_provider):
            raise ValueError("module must define PROVIDER or get_provider()")
        provider = get_provider()
    return check_provider(provider)


def load_providers(
    *,
    include_builtin: bool = True,
    provider_dirs: Sequence[Path] | None = None,
) -> ProviderLoadResult:
    """
    Load directory providers followed by the built-in providers.

    Broken provider files never abort the load; each one is reported in
    ``errors`` and skipped.
    """
    dirs = discover_provider_dirs(provider_dirs or ())
    builtins = builtin_providers() if include_builtin else []
    builtin_names = {p.name for p in builtins}

    providers: list[ToolProvider] = []
    errors: list[str] = []
    overrides: list[str] = []

    for d in dirs:
        if not d.is_dir():
            errors.append(f"Providers dir does not exist: {d}")
            continue
        for py_file in sorted(d.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            try:
                provider = _provider_from_file(py_file)
            except Exception as e:
                errors.append(f"Failed to load provider {py_file}: {e}")
                continue
            if provider.name in builtin_names:
                overrides.append(f"{provider.name} from {py_file}")
            providers.append(provider)

    providers.extend(builtins)
    return ProviderLoadResult(providers=providers, errors=errors, overrides=overrides)
