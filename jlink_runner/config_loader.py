from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from json import JSONDecodeError

from jlink_runner.errors import ConfigError
from jlink_runner.toolchain import Toolchain
from jlink_runner.util import expand_path, xdg_config_home

TOOLCHAINS_ENV = "JLINK_RUNNER_TOOLCHAINS"
_SUFFIXES = (".toml", ".json", ".yaml", ".yml")
SUPPORTED_VERSIONS = (1,)


@dataclass(frozen=True)
class LoadedToolchains:
    path: Path
    toolchains: list[Toolchain]


def _require_str(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{what}' must be a non-empty string")
    return value


def _as_table_list(value: Any, *, what: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list) and all(isinstance(x, dict) for x in value):
        return value
    raise ConfigError(f"'{what}' must be a table or array-of-tables")


def _toolchain_from_table(t: dict[str, Any], *, index: int, base_dir: Path) -> Toolchain:
    where = f"toolchain entry {index}"
    type_ = t.get("type", "jdk")
    _require_str(type_, what=f"{where}: type")

    home = t.get("jdk_home") or t.get("jdkHome")
    if home is None:
        cfg = t.get("configuration")
        if isinstance(cfg, dict):
            home = cfg.get("jdk_home") or cfg.get("jdkHome")
    _require_str(home, what=f"{where}: jdk_home")
    jdk_home = expand_path(home)
    if not jdk_home.is_absolute():
        jdk_home = base_dir / jdk_home

    provides_raw = t.get("provides", {})
    if not isinstance(provides_raw, dict):
        raise ConfigError(f"{where}: 'provides' must be a table")
    provides: dict[str, str] = {}
    for key, value in provides_raw.items():
        # TOML/YAML happily parse `version = 17` as an int.
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ConfigError(f"{where}: provides.{key} must be a string")
        provides[str(key)] = str(value)

    return Toolchain(type=type_, jdk_home=jdk_home, provides=provides)


def _normalize_top_level(obj: Any, path: Path) -> list[Toolchain]:
    if isinstance(obj, list):
        tables = _as_table_list(obj, what="toolchains")
    elif isinstance(obj, dict):
        version = obj.get("version")
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise ConfigError("'version' must be an integer if present")
        if version is not None and version not in SUPPORTED_VERSIONS:
            raise ConfigError(f"Unsupported toolchains file version {version} (supported: 1)")
        extra_keys = set(obj.keys()) - {"version", "toolchain", "toolchains"}
        if extra_keys:
            extra = ", ".join(sorted(extra_keys))
            raise ConfigError(f"Unknown top-level keys (found: {extra}).")
        if "toolchain" in obj and "toolchains" in obj:
            raise ConfigError("Use either 'toolchain' or 'toolchains', not both")
        raw = obj.get("toolchains", obj.get("toolchain"))
        tables = _as_table_list(raw, what="toolchains")
    else:
        raise ConfigError("Config must be a list of toolchains or {version, toolchains:[...]}.")

    base_dir = path.parent
    return [_toolchain_from_table(t, index=i, base_dir=base_dir) for i, t in enumerate(tables, start=1)]


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    # TOML parsing is in stdlib as of Python 3.11. On older Pythons, tomli is a declared dependency.
    try:
        import tomllib  # type: ignore
    except ImportError:  # pragma: no cover
        import tomli as tomllib  # type: ignore
    try:
        return tomllib.loads(text)
    except Exception as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    try:
        import yaml  # type: ignore
    except ImportError as e:
        raise ConfigError(
            "YAML toolchains support requires PyYAML. Install it (e.g. 'python -m pip install jlink-runner[yaml]') "
            f"and retry loading {path}."
        ) from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ConfigError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def load_toolchains_file(path: Path) -> LoadedToolchains:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Unable to read toolchains file {path}: {e}") from e
    suffix = path.suffix.lower()

    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
    else:
        raise ConfigError(
            f"Unsupported toolchains format for {path} (expected .json, .toml, .yaml, .yml)."
        )
    try:
        toolchains = _normalize_top_level(raw, path)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e
    return LoadedToolchains(path=path, toolchains=toolchains)


def default_toolchains_file() -> Path | None:
    base = xdg_config_home() / "jlink-runner"
    for suffix in _SUFFIXES:
        candidate = base / f"toolchains{suffix}"
        if candidate.is_file():
            return candidate
    return None


def find_toolchains_file(explicit: Path | None = None) -> Path | None:
    """
    Locate the toolchains file.

    Lookup order: explicit path, $JLINK_RUNNER_TOOLCHAINS, then
    ~/.config/jlink-runner/toolchains.{toml,json,yaml,yml}. An explicit or
    environment-provided path must exist; the default location is optional.
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Toolchains file not found: {explicit}")
        return explicit
    env = os.environ.get(TOOLCHAINS_ENV)
    if env:
        p = expand_path(env)
        if not p.is_file():
            raise ConfigError(f"Toolchains file from ${TOOLCHAINS_ENV} not found: {p}")
        return p
    return default_toolchains_file()
