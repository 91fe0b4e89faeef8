from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from jlink_runner.errors import ConfigError
from jlink_runner.util import executable_name


@dataclass(frozen=True)
class Toolchain:
    type: str
    jdk_home: Path
    provides: Mapping[str, str] = field(default_factory=dict)

    def find_tool(self, name: str) -> Path | None:
        candidate = self.jdk_home / "bin" / executable_name(name)
        if candidate.is_file():
            return candidate
        return None

    def describe(self) -> str:
        pairs = ", ".join(f"{k}={v}" for k, v in sorted(self.provides.items()))
        return f"{self.type}[{pairs}] @ {self.jdk_home}"


_RANGE_RE = re.compile(r"^\s*([\[(])\s*([^,\s]*)\s*,\s*([^,\s\])]*)\s*([\])])\s*$")


def _version_key(v: str) -> tuple[int, ...]:
    parts: list[int] = []
    for piece in re.split(r"[.+_-]", v.strip()):
        if not piece.isdigit():
            break
        parts.append(int(piece))
    return tuple(parts)


def _compare(a: tuple[int, ...], b: tuple[int, ...]) -> int:
    # Missing trailing components count as zero: 17 == 17.0.0
    n = max(len(a), len(b))
    a = a + (0,) * (n - len(a))
    b = b + (0,) * (n - len(b))
    return (a > b) - (a < b)


def version_matches(requirement: str, provided: str) -> bool:
    """
    Match a provided JDK version against a requirement.

    A plain requirement matches component-wise as a prefix ("17" matches
    "17" and "17.0.2", not "1.7"). A bracketed range such as "[11,17)" or
    "[17,)" compares numerically with inclusive/exclusive bounds.
    """
    have = _version_key(provided)
    m = _RANGE_RE.match(requirement)
    if m is None:
        want = _version_key(requirement)
        if not want:
            return requirement.strip() == provided.strip()
        return have[: len(want)] == want
    if not have:
        return False

    lo_inclusive = m.group(1) == "["
    lo, hi = m.group(2), m.group(3)
    hi_inclusive = m.group(4) == "]"
    if lo:
        c = _compare(have, _version_key(lo))
        if c < 0 or (c == 0 and not lo_inclusive):
            return False
    if hi:
        c = _compare(have, _version_key(hi))
        if c > 0 or (c == 0 and not hi_inclusive):
            return False
    return True


class ToolchainManager:
    """
    Selects a configured toolchain by type and requirements.

    Toolchains are considered in configuration order; the first match wins.
    """

    def __init__(self, toolchains: Iterable[Toolchain]) -> None:
        self._toolchains = list(toolchains)

    @property
    def toolchains(self) -> list[Toolchain]:
        return list(self._toolchains)

    def select(self, type_: str, requirements: Mapping[str, str] | None = None) -> Toolchain | None:
        reqs = {k: v for k, v in (requirements or {}).items() if v is not None}
        for tc in self._toolchains:
            if tc.type != type_:
                continue
            if all(self._satisfies(tc, key, want) for key, want in reqs.items()):
                return tc
        return None

    def require(self, type_: str, requirements: Mapping[str, str] | None = None) -> Toolchain:
        tc = self.select(type_, requirements)
        if tc is None:
            wanted = ", ".join(f"{k}={v}" for k, v in sorted((requirements or {}).items()) if v is not None)
            raise ConfigError(f"No toolchain of type '{type_}' matches requirements: {wanted or '(none)'}")
        return tc

    @staticmethod
    def _satisfies(tc: Toolchain, key: str, want: str) -> bool:
        have = tc.provides.get(key)
        if have is None:
            return False
        if key == "version":
            return version_matches(want, have)
        return have == want
