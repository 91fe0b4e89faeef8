from __future__ import annotations

from typing import Any, Protocol, Sequence, TextIO


class ToolProvider(Protocol):
    """
    A named tool that can be run with its output written to caller-supplied streams.

    A provider must:
    - expose the tool name it answers to (e.g. "jlink")
    - report whether it can run in this environment
    - run the tool with the given arguments and return its exit code
    """

    name: str

    def is_available(self) -> tuple[bool, str | None]: ...

    def run(self, out: TextIO, err: TextIO, args: Sequence[str]) -> int: ...


def check_provider(obj: Any) -> ToolProvider:
    """Raise ValueError unless obj has the shape of a ToolProvider."""
    name = getattr(obj, "name", None)
    if not isinstance(name, str) or not name:
        raise ValueError(f"Tool provider is missing required attribute 'name': {obj!r}")
    for method in ("is_available", "run"):
        if not callable(getattr(obj, method, None)):
            raise ValueError(f"Tool provider {name} must define {method}()")
    return obj
