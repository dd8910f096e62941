"""Environment variable parsing shared by the ``from_env`` constructors."""

from __future__ import annotations

import os

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class EnvVarError(ValueError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, name: str, expected: str, raw: str) -> None:
        """Initialise with the variable name, expectation, and raw value."""
        self.name = name
        super().__init__(f"{name} must be {expected}, got: {raw!r}")


def env_str(name: str, default: str = "") -> str:
    """Return a stripped env var, or ``default`` when unset or blank."""
    value = os.environ.get(name, "").strip()
    return value or default


def env_bool(name: str, *, default: bool = False) -> bool:
    """Parse a boolean env var accepting ``1/true/yes/on`` and their negations."""
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise EnvVarError(name, "a boolean", raw)


def env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated env var, dropping empty items."""
    raw = os.environ.get(name, "")
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default
