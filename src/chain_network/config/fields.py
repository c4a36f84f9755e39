"""Field access for loosely-typed config objects.

Config files come in more than one casing, so every field is looked up
under a list of aliases. Container fields are shape-checked here so that a
malformed file fails as a ``NetworkParseError`` naming the field.
"""

from __future__ import annotations

from typing import Any, Mapping


class NetworkConfigError(Exception):
    """Raised when a network configuration cannot be built."""


class NetworkParseError(NetworkConfigError, ValueError):
    """Raised when config input is not valid structured data."""


def first_present(config: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-null value found under any of ``keys``."""
    for key in keys:
        value = config.get(key)
        if value is not None:
            return value
    return default


def as_list(value: Any, field_name: str) -> list[Any]:
    if not isinstance(value, list):
        raise NetworkParseError(
            f"{field_name} must be a list, got {type(value).__name__}"
        )
    return list(value)


def as_dict(value: Any, field_name: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise NetworkParseError(
            f"{field_name} must be an object, got {type(value).__name__}"
        )
    return dict(value)
