from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Tuple

from .exceptions import ConfigurationError


def normalize(value: str | None) -> str | None:
    """
    Trim leading and trailing whitespace.

    Returns None if the trimmed string is empty, so blank values read as missing.
    """
    if value is None:
        return None
    value = value.strip()
    return value or None


def unique(items: Iterable[str]) -> Iterator[str]:
    """Yield each item once, in order of first occurrence."""
    seen = set()
    for item in items:
        if item not in seen:
            seen.add(item)
            yield item


def to_str(value: Any) -> str:
    """Convert a scalar to its stored string form (booleans become 'true'/'false')."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten(data: Mapping[str, Any], sep: str = ".") -> Iterator[Tuple[str, str]]:
    """
    Flatten a nested mapping into (dotted key, string value) pairs.

      {"db": {"host": "localhost", "port": 5432}}

    yields

      ("db.host", "localhost"), ("db.port", "5432")

    None values are skipped. Lists are stored as their comma separated items.
    """
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            for child_key, child_value in flatten(value, sep):
                yield f"{key}{sep}{child_key}", child_value
        elif isinstance(value, (list, tuple)):
            yield str(key), ",".join(to_str(v) for v in value)
        else:
            yield str(key), to_str(value)


def unflatten(items: Iterable[Tuple[str, str]], sep: str = ".") -> Dict[str, Any]:
    """
    Build a nested mapping from dotted keys, the inverse of flatten().

    :raises ConfigurationError: if a key has an empty segment ("a..b", ".x")
        or is both a leaf and a parent ("a" and "a.b"), since neither can be
        represented in a nested mapping.
    """
    result: Dict[str, Any] = {}
    for key, value in items:
        parts = key.split(sep)
        if not all(parts):
            raise ConfigurationError(
                f"Cannot nest key {key!r}: it contains an empty segment."
            )

        current = result
        for index, part in enumerate(parts[:-1]):
            child = current.setdefault(part, {})
            if not isinstance(child, dict):
                parent = sep.join(parts[: index + 1])
                raise ConfigurationError(
                    f"Cannot nest key {key!r}: {parent!r} already holds a value."
                )
            current = child

        if parts[-1] in current:
            raise ConfigurationError(
                f"Cannot nest key {key!r}: it is also the parent of other keys."
            )
        current[parts[-1]] = value
    return result
