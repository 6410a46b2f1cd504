from __future__ import annotations

from typing import Any, TypeVar

from .exceptions import InvalidArgumentError

T = TypeVar("T")


def check_not_none(value: T | None, what: str) -> T:
    """
    Reject a missing argument.

    :param value: Argument to check.
    :param what: Name of the argument, used in the error message.
    :raises InvalidArgumentError: if value is None.
    """
    if value is None:
        raise InvalidArgumentError(f"{what} must not be None.")
    return value


def check_not_empty(value: Any, what: str) -> Any:
    """
    Reject a missing or empty argument (string, sequence, ...).

    :raises InvalidArgumentError: if value is None or has zero length.
    """
    check_not_none(value, what)
    if len(value) == 0:
        raise InvalidArgumentError(f"{what} must not be empty.")
    return value


def check_key(key: str | None) -> str:
    """Return the key if it is a non-empty string, otherwise raise InvalidArgumentError."""
    check_not_none(key, "key")
    if not isinstance(key, str):
        raise InvalidArgumentError(f"key must be a string, got {type(key).__name__}.")
    return check_not_empty(key, "key")
