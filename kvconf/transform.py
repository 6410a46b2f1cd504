from __future__ import annotations

from typing import Callable, List

from .exceptions import InvalidArgumentError
from .proxy import ProxyStore
from .store import Store
from .utils import normalize


class TransformStore(ProxyStore):
    """
    A store which passes every value read from the wrapped store through fn.

    A key is contained only if the transformed value is not None, so a
    function that maps a value to None hides the key. Writes are forwarded
    unchanged.
    """

    @classmethod
    def norm(cls, wrapped: Store) -> TransformStore:
        """Wrap a store so that values are trimmed and blank values read as missing."""
        return cls(wrapped, normalize)

    def __init__(self, wrapped: Store, fn: Callable[[str], str | None]):
        super().__init__(wrapped)
        if not callable(fn):
            raise InvalidArgumentError("fn must be callable.")
        self._fn = fn

    def _contains(self, key: str) -> bool:
        return self._get(key) is not None

    def _get(self, key: str) -> str | None:
        value = self._wrapped._get(key)
        if value is not None:
            value = self._fn(value)
        return value

    def describe_self(self, parts: List[str]) -> None:
        parts.append("translate")
