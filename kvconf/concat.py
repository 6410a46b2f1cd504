from __future__ import annotations

from itertools import chain
from typing import Iterator, List, Tuple

from .exceptions import InvalidArgumentError
from .store import Store
from .utils import unique
from .validation import check_not_empty


class ConcatStore(Store):
    """
    An immutable store over an ordered sequence of stores.

    A lookup returns the value of the first store which contains the key, so
    earlier stores override later ones. keys() returns the union of all keys.
    """

    def __init__(self, *stores: Store):
        check_not_empty(stores, "stores")
        if any(store is None for store in stores):
            raise InvalidArgumentError("stores must not contain None.")
        self._stores: Tuple[Store, ...] = tuple(stores)

    @property
    def members(self) -> Tuple[Store, ...]:
        return self._stores

    def _contains(self, key: str) -> bool:
        return any(store._contains(key) for store in self._stores)

    def _get(self, key: str) -> str | None:
        for store in self._stores:
            value = store._get(key)
            if value is not None:
                return value
        return None

    @property
    def is_immutable(self) -> bool:
        return True

    def _set(self, key: str, value: str | None) -> None:
        raise self._immutable_error()

    def clear(self) -> Store:
        raise self._immutable_error()

    def keys(self) -> Iterator[str]:
        return unique(chain.from_iterable(store.keys() for store in self._stores))

    def describe(self, parts: List[str]) -> None:
        for index, store in enumerate(self._stores):
            if index:
                parts.append(" | ")
            store.describe(parts)
