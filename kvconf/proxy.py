from __future__ import annotations

from abc import abstractmethod
from typing import Iterator, List

from .backends import MapStore
from .store import Store
from .validation import check_not_none


class ProxyStore(Store):
    """
    Base class for stores which wrap exactly one other store.

    Every operation is forwarded to the wrapped store; subclasses override
    the hooks they change and supply `describe_self`.
    """

    def __init__(self, wrapped: Store):
        self._wrapped = check_not_none(wrapped, "wrapped")

    @property
    def wrapped(self) -> Store:
        return self._wrapped

    def _contains(self, key: str) -> bool:
        return self._wrapped._contains(key)

    def _get(self, key: str) -> str | None:
        return self._wrapped._get(key)

    def _set(self, key: str, value: str | None) -> None:
        self._wrapped._set(key, value)

    def keys(self) -> Iterator[str]:
        return self._wrapped.keys()

    @property
    def is_immutable(self) -> bool:
        return self._wrapped.is_immutable

    def clear(self) -> Store:
        self._wrapped.clear()
        return self

    def describe(self, parts: List[str]) -> None:
        self.describe_self(parts)
        parts.append("->")
        self._wrapped.describe(parts)

    @abstractmethod
    def describe_self(self, parts: List[str]) -> None:
        raise NotImplementedError


class ImmutableStore(ProxyStore):
    """A read-only view of another store. Reads pass through, writes raise ImmutableStoreError."""

    EMPTY: Store

    @classmethod
    def of(cls, store: Store) -> Store:
        """Wrap store, unless it is already immutable."""
        check_not_none(store, "wrapped")
        return store if store.is_immutable else cls(store)

    @property
    def is_immutable(self) -> bool:
        return True

    def _set(self, key: str, value: str | None) -> None:
        raise self._immutable_error()

    def clear(self) -> Store:
        raise self._immutable_error()

    def describe_self(self, parts: List[str]) -> None:
        parts.append("readonly")



ImmutableStore.EMPTY = ImmutableStore(MapStore())
