from __future__ import annotations

import logging
from typing import Iterator, List

from .proxy import ProxyStore
from .store import Store
from .utils import unique
from .validation import check_not_empty, check_not_none

logger = logging.getLogger(__name__)


class PrefixStore(ProxyStore):
    """
    A store scoped to the keys of the wrapped store which start with prefix.

    Key "k" of the prefix store is key prefix + "k" of the wrapped store.
    Use PrefixStore.of() (or Store.prefix()) to create instances: it folds
    nested prefix stores into one, so that

        base.prefix("a.").prefix("b.")

    is a single PrefixStore over base with prefix "b.a.".
    """

    @classmethod
    def of(cls, wrapped: Store, prefix: str) -> PrefixStore:
        check_not_none(wrapped, "wrapped")
        check_not_empty(prefix, "prefix")
        if isinstance(wrapped, PrefixStore):
            logger.debug(f"Folding prefix {prefix!r} into {wrapped.prefix_str!r}")
            prefix = prefix + wrapped.prefix_str
            wrapped = wrapped.wrapped
        return cls(wrapped, prefix)

    def __init__(self, wrapped: Store, prefix: str):
        super().__init__(wrapped)
        self._prefix = check_not_empty(prefix, "prefix")

    @property
    def prefix_str(self) -> str:
        return self._prefix

    def _full_key(self, key: str) -> str:
        return self._prefix + key

    def _contains(self, key: str) -> bool:
        return self._wrapped._contains(self._full_key(key))

    def _get(self, key: str) -> str | None:
        return self._wrapped._get(self._full_key(key))

    def _set(self, key: str, value: str | None) -> None:
        self._wrapped._set(self._full_key(key), value)

    def keys(self) -> Iterator[str]:
        size = len(self._prefix)
        return unique(
            key[size:]
            for key in self._wrapped.keys()
            if len(key) > size and key.startswith(self._prefix)
        )

    def describe_self(self, parts: List[str]) -> None:
        parts.append(f'"{self._prefix}"')
