from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, List

from .exceptions import ImmutableStoreError, InvalidArgumentError
from .validation import check_key
from .values import GetValue, SetValue


class Store(ABC):
    """
    Abstract base class for string keyed, string valued configuration stores.

    The public methods validate the key and then call the trusted hooks
    `_contains`, `_get` and `_set`, which subclasses implement. A value of
    None means "not present"; setting a key to None removes it.

    Stores compose without copying data:

        defaults = MapStore({"db.host": "localhost", "db.port": "5432"})
        local = FileStore("config.local.json", optional=True).load()

        cfg = concat(local, defaults)       # first store containing a key wins
        db = cfg.prefix("db.")              # db.get_value("host")
        port = db.get("port").as_int()
    """

    @staticmethod
    def concat(*stores: Store | None) -> Store | None:
        """Shortcut for kvconf.concat()."""
        return concat(*stores)

    # public, validated API

    def get(self, key: str) -> GetValue:
        """Return a GetValue accessor which converts the value stored for key."""
        return GetValue(self.get_value(key), key)

    def get_value(self, key: str) -> str | None:
        """Return the value for key, or None if the key is not present."""
        return self._get(check_key(key))

    def contains(self, key: str) -> bool:
        """Return True if the store holds a value for key."""
        return self._contains(check_key(key))

    def set(self, key: str) -> SetValue:
        """Return a SetValue builder which converts a value and stores it for key."""
        return SetValue(self, check_key(key))

    def set_value(self, key: str, value: str | None) -> Store:
        """
        Set the value of a key.

        :param key: Non-empty key.
        :param value: The value. If None, the key is removed.
        :returns: this store.
        :raises ImmutableStoreError: if the store is immutable.
        """
        check_key(key)
        if value is not None and not isinstance(value, str):
            raise InvalidArgumentError(
                f"Value for {key!r} must be a string, got {type(value).__name__}. "
                "Use set(key).to(value) to convert other types."
            )
        self._set(key, value)
        return self

    def remove(self, key: str) -> Store:
        """Remove a key. Shortcut for set_value(key, None)."""
        return self.set_value(key, None)

    @abstractmethod
    def clear(self) -> Store:
        """Remove all keys and return this store."""
        raise NotImplementedError

    def prefix(self, prefix: str) -> Store:
        """
        Return a store scoped to the keys starting with prefix.

            assert s.get_value("one.two") == s.prefix("one.").get_value("two")
        """
        from .prefix import PrefixStore

        return PrefixStore.of(self, prefix)

    def immutable(self) -> Store:
        """Return a read-only view of this store (or the store itself if already immutable)."""
        from .proxy import ImmutableStore

        return ImmutableStore.of(self)

    @property
    @abstractmethod
    def is_immutable(self) -> bool:
        """True if every mutating call on this store raises ImmutableStoreError."""
        raise NotImplementedError

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Return a lazy iterator over the keys known to this store, in no guaranteed order."""
        raise NotImplementedError

    # hooks, called with validated keys

    @abstractmethod
    def _contains(self, key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def _get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def _set(self, key: str, value: str | None) -> None:
        raise NotImplementedError

    @abstractmethod
    def describe(self, parts: List[str]) -> None:
        """Append a short structural description of this store to parts."""
        raise NotImplementedError

    def _immutable_error(self) -> ImmutableStoreError:
        return ImmutableStoreError("immutable")

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def __str__(self) -> str:
        parts: List[str] = []
        self.describe(parts)
        return "Store[" + "".join(parts) + "]"

    __repr__ = __str__


def concat(*stores: Store | None) -> Store | None:
    """
    Combine stores so that a lookup returns the value of the first store
    which contains the key.

    None entries are skipped: concat(a, None) is a, concat(None, None) is
    None, and a single store is returned as is. The result of combining two
    or more stores is immutable.
    """
    if not stores:
        return None
    if len(stores) == 1:
        return stores[0]
    if len(stores) == 2:
        first, second = stores
        if first is None:
            return second
        if second is None:
            return first
        from .concat import ConcatStore

        return ConcatStore(first, second)

    result = stores[0]
    for store in stores[1:]:
        result = concat(result, store)
    return result
