from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, TypeVar

from .exceptions import ConversionError
from .utils import to_str

if TYPE_CHECKING:  # pragma: no cover
    from .store import Store

T = TypeVar("T")


class GetValue:
    """
    Accessor for a raw string value read from a store.

    Converts the value on request, for example:

        port = store.get("db.port").as_int_or(5432)
        debug = store.get("app.debug").as_bool()

    Conversion errors raise ConversionError and name the key.
    """

    def __init__(self, value: str | None, key: str | None = None):
        self._value = value
        self._key = key

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def value(self) -> str | None:
        return self._value

    def value_or(self, default: str | None) -> str | None:
        return self._value if self._value is not None else default

    @property
    def is_none(self) -> bool:
        return self._value is None

    @property
    def is_empty(self) -> bool:
        return not self._value

    def not_none(self) -> GetValue:
        if self._value is None:
            raise ConversionError(f"{self._what()} is missing")
        return self

    def not_empty(self) -> GetValue:
        if not self._value:
            raise ConversionError(f"{self._what()} is missing or empty")
        return self

    def as_str(self) -> str:
        if self._value is None:
            raise ConversionError(f"{self._what()} is missing")
        return self._value

    def as_result(self, fn: Callable[[str | None], T]) -> T:
        """Apply fn to the raw value, wrapping any exception in ConversionError."""
        try:
            return fn(self._value)
        except Exception as exc:
            raise ConversionError(f"{self._what()} can't be converted: {exc}") from exc

    def as_bool(self, true_value: str = "true", false_value: str = "false") -> bool:
        value = self.as_str()
        if value == true_value:
            return True
        if value == false_value:
            return False
        raise ConversionError(
            f"{self._what()} is not a boolean ({true_value}/{false_value}): {value!r}"
        )

    def as_bool_or(self, default: bool) -> bool:
        return default if self.is_empty else self.as_bool()

    def as_int(self) -> int:
        return self._convert(int, "int")

    def as_int_or(self, default: int) -> int:
        return default if self.is_empty else self.as_int()

    def as_float(self) -> float:
        return self._convert(float, "float")

    def as_float_or(self, default: float) -> float:
        return default if self.is_empty else self.as_float()

    def as_path(self) -> Path | None:
        return Path(self._value).expanduser() if self._value is not None else None

    def as_split(self, sep: str = ",") -> List[str]:
        """Split the value on sep, dropping blank items. A missing value gives []."""
        if self._value is None:
            return []
        return [part.strip() for part in self._value.split(sep) if part.strip()]

    def _convert(self, fn: Callable[[str], T], type_name: str) -> T:
        value = self.as_str()
        try:
            return fn(value)
        except ValueError as exc:
            raise ConversionError(
                f"{self._what()} is not a valid {type_name}: {value!r}"
            ) from exc

    def _what(self) -> str:
        return f"value of {self._key!r}" if self._key else "value"

    def __repr__(self) -> str:
        return f"<GetValue key={self._key!r} value={self._value!r}>"


class SetValue:
    """
    Builder returned by Store.set(key); converts a value to its string form
    and stores it.

        store.set("app.debug").to(True)     # stored as "true"
        store.set("db.port").to(5432)       # stored as "5432"
    """

    def __init__(self, store: Store, key: str):
        self._store = store
        self._key = key

    def to(self, value: Any) -> Store:
        """Store value under the key; None removes the key. Returns the store."""
        return self._store.set_value(self._key, None if value is None else to_str(value))
