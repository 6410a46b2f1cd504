from __future__ import annotations

"""
kvconf - Composable key/value configuration stores.

This package provides:
- Store: base class for string keyed, string valued configuration stores.
- concat(): combine stores so that earlier stores override later ones.
- Decorators: PrefixStore, TransformStore, ImmutableStore, ConcatStore.
- Built-in backends: MapStore (dict, environment) and FileStore.
"""

from .backends import FileStore, MapStore
from .concat import ConcatStore
from .exceptions import (
    ConfigurationError,
    ConversionError,
    ImmutableStoreError,
    InvalidArgumentError,
)
from .prefix import PrefixStore
from .proxy import ImmutableStore, ProxyStore
from .store import Store, concat
from .transform import TransformStore
from .values import GetValue, SetValue

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "ImmutableStoreError",
    "InvalidArgumentError",
    "Store",
    "concat",
    "ProxyStore",
    "ImmutableStore",
    "TransformStore",
    "PrefixStore",
    "ConcatStore",
    "MapStore",
    "FileStore",
    "GetValue",
    "SetValue",
]
