from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Dict, Iterator, List

import configparser
import json
import logging
import os

from .exceptions import ConfigurationError
from .store import Store
from .utils import flatten, unflatten

logger = logging.getLogger(__name__)

# Optional TOML support:
# - Python >= 3.11: stdlib `tomllib`
# - Older: `tomli` fallback
tomllib: Any | None
try:
    import tomllib as _tomllib
    tomllib = _tomllib
except ImportError:  # pragma: no cover
    try:
        import tomli as _tomli
        tomllib = _tomli
    except ImportError:  # pragma: no cover
        tomllib = None

# Optional YAML support (PyYAML)
yaml: Any | None
try:
    import yaml as _yaml
    yaml = _yaml
except ImportError:  # pragma: no cover
    yaml = None


class MapStore(Store):
    """
    Store backed by a mutable mapping of strings.

    The mapping is used as is, not copied, so changes made through the
    store are visible in the mapping and vice versa.

    - MapStore() creates a mutable store over a new dict.
    - MapStore(data) creates an immutable store over data.
    - MapStore(data, immutable=False) creates a mutable store over data.
    """

    def __init__(
        self,
        data: MutableMapping[str, str] | Mapping[str, str] | None = None,
        *,
        immutable: bool | None = None,
    ):
        if data is None:
            self._data: Mapping[str, str] = {}
            self._immutable = bool(immutable)
        else:
            if not isinstance(data, Mapping):
                raise TypeError("MapStore expects a mapping of strings.")
            self._data = data
            self._immutable = True if immutable is None else bool(immutable)
        if not self._immutable and not isinstance(self._data, MutableMapping):
            raise TypeError("A mutable MapStore requires a mutable mapping.")

    @classmethod
    def env(cls) -> MapStore:
        """Return an immutable store over the environment variables (os.environ)."""
        return cls(os.environ, immutable=True)

    @property
    def data(self) -> Mapping[str, str]:
        """Return the underlying mapping."""
        return self._data

    def _contains(self, key: str) -> bool:
        return self._data.get(key) is not None

    def _get(self, key: str) -> str | None:
        return self._data.get(key)

    def _set(self, key: str, value: str | None) -> None:
        if self._immutable:
            raise self._immutable_error()
        data: MutableMapping[str, str] = self._data  # type: ignore[assignment]
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

    def clear(self) -> Store:
        if self._immutable:
            raise self._immutable_error()
        self._data.clear()  # type: ignore[attr-defined]
        return self

    @property
    def is_immutable(self) -> bool:
        return self._immutable

    def keys(self) -> Iterator[str]:
        return iter(list(self._data.keys()))

    def describe(self, parts: List[str]) -> None:
        parts.append("map")


class FileStore(MapStore):
    """
    Mutable store which can be loaded from and dumped to a single file.

    Supported formats (by extension):
      - .json
      - .toml  (requires Python 3.11+ or tomli; writing requires tomli-w)
      - .ini, .cfg, .conf (ConfigParser)
      - .yaml, .yml (requires PyYAML)
      - .properties (key=value lines)

    Nested structures are flattened to dotted keys:

      {"db": {"host": "localhost", "port": 5432}}

    is stored as

      db.host = "localhost"
      db.port = "5432"

    INI sections become the first key segment ("section.option").
    """

    def __init__(self, path: str | Path, *, optional: bool = False):
        super().__init__({}, immutable=False)
        self._path = Path(path).expanduser()
        self._optional = optional

    @property
    def path(self) -> Path:
        """Return the resolved file path."""
        return self._path

    def load(self) -> FileStore:
        """
        Replace the content of this store with the content of the file.

        :returns: this store.
        :raises ConfigurationError: if the file is missing (and not optional),
            cannot be read or has an unsupported format.
        """
        if not self._path.exists():
            if self._optional:
                logger.debug(f"Optional configuration file {self._path} not found")
                self.clear()
                return self
            raise ConfigurationError(f"Configuration file not found: {self._path}")

        suffix = self._path.suffix.lower()

        if suffix == ".json":
            data = self._load_json()
        elif suffix == ".toml":
            data = self._load_toml()
        elif suffix in {".ini", ".cfg", ".conf"}:
            data = self._load_ini()
        elif suffix in {".yaml", ".yml"}:
            data = self._load_yaml()
        elif suffix == ".properties":
            data = self._load_properties()
        else:
            raise ConfigurationError(
                f"Unsupported configuration file format: {self._path} "
                f"(extension '{suffix}')"
            )

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Top-level structure in {self._path} must be a mapping."
            )

        values = dict(flatten(data))
        self.clear()
        self._data.update(values)  # type: ignore[attr-defined]
        logger.debug(f"Loaded {len(values)} keys from {self._path}")
        return self

    def dump(self) -> None:
        """
        Persist the content of this store to the file.

        The format is chosen based on the file extension, using the same
        rules as for `load()`. The write is performed atomically by writing
        to a temporary file and then replacing the target file.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)

        suffix = self._path.suffix.lower()
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        items = sorted(self._data.items())

        if suffix == ".json":
            self._dump_json(tmp_path, unflatten(items))
        elif suffix == ".toml":
            self._dump_toml(tmp_path, unflatten(items))
        elif suffix in {".ini", ".cfg", ".conf"}:
            self._dump_ini(tmp_path, items)
        elif suffix in {".yaml", ".yml"}:
            self._dump_yaml(tmp_path, unflatten(items))
        elif suffix == ".properties":
            self._dump_properties(tmp_path, items)
        else:
            raise ConfigurationError(
                f"Unsupported configuration file format for writing: {self._path} "
                f"(extension '{suffix}')"
            )

        # Atomic replace (os.replace), overwrites existing file
        try:
            tmp_path.replace(self._path)
        except OSError as exc:
            raise ConfigurationError(
                f"Could not move temporary config file {tmp_path!r} to {self._path!r}: {exc}"
            ) from exc
        logger.debug(f"Wrote {len(items)} keys to {self._path}")

    def describe(self, parts: List[str]) -> None:
        parts.append("file")

    def _load_json(self) -> Any:
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Invalid JSON in {self._path}: {exc}") from exc

    def _dump_json(self, path: Path, data: Mapping[str, Any]) -> None:
        try:
            with path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
        except OSError as exc:
            raise ConfigurationError(f"Could not write JSON config {path!r}: {exc}") from exc

    def _load_toml(self) -> Mapping[str, Any]:
        if tomllib is None:
            raise ConfigurationError(
                "TOML configuration requested but neither 'tomllib' (Python 3.11+) "
                "nor 'tomli' is available. Install 'tomli' to enable TOML support."
            )
        try:
            with self._path.open("rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Invalid TOML in {self._path}: {exc}") from exc

    def _dump_toml(self, path: Path, data: Mapping[str, Any]) -> None:
        try:
            import tomli_w  # optional dependency
        except ImportError as exc:
            raise ConfigurationError(
                "Writing TOML configuration requires the optional 'tomli-w' package."
            ) from exc

        try:
            with path.open("w", encoding="utf-8") as f:
                f.write(tomli_w.dumps(data))
        except OSError as exc:
            raise ConfigurationError(f"Could not write TOML config {path!r}: {exc}") from exc

    def _load_ini(self) -> Mapping[str, Any]:
        # Disable interpolation for predictable behavior
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            with self._path.open("r", encoding="utf-8") as f:
                parser.read_file(f)
        except (OSError, configparser.Error) as exc:
            raise ConfigurationError(
                f"Error reading INI file {self._path}: {exc}"
            ) from exc

        return {
            section: dict(parser.items(section)) for section in parser.sections()
        }

    def _dump_ini(self, path: Path, items: List[tuple[str, str]]) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str  # type: ignore[assignment,method-assign]

        for key, value in items:
            section_name, sep, option = key.partition(".")
            if not sep or not option:
                raise ConfigurationError(
                    f"Cannot dump key {key!r} to INI; INI keys must have the "
                    "form 'section.option'. Use JSON, TOML or YAML instead."
                )
            if not parser.has_section(section_name):
                parser.add_section(section_name)
            parser[section_name][option] = value

        try:
            with path.open("w", encoding="utf-8") as f:
                parser.write(f)
        except OSError as exc:
            raise ConfigurationError(
                f"Could not write INI config {path!r}: {exc}"
            ) from exc

    def _load_yaml(self) -> Mapping[str, Any]:
        if yaml is None:
            raise ConfigurationError(
                "YAML configuration requested but 'PyYAML' is not installed."
            )
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Invalid YAML in {self._path}: {exc}") from exc

        if data is None:
            return {}
        return data

    def _dump_yaml(self, path: Path, data: Mapping[str, Any]) -> None:
        if yaml is None:
            raise ConfigurationError(
                "Writing YAML configuration requires the optional 'PyYAML' package."
            )

        try:
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(
                    dict(data),
                    f,
                    sort_keys=False,
                    default_flow_style=False,
                )
        except OSError as exc:
            raise ConfigurationError(f"Could not write YAML config {path!r}: {exc}") from exc

    def _load_properties(self) -> Mapping[str, Any]:
        # "key=value" / "key: value" lines with backslash escapes; '#' and '!' start comments.
        data: Dict[str, str] = {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for number, line in enumerate(f, start=1):
                    line = line.rstrip("\n").lstrip()
                    if not line or line[0] in "#!":
                        continue
                    parsed = _parse_property_line(line)
                    if parsed is None:
                        raise ConfigurationError(
                            f"Invalid properties line {number} in {self._path}: {line!r}"
                        )
                    key, value = parsed
                    data[key] = value
        except OSError as exc:
            raise ConfigurationError(
                f"Could not read properties file {self._path}: {exc}"
            ) from exc
        return data

    def _dump_properties(self, path: Path, items: List[tuple[str, str]]) -> None:
        try:
            with path.open("w", encoding="utf-8") as f:
                for key, value in items:
                    f.write(
                        f"{_escape_property(key, key=True)}="
                        f"{_escape_property(value, key=False)}\n"
                    )
        except OSError as exc:
            raise ConfigurationError(
                f"Could not write properties file {path!r}: {exc}"
            ) from exc


_PROPERTY_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "f": "\f"}
_PROPERTY_CONTROL = {char: name for name, char in _PROPERTY_ESCAPES.items()}


def _escape_property(text: str, *, key: bool) -> str:
    """
    Escape a key or value for a .properties line.

    Backslashes and control characters are always escaped. Keys also escape
    separators, comment characters and spaces; values escape a leading space
    only, so that it survives loading.
    """
    out: List[str] = []
    for index, char in enumerate(text):
        if char == "\\":
            out.append("\\\\")
        elif char in _PROPERTY_CONTROL:
            out.append("\\" + _PROPERTY_CONTROL[char])
        elif key and char in "=:#! ":
            out.append("\\" + char)
        elif char == " " and index == 0:
            out.append("\\ ")
        else:
            out.append(char)
    return "".join(out)


def _parse_property_line(line: str) -> tuple[str, str] | None:
    """
    Split a .properties line at the first unescaped '=' or ':'.

    Unescaped whitespace around the key and before the value is dropped.
    Returns None if the line has no separator or an empty key.
    """
    # (character, escaped) pairs
    tokens: List[tuple[str, bool]] = []
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\" and index + 1 < len(line):
            escaped = line[index + 1]
            tokens.append((_PROPERTY_ESCAPES.get(escaped, escaped), True))
            index += 2
        else:
            tokens.append((char, False))
            index += 1

    for sep, (char, escaped) in enumerate(tokens):
        if not escaped and char in "=:":
            break
    else:
        return None

    key_tokens = tokens[:sep]
    value_tokens = tokens[sep + 1:]
    while key_tokens and not key_tokens[-1][1] and key_tokens[-1][0].isspace():
        key_tokens.pop()
    start = 0
    while (
        start < len(value_tokens)
        and not value_tokens[start][1]
        and value_tokens[start][0].isspace()
    ):
        start += 1

    key = "".join(char for char, _ in key_tokens)
    if not key:
        return None
    return key, "".join(char for char, _ in value_tokens[start:])
