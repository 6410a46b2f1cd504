from __future__ import annotations

import json
from pathlib import Path

import pytest

from kvconf import (
    ConfigurationError,
    FileStore,
    ImmutableStoreError,
    MapStore,
    concat,
)


def test_map_store_defaults_to_mutable_empty_dict():
    store = MapStore()

    assert not store.is_immutable
    store.set("a").to(1)
    assert store.get_value("a") == "1"
    assert list(store.keys()) == ["a"]
    assert str(store) == "Store[map]"

    store.clear()
    assert store.get_value("a") is None


def test_map_store_over_given_mapping_is_immutable():
    store = MapStore({})

    assert store.is_immutable
    with pytest.raises(ImmutableStoreError):
        store.set_value("a", "b")
    with pytest.raises(ImmutableStoreError):
        store.clear()


def test_map_store_shares_the_mapping():
    data = {"a": "1"}
    store = MapStore(data, immutable=False)

    assert store.data is data
    store.set_value("b", "2")
    assert data == {"a": "1", "b": "2"}
    data["c"] = "3"
    assert store.get_value("c") == "3"


def test_map_store_requires_mutable_mapping_when_mutable():
    from types import MappingProxyType

    with pytest.raises(TypeError):
        MapStore(MappingProxyType({}), immutable=False)


def test_env_store(monkeypatch):
    monkeypatch.setenv("KVCONF_TEST_HOST", "localhost")

    env = MapStore.env()

    assert env.is_immutable
    assert env.get_value("KVCONF_TEST_HOST") == "localhost"
    assert env.prefix("KVCONF_TEST_").get_value("HOST") == "localhost"


def test_file_store_loads_json_as_dotted_keys(tmp_path: Path):
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps(
            {
                "app": {"debug": False, "tags": ["a", "b"]},
                "database": {"host": "example.local", "port": 5432},
            }
        ),
        encoding="utf-8",
    )

    store = FileStore(config_file).load()

    assert dict(store.data) == {
        "app.debug": "false",
        "app.tags": "a,b",
        "database.host": "example.local",
        "database.port": "5432",
    }
    assert store.prefix("database.").get("port").as_int() == 5432
    assert str(store) == "Store[file]"


def test_file_store_load_replaces_content(tmp_path: Path):
    config_file = tmp_path / "config.json"
    config_file.write_text('{"a": "1"}', encoding="utf-8")

    store = FileStore(config_file)
    store.set_value("stale", "x")
    store.load()

    assert sorted(store.keys()) == ["a"]


def test_file_store_missing_non_optional_raises(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        FileStore(tmp_path / "does_not_exist.json").load()


def test_file_store_missing_optional_is_empty(tmp_path: Path):
    store = FileStore(tmp_path / "missing.json", optional=True).load()
    assert list(store.keys()) == []


def test_file_store_invalid_json_raises(tmp_path: Path):
    config_file = tmp_path / "broken.json"
    config_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        FileStore(config_file).load()


def test_file_store_rejects_unknown_extension(tmp_path: Path):
    config_file = tmp_path / "config.txt"
    config_file.write_text("", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unsupported"):
        FileStore(config_file).load()
    with pytest.raises(ConfigurationError, match="Unsupported"):
        FileStore(config_file).dump()


def test_file_store_dump_json_roundtrip(tmp_path: Path) -> None:
    config_file = tmp_path / "nested" / "config.json"
    store = FileStore(config_file, optional=True)
    store.set_value("app.debug", "true").set_value("database.port", "5433")

    store.dump()

    assert json.loads(config_file.read_text(encoding="utf-8")) == {
        "app": {"debug": "true"},
        "database": {"port": "5433"},
    }
    assert dict(FileStore(config_file).load().data) == dict(store.data)


def test_file_store_ini(tmp_path: Path) -> None:
    config_file = tmp_path / "config.ini"
    config_file.write_text(
        "[app]\nDebug = false\n\n[database]\nhost = db.local\n", encoding="utf-8"
    )

    store = FileStore(config_file).load()
    assert store.get_value("app.Debug") == "false"
    assert store.get_value("database.host") == "db.local"

    store.set_value("database.port", "5432").dump()
    reloaded = FileStore(config_file).load()
    assert dict(reloaded.data) == {
        "app.Debug": "false",
        "database.host": "db.local",
        "database.port": "5432",
    }


def test_file_store_ini_rejects_keys_without_section(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "config.ini")
    store.set_value("plain", "1")

    with pytest.raises(ConfigurationError):
        store.dump()


def test_file_store_properties(tmp_path: Path) -> None:
    config_file = tmp_path / "app.properties"
    config_file.write_text(
        "# comment\n! other comment\n\ndb.host = localhost\ndb.url=jdbc:x\nname: demo\n",
        encoding="utf-8",
    )

    store = FileStore(config_file).load()
    assert dict(store.data) == {
        "db.host": "localhost",
        "db.url": "jdbc:x",
        "name": "demo",
    }

    store.remove("name")
    store.dump()
    assert config_file.read_text(encoding="utf-8") == "db.host=localhost\ndb.url=jdbc:x\n"


def test_file_store_invalid_properties_line(tmp_path: Path) -> None:
    config_file = tmp_path / "bad.properties"
    config_file.write_text("no separator here\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="line 1"):
        FileStore(config_file).load()


def test_file_store_yaml_roundtrip_if_pyyaml_installed(tmp_path: Path) -> None:
    pytest.importorskip("yaml")

    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "app:\n  debug: true\ndatabase:\n  host: db.local\n  port: 5432\n",
        encoding="utf-8",
    )

    store = FileStore(config_file).load()
    assert store.get("app.debug").as_bool() is True
    assert store.get("database.port").as_int() == 5432

    store.set_value("database.host", "other").dump()
    assert FileStore(config_file).load().get_value("database.host") == "other"


def test_file_store_toml_roundtrip_if_supported(tmp_path: Path) -> None:
    import kvconf.backends as backends

    if backends.tomllib is None:
        pytest.skip("TOML read support not available")
    pytest.importorskip("tomli_w")

    store = FileStore(tmp_path / "config.toml")
    store.set_value("app.log_level", "DEBUG").set_value("database.host", "db.toml.local")
    store.dump()

    loaded = FileStore(tmp_path / "config.toml").load()
    assert dict(loaded.data) == {
        "app.log_level": "DEBUG",
        "database.host": "db.toml.local",
    }


def test_layered_configuration(tmp_path: Path, monkeypatch) -> None:
    config_file = tmp_path / "config.json"
    config_file.write_text('{"db": {"host": "file-host", "port": 5433}}', encoding="utf-8")
    monkeypatch.setenv("MYAPP_db.host", "env-host")

    defaults = MapStore({"db.host": "localhost", "db.port": "5432", "db.name": "app"})
    cfg = concat(MapStore.env().prefix("MYAPP_"), FileStore(config_file).load(), defaults)
    db = cfg.prefix("db.")

    assert db.get_value("host") == "env-host"
    assert db.get("port").as_int() == 5433
    assert db.get_value("name") == "app"
    assert str(cfg) == 'Store["MYAPP_"->map | file | map]'


def test_file_store_properties_escapes_special_characters(tmp_path: Path) -> None:
    config_file = tmp_path / "special.properties"
    store = FileStore(config_file)
    store.set_value("url=x", "1").set_value("multi", "l1\nl2").set_value("pad", "  v")
    store.set_value("a key:#", "back\\slash\ttab ").set_value("hash", "#not a comment")

    store.dump()
    loaded = FileStore(config_file).load()

    assert dict(loaded.data) == {
        "url=x": "1",
        "multi": "l1\nl2",
        "pad": "  v",
        "a key:#": "back\\slash\ttab ",
        "hash": "#not a comment",
    }


def test_file_store_properties_reads_escapes(tmp_path: Path) -> None:
    config_file = tmp_path / "escaped.properties"
    config_file.write_text(
        "path\\:name = c\\:\\\\dir\nlines=one\\ntwo\n  indented = \\  spaced\n",
        encoding="utf-8",
    )

    store = FileStore(config_file).load()
    assert dict(store.data) == {
        "path:name": "c:\\dir",
        "lines": "one\ntwo",
        "indented": "  spaced",
    }


def test_file_store_properties_rejects_empty_key(tmp_path: Path) -> None:
    config_file = tmp_path / "empty.properties"
    config_file.write_text("= value\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="line 1"):
        FileStore(config_file).load()


@pytest.mark.parametrize(
    "keys",
    [("a", "a.b"), ("a..b",), (".x",)],
)
def test_file_store_json_dump_rejects_keys_that_cannot_nest(tmp_path: Path, keys) -> None:
    config_file = tmp_path / "config.json"
    store = FileStore(config_file)
    for key in keys:
        store.set_value(key, "v")

    with pytest.raises(ConfigurationError, match="Cannot nest key"):
        store.dump()
    assert not config_file.exists()


def test_file_store_optional_missing_load_clears_content(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "missing.json", optional=True)
    store.set_value("stale", "x")

    assert store.load() is store
    assert list(store.keys()) == []
