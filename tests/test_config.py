"""
Tests for Config: loading, key operations, saving and printing.
"""

import json
from datetime import datetime, timezone

import pytest

from typecfg import Config, ConfigState, PrintableOptions, TypeValidator, fail_string, types
from typecfg.core.exceptions import (
    ConfigurationError,
    NotObjectLikeError,
    ParseError,
    PersistenceError,
    ValidationError,
)
from typecfg.core.highlight import HighlightOptions
from typecfg.core.parser import YamlParser


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


class TestEmptyOptionalStruct:
    @pytest.fixture
    def cfg(self, config_path):
        return Config(str(config_path), types.struct({}, optional=True))

    def test_loads_cleanly(self, cfg):
        assert cfg.fail_load() is None
        assert cfg.is_object_like()
        assert cfg.key_list("current") == []
        assert cfg.get("testprop", mode="default") is None

    def test_set_unknown_key_fails_and_keeps_data(self, cfg):
        cfg.load()

        message = cfg.fail_set("testprop", "x")

        assert "testprop" in message
        assert message == "Unable to set the key: 'testprop'. Unexpected key."
        assert cfg.get_data() == {}

    def test_keyless_unset_succeeds(self, cfg):
        cfg.load()

        assert cfg.fail_unset() is None

    def test_none_data_is_treated_as_empty_record(self, config_path):
        cfg = Config(str(config_path), types.struct({"a": types.number(optional=True)}, optional=True))
        cfg.set_data(None)

        assert cfg.is_object_like()
        assert cfg.key_list() == []

        cfg.set("a", 1)
        assert cfg.get_data() == {"a": 1}


class TestLoad:
    def test_missing_file_uses_default(self, settings):
        settings.load()

        assert settings.get_data() == {"port": 8080, "host": "localhost"}
        assert settings.state is ConfigState.LOADED

    def test_valid_file(self, settings, config_path):
        write_json(config_path, {"port": 9000})

        settings.load()

        assert settings.get("port") == 9000
        assert settings.get("host") == "localhost"
        assert settings.get("host", mode="current") is None
        assert settings.key_list() == ["port"]

    def test_invalid_file_keeps_data(self, settings, config_path):
        write_json(config_path, {"port": "x", "extra": 1})

        message = settings.fail_load()

        assert "Bad value for the key 'port'" in message
        assert "Unexpected key 'extra'." in message
        assert settings.get_data() == {"port": 8080, "host": "localhost"}
        assert settings.state is ConfigState.UNLOADED

        with pytest.raises(ValidationError):
            settings.load()

    def test_malformed_file(self, settings, config_path):
        config_path.write_text("{", encoding="utf-8")

        assert settings.fail_load() == f"Unable to parse: {config_path}."
        with pytest.raises(ParseError):
            settings.load()

    def test_after_parse_is_applied(self, config_path):
        config_path.write_text('"2024-01-15T10:30:00Z"', encoding="utf-8")
        cfg = Config(str(config_path), types.date())

        cfg.load()

        assert cfg.get_data() == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_failing_after_parse_is_reported(self, config_path):
        def reject(value):
            raise ValueError("Unsupported value.")

        config_path.write_text("1", encoding="utf-8")
        cfg = Config(
            str(config_path),
            TypeValidator("number", lambda validator, value: None, default_val=0, after_parse=reject),
        )

        assert cfg.fail_load() == f"Unable to convert: {config_path}. Unsupported value."
        assert cfg.get_data() == 0
        with pytest.raises(ValidationError):
            cfg.load()

    def test_nested_struct_file(self, config_path):
        write_json(config_path, {"db": {"url": "sqlite://"}})
        cfg = Config(str(config_path), types.struct({"db": types.struct({"url": types.string()})}))

        cfg.load()

        assert cfg.get("db") == {"url": "sqlite://"}


class TestGetSet:
    def test_set_and_get(self, settings):
        settings.set("port", 9000)

        assert settings.get("port") == 9000
        assert settings.state is ConfigState.MUTATED

    def test_bad_value_message(self, settings):
        message = settings.fail_set("port", 0)

        assert message == (
            "Unable to set the key: 'port'. Got: 0. Should be an integer: 1 - 65535. Got: 0."
        )
        assert settings.get("port") == 8080

    def test_unknown_key_raises(self, settings):
        with pytest.raises(ValidationError, match="Unexpected key"):
            settings.set("colour", "red")

    def test_values_are_copies(self, settings):
        settings.set("tags", ["a"])

        settings.get("tags").append("b")
        settings.get_data()["tags"].append("c")

        assert settings.get("tags") == ["a"]

    def test_modes(self, settings):
        settings.set("port", 9000)
        settings.unset("host")

        assert settings.get("port", mode="real") == 9000
        assert settings.get("port", mode="default") == 8080
        assert settings.get("host", mode="real") == "localhost"
        assert settings.get("host", mode="current") is None

    def test_unknown_mode(self, settings):
        with pytest.raises(ConfigurationError):
            settings.get("port", mode="latest")

    def test_key_type(self, settings):
        assert settings.get_key_type("port").type_name == "integer"
        assert settings.get_key_type("colour") is None

    def test_set_data(self, settings):
        assert settings.fail_set_data({"port": "x"}).startswith("Unable to set the data.")

        settings.set_data({"port": 1})
        assert settings.get_data() == {"port": 1}


class TestKeyList:
    def test_modes(self, settings):
        settings.set("debug", True)

        assert settings.key_list("current") == ["port", "host", "debug"]
        assert settings.key_list("real") == ["port", "host", "debug"]
        assert settings.key_list("default") == ["port", "host"]

    def test_map_type_uses_current_keys(self, config_path):
        cfg = Config(str(config_path), types.object_(types.number(), default_val={}))
        cfg.set("x", 1)

        assert cfg.key_list("real") == ["x"]
        assert cfg.key_list("default") == ["x"]


class TestMapConfig:
    def test_value_type_governs_keys(self, config_path):
        cfg = Config(str(config_path), types.object_(types.number(), default_val={}))

        assert cfg.fail_set("x", 1) is None
        assert cfg.fail_set("y", "a").startswith("Unable to set the key: 'y'. Got: 'a'. Should be a number")
        assert cfg.get_key_type("anything").type_name == "number"


class TestNotObjectLike:
    @pytest.fixture
    def cfg(self, config_path):
        return Config(str(config_path), types.number(default_val=1))

    def test_key_operations_fail(self, cfg):
        assert not cfg.is_object_like()

        with pytest.raises(NotObjectLikeError):
            cfg.key_list()

        value, message = cfg.fail_get("x")
        assert value is None
        assert message.startswith("Unable to get the key: 'x'. Not object-like.")

        with pytest.raises(NotObjectLikeError):
            cfg.set("x", 1)

    def test_invalid_struct_data_is_not_object_like(self, config_path):
        cfg = Config(str(config_path), types.struct({"name": types.string()}))

        assert not cfg.is_object_like()
        assert "Missing keys: 'name'." in cfg.fail_unset("name")

    def test_printable(self, cfg):
        assert cfg.get_printable() == "1: number"
        assert cfg.get_printable(options=PrintableOptions(parsable=True)) == "1\nnumber"


class TestUnset:
    def test_unset_key_falls_back_to_default(self, settings):
        settings.set("port", 9000)

        settings.unset("port")

        assert settings.get("port") == 8080
        assert settings.key_list() == ["host"]

    def test_unset_absent_key_is_noop(self, settings):
        assert settings.fail_unset("debug") is None

    def test_required_key_is_kept(self, config_path):
        cfg = Config(
            str(config_path),
            types.struct({"name": types.string(), "nick": types.string(optional=True)}),
        )
        cfg.set_data({"name": "x", "nick": "y"})

        assert cfg.fail_unset("name") == (
            "Unable to unset the key: 'name'. The value should be a struct:\nMissing keys: 'name'."
        )
        assert cfg.fail_unset() == "Unable to unset keys: 'name'."
        assert cfg.get_data() == {"name": "x"}


class TestSave:
    def test_save_and_reload(self, settings, config_path, settings_type):
        settings.set("port", 9000)
        settings.save()

        assert json.loads(config_path.read_text(encoding="utf-8")) == {"port": 9000, "host": "localhost"}
        assert settings.state is ConfigState.LOADED

        reloaded = Config(str(config_path), settings_type)
        reloaded.load()
        assert reloaded.get("port") == 9000

    def test_empty_data_removes_file(self, settings, config_path):
        settings.save()
        assert config_path.exists()

        settings.unset()
        settings.save()

        assert not config_path.exists()
        assert settings.fail_save() is None

    def test_keep_empty_file(self, settings, config_path):
        settings.unset()

        settings.save(keep_empty_file=True)

        assert config_path.read_text(encoding="utf-8") == "{}"

    def test_creates_parent_directories(self, tmp_path, settings_type):
        path = tmp_path / "nested" / "dir" / "settings.json"
        cfg = Config(str(path), settings_type)

        cfg.save()

        assert path.is_file()

    def test_write_failure(self, settings_type, memory_storage):
        cfg = Config("settings.json", settings_type, storage=memory_storage(fail_write=True))

        assert cfg.fail_save() == "Unable to write: settings.json."
        with pytest.raises(PersistenceError):
            cfg.save()

    def test_remove_failure(self, settings_type, memory_storage):
        storage = memory_storage({"settings.json": "{}"}, fail_delete=True)
        cfg = Config("settings.json", settings_type, storage=storage)
        cfg.unset()

        assert cfg.fail_save() == "Unable to remove: settings.json."

    def test_dates_are_written_as_iso(self, config_path):
        cfg = Config(str(config_path), types.struct({"since": types.date(optional=True)}))
        cfg.set("since", datetime(2024, 1, 15, tzinfo=timezone.utc))

        cfg.save()

        assert json.loads(config_path.read_text(encoding="utf-8")) == {"since": "2024-01-15T00:00:00Z"}

    def test_yaml_parser(self, tmp_path, settings_type):
        path = tmp_path / "settings.yaml"
        cfg = Config(str(path), settings_type, parser=YamlParser())
        cfg.set("tags", ["a", "b"])
        cfg.save()

        assert "tags:" in path.read_text(encoding="utf-8")

        reloaded = Config(str(path), settings_type, parser=YamlParser())
        reloaded.load()
        assert reloaded.get("tags") == ["a", "b"]

    def test_data_string(self, settings):
        assert json.loads(settings.get_data_string()) == {"port": 8080, "host": "localhost"}


class TestPrintable:
    def test_aligned_lines(self, settings):
        settings.set("debug", True)

        assert settings.get_printable() == (
            " port = 8080: integer\n"
            " host = 'localhost': string\n"
            "debug = True: ?boolean"
        )

    def test_without_types(self, settings):
        options = PrintableOptions(types=False)

        assert settings.get_printable("port", options) == "port = 8080"

    def test_parsable(self, settings):
        options = PrintableOptions(parsable=True)

        assert settings.get_printable(options=options) == (
            "port\n8080\ninteger\nhost\n'localhost'\nstring"
        )

    def test_real_mode_includes_defaults(self, settings):
        settings.unset("host")

        options = PrintableOptions(mode="real", types=False)
        assert settings.get_printable(options=options) == "port = 8080\nhost = 'localhost'"

    def test_highlighted(self, settings):
        options = PrintableOptions(syntax=HighlightOptions())

        printed = settings.get_printable("port", options)

        assert "\x1b[" in printed
        assert "port" in printed and "8080" in printed


class TestFailString:
    def test_success(self):
        assert fail_string(lambda: 1) == (1, None)

    def test_failure(self):
        def broken():
            raise ValidationError("Bad value.")

        assert fail_string(broken) == (None, "Bad value.")
