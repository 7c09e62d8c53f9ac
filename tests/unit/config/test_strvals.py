"""Tests for the flat override and env override parsers."""

from __future__ import annotations

import pytest

from entrykit.config.strvals import (
    env_key_to_path,
    parse_env_overrides,
    parse_flat_overrides,
    typed_value,
)
from entrykit.core.errors import ConfigParseError


class TestTypedValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("FALSE", False),
            ("null", None),
            ("0", 0),
            ("42", 42),
            ("-7", -7),
            ("007", "007"),
            ("1.5", "1.5"),
            ("", ""),
            ("text", "text"),
        ],
    )
    def test_typing(self, raw, expected):
        assert typed_value(raw) == expected

    def test_as_string(self):
        assert typed_value("42", as_string=True) == "42"


class TestParseFlatOverrides:
    def test_empty(self):
        assert parse_flat_overrides("") == {}
        assert parse_flat_overrides("   ") == {}

    def test_simple_pairs(self):
        assert parse_flat_overrides("a=1,b=x") == {"a": 1, "b": "x"}

    def test_sequence_length_follows_indices(self):
        result = parse_flat_overrides("slice[0]=value0,slice[1]=value1")
        assert result == {"slice": ["value0", "value1"]}

    def test_scalar_and_sequence_together(self):
        assert parse_flat_overrides("key1=value1,slice[0]=value0") == {
            "key1": "value1",
            "slice": ["value0"],
        }

    def test_dotted_keys_nest(self):
        assert parse_flat_overrides("gin.port=8080,gin.name=api") == {
            "gin": {"port": 8080, "name": "api"}
        }

    def test_indexed_keys(self):
        assert parse_flat_overrides("list[0]=a,list[2]=c") == {"list": ["a", None, "c"]}

    def test_map_inside_sequence(self):
        assert parse_flat_overrides("cred[1].endpoint=kv:2379") == {
            "cred": [None, {"endpoint": "kv:2379"}]
        }

    def test_list_value(self):
        assert parse_flat_overrides("paths={a,b},x=1") == {"paths": ["a", "b"], "x": 1}

    def test_escaped_comma(self):
        assert parse_flat_overrides(r"a=x\,y") == {"a": "x,y"}

    def test_empty_value(self):
        assert parse_flat_overrides("a=,b=1") == {"a": "", "b": 1}

    def test_later_pair_wins(self):
        assert parse_flat_overrides("a=1,a=2") == {"a": 2}

    @pytest.mark.parametrize(
        "text",
        [
            "novalue",
            "a,b=1",
            "=1",
            "list[x]=1",
            "list[-1]=1",
            "list[0][1]=1",
            "list[0",
            "a={x,y",
            "a=1,a.b=2",
            "a=1,a[0]=2",
        ],
    )
    def test_malformed_raises(self, text):
        with pytest.raises(ConfigParseError):
            parse_flat_overrides(text)


class TestEnvOverrides:
    def test_key_to_path(self):
        assert env_key_to_path("GIN_0_PORT") == "gin[0].port"
        assert env_key_to_path("LOG_LEVEL") == "log.level"
        assert env_key_to_path("0_X") == "x"

    def test_collects_prefixed_variables(self):
        environ = {
            "ENTRYKIT_CRED_0_ENDPOINT": "kv:2379",
            "ENTRYKIT_CRED_0_NAME": "main",
            "OTHER_VAR": "ignored",
        }
        assert parse_env_overrides("ENTRYKIT", environ) == {
            "cred": [{"endpoint": "kv:2379", "name": "main"}]
        }

    def test_exclude(self):
        environ = {"ENTRYKIT_BOOT_FILE": "/tmp/boot.yaml", "ENTRYKIT_A": "1"}
        assert parse_env_overrides("ENTRYKIT", environ, exclude=["ENTRYKIT_BOOT_FILE"]) == {"a": 1}

    def test_values_with_commas_are_escaped(self):
        environ = {"ENTRYKIT_TAGS": "a,b", "ENTRYKIT_RAW": "{x}"}
        assert parse_env_overrides("ENTRYKIT", environ) == {"tags": "a,b", "raw": "{x}"}

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("ENTRYKIT_LOG_LEVEL", "debug")
        assert parse_env_overrides("ENTRYKIT") == {"log": {"level": "debug"}}
