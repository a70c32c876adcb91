import re

import pytest

from plugin_store.errors import ConfigurationError
from plugin_store.naming import is_valid_identifier, physical_name, sanitize, validate_identifier
from plugin_store.values import ensure_json_value, is_json_value

SAFE = re.compile(r"^[a-z0-9_]+$")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("attendance", "attendance"),
        ("Attendance", "attendance"),
        ("bad name!", "bad_name_"),
        ("a.b-c/d", "a_b_c_d"),
        ("ÜberPlugin", "_berplugin"),
        ("__x__", "__x__"),
    ],
)
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize("raw", ["attendance", "Mixed Case", "emoji 🎉", "tabs\tand\nnewlines", "İstanbul", "x" * 200])
def test_sanitize_is_safe_and_idempotent(raw):
    once = sanitize(raw)
    assert SAFE.match(once)
    assert sanitize(once) == once


def test_physical_name():
    assert physical_name("attendance") == "attendance"
    assert physical_name("attendance", "records") == "attendance_records"
    assert physical_name("Attendance", "Records") == "attendance_records"
    assert physical_name("attendance", "records", prefix="plugin_") == "plugin_attendance_records"
    assert physical_name("attendance", None, prefix="plugin_") == "plugin_attendance"


def test_physical_name_is_deterministic():
    assert physical_name("birthday", "wishes") == physical_name("birthday", "wishes")


def test_physical_name_collisions_are_possible():
    # Distinct inputs may collapse to one name; this is accepted, not an error.
    assert physical_name("a_b") == physical_name("A_B")
    assert physical_name("a", "b_c") == physical_name("a_b", "c")


def test_validate_identifier():
    assert validate_identifier("my_plugin1") == "my_plugin1"
    assert is_valid_identifier("ABC_123") is True
    for bad in ["", "bad name!", "dash-ed", "ünïcode", "x\n", "trailing\r\n", None, 3]:
        assert is_valid_identifier(bad) is False
        with pytest.raises(ConfigurationError):
            validate_identifier(bad)


def test_validate_identifier_names_the_field():
    with pytest.raises(ConfigurationError, match="table name"):
        validate_identifier("no way", "table name")


def test_json_values():
    value = {"a": [1, 2.5, None, True, "s", {"b": []}]}
    assert ensure_json_value(value) is value
    assert is_json_value(value) is True
    assert is_json_value({"t": (1, 2)}) is False
    assert is_json_value({"n": float("-inf")}) is False
    assert is_json_value({1: "x"}) is False


def test_json_value_error_reports_path():
    from plugin_store.errors import InvalidValueError

    with pytest.raises(InvalidValueError, match=r"value\.user\.tags\[1\]"):
        ensure_json_value({"user": {"tags": ["ok", {1, 2}]}})


def test_trailing_newline_is_not_an_identifier():
    # A newline would otherwise sanitize into a different table ("attendance_").
    assert is_valid_identifier("attendance\n") is False
    with pytest.raises(ConfigurationError):
        validate_identifier("records\n", "table name")


def test_physical_name_rejects_empty_namespace():
    with pytest.raises(ConfigurationError):
        physical_name("")
    with pytest.raises(ConfigurationError):
        physical_name("", "records", prefix="plugin_")
