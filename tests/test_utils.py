"""Tests for _utils.py - dotted lookups, dates and --data loading."""

import io

import pytest

from apiary_cli._utils import _get_path, _short_date, load_json_data
from apiary_cli.exceptions import InputError


class TestGetPath:
    def test_nested(self):
        assert _get_path({"attributes": {"slug": "prod"}}, "attributes.slug") == "prod"

    def test_missing(self):
        assert _get_path({"attributes": None}, "attributes.slug") is None

    def test_count(self):
        assert _get_path({"recipients": [1, 2, 3]}, "#recipients") == 3
        assert _get_path({}, "#recipients") == 0


class TestShortDate:
    def test_iso(self):
        assert _short_date("2026-01-15T10:30:00.000Z") == "2026-01-15"

    def test_passthrough(self):
        assert _short_date("yesterday") == "yesterday"
        assert _short_date(None) is None


class TestLoadJsonData:
    def test_inline(self):
        assert load_json_data('{"a": 1}') == {"a": 1}

    def test_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]")
        assert load_json_data(str(path)) == [1, 2]

    def test_bad_file_contents(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{oops")
        with pytest.raises(InputError, match="Invalid JSON in file"):
            load_json_data(str(path))

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO('{"b": 2}'))
        assert load_json_data("-") == {"b": 2}

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value):
        with pytest.raises(InputError, match="--data is empty"):
            load_json_data(value)
