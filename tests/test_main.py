"""Tests for the command line entry point."""

import json

import pytest

from mediagal.__main__ import main, parse_args


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.config == "settings.json"
    assert args.port is None
    assert args.host is None
    assert args.log_level is None


def test_parse_args_overrides() -> None:
    args = parse_args(["-c", "other.json", "-p", "9000", "--host", "127.0.0.1", "--log-level", "debug"])
    assert args.config == "other.json"
    assert args.port == 9000
    assert args.host == "127.0.0.1"
    assert args.log_level == "debug"


def test_missing_settings_file(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(tmp_path / "nope.json")])
    assert "cannot read settings file" in str(exc.value.code)


def test_no_usable_folders(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"folders": [str(tmp_path / "gone")]}))
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(path), "-p", "0", "--host", "127.0.0.1"])
    assert "none of the configured folders" in str(exc.value.code)
