"""Tests for the root registry."""

import logging
import os

import pytest

from mediagal.errors import ConfigError
from mediagal.roots import is_subpath, resolve_roots, root_for_real


def test_keys_by_base_name(tmp_path) -> None:
    (tmp_path / "media").mkdir()
    (tmp_path / "photos").mkdir()
    table = resolve_roots([str(tmp_path / "media"), str(tmp_path / "photos")])
    assert dict(table) == {
        "media": os.path.abspath(tmp_path / "media"),
        "photos": os.path.abspath(tmp_path / "photos"),
    }


def test_paths_are_cleaned(tmp_path) -> None:
    (tmp_path / "media").mkdir()
    table = resolve_roots([str(tmp_path) + "/./media/../media/"])
    assert table["media"] == os.path.abspath(tmp_path / "media")


def test_unusable_paths_are_skipped_and_logged(tmp_path, caplog) -> None:
    (tmp_path / "media").mkdir()
    (tmp_path / "file.txt").write_text("x")
    with caplog.at_level(logging.WARNING, logger="mediagal.roots"):
        table = resolve_roots([
            str(tmp_path / "missing"),
            str(tmp_path / "file.txt"),
            str(tmp_path / "media"),
        ])
    assert list(table) == ["media"]
    assert "missing" in caplog.text
    assert "not a directory" in caplog.text


def test_base_name_collision_is_rejected(tmp_path) -> None:
    (tmp_path / "a" / "media").mkdir(parents=True)
    (tmp_path / "b" / "media").mkdir(parents=True)
    with pytest.raises(ConfigError, match="media"):
        resolve_roots([str(tmp_path / "a" / "media"), str(tmp_path / "b" / "media")])


def test_same_folder_twice_is_fine(tmp_path) -> None:
    (tmp_path / "media").mkdir()
    table = resolve_roots([str(tmp_path / "media"), str(tmp_path / "media") + "/"])
    assert list(table) == ["media"]


def test_table_is_read_only(tmp_path) -> None:
    (tmp_path / "media").mkdir()
    table = resolve_roots([str(tmp_path / "media")])
    with pytest.raises(TypeError):
        table["other"] = "/tmp"


def test_is_subpath() -> None:
    assert is_subpath("/data/media/x", "/data/media")
    assert is_subpath("/data/media", "/data/media")
    assert not is_subpath("/data/media2/x", "/data/media")
    assert not is_subpath("/etc/passwd", "/data/media")
    assert not is_subpath("relative/x", "/data/media")


def test_root_for_real(tmp_path) -> None:
    (tmp_path / "media" / "sub").mkdir(parents=True)
    table = resolve_roots([str(tmp_path / "media")])
    assert root_for_real(str(tmp_path / "media" / "sub"), table) == ("media", "sub")
    assert root_for_real(str(tmp_path / "media"), table) == ("media", "")
    assert root_for_real(str(tmp_path), table) is None
