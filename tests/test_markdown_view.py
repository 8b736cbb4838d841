"""Tests for markdown reading and rendering."""

import codecs

import pytest

from mediagal.errors import ReadFailure
from mediagal.markdown_view import decode_text, read_markdown, render_markdown


@pytest.mark.parametrize("data", [
    "# Tïtle".encode("utf-8"),
    codecs.BOM_UTF8 + "# Tïtle".encode("utf-8"),
    codecs.BOM_UTF16_LE + "# Tïtle".encode("utf-16-le"),
    codecs.BOM_UTF16_BE + "# Tïtle".encode("utf-16-be"),
])
def test_decode_honours_bom(data) -> None:
    assert decode_text(data) == "# Tïtle"


def test_read_markdown(tmp_path) -> None:
    path = tmp_path / "notes.md"
    path.write_bytes(codecs.BOM_UTF8 + b"hello")
    assert read_markdown(str(path)) == "hello"


def test_read_missing(tmp_path) -> None:
    with pytest.raises(ReadFailure):
        read_markdown(str(tmp_path / "gone.md"))


def test_render() -> None:
    html = render_markdown("# Title\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\n```\ncode\n```\n")
    assert "<h1>Title</h1>" in html
    assert "<table>" in html
    assert "<code>code" in html
