"""Tests for request path normalization and link helpers."""

import pytest

from mediagal.paths import (escape_segment, human_sort_key, is_image, is_markdown, is_movie,
                            normalize, parent_link, url_for)


class TestNormalize:
    @pytest.mark.parametrize("raw", ["", "/", "//", "/.", "/./", "/..", "/../.."])
    def test_site_root(self, raw) -> None:
        assert normalize(raw) == ""

    def test_plain_path(self) -> None:
        assert normalize("/media/sub/pic.png") == "media/sub/pic.png"

    def test_strips_only_the_leading_separator(self) -> None:
        assert normalize("media/x") == "media/x"

    def test_decodes(self) -> None:
        assert normalize("/media/a%20b/%E5%86%99%E7%9C%9F.png") == "media/a b/写真.png"

    def test_collapses_dots_and_slashes(self) -> None:
        assert normalize("/media//x/./y/") == "media/x/y"
        assert normalize("/media/x/../y") == "media/y"

    def test_literal_traversal_cannot_climb(self) -> None:
        result = normalize("/media/../../etc/passwd")
        assert result == "etc/passwd"
        assert ".." not in result.split("/")

    def test_encoded_traversal_is_cleaned_after_decoding(self) -> None:
        result = normalize("/media/%2e%2e/%2E%2E/etc/passwd")
        assert result == "etc/passwd"
        assert ".." not in result.split("/")

    def test_encoded_slashes_are_cleaned_too(self) -> None:
        assert normalize("/media%2f..%2f..%2fetc") == "etc"

    def test_backslashes_are_separators(self) -> None:
        assert normalize("/media\\..\\..\\etc") == "etc"

    def test_undecodable_path_falls_back_to_raw(self) -> None:
        assert normalize("/media/%ff.png") == "media/%ff.png"


class TestLinks:
    def test_escape_segment_escapes_reserved(self) -> None:
        assert escape_segment("a b#c?.png") == "a%20b%23c%3F.png"
        assert escape_segment("a:b") == "a%3Ab"
        assert escape_segment("a/b") == "a%2Fb"

    def test_url_for(self) -> None:
        assert url_for("media") == "/media"
        assert url_for("media", "", is_dir=True) == "/media/"
        assert url_for("media", "a b/c#d.png") == "/media/a%20b/c%23d.png"
        assert url_for("media", "sub", is_dir=True) == "/media/sub/"

    @pytest.mark.parametrize("url, parent", [
        ("/", ""),
        ("", ""),
        ("/media/", "/"),
        ("/media", "/"),
        ("/media/sub/", "/media/"),
        ("/media/sub/deeper/", "/media/sub/"),
    ])
    def test_parent_link(self, url, parent) -> None:
        assert parent_link(url) == parent


class TestSortAndTypes:
    def test_natural_case_insensitive_order(self) -> None:
        names = ["img10.png", "img2.png", "Img1.png", "alpha"]
        assert sorted(names, key=human_sort_key) == ["alpha", "Img1.png", "img2.png", "img10.png"]

    def test_name_before_its_numbered_siblings(self) -> None:
        names = ["pic2.png", "pic10.png", "pic.png", "pic.jpg"]
        assert sorted(names, key=human_sort_key) == ["pic.jpg", "pic.png", "pic2.png", "pic10.png"]

    def test_media_types(self) -> None:
        assert is_image("a.PNG")
        assert is_image("b.jpeg")
        assert is_image("c.webp")
        assert not is_image("notes.txt")
        assert is_movie("clip.MKV")
        assert is_movie("x.mp4")
        assert not is_movie("x.mp3")
        assert is_markdown("README.md")
        assert not is_markdown("README.txt")
