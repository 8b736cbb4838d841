"""Tests for the HTML page templates."""

from mediagal.listing import EntryView
from mediagal.pages import folder_page, image_page, markdown_page, movie_page, not_found_page


def folder(name):
    return EntryView(name=name, link=name + "/", modified="2024-01-01 00:00:00",
                     is_dir=True, is_movie=False, is_image=False, icon=name + ".icon")


class TestPlaceholderNames:
    def test_folder_named_like_a_slot(self) -> None:
        html = folder_page("__BODY__", "/media/__BODY__/", "/media/", [])
        assert html.count("Nothing here.") == 1
        assert "<title>__BODY__</title>" in html

    def test_entries_named_like_slots(self) -> None:
        html = folder_page("media", "/media/", "/", [folder("__UP__"), folder("__STYLE__")])
        assert html.count('title="Up"') == 1
        assert html.count(":root {") == 1
        assert 'href="__UP__/"' in html

    def test_image_named_like_a_slot(self) -> None:
        html = image_page("__NAMES__", "/media/", ["__INDEX__", "__NAMES__"], 1)
        assert 'const names = ["__INDEX__", "__NAMES__"]' in html
        assert "let index = 1;" in html
        assert "<title>__NAMES__</title>" in html

    def test_movie_named_like_a_slot(self) -> None:
        html = movie_page("__SRC__", "/media/__SRC__", "/media/")
        assert 'src="/media/__SRC__"' in html
        assert 'href="/media/"' in html

    def test_markdown_content_is_left_alone(self) -> None:
        html = markdown_page("notes.md", "/media/", "<p><code>__TITLE__</code></p>")
        assert "<code>__TITLE__</code>" in html
        assert "<title>notes.md</title>" in html


def test_values_are_escaped() -> None:
    html = folder_page('<b>&"', "/media/", "/", [])
    assert "&lt;b&gt;&amp;&quot;" in html
    assert "<b>&" not in html


def test_script_cannot_be_closed_from_a_name() -> None:
    html = image_page("x", "/media/", ["</script><b>.png"], 0)
    assert "</script><b>" not in html


def test_not_found_page() -> None:
    html = not_found_page("/media/<x>")
    assert "Not Found" in html
    assert "/media/&lt;x&gt;" in html
