# file: mediagal/markdown_view.py
#
# Markdown files render to HTML for the markdown page.

import codecs

import markdown

from mediagal.errors import ReadFailure

EXTENSIONS = ['fenced_code', 'tables', 'sane_lists']

_BOMS = (
    (codecs.BOM_UTF8, 'utf-8-sig'),
    (codecs.BOM_UTF16_LE, 'utf-16'),
    (codecs.BOM_UTF16_BE, 'utf-16'),
)


def decode_text(data: bytes) -> str:
    """Honour a byte order mark; no mark means UTF-8."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data.decode(encoding, errors='replace')
    return data.decode('utf-8', errors='replace')


def read_markdown(path) -> str:
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise ReadFailure(f"cannot read {path}: {e}") from e
    return decode_text(data)


def render_markdown(text: str) -> str:
    return markdown.markdown(text, extensions=EXTENSIONS)
