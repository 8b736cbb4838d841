# file: mediagal/paths.py
#
# Request path normalization plus the small link/sort helpers the
# listings share.

# ===== MG:BEGIN_IMPORTS =====
import logging
import mimetypes
import os
import posixpath
import re
import urllib.parse

from mediagal.config import MARKDOWN_EXTS, MOVIE_EXTS
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)


# ===== MG:BEGIN_NORMALIZE =====
def normalize(raw: str) -> str:
    """Canonical relative form of a request path; '' is the site root.

    Decoding happens before cleaning so an encoded '..' is cleaned like a
    literal one. A path that does not decode is used undecoded.
    """
    path = raw[1:] if raw.startswith('/') else raw
    try:
        path = urllib.parse.unquote(path, errors='strict')
    except UnicodeDecodeError:
        log.debug("undecodable request path, using it raw: %r", raw)
    path = path.replace('\\', '/')
    # cleaning as a rooted path drops '..' that would climb past the top
    clean = posixpath.normpath('/' + path).lstrip('/')
    return '' if clean in ('', '.') else clean
# ===== MG:END_NORMALIZE =====


# ===== MG:BEGIN_LINKS =====
def escape_segment(name: str) -> str:
    # every reserved char, '/' and ':' included, so a name is never
    # read as a path or a scheme
    return urllib.parse.quote(name, safe='')

def url_for(root, rel='', is_dir=False):
    """Absolute URL path for a location inside a root."""
    url = '/' + escape_segment(root)
    if rel:
        url += '/' + '/'.join(escape_segment(s) for s in rel.split('/'))
    return url + '/' if is_dir else url

def parent_link(url_path):
    """Parent folder link for a listing, '' at the site root."""
    if url_path in ('', '/'):
        return ''
    parent = posixpath.dirname(url_path.rstrip('/'))
    return '/' if parent in ('', '/') else parent + '/'

def html_escape(s):
    return s.replace("&","&amp;").replace("<","&lt;").replace(">","&gt;").replace('"',"&quot;")
# ===== MG:END_LINKS =====


# ===== MG:BEGIN_SORT =====
_num_re = re.compile(r'(\d+)')

def _natural(s):
    key = []
    for tok in _num_re.split(s):
        if tok.isdecimal():
            key.append((1, int(tok)))
        else:
            key.append((0, tok.casefold()))
    return tuple(key)

def human_sort_key(name: str):
    """Natural sort key (stable: tag text vs number).

    The stem is compared before the extension, so 'pic.png' comes before
    'pic2.png'.
    """
    stem, ext = os.path.splitext(os.fspath(name))
    return _natural(stem), ext.casefold()
# ===== MG:END_SORT =====


# ===== MG:BEGIN_MEDIA_TYPES =====
# not every platform's mime table knows these
for _ext, _mt in (('.webp', 'image/webp'), ('.avif', 'image/avif'), ('.heic', 'image/heic')):
    mimetypes.add_type(_mt, _ext)

def is_image(name):
    mt, _ = mimetypes.guess_type(name, strict=False)
    return bool(mt) and mt.startswith('image/')

def is_movie(name):
    return os.path.splitext(name)[1].lower() in MOVIE_EXTS

def is_markdown(name):
    return os.path.splitext(name)[1].lower() in MARKDOWN_EXTS
# ===== MG:END_MEDIA_TYPES =====
