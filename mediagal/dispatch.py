# file: mediagal/dispatch.py
#
# Resolved target -> handler name. One table, first matching row wins.

from mediagal.paths import is_image, is_markdown, is_movie
from mediagal.resolver import ALIAS, BLOCKED, DIRECTORY, FILE, SPECIAL

# ===== MG:BEGIN_HANDLERS =====
INDEX = 'index'
ICON = 'icon'
IMAGE = 'image'
MOVIE = 'movie'
FOLDER = 'folder'
STREAM = 'stream'
MARKDOWN = 'markdown'
RAW = 'raw'
REDIRECT = 'redirect'
FORBIDDEN = 'forbidden'
NOT_FOUND = 'not_found'
# ===== MG:END_HANDLERS =====

# (suffix, underlying kinds, name test, handler)
DISPATCH_TABLE = (
    ('icon',  {FILE, DIRECTORY}, None,        ICON),
    ('image', {FILE},            is_image,    IMAGE),
    ('movie', {FILE},            is_movie,    MOVIE),
    (None,    {DIRECTORY},       None,        FOLDER),
    (None,    {FILE},            is_movie,    STREAM),
    (None,    {FILE},            is_markdown, MARKDOWN),
    (None,    {FILE},            None,        RAW),
)


def dispatch(target) -> str:
    if target.kind == ALIAS:
        return REDIRECT
    if target.kind in (BLOCKED, SPECIAL):
        return FORBIDDEN
    for suffix, kinds, accepts, handler in DISPATCH_TABLE:
        if target.suffix != suffix or target.kind not in kinds:
            continue
        if accepts is None or accepts(target.name):
            return handler
    return NOT_FOUND
