# file: mediagal/resolver.py
#
# Virtual path resolution: normalized request path -> ResolvedTarget.
#
#   media/sub/pic.png.image.html
#   \___/ \_________/\_________/
#   root   underlying   virtual suffix (never exists on disk)
#
# The suffix only selects a presentation; the underlying path is what gets
# checked against the root and stat'ed.

# ===== MG:BEGIN_IMPORTS =====
import logging
import os
import stat
from typing import NamedTuple, Optional

from mediagal.errors import NotFound
from mediagal.ignore import is_marker
from mediagal.paths import url_for
from mediagal.roots import _real, is_subpath, root_for_real
from mediagal.tools import SymlinkAliasResolver
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)

# ===== MG:BEGIN_SUFFIXES =====
# checked in this order, at most one is stripped
SUFFIXES = (
    ('.icon', 'icon'),
    ('.image.html', 'image'),
    ('.movie.html', 'movie'),
)
SUFFIX_TOKENS = {kind: token for token, kind in SUFFIXES}

# kinds of underlying entry
DIRECTORY = 'directory'
FILE = 'file'
ALIAS = 'alias'        # alias into an allowed root: redirect
BLOCKED = 'blocked'    # alias (or symlinked parent) leading out of the roots
SPECIAL = 'special'    # fifo, socket, device...
# ===== MG:END_SUFFIXES =====


class ResolvedTarget(NamedTuple):
    root: str                 # root name
    rel: str                  # underlying path inside the root, '/'-separated
    real_path: str            # root path joined with the request, suffix included
    suffix: Optional[str]     # None | 'icon' | 'image' | 'movie'
    underlying: str           # real path with the suffix stripped
    kind: str
    alias_link: Optional[str] = None

    @property
    def name(self):
        return os.path.basename(self.underlying)


def split_suffix(path):
    """Return (path without suffix, suffix kind or None)."""
    for token, kind in SUFFIXES:
        if path.endswith(token):
            stripped = path[:-len(token)]
            # '.icon' alone is a dotfile name, not a suffix
            if stripped and not stripped.endswith('/'):
                return stripped, kind
            break
    return path, None


def _segments(rest):
    segs = [s for s in rest.split('/') if s]
    for s in segs:
        if s in ('.', '..') or '\x00' in s or os.path.isabs(s) or os.sep in s:
            raise NotFound(f"bad path segment {s!r}")
        if os.altsep and os.altsep in s:
            raise NotFound(f"bad path segment {s!r}")
    return segs


def resolve(path, roots, alias_resolver=None) -> ResolvedTarget:
    """Map a normalized path onto a root; raise NotFound when it does not map.

    The returned real paths always lie (lexically) inside the matched root.
    """
    if alias_resolver is None:
        alias_resolver = SymlinkAliasResolver()

    stripped, suffix = split_suffix(path)
    first, _, rest = stripped.partition('/')
    base = roots.get(first)
    if base is None:
        raise NotFound(f"no root named {first!r}")

    segs = _segments(rest)
    underlying = os.path.join(base, *segs)
    if not is_subpath(os.path.normpath(underlying), base):
        raise NotFound(f"{path!r} leaves root {first!r}")
    if segs and is_marker(segs[-1]):
        raise NotFound(f"option marker {segs[-1]} is not served")

    real_path = underlying + SUFFIX_TOKENS[suffix] if suffix else underlying
    kind, alias_link = _classify(underlying, base, bool(segs), suffix, roots, alias_resolver)
    return ResolvedTarget(first, '/'.join(segs), real_path, suffix, underlying, kind, alias_link)


# ===== MG:BEGIN_CLASSIFY =====
def _classify(underlying, base, has_parent, suffix, roots, alias_resolver):
    try:
        st = os.lstat(underlying)
    except (FileNotFoundError, NotADirectoryError):
        raise NotFound(f"{underlying} does not exist") from None
    except (OSError, ValueError) as e:
        raise NotFound(f"cannot stat {underlying}: {e}") from e

    # a symlinked folder further up may lead out of the root
    if has_parent and not is_subpath(_real(os.path.dirname(underlying)), _real(base)):
        log.warning("parent of %s leaves root %s", underlying, base)
        return BLOCKED, None

    if stat.S_ISLNK(st.st_mode):
        return _alias(underlying, alias_resolver.resolve_alias(underlying), suffix, roots)
    if stat.S_ISDIR(st.st_mode):
        return DIRECTORY, None
    if stat.S_ISREG(st.st_mode):
        if suffix is None:
            target = alias_resolver.resolve_alias(underlying)
            if target is not None:
                return _alias(underlying, target, suffix, roots)
        return FILE, None
    return SPECIAL, None


def _alias(path, target, suffix, roots):
    if target is None or not os.path.exists(target):
        raise NotFound(f"alias {path} has no reachable target")
    hit = root_for_real(target, roots)
    if hit is None:
        log.warning("alias %s points outside the roots: %s", path, target)
        return BLOCKED, None
    name, rel = hit
    link = url_for(name, rel, is_dir=suffix is None and os.path.isdir(target))
    if suffix:
        link += SUFFIX_TOKENS[suffix]
    log.info("alias %s -> %s", path, link)
    return ALIAS, link
# ===== MG:END_CLASSIFY =====
