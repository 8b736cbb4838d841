# file: mediagal/roots.py
#
# Root registry: the whitelisted folders, keyed by their base name.
# Built once at startup, read by every request thread afterwards.

# ===== MG:BEGIN_IMPORTS =====
import logging
import os
from types import MappingProxyType

from mediagal.errors import ConfigError
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)


# ===== MG:BEGIN_PATH_CANON =====
def _abs(p): return os.path.normpath(os.path.abspath(os.path.expanduser(p)))

def _real(p): return os.path.realpath(_abs(p))

def is_subpath(child, base):
    """Lexical containment: both sides are compared as given."""
    try:
        return os.path.commonpath([child, base]) == base
    except ValueError:
        # mixed absolute/relative or different drives
        return False

def is_real_subpath(child, base):
    return is_subpath(_real(child), _real(base))
# ===== MG:END_PATH_CANON =====


# ===== MG:BEGIN_REGISTRY =====
def resolve_roots(paths):
    """Return a read-only {name: absolute path} table for the configured folders.

    Folders that do not exist (or are not directories) are logged and
    skipped. Two folders with the same base name are a configuration error.
    """
    table = {}
    for p in paths:
        ap = _abs(p)
        try:
            st = os.stat(ap)
        except OSError as e:
            log.warning("skipping root %s: %s", p, e)
            continue
        if not os.path.isdir(ap):
            log.warning("skipping root %s: not a directory (mode %o)", p, st.st_mode)
            continue
        name = os.path.basename(ap)
        if not name:
            # "/" has no base name to address it by
            log.warning("skipping root %s: has no base name", p)
            continue
        if name in table and table[name] != ap:
            raise ConfigError(
                f"root name {name!r} is used by both {table[name]} and {ap}")
        table[name] = ap
        log.info("root %s -> %s", name, ap)
    return MappingProxyType(table)


def root_for_real(path, roots):
    """Find the root whose real location contains real ``path``.

    Returns (name, relative path) or None.
    """
    rp = _real(path)
    for name, base in roots.items():
        rb = _real(base)
        if is_subpath(rp, rb):
            rel = os.path.relpath(rp, rb)
            return name, ('' if rel == '.' else rel.replace(os.sep, '/'))
    return None
# ===== MG:END_REGISTRY =====
