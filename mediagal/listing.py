# file: mediagal/listing.py
#
# Directory reading for the folder view, the root index and the image
# viewer's sequence, plus the per-folder option markers.

# ===== MG:BEGIN_IMPORTS =====
import logging
import os
import time
from typing import NamedTuple

from mediagal.errors import ReadFailure
from mediagal.ignore import OPTION_MARKERS, is_ignored
from mediagal.paths import escape_segment, human_sort_key, is_image, is_movie
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)

TIME_FMT = '%Y-%m-%d %H:%M:%S'


class EntryView(NamedTuple):
    name: str
    link: str          # relative to the folder's own URL
    modified: str
    is_dir: bool
    is_movie: bool
    is_image: bool
    icon: str


def entry_link(name, is_dir=False):
    """Relative link for an entry: folders get '/', media get their viewer suffix."""
    quoted = escape_segment(name)
    if is_dir:
        return quoted + '/'
    if is_movie(name):
        return quoted + '.movie.html'
    if is_image(name):
        return quoted + '.image.html'
    return quoted


def _fmt_time(ts):
    return time.strftime(TIME_FMT, time.localtime(ts))


# ===== MG:BEGIN_FOLDER_LISTING =====
def list_directory(folder, rules):
    """EntryViews for ``folder``, ignored names left out, natural order."""
    entries = []
    try:
        with os.scandir(folder) as it:
            for e in it:
                name = e.name
                ignored, reason = is_ignored(name, rules)
                if ignored:
                    log.debug("skip %s (%s)", os.path.join(folder, name), reason)
                    continue
                try:
                    is_dir = e.is_dir()
                    if not is_dir and not e.is_file():
                        continue
                    mtime = e.stat().st_mtime
                except OSError as err:
                    log.debug("skip %s: %s", os.path.join(folder, name), err)
                    continue
                entries.append(EntryView(
                    name=name,
                    link=entry_link(name, is_dir),
                    modified=_fmt_time(mtime),
                    is_dir=is_dir,
                    is_movie=not is_dir and is_movie(name),
                    is_image=not is_dir and is_image(name),
                    icon=escape_segment(name) + '.icon',
                ))
    except OSError as err:
        raise ReadFailure(f"cannot list {folder}: {err}") from err
    entries.sort(key=lambda v: human_sort_key(v.name))
    return entries


def list_roots(roots):
    """The site index: one folder entry per root."""
    views = []
    for name in sorted(roots, key=human_sort_key):
        try:
            modified = _fmt_time(os.stat(roots[name]).st_mtime)
        except OSError:
            modified = ''
        views.append(EntryView(
            name=name,
            link=escape_segment(name) + '/',
            modified=modified,
            is_dir=True,
            is_movie=False,
            is_image=False,
            icon=escape_segment(name) + '.icon',
        ))
    return views
# ===== MG:END_FOLDER_LISTING =====


# ===== MG:BEGIN_IMAGE_SEQUENCE =====
def image_sequence(image_path, rules):
    """(names, index) of the images next to ``image_path``, for prev/next.

    A deep-linked image that the listing would hide still gets a slot so
    the viewer can show it.
    """
    folder, current = os.path.split(image_path)
    names = []
    try:
        with os.scandir(folder) as it:
            for e in it:
                if is_ignored(e.name, rules)[0] or not is_image(e.name):
                    continue
                try:
                    if e.is_file():
                        names.append(e.name)
                except OSError:
                    continue
    except OSError as err:
        raise ReadFailure(f"cannot list {folder}: {err}") from err
    if current not in names:
        names.append(current)
    names.sort(key=human_sort_key)
    return names, names.index(current)
# ===== MG:END_IMAGE_SEQUENCE =====


def folder_options(folder):
    """Options switched on by marker files in ``folder``: {'r2l', '360vr'}."""
    return frozenset(opt for marker, opt in OPTION_MARKERS.items()
                     if os.path.isfile(os.path.join(folder, marker)))
