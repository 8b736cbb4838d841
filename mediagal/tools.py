# file: mediagal/tools.py
#
# The outside helpers the gallery leans on, each behind a one-method
# interface so tests can hand in fakes:
#
#   alias resolver  resolve_alias(path) -> target path | None
#   icon provider   get_icon(path)      -> PNG bytes
#   image resizer   resize(path)        -> (bytes, content type) | None
#   transcoder      open(path)          -> running process, MP4 on stdout
#
# Failures surface as UpstreamFailure; nothing here retries or times out.

# ===== MG:BEGIN_IMPORTS =====
import base64
import binascii
import io
import logging
import os
import shlex
import subprocess

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from mediagal.errors import UpstreamFailure
from mediagal.ignore import IgnoreRules, is_ignored
from mediagal.paths import human_sort_key, is_image
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)

ICON_SIZE = 128


# ===== MG:BEGIN_ALIAS =====
class SymlinkAliasResolver:
    """Symbolic links are the aliases."""

    def resolve_alias(self, path):
        if not os.path.islink(path):
            return None
        return os.path.realpath(path)


class CommandAliasResolver(SymlinkAliasResolver):
    """Ask an external tool (e.g. a Finder alias resolver) what a file points at.

    The tool gets the path as its only argument and prints the target. A
    nonzero exit means the file is not an alias.
    """

    def __init__(self, command):
        self.argv = shlex.split(command)

    def resolve_alias(self, path):
        target = super().resolve_alias(path)
        if target is not None:
            return target
        try:
            proc = subprocess.run(self.argv + [path], capture_output=True, check=False)
        except OSError as e:
            raise UpstreamFailure(f"alias tool {self.argv[0]} failed to start: {e}") from e
        if proc.returncode != 0:
            return None
        out = proc.stdout.decode('utf-8', 'replace').strip()
        if not out:
            raise UpstreamFailure(f"alias tool printed nothing for {path}")
        return os.path.realpath(out)
# ===== MG:END_ALIAS =====


# ===== MG:BEGIN_ICONS =====
class CommandIconProvider:
    """Run an external tool that prints the icon as base64 PNG."""

    def __init__(self, command):
        self.argv = shlex.split(command)

    def get_icon(self, path):
        try:
            proc = subprocess.run(self.argv + [path], capture_output=True, check=True)
        except OSError as e:
            raise UpstreamFailure(f"icon tool {self.argv[0]} failed to start: {e}") from e
        except subprocess.CalledProcessError as e:
            raise UpstreamFailure(f"icon tool failed for {path}: exit {e.returncode}") from e
        try:
            return base64.b64decode(proc.stdout.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamFailure(f"icon tool output for {path} is not base64") from e


def _png(img):
    buf = io.BytesIO()
    img.save(buf, 'PNG')
    return buf.getvalue()


def _first_image(folder, rules):
    try:
        with os.scandir(folder) as it:
            names = [e.name for e in it
                     if not is_ignored(e.name, rules)[0] and e.is_file() and is_image(e.name)]
    except OSError:
        return None
    if not names:
        return None
    names.sort(key=human_sort_key)
    return os.path.join(folder, names[0])


class PillowIconProvider:
    """Thumbnails with Pillow; a plain labelled tile when there is nothing to shrink."""

    FOLDER_COLOR = (70, 110, 160)
    FILE_COLOR = (60, 60, 60)

    def __init__(self, size=ICON_SIZE, rules=None):
        self.size = size
        # the cover image follows the listing's ignore rules
        self.rules = rules if rules is not None else IgnoreRules()

    def get_icon(self, path):
        if os.path.isdir(path):
            cover = _first_image(path, self.rules)
            if cover is None:
                return self.placeholder('DIR', self.FOLDER_COLOR)
            return self.thumbnail(cover)
        if is_image(path):
            return self.thumbnail(path)
        ext = os.path.splitext(path)[1].lstrip('.').upper()[:4]
        return self.placeholder(ext or 'FILE', self.FILE_COLOR)

    def thumbnail(self, path):
        try:
            with Image.open(path) as img:
                img = ImageOps.exif_transpose(img)
                if img.mode not in ('RGB', 'RGBA'):
                    img = img.convert('RGBA')
                img.thumbnail((self.size, self.size))
                return _png(img)
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise UpstreamFailure(f"cannot thumbnail {path}: {e}") from e

    def placeholder(self, label, color):
        img = Image.new('RGB', (self.size, self.size), color)
        draw = ImageDraw.Draw(img)
        left, top, right, bottom = draw.textbbox((0, 0), label)
        x = (self.size - (right - left)) // 2
        y = (self.size - (bottom - top)) // 2
        draw.text((x, y), label, fill=(235, 235, 235))
        return _png(img)
# ===== MG:END_ICONS =====


# ===== MG:BEGIN_RESIZE =====
_KEEP_FORMATS = {'JPEG', 'PNG', 'WEBP'}

class PillowResizer:
    """Shrink oversized images for the browser, in memory."""

    def __init__(self, max_size):
        self.max_size = max_size

    def resize(self, path):
        """Return (payload, content type), or None when the image is small enough."""
        if not self.max_size:
            return None
        try:
            with Image.open(path) as img:
                if max(img.size) <= self.max_size:
                    return None
                fmt = img.format if img.format in _KEEP_FORMATS else 'PNG'
                img = ImageOps.exif_transpose(img)
                if fmt == 'JPEG' and img.mode != 'RGB':
                    img = img.convert('RGB')
                img.thumbnail((self.max_size, self.max_size))
                buf = io.BytesIO()
                img.save(buf, fmt)
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise UpstreamFailure(f"cannot resize {path}: {e}") from e
        return buf.getvalue(), Image.MIME[fmt]
# ===== MG:END_RESIZE =====


# ===== MG:BEGIN_TRANSCODE =====
class FFmpegTranscoder:
    """Pipe a movie through ffmpeg as fragmented MP4 so browsers can play it."""

    def __init__(self, ffmpeg='ffmpeg'):
        self.ffmpeg = ffmpeg

    def command(self, path):
        return [self.ffmpeg, '-loglevel', 'error',
                '-i', path,
                '-c:v', 'libx264',
                '-c:a', 'aac',
                '-f', 'mp4',
                '-movflags', 'frag_keyframe+empty_moov+default_base_moof',
                'pipe:1']

    def open(self, path):
        try:
            return subprocess.Popen(self.command(path),
                                    stdin=subprocess.DEVNULL,
                                    stdout=subprocess.PIPE,
                                    stderr=subprocess.DEVNULL)
        except OSError as e:
            raise UpstreamFailure(f"{self.ffmpeg} failed to start: {e}") from e
# ===== MG:END_TRANSCODE =====
