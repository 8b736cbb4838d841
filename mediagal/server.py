# file: mediagal/server.py
#
# Threaded HTTP server. Every request goes the same way:
#
#   request path -> normalize -> resolve -> dispatch -> _serve_<handler>
#
# Routes:
#   /                          → index of the configured roots
#   /<root>/<dir>/             → folder listing
#   /<root>/<file>             → file bytes (images shrunk, movies streamed,
#                                markdown rendered)
#   /<root>/<file>.image.html  → image viewer
#   /<root>/<file>.movie.html  → movie player page
#   /<root>/<path>.icon        → thumbnail PNG (also /icon/<root>/<path>)
#
# Any failure ends in the same not-found page; the detail goes to the log.

# ===== MG:BEGIN_IMPORTS =====
import http.server
from http.server import ThreadingHTTPServer
import logging
import mimetypes
import os
import posixpath
import re
import shutil
import socket
import urllib.parse
from typing import NamedTuple

from mediagal import __version__
from mediagal import dispatch as routes
from mediagal.errors import ConfigError, Forbidden, GalleryError, NotFound, UpstreamFailure
from mediagal.ignore import IgnoreRules
from mediagal.listing import folder_options, image_sequence, list_directory, list_roots
from mediagal.markdown_view import read_markdown, render_markdown
from mediagal.pages import folder_page, image_page, markdown_page, movie_page, not_found_page
from mediagal.paths import is_image, normalize, parent_link, url_for
from mediagal.resolver import resolve
from mediagal.roots import resolve_roots
from mediagal.tools import (CommandAliasResolver, CommandIconProvider, FFmpegTranscoder,
                            PillowIconProvider, PillowResizer, SymlinkAliasResolver)
# ===== MG:END_IMPORTS =====

log = logging.getLogger(__name__)

CHUNK = 64 * 1024
ICON_PREFIX = '/icon/'
SITE_TITLE = 'mediagal'


# ===== MG:BEGIN_GALLERY =====
class Gallery(NamedTuple):
    """Everything a request may read. Built once, before the listener starts."""
    roots: object
    rules: IgnoreRules
    alias_resolver: object
    icons: object
    resizer: object
    transcoder: object


def build_gallery(settings):
    roots = resolve_roots(settings.folders)
    if not roots:
        raise ConfigError("none of the configured folders can be served")
    rules = IgnoreRules(settings.ignores)
    if settings.alias_command:
        alias_resolver = CommandAliasResolver(settings.alias_command)
    else:
        alias_resolver = SymlinkAliasResolver()
    if settings.icon_command:
        icons = CommandIconProvider(settings.icon_command)
    else:
        icons = PillowIconProvider(rules=rules)
    return Gallery(
        roots=roots,
        rules=rules,
        alias_resolver=alias_resolver,
        icons=icons,
        resizer=PillowResizer(settings.max_image_size),
        transcoder=FFmpegTranscoder(settings.ffmpeg),
    )
# ===== MG:END_GALLERY =====


# ===== MG:BEGIN_HTTP_HANDLER =====
_range_re = re.compile(r'^bytes=(\d*)-(\d*)$')


class Handler(http.server.BaseHTTPRequestHandler):
    server_version = 'mediagal/' + __version__

    def do_GET(self):
        self._head = False
        self._handle()

    def do_HEAD(self):
        self._head = True
        self._handle()

    def _handle(self):
        parsed = urllib.parse.urlsplit(self.path)
        url_path = parsed.path or '/'
        gallery = self.server.gallery
        try:
            if url_path.startswith(ICON_PREFIX):
                path = normalize(url_path[len(ICON_PREFIX) - 1:])
                if not path:
                    raise NotFound("icon of the site root")
                path += '.icon'
            else:
                path = normalize(url_path)
            if path == '':
                return self._serve_index()
            target = resolve(path, gallery.roots, gallery.alias_resolver)
            handler = routes.dispatch(target)
            log.debug("%s -> %s (%s, %s)", url_path, handler, target.kind, target.suffix)
            getattr(self, '_serve_' + handler)(target, parsed)
        except GalleryError as e:
            log.info("%s %s: %s", e.__class__.__name__, url_path, e)
            self._send_error_page(e.status, url_path)
        except (BrokenPipeError, ConnectionResetError):
            log.debug("client went away: %s", url_path)

    def log_message(self, format, *args):
        log.info("%s - %s", self.address_string(), format % args)
# ===== MG:END_HTTP_HANDLER =====

# ===== MG:BEGIN_VIEW_HANDLERS =====
    def _serve_index(self):
        entries = list_roots(self.server.gallery.roots)
        self._send_html(folder_page(SITE_TITLE, '/', '', entries))

    def _serve_folder(self, target, parsed):
        # links are rebuilt from the resolved folder, never echoed from the request
        link = url_for(target.root, target.rel, is_dir=True)
        if not parsed.path.endswith('/'):
            # relative entry links need the trailing slash
            location = link + ('?' + parsed.query if parsed.query else '')
            return self._redirect(location, 301)
        entries = list_directory(target.underlying, self.server.gallery.rules)
        log.info("listing %s (%d entries)", target.underlying, len(entries))
        title = target.name or target.root
        self._send_html(folder_page(title, link, parent_link(link), entries))

    def _serve_image(self, target, parsed):
        names, index = image_sequence(target.underlying, self.server.gallery.rules)
        options = folder_options(os.path.dirname(target.underlying))
        self._send_html(image_page(target.name, _base_url(target), names, index, options))

    def _serve_movie(self, target, parsed):
        src = url_for(target.root, target.rel)
        self._send_html(movie_page(target.name, src, _base_url(target)))

    def _serve_markdown(self, target, parsed):
        html = render_markdown(read_markdown(target.underlying))
        log.info("markdown %s", target.underlying)
        self._send_html(markdown_page(target.name, _base_url(target), html))

    def _serve_icon(self, target, parsed):
        data = self.server.gallery.icons.get_icon(target.underlying)
        self.send_response(200)
        self.send_header('Content-Type', 'image/png')
        self.send_header('Content-Length', str(len(data)))
        self.send_header('Cache-Control', 'max-age=3600')
        self.end_headers()
        self._write(data)

    def _serve_raw(self, target, parsed):
        resizer = self.server.gallery.resizer
        if resizer is not None and is_image(target.name):
            try:
                shrunk = resizer.resize(target.underlying)
            except UpstreamFailure as e:
                log.warning("sending %s unresized: %s", target.underlying, e)
                shrunk = None
            if shrunk is not None:
                data, ctype = shrunk
                log.info("sending %s resized (%d bytes)", target.underlying, len(data))
                return self._send_bytes(data, ctype)
        self._send_file(target.underlying)

    def _serve_stream(self, target, parsed):
        if target.name.lower().endswith('.mp4'):
            return self._send_file(target.underlying, 'video/mp4')
        self._send_transcoded(target.underlying)

    def _serve_redirect(self, target, parsed):
        self._redirect(target.alias_link, 302)

    def _serve_forbidden(self, target, parsed):
        raise Forbidden(f"{target.underlying} ({target.kind}) is not served")

    def _serve_not_found(self, target, parsed):
        raise NotFound(f"no view for {target.underlying} ({target.kind}, suffix {target.suffix})")
# ===== MG:END_VIEW_HANDLERS =====

# ===== MG:BEGIN_HTTP_HELPERS =====
    def _write(self, data):
        if not self._head:
            self.wfile.write(data)

    def _send_html(self, html, code=200):
        data = html.encode('utf-8')
        self.send_response(code)
        self.send_header('Content-Type', 'text/html; charset=utf-8')
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        self._write(data)

    def _send_error_page(self, code, link):
        self._send_html(not_found_page(link), code)

    def _send_bytes(self, data, ctype):
        self.send_response(200)
        self.send_header('Content-Type', ctype)
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        self._write(data)

    def _redirect(self, location, code):
        self.send_response(code)
        self.send_header('Location', location)
        self.send_header('Content-Length', '0')
        self.end_headers()

    def _byte_range(self, size):
        """(start, end) inclusive, None for the whole file, False if unsatisfiable."""
        header = self.headers.get('Range')
        if not header:
            return None
        m = _range_re.match(header.strip())
        if not m or not (m.group(1) or m.group(2)):
            # multi-range or junk: send everything
            return None
        first, last = m.group(1), m.group(2)
        if not first:
            length = int(last)
            if length == 0 or size == 0:
                return False
            return max(0, size - length), size - 1
        start = int(first)
        end = min(int(last), size - 1) if last else size - 1
        if start >= size or start > end:
            return False
        return start, end

    def _send_file(self, path, ctype=None):
        try:
            f = open(path, 'rb')
        except OSError as e:
            raise NotFound(f"cannot open {path}: {e}") from e
        with f:
            fs = os.fstat(f.fileno())
            size = fs.st_size
            ctype = ctype or mimetypes.guess_type(path)[0] or 'application/octet-stream'
            rng = self._byte_range(size)
            if rng is False:
                self.send_response(416)
                self.send_header('Content-Range', f'bytes */{size}')
                self.send_header('Content-Length', '0')
                self.end_headers()
                return
            if rng is None:
                start, end = 0, size - 1
                self.send_response(200)
            else:
                start, end = rng
                self.send_response(206)
                self.send_header('Content-Range', f'bytes {start}-{end}/{size}')
            length = end - start + 1 if size else 0
            self.send_header('Content-Type', ctype)
            self.send_header('Content-Length', str(length))
            self.send_header('Last-Modified', self.date_time_string(fs.st_mtime))
            self.send_header('Accept-Ranges', 'bytes')
            self.end_headers()
            log.info("sending %s (%d bytes from %d)", path, length, start)
            if self._head:
                return
            f.seek(start)
            remaining = length
            while remaining > 0:
                buf = f.read(min(CHUNK, remaining))
                if not buf:
                    break
                self.wfile.write(buf)
                remaining -= len(buf)

    def _send_transcoded(self, path):
        proc = self.server.gallery.transcoder.open(path)
        try:
            self.send_response(200)
            self.send_header('Content-Type', 'video/mp4')
            self.send_header('Cache-Control', 'no-cache')
            self.end_headers()
            log.info("transcoding %s", path)
            if self._head:
                proc.kill()
            else:
                shutil.copyfileobj(proc.stdout, self.wfile, CHUNK)
        except BaseException:
            proc.kill()
            raise
        finally:
            proc.stdout.close()
            rc = proc.wait()
            if rc and not self._head:
                log.warning("transcoder exited with %s for %s", rc, path)
# ===== MG:END_HTTP_HELPERS =====


def _base_url(target):
    """URL of the folder holding the target."""
    return url_for(target.root, posixpath.dirname(target.rel), is_dir=True)


# ===== MG:BEGIN_SERVER =====
class GalleryServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, gallery):
        self.gallery = gallery
        super().__init__(address, Handler)


def make_server(gallery, host='', port=8080):
    return GalleryServer((host, port), gallery)


def get_lan_ip():
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(('8.8.8.8', 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return '127.0.0.1'
# ===== MG:END_SERVER =====
