"""Shared fixtures: a small media tree on disk and a live server."""

import http.client
import io
import os
import threading

import pytest
from PIL import Image

from mediagal.errors import UpstreamFailure
from mediagal.ignore import IgnoreRules
from mediagal.roots import resolve_roots
from mediagal.server import Gallery, make_server
from mediagal.tools import SymlinkAliasResolver


def write_image(path, size=(4, 3), color='red'):
    Image.new('RGB', size, color).save(path)
    return path


@pytest.fixture
def media(tmp_path):
    """
    media/
      a.tmp  b.jpg  clip.mkv  movie.mp4  notes.txt  readme.md  .hidden.png
      __option_R2L__
      folder/         (empty)
      sub/pic.png  sub/pic2.png  sub/doc.txt
    """
    root = tmp_path / "media"
    root.mkdir()
    (root / "a.tmp").write_text("scratch")
    write_image(root / "b.jpg")
    (root / "clip.mkv").write_bytes(b"\x1aE\xdf\xa3matroska")
    (root / "movie.mp4").write_bytes(b"0123456789")
    (root / "notes.txt").write_text("plain notes")
    (root / "readme.md").write_text("# Hello\n\nSome *text*.\n")
    write_image(root / ".hidden.png")
    (root / "__option_R2L__").write_text("")
    (root / "folder").mkdir()
    sub = root / "sub"
    sub.mkdir()
    write_image(sub / "pic.png")
    write_image(sub / "pic2.png")
    (sub / "doc.txt").write_text("doc")
    return root


@pytest.fixture
def roots(media):
    return resolve_roots([str(media)])


class FakeIcons:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def get_icon(self, path):
        self.calls.append(path)
        if self.fail:
            raise UpstreamFailure("icon tool exploded")
        return b"\x89PNG fake icon"


class FakeProc:
    def __init__(self, data):
        self.stdout = io.BytesIO(data)
        self.killed = False

    def kill(self):
        self.killed = True

    def wait(self):
        return 0


class FakeTranscoder:
    def __init__(self):
        self.opened = []

    def open(self, path):
        self.opened.append(path)
        return FakeProc(b"transcoded-mp4")


@pytest.fixture
def fake_icons():
    return FakeIcons()


@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()


@pytest.fixture
def gallery(roots, fake_icons, fake_transcoder):
    return Gallery(
        roots=roots,
        rules=IgnoreRules(['*.tmp']),
        alias_resolver=SymlinkAliasResolver(),
        icons=fake_icons,
        resizer=None,
        transcoder=fake_transcoder,
    )


@pytest.fixture
def serve():
    """Start a server for a Gallery on an ephemeral port; returns the port."""
    servers = []

    def start(gallery):
        httpd = make_server(gallery, '127.0.0.1', 0)
        t = threading.Thread(target=httpd.serve_forever, daemon=True)
        t.start()
        servers.append(httpd)
        return httpd.server_address[1]

    yield start
    for httpd in servers:
        httpd.shutdown()
        httpd.server_close()


def _fetch(port, path, method='GET', headers=None):
    """(status, headers, body) for one request."""
    conn = http.client.HTTPConnection('127.0.0.1', port, timeout=10)
    try:
        conn.request(method, path, headers=headers or {})
        resp = conn.getresponse()
        body = resp.read()
        return resp.status, resp.headers, body
    finally:
        conn.close()


@pytest.fixture
def symlinks_ok(tmp_path):
    try:
        os.symlink(tmp_path, tmp_path / "_probe")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not available")
    os.unlink(tmp_path / "_probe")


@pytest.fixture
def fetch():
    return _fetch
