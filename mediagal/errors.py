# file: mediagal/errors.py
#
# Per-request failures carry the HTTP status they end in. The request
# handler turns every one of them into the generic not-found page.

class GalleryError(Exception):
    status = 500


class NotFound(GalleryError):
    """Unknown root, missing path, or a sentinel marker asked for by name."""
    status = 404


class Forbidden(GalleryError):
    """Alias leaving the allowed roots, or an entry we refuse to serve."""
    status = 403


class UpstreamFailure(GalleryError):
    """An external tool (icon, transcoder, resizer, alias) failed."""
    status = 502


class ReadFailure(GalleryError):
    """A directory could not be enumerated."""
    status = 500


class ConfigError(Exception):
    """Broken settings; fatal at startup."""
