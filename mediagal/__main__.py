# file: mediagal/__main__.py
#
# Run:  python -m mediagal [--config settings.json] [--port 8080]
# Open: http://127.0.0.1:8080

# ===== MG:BEGIN_IMPORTS =====
import argparse
import logging
import sys

from mediagal.config import DEFAULT_SETTINGS_FILE, load_settings
from mediagal.errors import ConfigError
from mediagal.server import build_gallery, get_lan_ip, make_server
# ===== MG:END_IMPORTS =====

log = logging.getLogger('mediagal')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='mediagal', description="Local media gallery server")
    parser.add_argument('-c', '--config', default=DEFAULT_SETTINGS_FILE,
                        help="settings file (default: %(default)s)")
    parser.add_argument('-p', '--port', type=int, help="override the configured port")
    parser.add_argument('--host', help="override the configured bind address")
    parser.add_argument('--log-level', help="DEBUG, INFO, WARNING...")
    return parser.parse_args(argv)


# ===== MG:BEGIN_MAIN =====
def main(argv=None):
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        sys.exit(f"mediagal: {e}")
    if args.port is not None:
        settings = settings._replace(port=args.port)
    if args.host is not None:
        settings = settings._replace(host=args.host)

    level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        gallery = build_gallery(settings)
        httpd = make_server(gallery, settings.host, settings.port)
    except ConfigError as e:
        sys.exit(f"mediagal: {e}")
    except OSError as e:
        sys.exit(f"mediagal: cannot listen on port {settings.port}: {e}")

    with httpd:
        port = httpd.server_address[1]
        print(f"Serving ⟶  http://127.0.0.1:{port}")
        print(f"LAN     ⟶  http://{get_lan_ip()}:{port}")
        for name, path in sorted(gallery.roots.items()):
            print(f"Root    ⟶  {name}: {path}")
        print("Press Ctrl+C to stop.")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")


if __name__ == '__main__':
    main()
# ===== MG:END_MAIN =====
