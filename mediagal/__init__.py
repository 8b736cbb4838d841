# file: mediagal/__init__.py
#
# Local media gallery server over a set of whitelisted folders.

__version__ = "0.3.0"
