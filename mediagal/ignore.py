# file: mediagal/ignore.py
#
# Which directory entries never show up in a listing.
#
# Rules are checked in a fixed order and the first hit wins:
#   1. option marker files (always, whatever the settings say)
#   2. configured patterns: '*' and '?' wildcards matched against the whole
#      name, or 're:<regex>' searched anywhere in it
#   3. dotfiles

# ===== MG:BEGIN_IMPORTS =====
import re
from typing import NamedTuple

from mediagal.errors import ConfigError
# ===== MG:END_IMPORTS =====

# ===== MG:BEGIN_MARKERS =====
R2L_MARKER = '__option_R2L__'
VR360_MARKER = '__option_360VR__'

# marker file name -> folder option it switches on
OPTION_MARKERS = {
    R2L_MARKER: 'r2l',
    VR360_MARKER: '360vr',
}

# case-insensitive filesystems open the marker under any spelling
_MARKER_NAMES = frozenset(m.casefold() for m in OPTION_MARKERS)

def is_marker(name):
    return name.casefold() in _MARKER_NAMES
# ===== MG:END_MARKERS =====


class Rule(NamedTuple):
    pattern: str
    regex: re.Pattern
    anchored: bool


def wildcard_to_regex(pattern):
    """'*.tmp' -> r'.*\\.tmp', everything but the wildcards taken literally."""
    out = []
    for ch in pattern:
        if ch == '*':
            out.append('.*')
        elif ch == '?':
            out.append('.')
        else:
            out.append(re.escape(ch))
    return ''.join(out)


def compile_rule(pattern):
    try:
        if pattern.startswith('re:'):
            return Rule(pattern, re.compile(pattern[3:]), False)
        return Rule(pattern, re.compile(wildcard_to_regex(pattern), re.DOTALL), True)
    except re.error as e:
        raise ConfigError(f"bad ignore pattern {pattern!r}: {e}") from e


class IgnoreRules:
    """Compiled, immutable ignore patterns."""

    __slots__ = ('_rules',)

    def __init__(self, patterns=()):
        object.__setattr__(self, '_rules', tuple(compile_rule(p) for p in patterns))

    def __setattr__(self, key, value):
        raise AttributeError("IgnoreRules is immutable")

    @property
    def patterns(self):
        return tuple(r.pattern for r in self._rules)

    def __iter__(self):
        return iter(self._rules)

    def __len__(self):
        return len(self._rules)

    def __repr__(self):
        return f"IgnoreRules({list(self.patterns)!r})"


def is_ignored(name, rules):
    """Return (ignored, reason); reason is only for the log."""
    if is_marker(name):
        return True, f"option marker {name}"
    for rule in rules:
        if rule.anchored:
            hit = rule.regex.fullmatch(name)
        else:
            hit = rule.regex.search(name)
        if hit:
            return True, f"pattern {rule.pattern!r}"
    if name.startswith('.'):
        return True, "hidden file"
    return False, ''
