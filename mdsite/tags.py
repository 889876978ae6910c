"""Escape-aware ``##NAME##`` token handling.

A token is escaped when the character right before it is a backslash. The
backslash is left in place; only unescaped tokens are found, replaced or
stripped.
"""

from __future__ import annotations

import re
from typing import Mapping

from .errors import ReplacementLoopError

ESCAPE = "\\"
TAG_RE = re.compile(r"(?<!\\)##(?P<name>[^#\n]+)##")


def make_tag(name: str) -> str:
    return f"##{name}##"


def find_unescaped(haystack: str, token: str) -> list[int]:
    """Return the offsets of all non-overlapping, unescaped occurrences of ``token``.

    Occurrences are matched left to right like ``str.find``; an escaped one
    is skipped but still consumes its characters. Offset 0 is always
    unescaped.
    """
    if not token:
        raise ValueError("token must not be empty")
    offsets = []
    start = 0
    while True:
        index = haystack.find(token, start)
        if index < 0:
            break
        if index == 0 or haystack[index - 1] != ESCAPE:
            offsets.append(index)
        start = index + len(token)
    return offsets


def replace_all_unescaped(haystack: str, token: str, replacement: str) -> str:
    """Replace unescaped ``token`` occurrences until none are left.

    Every pass collects all unescaped offsets in one scan and splices the
    replacement in at each of them. Passes repeat while splicing produced
    new unescaped occurrences out of the surrounding text. A replacement
    that contains ``token`` itself could never settle and raises
    ``ReplacementLoopError``, but only when ``token`` occurs in ``haystack``.
    """
    offsets = find_unescaped(haystack, token)
    if offsets and find_unescaped(replacement, token):
        raise ReplacementLoopError(token)
    while offsets:
        parts = []
        last = 0
        for offset in offsets:
            parts.append(haystack[last:offset])
            parts.append(replacement)
            last = offset + len(token)
        parts.append(haystack[last:])
        haystack = "".join(parts)
        offsets = find_unescaped(haystack, token)
    return haystack


def strip_unmatched_tags(text: str) -> str:
    return TAG_RE.sub("", text)


class ReplacementTable:
    """Ordered token -> value mapping filled pass by pass.

    A later pass overwrites the value of a token an earlier pass already
    set, so with sections, then page config, then global replacements, a
    front-matter key beats a section of the same name.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def add_pass(self, values: Mapping[str, str], prefix: str = "") -> None:
        for name, value in values.items():
            self._entries[make_tag(f"{prefix}{name}")] = value

    def apply(self, template: str) -> str:
        output = template
        for token, value in self._entries.items():
            output = replace_all_unescaped(output, token, value)
        return output
