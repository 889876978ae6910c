"""Error hierarchy for mdsite.

Every failure during a build is fatal. Library code raises one of these and
``mdsite.cli.main`` turns it into a message on stderr and a non-zero exit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SiteError(Exception):
    """Base exception for all mdsite errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# Configuration errors


class ConfigError(SiteError):
    """Invalid or unusable configuration (config dir, settings file, output root)."""


class TemplateNotFoundError(ConfigError):
    def __init__(self, name: str, page: Optional[Path] = None) -> None:
        self.name = name
        self.page = page
        message = f"Template not found: {name}"
        if page is not None:
            message += f" (requested by {page.as_posix()})"
        super().__init__(message)


class ChannelNotFoundError(ConfigError):
    def __init__(self, channel_id: str, page: Optional[Path] = None) -> None:
        self.channel_id = channel_id
        self.page = page
        message = f"Feed channel not found: {channel_id}"
        if page is not None:
            message += f" (referenced by {page.as_posix()})"
        super().__init__(message)


class ChannelConfigError(ConfigError):
    """A channel definition is missing a required field or has an unusable one."""

    def __init__(self, channel_id: str, field: str, problem: Optional[str] = None) -> None:
        self.channel_id = channel_id
        self.field = field
        detail = problem or f"is missing required field: {field}"
        super().__init__(f"Feed channel {channel_id!r} {detail}")


# Parse errors


class ParseError(SiteError):
    pass


class FrontMatterError(ParseError):
    """Opening ``---`` delimiter without a closing one."""

    def __init__(self, message: str = "Front matter opened with '---' but never closed") -> None:
        super().__init__(message)


class AssignmentError(ParseError):
    """A line that should read ``key=value`` does not."""

    def __init__(self, line: str, source: str = "") -> None:
        self.line = line
        self.source = source
        message = f"Malformed key=value line: {line!r}"
        if source:
            message += f" in {source}"
        super().__init__(message)


class PubDateError(ParseError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Malformed RFC 2822 publish date: {value!r}")


class FeedItemError(ParseError):
    pass


# Substitution errors


class ReplacementLoopError(SiteError):
    """The replacement value for a token contains that same token unescaped."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Replacement for {token} contains {token} itself and would never settle")


# Filesystem errors


class PathEncodingError(SiteError):
    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Path is not valid Unicode: {path!r}")


class WalkError(SiteError):
    """A directory could not be listed during the walk."""

    def __init__(self, path: Path, error: OSError) -> None:
        self.path = path
        self.error = error
        reason = error.strerror or str(error)
        super().__init__(f"Cannot read directory {path}: {reason}")
