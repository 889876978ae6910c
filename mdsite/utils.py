from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path, PurePath

from .errors import AssignmentError, ConfigError, PathEncodingError


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, ignoring the empty piece after a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_assignment(line: str, source: str = "") -> tuple[str, str]:
    key, sep, value = line.partition("=")
    if not sep:
        raise AssignmentError(line, source)
    return key.strip(), value.strip()


def rfc822_date(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    else:
        value = value.astimezone(dt.timezone.utc)
    return value.strftime("%a, %d %b %Y %H:%M:%S %z")


def posix_text(path: PurePath) -> str:
    """Return ``path`` with forward slashes, refusing undecodable components."""
    text = path.as_posix()
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise PathEncodingError(path) from exc
    return text


def reset_output_dir(output_dir: Path, protected: list[Path]) -> None:
    output_resolved = output_dir.resolve()
    for path in protected:
        path_resolved = path.resolve()
        if path_resolved.is_relative_to(output_resolved):
            raise ConfigError(f"Refusing to clean output directory {output_dir}: it contains {path}")
        if output_resolved.is_relative_to(path_resolved):
            raise ConfigError(f"Refusing to build into {output_dir}: it lies inside {path}")
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)
