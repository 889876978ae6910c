from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

from .errors import ConfigError, TemplateNotFoundError
from .utils import parse_assignment, posix_text, split_lines

IGNORE_FILE = "md_ignore"
REPLACE_FILE = "md_replace"
CHANNELS_FILE = "channels"
TEMPLATES_DIR = "templates"
RECORD_SEPARATOR = "----"
DEFAULT_TEMPLATE = "main"


def load_settings(path: Path) -> dict:
    """Load the optional settings file that supplies CLI defaults."""
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            raise ConfigError("TOML settings require tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in settings file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise ConfigError("YAML settings require PyYAML.")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in settings file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must be a mapping: {path}")
    return data


def read_optional(path: Path) -> Optional[str]:
    """Return the file's text, or None when it is missing or empty."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return text or None


def parse_records(text: str, source: str = "") -> list[tuple[str, str]]:
    """Parse the ``----``-separated record format into (key, value) pairs.

    A record of one line is ``key=value``. A longer record uses its first
    line as the key and keeps the remaining lines verbatim as the value.
    Trailing blank lines of a record are dropped, empty records skipped.
    """
    groups: list[list[str]] = [[]]
    for line in split_lines(text):
        if line == RECORD_SEPARATOR:
            groups.append([])
        else:
            groups[-1].append(line)

    records = []
    for lines in groups:
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            continue
        if len(lines) == 1:
            records.append(parse_assignment(lines[0], source))
        else:
            records.append((lines[0].strip(), "\n".join(lines[1:])))
    return records


def load_ignore_list(config_dir: Path, extra: Iterable[str] = ()) -> frozenset[Path]:
    entries = [Path(item) for item in extra if item.strip()]
    text = read_optional(config_dir / IGNORE_FILE)
    if text:
        entries.extend(Path(line.strip()) for line in split_lines(text) if line.strip())
    return frozenset(entries)


def load_replacements(config_dir: Path, overrides: Iterable[str] = ()) -> dict[str, str]:
    path = config_dir / REPLACE_FILE
    replacements = {}
    text = read_optional(path)
    if text:
        replacements.update(parse_records(text, str(path)))
    for override in overrides:
        key, value = parse_assignment(override, "replacement overrides")
        replacements[key] = value
    return replacements


def load_templates(config_dir: Path) -> dict[str, str]:
    templates_dir = config_dir / TEMPLATES_DIR
    if not templates_dir.exists():
        return {}
    templates = {}
    for item in templates_dir.iterdir():
        if item.is_dir():
            continue
        name = posix_text(Path(item.name))
        templates[name] = item.read_text(encoding="utf-8")
    return templates


def load_channel_fields(config_dir: Path) -> dict[str, dict[str, str]]:
    path = config_dir / CHANNELS_FILE
    text = read_optional(path)
    if not text:
        return {}
    channels = {}
    for channel_id, block in parse_records(text, str(path)):
        fields = {}
        for line in split_lines(block):
            if line.strip():
                key, value = parse_assignment(line, f"{path} [{channel_id}]")
                fields[key] = value
        channels[channel_id] = fields
    return channels


class ConfigStore:
    """Everything read from the config directory before the walk starts."""

    def __init__(
        self,
        ignore: frozenset[Path],
        replacements: dict[str, str],
        templates: dict[str, str],
        channels: dict[str, dict[str, str]],
    ) -> None:
        self.ignore = ignore
        self.replacements = replacements
        self.templates = templates
        self.channels = channels

    @classmethod
    def load(
        cls, config_dir: Path, extra_ignores: Iterable[str] = (), overrides: Iterable[str] = ()
    ) -> ConfigStore:
        config_dir = Path(config_dir)
        if config_dir.exists() and not config_dir.is_dir():
            raise ConfigError(f"Config path is not a directory: {config_dir}")
        return cls(
            ignore=load_ignore_list(config_dir, extra_ignores),
            replacements=load_replacements(config_dir, overrides),
            templates=load_templates(config_dir),
            channels=load_channel_fields(config_dir),
        )

    def is_ignored(self, path: Path) -> bool:
        return path in self.ignore

    def template(self, name: str, page: Optional[Path] = None) -> str:
        try:
            return self.templates[name]
        except KeyError:
            raise TemplateNotFoundError(name, page) from None
