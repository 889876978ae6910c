from __future__ import annotations

import enum
from pathlib import Path
from typing import Iterable, Optional

from .config import DEFAULT_TEMPLATE, ConfigStore
from .content import is_markdown, parse_page_config, split_document
from .errors import ChannelNotFoundError, ConfigError
from .feed import CHANNEL_KEY, Channel, build_channels, build_item
from .render import copy_file, fill_template, render_markdown, write_text
from .utils import posix_text, reset_output_dir
from .walk import walk

TEMPLATE_KEY = "template"
HTML_SUFFIX = ".html"


class BuildState(enum.Enum):
    INIT = "init"
    CONFIG_LOADED = "config-loaded"
    WALKING = "walking"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class SiteBuilder:
    """One full build of ``input_dir`` into ``output_dir``.

    Config is loaded first, then the output root is wiped and recreated, the
    input tree is walked once, and the feed channels are written last. The
    first error of any kind stops the build; whatever was already written
    stays in the output root.
    """

    def __init__(
        self,
        input_dir: Path,
        output_dir: Path,
        config_dir: Path,
        extra_ignores: Iterable[str] = (),
        overrides: Iterable[str] = (),
        verbose: bool = False,
    ) -> None:
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)
        self.config_dir = Path(config_dir)
        self.extra_ignores = list(extra_ignores)
        self.overrides = list(overrides)
        self.verbose = verbose
        self.state = BuildState.INIT
        self.config: Optional[ConfigStore] = None
        self.channels: dict[str, Channel] = {}
        self.current: Optional[Path] = None
        self.failed_in: Optional[BuildState] = None
        self.stats = {"directories": 0, "rendered": 0, "copied": 0, "feeds": 0}

    def log(self, message: str) -> None:
        if self.verbose:
            print(message)

    def run(self) -> dict:
        try:
            if not self.input_dir.is_dir():
                raise ConfigError(f"Input directory not found: {self.input_dir}")
            self.load_config()
            reset_output_dir(self.output_dir, [self.input_dir, self.config_dir])
            self.walk_input()
            self.finalize()
        except Exception:
            self.failed_in = self.state
            self.state = BuildState.FAILED
            raise
        self.state = BuildState.DONE
        return self.stats

    def load_config(self) -> None:
        self.config = ConfigStore.load(self.config_dir, self.extra_ignores, self.overrides)
        self.channels = build_channels(self.config.channels)
        self.state = BuildState.CONFIG_LOADED

    def walk_input(self) -> None:
        self.state = BuildState.WALKING
        for entry in walk(self.input_dir):
            self.current = entry.path
            rel_text = posix_text(entry.path)
            if entry.is_dir:
                (self.output_dir / entry.path).mkdir()
                self.stats["directories"] += 1
            elif is_markdown(entry.path) and not self.config.is_ignored(entry.path):
                self.log(f"render {rel_text}")
                self.render_page(entry.path)
                self.stats["rendered"] += 1
            else:
                self.log(f"copy {rel_text}")
                copy_file(self.input_dir / entry.path, self.output_dir / entry.path)
                self.stats["copied"] += 1
        self.current = None

    def render_page(self, rel: Path) -> None:
        text = (self.input_dir / rel).read_text(encoding="utf-8")
        front_matter, sections = split_document(text)
        page_config = parse_page_config(front_matter, posix_text(rel))

        if CHANNEL_KEY in page_config:
            channel_id, item = build_item(page_config, rel)
            channel = self.channels.get(channel_id)
            if channel is None:
                raise ChannelNotFoundError(channel_id, rel)
            self.log(f"feed item {item.page} -> {channel_id}")
            channel.add(item)

        template = self.config.template(page_config.get(TEMPLATE_KEY, DEFAULT_TEMPLATE), rel)
        filled = fill_template(template, sections, page_config, self.config.replacements)
        write_text(self.output_dir / rel.with_suffix(HTML_SUFFIX), render_markdown(filled))

    def finalize(self) -> None:
        self.state = BuildState.FINALIZING
        for channel in self.channels.values():
            self.log(f"feed {channel.channel_id} -> {channel.outfile.as_posix()} ({len(channel.items)} items)")
            write_text(self.output_dir / channel.outfile, channel.render())
            self.stats["feeds"] += 1


def build_site(
    input_dir: Path,
    output_dir: Path,
    config_dir: Path,
    extra_ignores: Iterable[str] = (),
    overrides: Iterable[str] = (),
    verbose: bool = False,
) -> dict:
    builder = SiteBuilder(input_dir, output_dir, config_dir, extra_ignores, overrides, verbose)
    return builder.run()
