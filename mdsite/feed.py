"""RSS channels fed by pages during a build.

A page joins a channel by naming it in its front matter under
``rss_chan_id``. Items are collected in walk order and every channel is
written once the walk is over.
"""

from __future__ import annotations

import datetime as dt
import html
import posixpath
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import NamedTuple, Optional

from .errors import ChannelConfigError, FeedItemError, PubDateError
from .utils import posix_text, rfc822_date

CHANNEL_KEY = "rss_chan_id"
ITEM_TITLE_KEY = "rss_title"
PAGE_TITLE_KEY = "title"
PUBDATE_KEY = "rss_pubdate"
DESCRIPTION_KEY = "rss_description"
RSS_DOCS = "https://www.rssboard.org/rss-specification"
REQUIRED_CHANNEL_FIELDS = ("prepend", "title", "path", "outfile")


class FeedItem(NamedTuple):
    page: str
    title: str
    description: str = ""
    pubdate: Optional[dt.datetime] = None


def parse_pubdate(value: str) -> dt.datetime:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as exc:
        raise PubDateError(value) from exc
    if parsed is None:
        raise PubDateError(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def build_item(page_config: dict[str, str], page: Path) -> tuple[str, FeedItem]:
    """Build the feed item a page contributes, returning ``(channel_id, item)``."""
    channel_id = page_config[CHANNEL_KEY]
    title = page_config.get(ITEM_TITLE_KEY) or page_config.get(PAGE_TITLE_KEY)
    if title is None:
        raise FeedItemError(
            f"Feed item for {page.as_posix()} has neither {ITEM_TITLE_KEY} nor {PAGE_TITLE_KEY}"
        )
    pubdate_value = page_config.get(PUBDATE_KEY)
    pubdate = parse_pubdate(pubdate_value) if pubdate_value is not None else None
    item = FeedItem(
        page=posix_text(page.with_suffix(".html")),
        title=title,
        description=page_config.get(DESCRIPTION_KEY, ""),
        pubdate=pubdate,
    )
    return channel_id, item


def output_relative(channel_id: str, outfile: str) -> Path:
    """Return ``outfile`` as a path inside the output directory."""
    normalized = posixpath.normpath(outfile.lstrip("/"))
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        raise ChannelConfigError(
            channel_id, "outfile", f"outfile {outfile!r} does not name a file inside the output directory"
        )
    return Path(normalized)


class Channel:
    def __init__(
        self,
        channel_id: str,
        prepend: str,
        title: str,
        path: str,
        outfile: str,
        description: str = "",
        image: Optional[str] = None,
    ) -> None:
        self.channel_id = channel_id
        self.prepend = prepend
        self.title = title
        self.link = f"{prepend}{path}"
        self.outfile = output_relative(channel_id, outfile)
        self.description = description
        self.image_url = f"{prepend}{image}" if image else None
        self.items: list[FeedItem] = []

    @classmethod
    def from_fields(cls, channel_id: str, fields: dict[str, str]) -> Channel:
        for name in REQUIRED_CHANNEL_FIELDS:
            if not fields.get(name):
                raise ChannelConfigError(channel_id, name)
        return cls(
            channel_id,
            prepend=fields["prepend"],
            title=fields["title"],
            path=fields["path"],
            outfile=fields["outfile"],
            description=fields.get("description", ""),
            image=fields.get("image"),
        )

    def add(self, item: FeedItem) -> None:
        self.items.append(item)

    def render_item(self, item: FeedItem) -> str:
        link = html.escape(f"{self.prepend}{item.page}")
        lines = [
            "<item>",
            f"<title>{html.escape(item.title)}</title>",
            f"<link>{link}</link>",
            f'<guid isPermaLink="true">{link}</guid>',
            f"<description>{html.escape(item.description)}</description>",
        ]
        if item.pubdate is not None:
            lines.append(f"<pubDate>{rfc822_date(item.pubdate)}</pubDate>")
        lines.append("</item>")
        return "\n".join(lines)

    def render(self) -> str:
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(self.title)}</title>",
            f"<link>{html.escape(self.link)}</link>",
            f"<description>{html.escape(self.description)}</description>",
            f"<docs>{RSS_DOCS}</docs>",
        ]
        if self.image_url:
            lines.extend(
                [
                    "<image>",
                    f"<url>{html.escape(self.image_url)}</url>",
                    f"<title>{html.escape(self.title)}</title>",
                    f"<link>{html.escape(self.link)}</link>",
                    "</image>",
                ]
            )
        lines.extend(self.render_item(item) for item in self.items)
        lines.extend(["</channel>", "</rss>"])
        return "\n".join(lines) + "\n"


def build_channels(definitions: dict[str, dict[str, str]]) -> dict[str, Channel]:
    return {
        channel_id: Channel.from_fields(channel_id, fields)
        for channel_id, fields in definitions.items()
    }
