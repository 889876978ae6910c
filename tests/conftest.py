"""Shared fixtures: a small site with config, templates and a feed channel."""

from pathlib import Path

import pytest

MAIN_TEMPLATE = """# ##title##

##MAIN##

Footer: ##REP=footer##
##UNSET##
"""

POST_TEMPLATE = """Title: ##title##

##BODY##

##REP=nav##
"""

INDEX_MD = """---
title=Home
---
ignored intro
##MAIN##
Welcome to *the site*.
"""

POST_MD = """---
title=First post
template=post
rss_chan_id=blog
rss_pubdate=Mon, 02 Jan 2023 10:00:00 +0000
rss_description=Hello & welcome
---
##BODY##
Some `code` here.
"""

MD_REPLACE = """footer=(c) Example
----
nav
[Home](/index.html)
[Blog](/blog/post.html)
"""

CHANNELS = """blog
prepend=https://example.com/
title=Example & Co blog
description=Posts
path=blog/
image=logo.png
outfile=blog/rss.xml
"""

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x01\x02binary\xff"


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Create ``site/`` and ``cfg/`` under tmp_path and return tmp_path."""
    src = tmp_path / "site"
    write(src / "index.md", INDEX_MD)
    write(src / "blog" / "post.md", POST_MD)
    (src / "blog" / "img.png").write_bytes(PNG_BYTES)
    write(src / "raw.md", "##MAIN## kept as is\n")
    write(src / "notes.txt", "plain notes\n")

    cfg = tmp_path / "cfg"
    write(cfg / "templates" / "main", MAIN_TEMPLATE)
    write(cfg / "templates" / "post", POST_TEMPLATE)
    write(cfg / "md_replace", MD_REPLACE)
    write(cfg / "md_ignore", "raw.md\n")
    write(cfg / "channels", CHANNELS)
    return tmp_path
