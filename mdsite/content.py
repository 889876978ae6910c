from __future__ import annotations

import re
from pathlib import Path

from .errors import FrontMatterError
from .tags import TAG_RE
from .utils import parse_assignment, split_lines

FRONT_MATTER_OPEN = "---\n"
FRONT_MATTER_CLOSE_RE = re.compile(r"^---$", re.MULTILINE)
MARKDOWN_SUFFIX = ".md"


def split_front_matter(text: str) -> tuple[str, str]:
    if not text.startswith(FRONT_MATTER_OPEN):
        return "", text
    start = len(FRONT_MATTER_OPEN)
    match = FRONT_MATTER_CLOSE_RE.search(text, start)
    if match is None:
        raise FrontMatterError()
    # the closing line may follow the opening one directly
    front_matter = text[start : match.start() - 1] if match.start() > start else ""
    body = text[match.end() :]
    if body.startswith("\n"):
        body = body[1:]
    return front_matter, body


def scan_sections(body: str) -> dict[str, str]:
    sections: dict[str, str] = {}
    labels = list(TAG_RE.finditer(body))
    for index, label in enumerate(labels):
        end = labels[index + 1].start() if index + 1 < len(labels) else len(body)
        sections[label.group("name")] = body[label.end() : end]
    return sections


def split_document(text: str) -> tuple[str, dict[str, str]]:
    """Split a document into its front matter and its ``##NAME##`` sections.

    Text before the first label is dropped. When a label repeats, the later
    section replaces the earlier one.
    """
    front_matter, body = split_front_matter(text)
    return front_matter, scan_sections(body)


def parse_page_config(front_matter: str, source: str = "") -> dict[str, str]:
    config = {}
    for line in split_lines(front_matter):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, value = parse_assignment(stripped, source)
        config[key] = value
    return config


def is_markdown(path: Path) -> bool:
    return path.suffix == MARKDOWN_SUFFIX
