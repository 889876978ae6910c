from __future__ import annotations

import shutil
from pathlib import Path
from typing import Mapping

import markdown

from .tags import ReplacementTable, strip_unmatched_tags

REPLACE_PREFIX = "REP="
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False}}


def build_replacements(
    sections: Mapping[str, str], page_config: Mapping[str, str], replacements: Mapping[str, str]
) -> ReplacementTable:
    table = ReplacementTable()
    table.add_pass(sections)
    table.add_pass(page_config)
    table.add_pass(replacements, prefix=REPLACE_PREFIX)
    return table


def fill_template(
    template: str,
    sections: Mapping[str, str],
    page_config: Mapping[str, str],
    replacements: Mapping[str, str],
) -> str:
    """Fill a template from sections, then page config, then ``##REP=name##`` tokens.

    Placeholders nothing filled are removed.
    """
    table = build_replacements(sections, page_config, replacements)
    return strip_unmatched_tags(table.apply(template))


def render_markdown(text: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    return md.convert(text)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_file(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
