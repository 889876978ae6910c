from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .builder import SiteBuilder
from .config import load_settings
from .errors import SiteError
from .utils import parse_bool

DEFAULT_SETTINGS = "mdsite.toml"


def settings_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [f"{key}={item}" for key, item in value.items()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def build_parser(settings: dict, settings_path: str) -> argparse.ArgumentParser:
    def cfg_str(key: str, default: str) -> str:
        value = settings.get(key)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = settings.get(key)
        return default if value is None else parse_bool(value)

    parser = argparse.ArgumentParser(
        prog="mdsite",
        description="Render a tree of markdown documents through templates into HTML.",
    )
    parser.add_argument(
        "--settings",
        default=settings_path,
        help="Settings file supplying option defaults (TOML/YAML/JSON).",
    )
    parser.add_argument("-d", "--dir", default=cfg_str("dir", ""), help="Working directory.")
    parser.add_argument("-i", "--input", default=cfg_str("input", "site"), help="Input directory.")
    parser.add_argument("-o", "--output", default=cfg_str("output", "build"), help="Output directory.")
    parser.add_argument(
        "-c",
        "--config-dir",
        default=cfg_str("config_dir", "cfg"),
        help="Config directory (md_ignore, md_replace, channels, templates/).",
    )
    parser.add_argument(
        "-I",
        "--ignore",
        action="append",
        default=settings_list(settings.get("ignore")),
        help="Markdown file to copy instead of render, relative to the input directory.",
    )
    parser.add_argument(
        "-R",
        "--replace",
        action="append",
        default=settings_list(settings.get("replace")),
        help="Replacement as name=value, filling ##REP=name##; wins over md_replace.",
    )
    parser.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("verbose", False),
        help="Print every rendered, copied and feed item.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--settings", default=DEFAULT_SETTINGS)
    pre_parser.add_argument("-d", "--dir", default="")
    pre_args, _ = pre_parser.parse_known_args(argv)
    settings_path = Path(pre_args.settings)
    if pre_args.dir and not settings_path.is_absolute():
        settings_path = Path(pre_args.dir) / settings_path
    try:
        settings = load_settings(settings_path)
    except SiteError as exc:
        print(exc.message, file=sys.stderr)
        sys.exit(1)

    args = build_parser(settings, str(settings_path)).parse_args(argv)
    if args.dir:
        try:
            os.chdir(args.dir)
        except OSError as exc:
            print(f"Cannot enter working directory {args.dir}: {exc}", file=sys.stderr)
            sys.exit(1)
    root = Path.cwd()

    builder = SiteBuilder(
        input_dir=root / args.input,
        output_dir=root / args.output,
        config_dir=root / args.config_dir,
        extra_ignores=args.ignore,
        overrides=args.replace,
        verbose=args.verbose,
    )
    start = time.perf_counter()
    try:
        stats = builder.run()
    except (SiteError, OSError, UnicodeDecodeError) as exc:
        where = f" at {builder.current.as_posix()}" if builder.current is not None else ""
        print(f"Build failed{where} ({builder.failed_in.value}): {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(
        f"Rendered {stats['rendered']} pages, copied {stats['copied']} files, "
        f"wrote {stats['feeds']} feeds in {elapsed:.2f}s."
    )
    print(f"Site generated in: {builder.output_dir}")
