from __future__ import annotations

import enum
import os
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

from .errors import WalkError


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Entry(NamedTuple):
    path: Path
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def _open_listing(directory: Path) -> Iterator[os.DirEntry]:
    try:
        return os.scandir(directory)
    except OSError as exc:
        raise WalkError(directory, exc) from exc


def walk(root: Path) -> Iterator[Entry]:
    """Yield every object under ``root`` as an ``Entry`` relative to ``root``.

    Depth-first, with a directory yielded before anything inside it. Sibling
    order is whatever the OS listing returns. One open listing is kept per
    depth level; an exhausted listing is closed and the walk resumes in its
    parent. An unreadable directory raises ``WalkError`` at the point where
    it would have been yielded, which ends the walk.
    """
    root = Path(root)
    stack: list[tuple[Iterator[os.DirEntry], Optional[Path]]] = [(_open_listing(root), None)]
    try:
        while stack:
            listing, rel_dir = stack[-1]
            current = root if rel_dir is None else root / rel_dir
            try:
                item = next(listing, None)
            except OSError as exc:
                raise WalkError(current, exc) from exc
            if item is None:
                listing.close()
                stack.pop()
                continue
            rel = Path(item.name) if rel_dir is None else rel_dir / item.name
            if item.is_dir():
                stack.append((_open_listing(root / rel), rel))
                yield Entry(rel, EntryKind.DIRECTORY)
            else:
                yield Entry(rel, EntryKind.FILE)
    finally:
        for listing, _ in stack:
            listing.close()
