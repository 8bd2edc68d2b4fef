from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import SOURCE_SUFFIX
from .errors import SourceNotFound


# macOS archive metadata: resource forks that share the real file's name.
_IGNORED_DIRS = {"__MACOSX"}
_IGNORED_PREFIX = "._"


def _walk_first(directory: Path, suffix: str) -> Optional[Path]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        if entry.name.startswith(_IGNORED_PREFIX):
            continue
        if entry.is_dir(follow_symlinks=False):
            if entry.name in _IGNORED_DIRS:
                continue
            found = _walk_first(Path(entry.path), suffix)
            if found is not None:
                return found
        elif entry.is_file(follow_symlinks=False) and Path(entry.name).suffix.lower() == suffix:
            return Path(entry.path)
    return None


def find_source_document(root_dir: Path, suffix: str = SOURCE_SUFFIX) -> Path:
    """Return the first file under root_dir whose extension matches suffix.

    Order is lexical depth-first: the entries of each directory are visited
    sorted by name and a subdirectory is descended into as soon as it is
    reached, so ``a/z.md`` wins over ``b.md``. Only the extension is checked,
    never the content.
    """
    suffix = suffix.lower()
    found = _walk_first(root_dir, suffix)
    if found is None:
        raise SourceNotFound(suffix)
    logger.info("Source document located: {}", found.relative_to(root_dir))
    return found
