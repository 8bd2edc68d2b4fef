from __future__ import annotations

import shutil
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from loguru import logger

from .config import STALE_SCRATCH_SECONDS
from .security import is_scratch_token, new_scratch_token


EXTRACT_PREFIX = "extracted_"
ARCHIVE_SUFFIX = ".zip"


@dataclass
class ScratchWorkspace:
    """Per-request scratch resources: the saved upload and its extraction dir.

    Both paths derive from ``token`` alone; the client's file name never
    becomes a path component.
    """

    token: str
    archive_path: Path
    extract_dir: Path
    released: bool = False

    def save_upload(self, data: bytes) -> Path:
        self.archive_path.write_bytes(data)
        return self.archive_path

    def release(self) -> None:
        """Remove the archive and extraction dir. Later calls are no-ops."""
        if self.released:
            return
        self.released = True
        if self.extract_dir.exists():
            try:
                shutil.rmtree(self.extract_dir)
            except OSError as e:
                logger.error("Failed to remove extraction directory {}: {}", self.extract_dir.name, e)
        try:
            self.archive_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to remove uploaded archive {}: {}", self.archive_path.name, e)
        logger.debug("Released scratch workspace {}", self.token)


def _extract_dir_for(archive_path: Path) -> Path:
    return archive_path.parent / f"{EXTRACT_PREFIX}{archive_path.stem}"


def create_scratch_workspace(scratch_root: Path) -> ScratchWorkspace:
    scratch_root.mkdir(parents=True, exist_ok=True)
    token = new_scratch_token()
    archive_path = scratch_root.resolve() / f"{token}{ARCHIVE_SUFFIX}"
    return ScratchWorkspace(
        token=token,
        archive_path=archive_path,
        extract_dir=_extract_dir_for(archive_path),
    )


@contextmanager
def scratch_workspace(scratch_root: Path) -> Iterator[ScratchWorkspace]:
    """Scope a ScratchWorkspace; release runs on every exit path."""
    ws = create_scratch_workspace(scratch_root)
    try:
        yield ws
    finally:
        ws.release()


def _is_scratch_entry(path: Path) -> bool:
    if path.is_dir() and path.name.startswith(EXTRACT_PREFIX):
        return is_scratch_token(path.name[len(EXTRACT_PREFIX):])
    if path.is_file() and path.suffix == ARCHIVE_SUFFIX:
        return is_scratch_token(path.stem)
    return False


def delete_stale_workspaces(scratch_root: Path, max_age_seconds: float = STALE_SCRATCH_SECONDS) -> int:
    """Delete leftovers of earlier processes directly under scratch_root.

    Only removes entries that look like ours and were last modified more
    than max_age_seconds ago; younger ones may be in-flight requests of
    another worker sharing the root:
    - ``<token>.zip`` files
    - ``extracted_<token>`` directories
    Returns number of deleted entries.
    """
    deleted = 0
    if not scratch_root.exists():
        return 0

    max_age_seconds = max(0.0, max_age_seconds)
    now = time.time()

    for child in scratch_root.iterdir():
        if not _is_scratch_entry(child):
            continue
        try:
            age = now - child.stat().st_mtime
        except FileNotFoundError:
            # Released by its owner meanwhile.
            continue
        if age <= max_age_seconds:
            continue
        if child.is_dir():
            shutil.rmtree(child, ignore_errors=True)
        else:
            child.unlink(missing_ok=True)
        deleted += 1
    if deleted:
        logger.info("Removed {} stale scratch entr{}", deleted, "y" if deleted == 1 else "ies")
    return deleted
