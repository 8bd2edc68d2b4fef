from __future__ import annotations

import os
import shutil
import stat
import zipfile
import zlib
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import MAX_EXTRACTED_BYTES
from .errors import ArchiveTooLarge, ArchiveUnreadable, PathTraversal, WriteFailed
from .security import is_bad_archive_member, safe_join


DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755


def _entry_mode(info: zipfile.ZipInfo) -> int:
    # Unix permission bits live in the high 16 bits of external_attr.
    # Archives built on Windows leave them zeroed.
    return (info.external_attr >> 16) & 0o777


def _resolve_entry(target_dir: Path, name: str) -> Path:
    if is_bad_archive_member(name):
        raise PathTraversal(name)
    try:
        return safe_join(target_dir, name)
    except ValueError:
        raise PathTraversal(name) from None


def _write_dir(info: zipfile.ZipInfo, dest: Path) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    mode = _entry_mode(info) or DEFAULT_DIR_MODE
    try:
        # Keep owner rwx so later entries and cleanup still work.
        os.chmod(dest, mode | stat.S_IRWXU)
    except OSError as e:
        logger.debug("Could not set mode {:o} on directory {}: {}", mode, info.filename, e)


def _write_file(zf: zipfile.ZipFile, info: zipfile.ZipInfo, dest: Path) -> None:
    if stat.S_ISLNK(info.external_attr >> 16):
        # Never materialize links; the target text becomes plain file content.
        logger.debug("Symlink entry {} extracted as regular file", info.filename)

    dest.parent.mkdir(parents=True, exist_ok=True)
    with zf.open(info) as src, open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.chmod(dest, _entry_mode(info) or DEFAULT_FILE_MODE)


def extract_archive(archive_path: Path, target_dir: Path, max_total_bytes: Optional[int] = None) -> list[Path]:
    """Extract a ZIP archive into target_dir, refusing any entry that escapes it.

    Rules:
    - target_dir (and parents) is created before the first entry is written
    - entries are processed in archive order; each destination is validated
      lexically and after canonicalization *before* anything is written for it
    - the first failing entry aborts the whole extraction (fail-fast)
    - entries already written are left in place; the caller owns cleanup
    - the summed uncompressed size may not exceed max_total_bytes
      (MAX_EXTRACTED_BYTES by default); checked before the first write

    Returns the paths of the extracted files.
    """
    logger.info("Extracting archive {} into {}", archive_path.name, target_dir.name)
    try:
        zf = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as e:
        logger.warning("Could not open archive {}: {}", archive_path.name, e)
        raise ArchiveUnreadable() from e

    limit = MAX_EXTRACTED_BYTES if max_total_bytes is None else max_total_bytes
    written: list[Path] = []
    with zf:
        # zipfile stops each member at its declared file_size, so the sum bounds disk use.
        total = sum(info.file_size for info in zf.infolist())
        if total > limit:
            logger.warning("Archive {} inflates to {} bytes (limit {})", archive_path.name, total, limit)
            raise ArchiveTooLarge(limit)

        target_dir.mkdir(parents=True, exist_ok=True)
        for info in zf.infolist():
            name = info.filename
            dest = _resolve_entry(target_dir, name)
            logger.debug("Extracting entry {}", name)

            try:
                if info.is_dir():
                    _write_dir(info, dest)
                else:
                    _write_file(zf, info, dest)
                    written.append(dest)
            except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
                # Corrupt or truncated data, unsupported compression or encrypted member.
                raise ArchiveUnreadable(f"cannot read entry {name!r}") from e
            except OSError as e:
                raise WriteFailed(name, e) from e

    logger.info("Extraction finished: {} file(s)", len(written))
    return written
