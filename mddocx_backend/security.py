from __future__ import annotations

import re
import uuid
from pathlib import Path, PurePosixPath


_TOKEN_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def new_scratch_token() -> str:
    """Fresh per-request token; the only component scratch paths are built from."""
    return str(uuid.uuid4())


def is_scratch_token(value: str) -> bool:
    """True for canonical lowercase UUID4 strings as produced by new_scratch_token."""
    return isinstance(value, str) and bool(_TOKEN_RE.match(value))


def is_bad_archive_member(name: str) -> bool:
    """Lexical Zip Slip check, run before any path resolution."""
    if not name or name.strip() == "":
        return True
    if "\x00" in name:
        return True
    if name.startswith("/") or name.startswith("\\"):
        return True
    if _DRIVE_RE.match(name):
        # block drive letters
        return True
    parts = PurePosixPath(name.replace("\\", "/")).parts
    if any(p == ".." for p in parts):
        return True
    return False


def safe_join(base_dir: Path, *parts: str) -> Path:
    """Join paths and ensure the result is a strict descendant of base_dir.

    The candidate is canonicalized first, so symlinks already on disk or
    ``..`` segments cannot smuggle it outside. Raises ValueError otherwise.
    """
    base_dir = base_dir.resolve()
    candidate = base_dir
    for part in parts:
        candidate = candidate / part
    resolved = candidate.resolve()
    if base_dir not in resolved.parents:
        raise ValueError("Path traversal attempt")
    return resolved
