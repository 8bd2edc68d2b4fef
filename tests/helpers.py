"""Helpers shared by the test modules."""
import io
import os
import stat
import struct
import time
import zipfile
from pathlib import Path


FAKE_PANDOC = """#!/bin/sh
if [ "$1" = "--version" ]; then
  echo "pandoc 3.1.11"
  echo "Features: +server +lua"
  exit 0
fi
out=""
src=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) shift; out="$1" ;;
    -f|-t) shift ;;
    --*) ;;
    *) src="$1" ;;
  esac
  shift
done
if [ ! -f "$src" ]; then
  echo "pandoc: $src: withBinaryFile: does not exist" >&2
  exit 1
fi
{ printf 'FAKEDOCX\\n'; cat "$src"; } > "$out"
"""

FAILING_PANDOC = """#!/bin/sh
if [ "$1" = "--version" ]; then
  echo "pandoc 3.1.11"
  exit 0
fi
echo "Error parsing YAML metadata at line 3" >&2
exit 64
"""


def write_script(path: Path, body: str) -> str:
    path.write_text(body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def make_zip(entries) -> bytes:
    """Build a ZIP in memory.

    entries: iterable of (name, data) or (ZipInfo, data) pairs, kept in order.
    Names ending in "/" become directory entries.
    """
    if isinstance(entries, dict):
        entries = entries.items()
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()


def corrupt_member(zip_bytes: bytes, name: str, length: int = 20) -> bytes:
    """Overwrite the start of a member's compressed data; the directory stays valid."""
    with zipfile.ZipFile(io.BytesIO(zip_bytes)) as zf:
        info = zf.getinfo(name)
    raw = bytearray(zip_bytes)
    name_len, extra_len = struct.unpack_from("<HH", raw, info.header_offset + 26)
    start = info.header_offset + 30 + name_len + extra_len
    # 0xff opens a deflate block of reserved type 3.
    raw[start:start + length] = b"\xff" * length
    return bytes(raw)


def backdate(path: Path, seconds: float) -> None:
    stamp = time.time() - seconds
    os.utime(path, (stamp, stamp))
