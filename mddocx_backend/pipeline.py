from __future__ import annotations

from pathlib import Path
from typing import Optional

from loguru import logger

from .config import CONVERTER_BIN, OUTPUT_FILENAME, SOURCE_SUFFIX
from .converter import convert_document
from .locator import find_source_document
from .workspace import scratch_workspace
from .zip_utils import extract_archive


def convert_archive(
    archive_bytes: bytes,
    scratch_root: Path,
    converter_bin: str = CONVERTER_BIN,
    timeout: Optional[float] = None,
    suffix: str = SOURCE_SUFFIX,
) -> bytes:
    """Extract -> locate -> convert, returning the converted document's bytes.

    The artifact is read into memory while the scratch workspace is still
    alive; the workspace is removed before this returns or raises.
    """
    with scratch_workspace(scratch_root) as ws:
        ws.save_upload(archive_bytes)
        logger.info("Saved upload ({} bytes) as {}", len(archive_bytes), ws.archive_path.name)

        extract_archive(ws.archive_path, ws.extract_dir)
        source = find_source_document(ws.extract_dir, suffix=suffix)

        output_path = ws.extract_dir / OUTPUT_FILENAME
        convert_document(source, output_path, converter_bin=converter_bin, timeout=timeout)
        return output_path.read_bytes()
