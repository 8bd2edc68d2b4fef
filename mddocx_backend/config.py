from __future__ import annotations

import os
from pathlib import Path


# Root directory for all per-request scratch space.
# Default: project-local ./scratch for easier inspection.
# Override with env var MDDOCX_SCRATCH_ROOT.
_root_raw = os.environ.get("MDDOCX_SCRATCH_ROOT")
if _root_raw and _root_raw.strip():
    SCRATCH_ROOT = Path(_root_raw)
else:
    # mddocx_backend/ -> project root
    SCRATCH_ROOT = Path(__file__).resolve().parent.parent / "scratch"
SCRATCH_ROOT = SCRATCH_ROOT.resolve()
SCRATCH_ROOT.mkdir(parents=True, exist_ok=True)

# External converter and its fixed argument contract.
CONVERTER_BIN = os.environ.get("MDDOCX_CONVERTER_BIN", "pandoc")
INPUT_FORMAT = os.environ.get("MDDOCX_INPUT_FORMAT", "markdown")
OUTPUT_FORMAT = os.environ.get("MDDOCX_OUTPUT_FORMAT", "docx")

# No timeout unless configured.
_timeout_raw = os.environ.get("MDDOCX_CONVERTER_TIMEOUT_SECONDS", "").strip()
CONVERTER_TIMEOUT_SECONDS = float(_timeout_raw) if _timeout_raw else None

# First file with this extension (case-insensitive) is the conversion input.
SOURCE_SUFFIX = os.environ.get("MDDOCX_SOURCE_SUFFIX", ".md").lower()

# Upload limit (best-effort; also enforced by proxy typically).
MAX_ARCHIVE_UPLOAD_BYTES = int(os.environ.get("MDDOCX_MAX_ARCHIVE_UPLOAD_BYTES", str(50 * 1024 * 1024)))  # 50MB

# Sum of declared uncompressed entry sizes allowed per archive.
MAX_EXTRACTED_BYTES = int(os.environ.get("MDDOCX_MAX_EXTRACTED_BYTES", str(200 * 1024 * 1024)))  # 200MB

# Scratch entries older than this are leftovers; younger ones may belong to
# another worker sharing the scratch root.
STALE_SCRATCH_SECONDS = float(os.environ.get("MDDOCX_STALE_SCRATCH_SECONDS", "3600"))

OUTPUT_FILENAME = "output.docx"
DOWNLOAD_FILENAME = os.environ.get("MDDOCX_DOWNLOAD_FILENAME", "converted.docx")
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

CORS_ORIGINS = [o.strip() for o in os.environ.get("MDDOCX_CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.environ.get("MDDOCX_LOG_LEVEL", "INFO").upper()
LOG_JSON = os.environ.get("MDDOCX_LOG_JSON", "0").strip().lower() in {"1", "true", "yes"}
