"""Error taxonomy for the conversion pipeline.

Every stage raises a subclass of ConversionServiceError; the HTTP layer maps
``status_code`` and ``message`` straight onto an ``{"error": ...}`` payload.
Messages are client-safe: they may name an archive entry but never a
filesystem path on the server.
"""

from __future__ import annotations


class ConversionServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UploadError(ConversionServiceError):
    status_code = 400


class UploadTooLarge(UploadError):
    status_code = 413


class ExtractionError(ConversionServiceError):
    status_code = 400


class ArchiveUnreadable(ExtractionError):
    def __init__(self, reason: str = "not a valid ZIP archive"):
        super().__init__(f"Failed to extract zip: {reason}")


class PathTraversal(ExtractionError):
    """An entry would land outside the extraction directory."""

    def __init__(self, entry_name: str):
        super().__init__(f"Failed to extract zip: unsafe path in archive: {entry_name!r}")
        self.entry_name = entry_name


class ArchiveTooLarge(ExtractionError):
    status_code = 413

    def __init__(self, limit: int):
        super().__init__(f"Failed to extract zip: uncompressed size exceeds {limit} bytes")
        self.limit = limit


class WriteFailed(ExtractionError):
    def __init__(self, entry_name: str, cause: BaseException):
        super().__init__(f"Failed to extract zip: could not write {entry_name!r}")
        self.entry_name = entry_name
        self.cause = cause


class SourceNotFound(ConversionServiceError):
    status_code = 400

    def __init__(self, suffix: str = ".md"):
        super().__init__(f"No source document ({suffix}) found in zip")
        self.suffix = suffix


class ConversionFailed(ConversionServiceError):
    status_code = 500

    def __init__(self, reason: str, returncode: int | None = None, output: str = ""):
        message = f"Conversion failed: {reason}"
        if output:
            message = f"{message}, output: {output}"
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class ConverterUnavailable(ConversionServiceError):
    """The converter binary is missing or not invocable (startup check)."""
