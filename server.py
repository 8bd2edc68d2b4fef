from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import BaseModel

from mddocx_backend.config import (
    CONVERTER_BIN,
    CONVERTER_TIMEOUT_SECONDS,
    CORS_ORIGINS,
    DOCX_MEDIA_TYPE,
    DOWNLOAD_FILENAME,
    LOG_JSON,
    LOG_LEVEL,
    MAX_ARCHIVE_UPLOAD_BYTES,
    SCRATCH_ROOT,
    STALE_SCRATCH_SECONDS,
)
from mddocx_backend.converter import check_converter
from mddocx_backend.errors import ConversionServiceError, ConverterUnavailable, UploadError, UploadTooLarge
from mddocx_backend.logging_config import setup_logging
from mddocx_backend.pipeline import convert_archive
from mddocx_backend.workspace import delete_stale_workspaces


setup_logging(LOG_LEVEL, enable_json=LOG_JSON)


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    converter: Optional[str] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without a working converter.
    try:
        app.state.converter_version = check_converter(CONVERTER_BIN)
    except ConverterUnavailable as e:
        logger.critical("Converter check failed: {}", e.message)
        raise

    # Leftovers from a previous process that died mid-request.
    try:
        delete_stale_workspaces(SCRATCH_ROOT, max_age_seconds=STALE_SCRATCH_SECONDS)
    except OSError as e:
        logger.warning("Stale scratch cleanup failed: {}", e)

    logger.info("Service ready; scratch root {}", SCRATCH_ROOT)
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(ConversionServiceError)
async def _service_error(request: Request, exc: ConversionServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
    else:
        logger.warning("{} {} rejected: {}", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


@app.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(status="ok", converter=getattr(request.app.state, "converter_version", None))


@app.post(
    "/convert",
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def convert(file: Optional[UploadFile] = File(None)) -> Response:
    """Convert an uploaded ZIP containing a markdown tree into a DOCX attachment."""
    if file is None or not file.filename:
        raise UploadError("No file uploaded")

    # Limit read to reject oversized uploads without buffering all of them.
    data = await file.read(MAX_ARCHIVE_UPLOAD_BYTES + 1)
    if len(data) > MAX_ARCHIVE_UPLOAD_BYTES:
        raise UploadTooLarge("ZIP too large")
    logger.info("Upload received: {!r} ({} bytes)", file.filename, len(data))

    # Extraction and the converter block; keep them off the event loop.
    docx_bytes = await run_in_threadpool(
        convert_archive,
        data,
        SCRATCH_ROOT,
        converter_bin=CONVERTER_BIN,
        timeout=CONVERTER_TIMEOUT_SECONDS,
    )
    logger.info("Conversion finished: {} bytes", len(docx_bytes))

    headers = {
        "Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"',
        "Cache-Control": "no-store",
        "X-Content-Type-Options": "nosniff",
    }
    return Response(content=docx_bytes, media_type=DOCX_MEDIA_TYPE, headers=headers)


if __name__ == "__main__":
    # Convenience: python server.py
    import uvicorn

    port = int(os.environ.get("PORT", "8080"))
    host = os.environ.get("HOST", "127.0.0.1")
    uvicorn.run("server:app", host=host, port=port, reload=False)
