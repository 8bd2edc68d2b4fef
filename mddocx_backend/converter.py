from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import CONVERTER_BIN, INPUT_FORMAT, OUTPUT_FORMAT
from .errors import ConversionFailed, ConverterUnavailable


def build_command(
    source_path: Path,
    output_path: Path,
    converter_bin: str = CONVERTER_BIN,
    input_format: str = INPUT_FORMAT,
    output_format: str = OUTPUT_FORMAT,
) -> list[str]:
    return [
        converter_bin,
        "-f",
        input_format,
        "-t",
        output_format,
        str(source_path),
        "-o",
        str(output_path),
        "--extract-media=.",
    ]


def check_converter(converter_bin: str = CONVERTER_BIN) -> str:
    """Return the first line of ``<converter> --version``.

    Raises ConverterUnavailable when the binary is missing or exits non-zero.
    """
    try:
        proc = subprocess.run(
            [converter_bin, "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ConverterUnavailable(f"{converter_bin} is not installed or not executable: {e}") from e

    if proc.returncode != 0:
        raise ConverterUnavailable(
            f"{converter_bin} --version exited with {proc.returncode}: {proc.stdout.strip()}"
        )
    lines = proc.stdout.strip().splitlines()
    version = lines[0] if lines else converter_bin
    logger.info("Converter version: {}", version)
    return version


def convert_document(
    source_path: Path,
    output_path: Path,
    converter_bin: str = CONVERTER_BIN,
    timeout: Optional[float] = None,
) -> None:
    """Run the external converter on source_path, writing output_path.

    The process runs in the source file's directory so extracted media and
    relative resource references stay inside the extraction tree. Combined
    stdout/stderr is captured and carried on ConversionFailed.
    """
    cmd = build_command(source_path, output_path, converter_bin=converter_bin)
    logger.info("Running converter: {} -> {}", source_path.name, output_path.name)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(source_path.parent),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = (e.output or b"").decode("utf-8", errors="replace").strip()
        logger.error("Converter timed out after {}s", timeout)
        raise ConversionFailed(f"timed out after {timeout}s", output=output) from e
    except OSError as e:
        logger.error("Converter could not be started: {}", e)
        raise ConversionFailed(f"could not start {converter_bin}: {e}") from e

    output = proc.stdout.decode("utf-8", errors="replace").strip()
    if proc.returncode != 0:
        logger.error("Converter exited with {}: {}", proc.returncode, output)
        raise ConversionFailed(
            f"{converter_bin} exited with status {proc.returncode}",
            returncode=proc.returncode,
            output=output,
        )
    if not output_path.is_file():
        raise ConversionFailed(f"{converter_bin} produced no output file", returncode=0, output=output)
