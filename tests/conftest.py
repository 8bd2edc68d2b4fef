"""
Test Configuration and Fixtures
"""
import os
import tempfile
from pathlib import Path

import pytest

# Must be set before mddocx_backend.config is imported anywhere.
os.environ.setdefault("MDDOCX_SCRATCH_ROOT", tempfile.mkdtemp(prefix="mddocx-test-"))

from tests.helpers import FAILING_PANDOC, FAKE_PANDOC, make_zip, write_script  # noqa: E402

@pytest.fixture
def fake_converter(tmp_path):
    """Executable honoring the pandoc command line used by the service."""
    return write_script(tmp_path / "fake-pandoc", FAKE_PANDOC)


@pytest.fixture
def failing_converter(tmp_path):
    """Passes the version check, fails every conversion with diagnostics."""
    return write_script(tmp_path / "failing-pandoc", FAILING_PANDOC)


@pytest.fixture
def scratch_root(tmp_path):
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def target_dir(tmp_path):
    """Extraction target nested two levels deep so escapes are observable."""
    return tmp_path / "work" / "extracted"


@pytest.fixture
def archive_file(tmp_path):
    def _write(entries, name="upload.zip") -> Path:
        path = tmp_path / name
        path.write_bytes(make_zip(entries))
        return path

    return _write
