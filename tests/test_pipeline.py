"""
End-to-end pipeline tests without the HTTP layer.
"""
import pytest

from mddocx_backend.errors import (
    ArchiveUnreadable,
    ConversionFailed,
    ConversionServiceError,
    PathTraversal,
    SourceNotFound,
)
from mddocx_backend.pipeline import convert_archive
from tests.helpers import make_zip


class TestConvertArchive:

    def test_success_returns_document(self, scratch_root, fake_converter):
        archive = make_zip({"doc/readme.md": "# Readme\n", "doc/img/a.png": b"\x89PNG"})
        data = convert_archive(archive, scratch_root, converter_bin=fake_converter)
        assert data.startswith(b"FAKEDOCX\n")
        assert b"# Readme" in data
        assert list(scratch_root.iterdir()) == []

    @pytest.mark.parametrize(
        "archive, error",
        [
            (b"not a zip at all", ArchiveUnreadable),
            (make_zip({"doc/a.md": "a", "../evil.txt": "owned"}), PathTraversal),
            (make_zip({}), SourceNotFound),
            (make_zip({"doc/readme.txt": "no markdown here"}), SourceNotFound),
        ],
    )
    def test_failures_leave_no_scratch(self, scratch_root, fake_converter, archive, error):
        with pytest.raises(error):
            convert_archive(archive, scratch_root, converter_bin=fake_converter)
        assert list(scratch_root.iterdir()) == []
        assert not (scratch_root.parent / "evil.txt").exists()

    def test_converter_failure_leaves_no_scratch(self, scratch_root, failing_converter):
        with pytest.raises(ConversionFailed):
            convert_archive(make_zip({"readme.md": "# x"}), scratch_root, converter_bin=failing_converter)
        assert list(scratch_root.iterdir()) == []

    def test_all_errors_share_base(self, scratch_root, fake_converter):
        with pytest.raises(ConversionServiceError) as excinfo:
            convert_archive(make_zip({}), scratch_root, converter_bin=fake_converter)
        assert excinfo.value.status_code == 400
